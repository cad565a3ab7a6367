"""
Pytest configuration and common fixtures for peak_consensus tests.
"""

import pytest

from peak_consensus.features import ChromosomeInfo, IntervalFeature, PointFeature


@pytest.fixture
def chromosomes():
    """Two chromosomes, listed chr2 first."""
    return [ChromosomeInfo("chr2", 5000), ChromosomeInfo("chr1", 1000)]


@pytest.fixture
def two_experiment_points():
    """Summits at 100 (experiment X) and 140 (experiment Y) on chr1."""
    return [
        PointFeature("chr1", 100, "X", "x1"),
        PointFeature("chr1", 140, "Y", "y1"),
    ]


@pytest.fixture
def two_experiment_intervals():
    """Peak regions linked to the two_experiment_points summits."""
    return [
        IntervalFeature("chr1", 90, 150, "X", "x1"),
        IntervalFeature("chr1", 130, 170, "Y", "y1"),
    ]


def write_narrowpeak(path, rows):
    """Write narrowPeak rows given as (chrom, start, end, name, peak_offset)."""
    with open(path, 'w') as fh:
        for chrom, start, end, name, peak in rows:
            fh.write(f"{chrom}\t{start}\t{end}\t{name}\t0\t.\t5.0\t4.0\t3.0\t{peak}\n")
    return path
