#!/usr/bin/env python
"""
Per-chromosome partition of point and interval features.

The interval partition of a chromosome is either ``LinkedIntervals`` (interval
features are required and were indexed) or ``NoIntervals`` (resizing was not
requested, so intervals are never looked up).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

import pandas as pd

from peak_consensus.errors import MissingLinkedFeatureError
from peak_consensus.features import INTERVAL_COLUMNS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkedIntervals:
    """
    Interval features of one chromosome keyed by (name, experiment).

    Attributes:
        chromosome: Chromosome name
        bounds: Mapping of (name, experiment) to (start, end)
    """
    chromosome: str
    bounds: Dict[Tuple[str, str], Tuple[int, int]] = field(default_factory=dict)

    @classmethod
    def from_frame(cls, chromosome: str, df: pd.DataFrame) -> "LinkedIntervals":
        bounds = {
            (name, experiment): (int(start), int(end))
            for start, end, experiment, name
            in df.loc[:, ['start', 'end', 'experiment', 'name']].itertuples(index=False, name=None)
        }
        return cls(chromosome, bounds)

    def lookup(self, name: str, experiment: str) -> Tuple[int, int]:
        """
        Return the (start, end) of the interval linked to a point feature.

        Raises:
            MissingLinkedFeatureError: If no interval has this name and experiment
        """
        try:
            return self.bounds[(name, experiment)]
        except KeyError:
            raise MissingLinkedFeatureError(name, experiment, self.chromosome) from None


@dataclass(frozen=True)
class NoIntervals:
    """Marker for a chromosome processed without interval features."""
    chromosome: str


IntervalPartition = Union[LinkedIntervals, NoIntervals]


@dataclass(frozen=True)
class ChromosomeSlice:
    """
    Everything one chromosome task needs.

    Attributes:
        name: Chromosome name
        length: Chromosome length
        points: Point features on this chromosome, in input order
        intervals: Linked interval features, or NoIntervals
    """
    name: str
    length: int
    points: pd.DataFrame
    intervals: IntervalPartition


def build_feature_index(points_df: pd.DataFrame,
                        intervals_df: pd.DataFrame,
                        chromosomes_df: pd.DataFrame,
                        use_intervals: bool) -> List[ChromosomeSlice]:
    """
    Partition features by chromosome, restricted to the analyzed chromosomes.

    Chromosomes without point features are skipped. When ``use_intervals`` is
    False the interval collection is never read and may be empty.

    Args:
        points_df: Point features with the ``POINT_COLUMNS`` columns
        intervals_df: Interval features with the ``INTERVAL_COLUMNS`` columns
        chromosomes_df: Chromosome metadata with the ``CHROMOSOME_COLUMNS`` columns
        use_intervals: Whether interval features are needed downstream

    Returns:
        list: ChromosomeSlice objects, in the order of ``chromosomes_df``
    """
    points_by_chrom = {name: group for name, group in points_df.groupby('chromosome', sort=False)}

    if use_intervals:
        if intervals_df is None:
            intervals_df = pd.DataFrame(columns=INTERVAL_COLUMNS)
        intervals_by_chrom = {
            name: group for name, group in intervals_df.groupby('chromosome', sort=False)
        }
    else:
        intervals_by_chrom = {}

    slices = []
    for name, length in chromosomes_df.loc[:, ['name', 'length']].itertuples(index=False, name=None):
        chrom_points = points_by_chrom.get(name)
        if chrom_points is None or chrom_points.empty:
            logger.debug("No point features on %s, skipping", name)
            continue

        if use_intervals:
            chrom_intervals = intervals_by_chrom.get(name, pd.DataFrame(columns=INTERVAL_COLUMNS))
            partition = LinkedIntervals.from_frame(name, chrom_intervals)
        else:
            partition = NoIntervals(name)

        slices.append(ChromosomeSlice(
            name=name,
            length=int(length),
            points=chrom_points.reset_index(drop=True),
            intervals=partition,
        ))

    skipped = set(points_by_chrom) - set(chromosomes_df['name'])
    if skipped:
        logger.info("Ignoring point features on %d chromosome(s) absent from chromosome metadata", len(skipped))
    logger.info("Feature index built for %d chromosome(s)", len(slices))

    return slices
