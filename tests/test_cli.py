#!/usr/bin/env python
"""
Tests for the peak-consensus command-line interface.
"""

from pathlib import Path

import pandas as pd
import pytest
from click.testing import CliRunner

from conftest import write_narrowpeak
from peak_consensus.cli import find_consensus


@pytest.fixture
def sample_inputs(tmp_path):
    """Experiment table with two narrowPeak files and a chrom.sizes file."""
    write_narrowpeak(tmp_path / "x.narrowPeak", [
        ("chr1", 50, 150, "x1", 50),
        ("chr1", 800, 900, "x2", 50),
    ])
    write_narrowpeak(tmp_path / "y.narrowPeak", [
        ("chr1", 100, 180, "y1", 40),
        ("chr2", 10, 90, "y2", 40),
    ])
    table = tmp_path / "experiments.tsv"
    table.write_text("experiment\tlocation\nX\tx.narrowPeak\nY\ty.narrowPeak\n")
    chrom_sizes = tmp_path / "genome.chrom.sizes"
    chrom_sizes.write_text("chr1\t1000\nchr2\t1000\n")
    return table, chrom_sizes


def test_cli_basic_run(sample_inputs, tmp_path):
    """Test basic CLI functionality."""
    table, chrom_sizes = sample_inputs
    output = tmp_path / "consensus.bed"
    runner = CliRunner()
    result = runner.invoke(find_consensus, [
        '--location', str(table),
        '--chrom-sizes', str(chrom_sizes),
        '--output', str(output),
        '--extending-size', '50',
    ])

    assert result.exit_code == 0
    df = pd.read_csv(output, sep='\t', header=None)
    assert df[[0, 1, 2, 4]].values.tolist() == [
        ["chr1", 70, 170, 2],
        ["chr1", 800, 900, 1],
        ["chr2", 0, 100, 1],
    ]


def test_cli_min_nbr_exp_and_expand(sample_inputs, tmp_path):
    """Test CLI with an experiment threshold and expansion."""
    table, chrom_sizes = sample_inputs
    output = tmp_path / "consensus.bed"
    runner = CliRunner()
    result = runner.invoke(find_consensus, [
        '--location', str(table),
        '--chrom-sizes', str(chrom_sizes),
        '--output', str(output),
        '--extending-size', '50',
        '--min-nbr-exp', '2',
        '--expand-to-fit',
        '--threads', '2',
    ])

    assert result.exit_code == 0
    df = pd.read_csv(output, sep='\t', header=None)
    assert df[[0, 1, 2, 5]].values.tolist() == [["chr1", 50, 180, "X,Y"]]


def test_cli_verbose_flag(sample_inputs, tmp_path):
    """Test CLI with verbose flag."""
    table, chrom_sizes = sample_inputs
    runner = CliRunner()
    result = runner.invoke(find_consensus, [
        '--location', str(table),
        '--chrom-sizes', str(chrom_sizes),
        '--output', str(tmp_path / "consensus.bed"),
        '--verbose',
    ])

    assert result.exit_code == 0
    assert "DEBUG" in result.output


def test_cli_threshold_above_experiments(sample_inputs, tmp_path):
    """Test CLI fails when more experiments are required than available."""
    table, chrom_sizes = sample_inputs
    output = tmp_path / "consensus.bed"
    runner = CliRunner()
    result = runner.invoke(find_consensus, [
        '--location', str(table),
        '--chrom-sizes', str(chrom_sizes),
        '--output', str(output),
        '--min-nbr-exp', '3',
    ])

    assert result.exit_code != 0
    assert not Path(output).exists()


def test_cli_invalid_input():
    """Test CLI with invalid input file."""
    runner = CliRunner()
    result = runner.invoke(find_consensus, [
        '--location', 'nonexistent_file.tsv',
        '--chrom-sizes', 'nonexistent.chrom.sizes',
        '--output', 'consensus.bed',
    ])

    assert result.exit_code != 0


if __name__ == "__main__":
    pytest.main()
