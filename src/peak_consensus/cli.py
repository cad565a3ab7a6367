#!/usr/bin/env python
"""
Command-line interface for finding consensus peak regions.

This module handles argument parsing, logging configuration and the wiring of
input loading, validation, the consensus computation and output writing.

Usage:
    peak-consensus --location experiments.tsv --chrom-sizes hg38.chrom.sizes --output consensus.bed
    peak-consensus --location experiments.tsv --chrom-sizes hg38.chrom.sizes --output consensus.bed \
        --extending-size 300 --expand-to-fit --min-nbr-exp 2 --threads 4 --verbose
"""

import logging
import sys

import click

from peak_consensus.consensus import find_consensus_peak_regions
from peak_consensus.io import load_experiment_table, read_chrom_sizes, write_consensus_bed

# Configure root logger
logger = logging.getLogger()


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    console_handler.setLevel(level)

    logger.addHandler(console_handler)


@click.command()
@click.option('--location', type=click.Path(exists=True, dir_okay=False), required=True,
              help="Experiment table listing one peak file per row (columns: experiment, location[, format]).")
@click.option('--sep', default='\t',
              help="Separator for the experiment table.")
@click.option('--chrom-sizes', type=click.Path(exists=True, dir_okay=False), required=True,
              help="Two-column chrom.sizes file; only these chromosomes are analyzed.")
@click.option('--output', type=click.Path(dir_okay=False), required=True,
              help="BED file to write the consensus regions to.")
@click.option('--extending-size', default=250, type=click.IntRange(min=1), show_default=True,
              help="Padding on both sides of the median position of a region.")
@click.option('--expand-to-fit/--no-expand-to-fit', default=False,
              help="Grow regions to include the peak regions of their supporting peaks.")
@click.option('--shrink-to-fit/--no-shrink-to-fit', default=False,
              help="Shrink regions to their peak regions when all of them fit inside.")
@click.option('--min-nbr-exp', default=1, type=click.IntRange(min=1), show_default=True,
              help="Minimum number of experiments with a peak in a region.")
@click.option('--threads', default=1, type=click.IntRange(min=1), show_default=True,
              help="Number of worker processes; chromosomes are processed in parallel.")
@click.option('--verbose', is_flag=True, default=False,
              help="Enable verbose (debug) logging.")
def find_consensus(location: str,
                   sep: str,
                   chrom_sizes: str,
                   output: str,
                   extending_size: int,
                   expand_to_fit: bool,
                   shrink_to_fit: bool,
                   min_nbr_exp: int,
                   threads: int,
                   verbose: bool) -> None:
    """
    Find regions where peaks of several experiments agree.

    Peaks (narrowPeak summits or summit BED files) from every experiment listed
    in the table are grouped per chromosome by iterative window convergence.
    Regions supported by fewer than --min-nbr-exp experiments are dropped.

    Examples:
        peak-consensus --location experiments.tsv --chrom-sizes hg38.chrom.sizes --output consensus.bed
        peak-consensus --location experiments.tsv --chrom-sizes hg38.chrom.sizes --output consensus.bed --min-nbr-exp 2 --verbose
    """
    setup_logging(verbose)

    try:
        points_df, intervals_df = load_experiment_table(location, sep)
        chromosomes_df = read_chrom_sizes(chrom_sizes)

        result = find_consensus_peak_regions(
            points_df,
            intervals_df,
            chromosomes_df,
            extending_size=extending_size,
            expand_to_fit_peak_region=expand_to_fit,
            shrink_to_fit_peak_region=shrink_to_fit,
            min_nbr_exp=min_nbr_exp,
            worker_count=threads,
        )

        if len(result) == 0:
            logger.info("No consensus regions found")
        write_consensus_bed(result, output)

    except Exception as e:
        logger.exception("Error during consensus computation: %s", str(e))
        raise


if __name__ == "__main__":
    find_consensus()
