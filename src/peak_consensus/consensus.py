#!/usr/bin/env python
"""
Consensus regions across experiments, computed chromosome by chromosome.

Each chromosome is an independent unit of work: its point features go through
window convergence, then the experiment-count filter and optional resizing.
Units run sequentially or on a pool of worker processes and their results are
joined in chromosome-metadata order, so the output does not depend on the
number of workers.
"""

import logging
import os
from concurrent.futures import FIRST_EXCEPTION, ProcessPoolExecutor, wait
from typing import Dict, List, Optional

import pandas as pd

from peak_consensus.feature_index import ChromosomeSlice, build_feature_index
from peak_consensus.features import (
    ChromosomeInput,
    ConsensusOptions,
    ConsensusRegion,
    ConsensusResult,
    IntervalInput,
    PointInput,
    as_chromosomes_frame,
    as_intervals_frame,
    as_points_frame,
)
from peak_consensus.resize import consensus_for_chromosome
from peak_consensus.validation import validate_consensus_inputs

logger = logging.getLogger(__name__)


def available_workers() -> int:
    """Number of CPUs usable by this process."""
    return os.cpu_count() or 1


def _run_sequential(slices: List[ChromosomeSlice],
                    options: ConsensusOptions) -> Dict[str, List[ConsensusRegion]]:
    results = {}
    for chrom in slices:
        logger.debug("Processing %s (%d point features)", chrom.name, len(chrom.points))
        results[chrom.name] = consensus_for_chromosome(chrom, options)
    return results


def _run_parallel(slices: List[ChromosomeSlice], options: ConsensusOptions,
                  max_workers: int) -> Dict[str, List[ConsensusRegion]]:
    logger.info("Dispatching %d chromosome(s) to %d worker processes", len(slices), max_workers)
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(consensus_for_chromosome, chrom, options): chrom.name
                   for chrom in slices}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for future in done:
            if future.exception() is not None:
                for other in pending:
                    other.cancel()
                logger.error("Consensus computation failed on %s", futures[future])
                raise future.exception()

        return {futures[future]: future.result() for future in futures}


def compute_consensus_regions(points: PointInput,
                              intervals: IntervalInput,
                              chromosomes: ChromosomeInput,
                              extending_size: int = 250,
                              expand_to_fit_peak_region: bool = False,
                              shrink_to_fit_peak_region: bool = False,
                              min_nbr_exp: int = 1,
                              worker_count: int = 1) -> ConsensusResult:
    """
    Find consensus regions on every analyzed chromosome.

    Inputs are assumed valid; use ``find_consensus_peak_regions`` to validate
    them first.

    Args:
        points: Point features (DataFrame or PointFeature records)
        intervals: Interval features linked to the points; only read when
            expanding or shrinking, otherwise may be None
        chromosomes: Chromosomes to analyze, with their lengths
        extending_size: Half-width of the base region around the median position
        expand_to_fit_peak_region: Grow regions to include the linked intervals
        shrink_to_fit_peak_region: Shrink regions to the linked intervals when
            all of them fit inside the region
        min_nbr_exp: Minimum number of distinct experiments per region
        worker_count: Number of worker processes

    Returns:
        ConsensusResult: Options used and regions ordered by chromosome, then start

    Raises:
        MissingLinkedFeatureError: If resizing needs an interval that is missing
        ConvergenceError: If a window fails to stabilize
    """
    options = ConsensusOptions(
        extending_size=extending_size,
        expand_to_fit_peak_region=expand_to_fit_peak_region,
        shrink_to_fit_peak_region=shrink_to_fit_peak_region,
        min_nbr_exp=min_nbr_exp,
        worker_count=worker_count,
    )
    return run_consensus(
        as_points_frame(points),
        as_intervals_frame(intervals) if options.uses_intervals else None,
        as_chromosomes_frame(chromosomes),
        options,
    )


def run_consensus(points_df: pd.DataFrame,
                  intervals_df: Optional[pd.DataFrame],
                  chromosomes_df: pd.DataFrame,
                  options: ConsensusOptions) -> ConsensusResult:
    """
    Run the per-chromosome computation on DataFrames that are already coerced.

    Returns:
        ConsensusResult: Options used and the ordered regions
    """
    slices = build_feature_index(points_df, intervals_df, chromosomes_df, options.uses_intervals)

    max_workers = min(options.worker_count, len(slices), available_workers())
    if max_workers <= 1:
        results = _run_sequential(slices, options)
    else:
        results = _run_parallel(slices, options, max_workers)

    regions = [region for chrom in slices for region in results[chrom.name]]
    logger.info("Found %d consensus regions on %d chromosome(s)", len(regions), len(slices))

    return ConsensusResult(parameters=options, regions=tuple(regions))


def find_consensus_peak_regions(points: PointInput,
                                intervals: IntervalInput,
                                chromosomes: ChromosomeInput,
                                extending_size: int = 250,
                                expand_to_fit_peak_region: bool = False,
                                shrink_to_fit_peak_region: bool = False,
                                min_nbr_exp: int = 1,
                                worker_count: int = 1) -> ConsensusResult:
    """
    Validate the inputs, then find consensus regions.

    Regions are built from point features (e.g. peak summits) of several
    experiments. The minimum width of a region is ``2 * extending_size``
    unless shrinking or chromosome clipping applies. The choice of
    ``extending_size`` has a large effect on the result; trying a few values
    is recommended.

    Args:
        points: Point features (DataFrame or PointFeature records)
        intervals: Interval features linked to the points by name and
            experiment; required when expanding or shrinking
        chromosomes: Chromosomes to analyze, with their lengths
        extending_size: Half-width of the base region around the median position
        expand_to_fit_peak_region: Grow regions to include the linked intervals
            of their supporting points (single pass)
        shrink_to_fit_peak_region: Shrink regions to the linked intervals when
            all of them fit inside the region
        min_nbr_exp: Minimum number of distinct experiments per region
        worker_count: Number of worker processes

    Returns:
        ConsensusResult: Options used and regions ordered by chromosome, then start

    Raises:
        InputValidationError: If options or feature collections are invalid
    """
    options = ConsensusOptions(
        extending_size=extending_size,
        expand_to_fit_peak_region=expand_to_fit_peak_region,
        shrink_to_fit_peak_region=shrink_to_fit_peak_region,
        min_nbr_exp=min_nbr_exp,
        worker_count=worker_count,
    )
    points_df = as_points_frame(points)
    intervals_df = as_intervals_frame(intervals) if options.uses_intervals else None
    chromosomes_df = as_chromosomes_frame(chromosomes)

    validate_consensus_inputs(points_df, intervals_df, chromosomes_df, options)
    logger.info("Finding consensus regions for %d point features from %d experiments",
                len(points_df), points_df['experiment'].nunique())

    return run_consensus(points_df, intervals_df, chromosomes_df, options)
