#!/usr/bin/env python
"""
Experiment-count filtering and resizing of raw regions.

A raw region that passes the ``min_nbr_exp`` threshold gets base bounds of
``extending_size`` around its center. The bounds can then grow to the hull of
the linked interval features (expand), shrink to that hull when every linked
interval already fits inside (shrink), and are finally clipped to the
chromosome.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from peak_consensus.convergence import RawRegion, find_raw_regions
from peak_consensus.feature_index import ChromosomeSlice, IntervalPartition, LinkedIntervals
from peak_consensus.features import ConsensusOptions, ConsensusRegion, PointFeature, point_features

logger = logging.getLogger(__name__)


def base_bounds(center: float, extending_size: int) -> Tuple[int, int]:
    """Return the unexpanded (start, end) around a center position."""
    return int(math.floor(center - extending_size)), int(math.ceil(center + extending_size))


def linked_hull(features: Sequence[PointFeature], intervals: LinkedIntervals) -> Tuple[int, int]:
    """
    Smallest (start, end) covering the intervals linked to the given features.

    Raises:
        MissingLinkedFeatureError: If a feature has no linked interval
    """
    bounds = [intervals.lookup(feature.name, feature.experiment) for feature in features]
    return min(start for start, _ in bounds), max(end for _, end in bounds)


def expand_to_fit(start: int, end: int, hull: Tuple[int, int]) -> Tuple[int, int]:
    """Grow (start, end) so that it covers the hull; never shrinks."""
    return min(start, hull[0]), max(end, hull[1])


def shrink_to_fit(start: int, end: int, hull: Tuple[int, int]) -> Tuple[int, int]:
    """Shrink (start, end) to the hull when the hull lies inside it; never grows."""
    if start <= hull[0] and hull[1] <= end:
        return hull
    return start, end


def clip_to_chromosome(start: int, end: int, length: int) -> Tuple[int, int]:
    """Clamp (start, end) to [0, length], keeping start <= end."""
    end = min(max(end, 0), length)
    start = min(max(start, 0), end)
    return start, end


def filter_and_resize(raw: RawRegion,
                      features: Sequence[PointFeature],
                      intervals: IntervalPartition,
                      options: ConsensusOptions,
                      chromosome: str,
                      length: int) -> Optional[ConsensusRegion]:
    """
    Turn a raw region into a ConsensusRegion, or drop it.

    Args:
        raw: Converged window
        features: Point features of the chromosome, indexable by ``raw.included``
        intervals: Linked intervals of the chromosome, or NoIntervals
        options: Option set of the computation
        chromosome: Chromosome name
        length: Chromosome length

    Returns:
        ConsensusRegion or None: None when fewer than ``min_nbr_exp`` experiments
            support the region

    Raises:
        MissingLinkedFeatureError: If resizing needs an interval that is missing
    """
    supporting = tuple(features[i] for i in raw.included)
    experiment_count = len({feature.experiment for feature in supporting})
    if experiment_count < options.min_nbr_exp:
        return None

    start, end = base_bounds(raw.center, options.extending_size)

    # Expansion runs first; shrinking is checked against the expanded bounds
    if options.uses_intervals and isinstance(intervals, LinkedIntervals):
        hull = linked_hull(supporting, intervals)
        if options.expand_to_fit_peak_region:
            start, end = expand_to_fit(start, end, hull)
        if options.shrink_to_fit_peak_region:
            start, end = shrink_to_fit(start, end, hull)

    start, end = clip_to_chromosome(start, end, length)

    return ConsensusRegion(
        chromosome=chromosome,
        start=start,
        end=end,
        supporting_features=supporting,
        experiment_count=experiment_count,
    )


def consensus_for_chromosome(chrom: ChromosomeSlice, options: ConsensusOptions) -> List[ConsensusRegion]:
    """
    Run window convergence and filtering for one chromosome.

    This is the unit of work dispatched to worker processes.

    Args:
        chrom: Features and metadata of the chromosome
        options: Option set of the computation

    Returns:
        list: ConsensusRegion objects sorted by start position
    """
    features = point_features(chrom.points)
    raw_regions = find_raw_regions(chrom.points['position'].to_numpy(), options.extending_size,
                                   chromosome=chrom.name)

    regions = []
    for raw in raw_regions:
        region = filter_and_resize(raw, features, chrom.intervals, options, chrom.name, chrom.length)
        if region is not None:
            regions.append(region)

    regions.sort(key=lambda region: region.start)
    logger.debug("%s: kept %d of %d raw regions", chrom.name, len(regions), len(raw_regions))
    return regions
