#!/usr/bin/env python
"""
Window convergence over the point features of one chromosome.

Starting from the leftmost unconsumed point, a window of half-width
``extending_size`` collects nearby points. The window is then re-centered on
the median of the collected positions with twice the half-width, and the
collection is repeated until the set of collected points no longer changes.
The stable set is consumed and becomes one raw region; scanning resumes at the
next unconsumed point.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from peak_consensus.errors import ConvergenceError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10000


@dataclass(frozen=True)
class CandidateWindow:
    """Window state during one convergence iteration."""
    center: float
    half_width: int
    included: np.ndarray


@dataclass(frozen=True)
class RawRegion:
    """
    A converged window.

    Attributes:
        center: Median position of the included points
        included: Indices of the included points in the caller's input order,
            sorted by position
    """
    center: float
    included: np.ndarray


def points_in_window(sorted_positions: np.ndarray, consumed: np.ndarray,
                     low: float, high: float) -> np.ndarray:
    """
    Find unconsumed points inside a closed window.

    Args:
        sorted_positions: Point positions sorted ascending
        consumed: Boolean mask of consumed points, aligned with sorted_positions
        low: Inclusive lower bound of the window
        high: Inclusive upper bound of the window

    Returns:
        numpy.ndarray: Indices into sorted_positions, ascending
    """
    first = np.searchsorted(sorted_positions, low, side='left')
    last = np.searchsorted(sorted_positions, high, side='right')
    candidates = np.arange(first, last)
    return candidates[~consumed[first:last]]


def converge_window(sorted_positions: np.ndarray, consumed: np.ndarray,
                    seed: int, extending_size: int,
                    max_iterations: int = DEFAULT_MAX_ITERATIONS,
                    chromosome: str = '') -> CandidateWindow:
    """
    Grow and re-center a window seeded at one point until it stabilizes.

    Args:
        sorted_positions: Point positions sorted ascending
        consumed: Boolean mask of consumed points
        seed: Index of the seed point in sorted_positions
        extending_size: Half-width of the seed window
        max_iterations: Number of re-centering steps allowed before giving up
        chromosome: Chromosome name, used in error messages

    Returns:
        CandidateWindow: The converged window

    Raises:
        ConvergenceError: If the included set is still changing after max_iterations
    """
    position = sorted_positions[seed]
    window = CandidateWindow(
        center=float(position),
        half_width=extending_size,
        included=points_in_window(sorted_positions, consumed,
                                  position - extending_size, position + extending_size),
    )
    scan_width = 2 * extending_size

    for _ in range(max_iterations):
        median = float(np.median(sorted_positions[window.included]))
        included = points_in_window(sorted_positions, consumed,
                                    median - scan_width, median + scan_width)
        if np.array_equal(included, window.included):
            return CandidateWindow(center=median, half_width=scan_width, included=included)
        window = CandidateWindow(center=median, half_width=scan_width, included=included)

    raise ConvergenceError(chromosome, int(position), max_iterations)


def find_raw_regions(positions: np.ndarray, extending_size: int,
                     max_iterations: int = DEFAULT_MAX_ITERATIONS,
                     chromosome: str = '') -> List[RawRegion]:
    """
    Detect raw consensus regions on one chromosome.

    Every point ends up in exactly one raw region. Regions are returned in
    scan order, which is ascending in position.

    Args:
        positions: Point positions in input order
        extending_size: Half-width of the base window, positive
        max_iterations: Iteration cap for each window
        chromosome: Chromosome name, used in log and error messages

    Returns:
        list: RawRegion objects whose ``included`` indices refer to ``positions``
    """
    positions = np.asarray(positions)
    order = np.argsort(positions, kind='stable')
    sorted_positions = positions[order]
    consumed = np.zeros(len(sorted_positions), dtype=bool)

    regions = []
    cursor = 0
    while cursor < len(sorted_positions):
        window = converge_window(sorted_positions, consumed, cursor, extending_size,
                                 max_iterations=max_iterations, chromosome=chromosome)
        consumed[window.included] = True
        regions.append(RawRegion(center=window.center, included=order[window.included]))

        # The next seed is the leftmost point still unconsumed
        while cursor < len(sorted_positions) and consumed[cursor]:
            cursor += 1

    logger.debug("Found %d raw regions from %d points on %s",
                 len(regions), len(sorted_positions), chromosome)
    return regions
