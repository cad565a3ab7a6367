#!/usr/bin/env python
"""
Validation of option values and feature collections.

All checks run before any chromosome is processed and raise
InputValidationError on the first problem found.
"""

import logging
import numbers

import pandas as pd

from peak_consensus.errors import InputValidationError
from peak_consensus.features import ConsensusOptions

logger = logging.getLogger(__name__)


def _is_positive_integer(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return value > 0 and float(value).is_integer()


def validate_options(options: ConsensusOptions) -> None:
    """
    Check the option set.

    Raises:
        InputValidationError: If a size or count is not a positive integer, or a
            resize flag is not a boolean
    """
    for label in ('extending_size', 'min_nbr_exp', 'worker_count'):
        if not _is_positive_integer(getattr(options, label)):
            raise InputValidationError(f"{label} must be a positive integer, got {getattr(options, label)!r}")

    for label in ('expand_to_fit_peak_region', 'shrink_to_fit_peak_region'):
        if not isinstance(getattr(options, label), bool):
            raise InputValidationError(f"{label} must be a boolean, got {getattr(options, label)!r}")


def validate_chromosomes(chromosomes_df: pd.DataFrame) -> None:
    """
    Check chromosome metadata.

    Raises:
        InputValidationError: If no chromosome is given, a name repeats, or a
            length is not positive
    """
    if chromosomes_df.empty:
        raise InputValidationError("At least one chromosome must be provided")
    duplicated = chromosomes_df['name'][chromosomes_df['name'].duplicated()]
    if not duplicated.empty:
        raise InputValidationError(f"Duplicated chromosome names: {', '.join(duplicated.unique())}")
    if (chromosomes_df['length'] <= 0).any():
        raise InputValidationError("Chromosome lengths must be positive")


def validate_points(points_df: pd.DataFrame, options: ConsensusOptions) -> None:
    """
    Check point features against the option set.

    Raises:
        InputValidationError: If positions are negative, (name, experiment)
            pairs repeat, or min_nbr_exp exceeds the number of experiments
    """
    if (points_df['position'] < 0).any():
        raise InputValidationError("Point feature positions must be non-negative")

    duplicated = points_df.duplicated(subset=['name', 'experiment'])
    if duplicated.any():
        first = points_df.loc[duplicated].iloc[0]
        raise InputValidationError(
            f"Point feature '{first['name']}' appears more than once in experiment '{first['experiment']}'"
        )

    nbr_experiments = points_df['experiment'].nunique()
    if options.min_nbr_exp > nbr_experiments:
        raise InputValidationError(
            f"min_nbr_exp ({options.min_nbr_exp}) exceeds the number of experiments ({nbr_experiments})"
        )


def validate_intervals(points_df: pd.DataFrame, intervals_df: pd.DataFrame) -> None:
    """
    Check interval features and their links to point features.

    Every point feature must have exactly one interval feature with the same
    name, experiment and chromosome.

    Raises:
        InputValidationError: If an interval has start > end, a link is
            ambiguous, or a point feature has no linked interval
    """
    if (intervals_df['start'] > intervals_df['end']).any():
        raise InputValidationError("Interval features must satisfy start <= end")

    keys = ['chromosome', 'name', 'experiment']
    if intervals_df.duplicated(subset=keys).any():
        raise InputValidationError("Interval features must be unique per chromosome, name and experiment")

    linked = points_df.merge(intervals_df.loc[:, keys], on=keys, how='left', indicator=True)
    unmatched = linked[linked['_merge'] == 'left_only']
    if not unmatched.empty:
        first = unmatched.iloc[0]
        raise InputValidationError(
            f"{len(unmatched)} point feature(s) have no interval feature, e.g. "
            f"'{first['name']}' of experiment '{first['experiment']}' on {first['chromosome']}"
        )


def validate_consensus_inputs(points_df: pd.DataFrame,
                              intervals_df: pd.DataFrame,
                              chromosomes_df: pd.DataFrame,
                              options: ConsensusOptions) -> None:
    """
    Run every check needed before a consensus computation.

    Interval features are only checked when resizing is requested.

    Raises:
        InputValidationError: On the first problem found
    """
    validate_options(options)
    validate_chromosomes(chromosomes_df)
    validate_points(points_df, options)
    if options.uses_intervals:
        validate_intervals(points_df, intervals_df)
    logger.debug("Validated %d point features and %d chromosomes", len(points_df), len(chromosomes_df))
