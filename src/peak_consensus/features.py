#!/usr/bin/env python
"""
Data model for point features, interval features, chromosomes and results.

Feature collections travel through the package as pandas DataFrames with a
fixed set of columns (see ``POINT_COLUMNS``, ``INTERVAL_COLUMNS`` and
``CHROMOSOME_COLUMNS``). The frozen dataclasses in this module are the record
view of a single row and the types of the public results.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from peak_consensus.errors import InputValidationError

POINT_COLUMNS = ['chromosome', 'position', 'experiment', 'name']
INTERVAL_COLUMNS = ['chromosome', 'start', 'end', 'experiment', 'name']
CHROMOSOME_COLUMNS = ['name', 'length', 'is_circular']
REGION_COLUMNS = ['chromosome', 'start', 'end', 'experiment_count', 'experiments', 'features']


@dataclass(frozen=True)
class PointFeature:
    """A single-coordinate observation (e.g. a peak summit)."""
    chromosome: str
    position: int
    experiment: str
    name: str


@dataclass(frozen=True)
class IntervalFeature:
    """A genomic range linked to a point feature by name and experiment."""
    chromosome: str
    start: int
    end: int
    experiment: str
    name: str


@dataclass(frozen=True)
class ChromosomeInfo:
    """Name and length of a chromosome to analyze."""
    name: str
    length: int
    is_circular: Optional[bool] = None


@dataclass(frozen=True)
class ConsensusOptions:
    """
    Option set of a consensus computation.

    Attributes:
        extending_size: Half-width of the base region around the median position
        expand_to_fit_peak_region: Grow regions to include the linked intervals
        shrink_to_fit_peak_region: Shrink regions to the linked intervals when
            all of them already fit inside the region
        min_nbr_exp: Minimum number of distinct experiments supporting a region
        worker_count: Number of worker processes
    """
    extending_size: int = 250
    expand_to_fit_peak_region: bool = False
    shrink_to_fit_peak_region: bool = False
    min_nbr_exp: int = 1
    worker_count: int = 1

    @property
    def uses_intervals(self) -> bool:
        return self.expand_to_fit_peak_region or self.shrink_to_fit_peak_region


@dataclass(frozen=True)
class ConsensusRegion:
    """A region supported by point features from at least ``min_nbr_exp`` experiments."""
    chromosome: str
    start: int
    end: int
    supporting_features: Tuple[PointFeature, ...]
    experiment_count: int

    @property
    def experiments(self) -> List[str]:
        """Distinct experiment tags of the supporting features, sorted."""
        return sorted({feature.experiment for feature in self.supporting_features})


@dataclass(frozen=True)
class ConsensusResult:
    """
    Consensus regions together with the options that produced them.

    Attributes:
        parameters: Options used for the computation
        regions: Regions ordered by chromosome, then start position
    """
    parameters: ConsensusOptions
    regions: Tuple[ConsensusRegion, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.regions)

    def __iter__(self):
        return iter(self.regions)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Render the regions as a DataFrame.

        Returns:
            pandas.DataFrame: One row per region with the columns in ``REGION_COLUMNS``;
                ``experiments`` and ``features`` are comma-separated strings
        """
        records = [
            (
                region.chromosome,
                region.start,
                region.end,
                region.experiment_count,
                ','.join(region.experiments),
                ','.join(feature.name for feature in region.supporting_features),
            )
            for region in self.regions
        ]
        df = pd.DataFrame.from_records(records, columns=REGION_COLUMNS)
        return df.astype({'start': 'int64', 'end': 'int64', 'experiment_count': 'int64'})


PointInput = Union[pd.DataFrame, Iterable[PointFeature]]
IntervalInput = Union[pd.DataFrame, Iterable[IntervalFeature], None]
ChromosomeInput = Union[pd.DataFrame, Iterable[ChromosomeInfo], Dict[str, int]]


def _records_to_frame(records: Iterable, columns: Sequence[str]) -> pd.DataFrame:
    rows = [asdict(record) for record in records]
    return pd.DataFrame(rows, columns=list(columns))


def _check_columns(df: pd.DataFrame, columns: Sequence[str], label: str) -> None:
    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise InputValidationError(f"{label} are missing required columns: {', '.join(missing)}")


def _as_coordinates(values: pd.Series, label: str) -> pd.Series:
    """
    Cast a coordinate column to int64.

    Raises:
        InputValidationError: If a value is missing, not numeric, or not a whole number
    """
    numeric = pd.to_numeric(values, errors='coerce')
    if numeric.isna().any():
        raise InputValidationError(f"{label} must be numeric and non-missing")
    if (numeric % 1 != 0).any():
        raise InputValidationError(f"{label} must be whole numbers")
    return numeric.astype('int64')


def as_points_frame(points: PointInput) -> pd.DataFrame:
    """
    Coerce point features into a DataFrame with the ``POINT_COLUMNS`` columns.

    Args:
        points: DataFrame or iterable of PointFeature

    Returns:
        pandas.DataFrame: Point features, index reset, positions as int64
    """
    if isinstance(points, pd.DataFrame):
        _check_columns(points, POINT_COLUMNS, "Point features")
        df = points.loc[:, POINT_COLUMNS]
    else:
        df = _records_to_frame(points, POINT_COLUMNS)
    df = df.reset_index(drop=True)
    df = df.astype({'chromosome': str, 'experiment': str, 'name': str})
    df['position'] = _as_coordinates(df['position'], "Point feature positions")
    return df


def as_intervals_frame(intervals: IntervalInput) -> pd.DataFrame:
    """
    Coerce interval features into a DataFrame with the ``INTERVAL_COLUMNS`` columns.

    ``None`` gives an empty DataFrame.
    """
    if intervals is None:
        df = pd.DataFrame(columns=INTERVAL_COLUMNS)
    elif isinstance(intervals, pd.DataFrame):
        _check_columns(intervals, INTERVAL_COLUMNS, "Interval features")
        df = intervals.loc[:, INTERVAL_COLUMNS]
    else:
        df = _records_to_frame(intervals, INTERVAL_COLUMNS)
    df = df.reset_index(drop=True)
    df = df.astype({'chromosome': str, 'experiment': str, 'name': str})
    df['start'] = _as_coordinates(df['start'], "Interval feature starts")
    df['end'] = _as_coordinates(df['end'], "Interval feature ends")
    return df


def as_chromosomes_frame(chromosomes: ChromosomeInput) -> pd.DataFrame:
    """
    Coerce chromosome metadata into a DataFrame with the ``CHROMOSOME_COLUMNS`` columns.

    Args:
        chromosomes: DataFrame, iterable of ChromosomeInfo, or a mapping of
            chromosome name to length

    Returns:
        pandas.DataFrame: Chromosome metadata in the given order
    """
    if isinstance(chromosomes, pd.DataFrame):
        df = chromosomes.copy()
        if 'is_circular' not in df.columns:
            df['is_circular'] = None
        _check_columns(df, CHROMOSOME_COLUMNS, "Chromosome metadata")
        df = df.loc[:, CHROMOSOME_COLUMNS]
    elif isinstance(chromosomes, dict):
        df = pd.DataFrame(
            [(name, length, None) for name, length in chromosomes.items()],
            columns=CHROMOSOME_COLUMNS,
        )
    else:
        df = _records_to_frame(chromosomes, CHROMOSOME_COLUMNS)
    df = df.reset_index(drop=True)
    df['name'] = df['name'].astype(str)
    df['length'] = _as_coordinates(df['length'], "Chromosome lengths")
    return df


def point_features(df: pd.DataFrame) -> List[PointFeature]:
    """Convert a points DataFrame into PointFeature records, keeping row order."""
    return [
        PointFeature(chromosome, int(position), experiment, name)
        for chromosome, position, experiment, name
        in df.loc[:, POINT_COLUMNS].itertuples(index=False, name=None)
    ]
