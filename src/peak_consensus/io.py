#!/usr/bin/env python
"""
Reading peak calls and chromosome sizes, and writing consensus regions.

Peak calls are read from narrowPeak files (point = summit, interval = peak
region) or from BED files of summits (point only). An experiment table lists
one file per row with the experiment tag it belongs to.
"""

import logging
from pathlib import Path
from typing import Iterable, Tuple, Union

import numpy as np
import pandas as pd

from peak_consensus.errors import InputValidationError
from peak_consensus.features import (
    CHROMOSOME_COLUMNS,
    INTERVAL_COLUMNS,
    POINT_COLUMNS,
    ConsensusResult,
)

logger = logging.getLogger(__name__)

NARROWPEAK_COLUMNS = [
    'chromosome', 'start', 'end', 'name', 'score', 'strand',
    'signal_value', 'p_value', 'q_value', 'peak',
]
SUMMIT_COLUMNS = ['chromosome', 'start', 'end', 'name']
PEAK_FORMATS = ('narrowPeak', 'summits')


def _normalize_sep(sep: str) -> str:
    return '\t' if sep == '\\t' else sep


def _fill_names(names: pd.Series, experiment: str) -> pd.Series:
    """Replace missing or '.' peak names with '<experiment>_peak_<n>'."""
    generated = pd.Series(
        [f"{experiment}_peak_{i + 1}" for i in range(len(names))], index=names.index
    )
    missing = names.isna() | (names.astype(str) == '.')
    return names.astype(str).where(~missing, generated)


def read_narrowpeak(path: Union[str, Path], experiment: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load a narrowPeak file as point and interval features.

    The point of each peak is its summit, ``start + peak``; when the summit
    offset is -1 (not called) the midpoint of the peak is used instead.

    Args:
        path: narrowPeak file (BED6+4)
        experiment: Experiment tag given to every feature of the file

    Returns:
        tuple: (points_df, intervals_df)
    """
    logger.info("Loading narrowPeak data from: %s", path)
    df = pd.read_csv(path, sep='\t', header=None, names=NARROWPEAK_COLUMNS,
                     comment='#', usecols=range(len(NARROWPEAK_COLUMNS)))

    invalid_mask = (df['start'] < 0) | (df['end'] < df['start'])
    if invalid_mask.any():
        logger.warning("Removing %d invalid entries from %s (negative start or end < start)",
                       invalid_mask.sum(), path)
        df = df[~invalid_mask]

    df = df.reset_index(drop=True)
    df['experiment'] = experiment
    df['name'] = _fill_names(df['name'], experiment)
    df['chromosome'] = df['chromosome'].astype(str)

    midpoint = (df['start'] + df['end']) // 2
    df['position'] = np.where(df['peak'] >= 0, df['start'] + df['peak'], midpoint).astype('int64')

    logger.debug("Loaded %d peaks for experiment %s", len(df), experiment)
    return df.loc[:, POINT_COLUMNS].copy(), df.loc[:, INTERVAL_COLUMNS].copy()


def read_summits_bed(path: Union[str, Path], experiment: str) -> pd.DataFrame:
    """
    Load a BED file of summits as point features.

    The BED start of each line is taken as the summit position.

    Args:
        path: BED file with at least chromosome, start and end columns
        experiment: Experiment tag given to every feature of the file

    Returns:
        pandas.DataFrame: Point features
    """
    logger.info("Loading summit data from: %s", path)
    df = pd.read_csv(path, sep='\t', header=None, comment='#')
    if df.shape[1] < 3:
        raise InputValidationError(f"{path} is not a BED file (fewer than 3 columns)")
    if df.shape[1] == 3:
        df[3] = '.'
    df = df.iloc[:, :4].copy()
    df.columns = SUMMIT_COLUMNS

    df['experiment'] = experiment
    df['name'] = _fill_names(df['name'], experiment)
    df['chromosome'] = df['chromosome'].astype(str)
    df['position'] = df['start'].astype('int64')
    return df.loc[:, POINT_COLUMNS].copy()


def load_experiment_table(location: Union[str, Path], sep: str = '\t',
                          location_column: str = 'location') -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load the experiment table and all referenced peak files.

    The table has a header with at least ``experiment`` and ``location``
    columns; an optional ``format`` column holds ``narrowPeak`` (default) or
    ``summits``. Relative locations are resolved against the table's directory.

    Args:
        location: Path to the experiment table
        sep: Separator used in the table
        location_column: Column holding the peak file paths

    Returns:
        tuple: (points_df, intervals_df) combined over all experiments
    """
    sep = _normalize_sep(sep)

    logger.info("Reading experiment table...")
    table_df = pd.read_csv(location, sep=sep, dtype=str)
    logger.info("Experiment table loaded with %d rows", len(table_df))
    logger.debug("Experiment table head:\n%s", table_df.head())

    for column in ('experiment', location_column):
        if column not in table_df.columns:
            raise InputValidationError(f"Experiment table {location} has no '{column}' column")
    if 'format' not in table_df.columns:
        table_df['format'] = 'narrowPeak'

    base_dir = Path(location).parent
    point_frames, interval_frames = [], []
    for _, row in table_df.iterrows():
        peak_path = Path(row[location_column])
        if not peak_path.is_absolute():
            peak_path = base_dir / peak_path

        peak_format = row['format'] if isinstance(row['format'], str) else 'narrowPeak'
        if peak_format not in PEAK_FORMATS:
            raise InputValidationError(
                f"Unknown peak format '{peak_format}' for {peak_path}; expected one of {', '.join(PEAK_FORMATS)}"
            )

        try:
            if peak_format == 'narrowPeak':
                points_df, intervals_df = read_narrowpeak(peak_path, row['experiment'])
                interval_frames.append(intervals_df)
            else:
                points_df = read_summits_bed(peak_path, row['experiment'])
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error("Error loading %s: %s", peak_path, str(e))
            raise
        point_frames.append(points_df)

    points_df = pd.concat(point_frames, ignore_index=True) if point_frames \
        else pd.DataFrame(columns=POINT_COLUMNS)
    intervals_df = pd.concat(interval_frames, ignore_index=True) if interval_frames \
        else pd.DataFrame(columns=INTERVAL_COLUMNS)
    logger.info("Combined %d point features and %d interval features", len(points_df), len(intervals_df))

    return points_df, intervals_df


def chromosome_info_from_pairs(pairs: Iterable[Tuple[str, int]]) -> pd.DataFrame:
    """Build chromosome metadata from (name, length) pairs."""
    return pd.DataFrame([(str(name), int(length), None) for name, length in pairs], columns=CHROMOSOME_COLUMNS)


def read_chrom_sizes(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a two-column ``chrom.sizes`` file as chromosome metadata.

    Args:
        path: Tab-separated file of chromosome name and length

    Returns:
        pandas.DataFrame: Chromosome metadata in file order
    """
    logger.info("Reading chromosome sizes from: %s", path)
    df = pd.read_csv(path, sep='\t', header=None, comment='#', usecols=[0, 1], names=['name', 'length'],
                     dtype={'name': str})
    return chromosome_info_from_pairs(df.itertuples(index=False, name=None))


def write_consensus_bed(result: ConsensusResult, path: Union[str, Path]) -> Path:
    """
    Save consensus regions as a tab-separated BED file.

    Columns are chromosome, start, end, region name, number of experiments
    and the comma-separated experiment tags.

    Args:
        result: Consensus computation result
        path: Output file

    Returns:
        Path: The written file
    """
    path = Path(path)
    path.parent.mkdir(exist_ok=True, parents=True)

    df = result.to_dataframe()
    df.insert(3, 'region', [f"consensus_{i + 1}" for i in range(len(df))])
    df = df.loc[:, ['chromosome', 'start', 'end', 'region', 'experiment_count', 'experiments']]
    df.to_csv(path, sep='\t', header=False, index=False)

    logger.info("Consensus regions saved to %s", path)
    return path
