"""
Cleaner - fill missing crime counts and trim the table to the reporting window.

Cleaning is two explicit steps: `missing_count_mask` records which cells were
blank, then `fill_missing_counts` collapses them to 0 ("no reported
incidents"). Month columns are always selected by name.
"""

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from community_crime.config import PipelineConfig
from community_crime.reshaper import parse_month_header
from community_crime.utils.logger_config import setup_logger

logger = setup_logger(__name__)


def month_columns_of(df: pd.DataFrame, id_columns: Sequence[str] = ('Community', 'Category')) -> List[str]:
    """Every column that isn't an identifier, in table order"""
    return [col for col in df.columns if col not in id_columns]


def missing_count_mask(df: pd.DataFrame, month_columns: Sequence[str]) -> pd.DataFrame:
    """Boolean frame, True where a count cell was blank in the input"""
    return df[list(month_columns)].isna()


def count_missing(df: pd.DataFrame, month_columns: Sequence[str]) -> int:
    return int(missing_count_mask(df, month_columns).to_numpy().sum())


def fill_missing_counts(df: pd.DataFrame, month_columns: Sequence[str]) -> pd.DataFrame:
    """
    Replaces blank count cells with 0 and casts them to int64

    Args:
    df (pd.DataFrame): Crime table straight from the loader
    month_columns (Sequence[str]): Count columns to fill

    Returns:
    pd.DataFrame: Copy of df with no missing counts
    """
    df = df.copy()
    for col in month_columns:
        df[col] = df[col].fillna(0).astype('int64')
    return df


def drop_month_columns(df: pd.DataFrame, exclude: Iterable[str]) -> pd.DataFrame:
    """Drops the named month columns. Unknown names are logged and ignored"""
    exclude = list(exclude)
    unknown = [col for col in exclude if col not in df.columns]
    if unknown:
        logger.warning(f'Ignoring excluded month columns not in the table: {unknown}')
    present = [col for col in exclude if col in df.columns]
    if present:
        logger.debug(f'Dropping month columns {present}')
    return df.drop(columns=present)


def select_reporting_window(df: pd.DataFrame, month_columns: Sequence[str],
                            start: Optional[str] = None, end: Optional[str] = None,
                            month_format: str = '%Y/%m') -> pd.DataFrame:
    """
    Keeps only month columns whose header falls inside [start, end]

    Args:
    df (pd.DataFrame): Crime table
    month_columns (Sequence[str]): Candidate month columns
    start (str | None): First month to keep, written like a header. None keeps from the beginning
    end (str | None): Last month to keep, written like a header. None keeps to the end
    month_format (str): Format of the headers and bounds

    Returns:
    pd.DataFrame: df without the out-of-window month columns

    Raises:
    ReshapeError: A header or bound doesn't match month_format
    """
    if start is None and end is None:
        return df

    lower = parse_month_header(start, month_format) if start is not None else None
    upper = parse_month_header(end, month_format) if end is not None else None

    outside = []
    for col in month_columns:
        month = parse_month_header(col, month_format)
        if (lower is not None and month < lower) or (upper is not None and month > upper):
            outside.append(col)

    logger.info(f'Reporting window {start or "..."} to {end or "..."} drops {len(outside)} month columns')
    return df.drop(columns=outside)


def clean_crime_table(df: pd.DataFrame, config: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """
    Applies the exclusion list, the reporting window, then fills blanks with 0

    Exclusions go first so non-month columns (e.g. a 'Total') never reach
    the window's header parsing. Output has the same rows as df and no
    missing counts.
    """
    config = config or PipelineConfig()
    logger.info('Starting Crime Table Cleaning')

    df = drop_month_columns(df, config.exclude_months)
    months = month_columns_of(df, config.id_columns)
    df = select_reporting_window(df, months, config.window_start, config.window_end, config.month_format)

    months = month_columns_of(df, config.id_columns)
    logger.debug(f'Filling {count_missing(df, months)} blank count cells with 0')
    df = fill_missing_counts(df, months)

    logger.info(f'Cleaned {len(df)} rows, {len(months)} month columns kept')
    return df
