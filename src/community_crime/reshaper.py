"""
Reshaper - wide monthly columns to the tidy (Community, Category, Date, Cases) table.

Every month header is parsed up front, so a bad header aborts the stage
before any rows are produced.
"""

from datetime import datetime
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from community_crime.utils.logger_config import setup_logger
from community_crime.utils.exceptions import ReshapeError

logger = setup_logger(__name__)

TIDY_COLUMNS: List[str] = ['Community', 'Category', 'Date', 'Cases']


def parse_month_header(header: str, month_format: str = '%Y/%m') -> pd.Timestamp:
    """
    Parses a month column header to the first day of that month

    Args:
    header (str): Column header, e.g. '2017/03'
    month_format (str): strptime format the header must match exactly

    Returns:
    pd.Timestamp: Midnight on the first day of the month

    Raises:
    ReshapeError: The header doesn't match month_format
    """
    try:
        parsed = datetime.strptime(str(header).strip(), month_format)
    except ValueError as e:
        raise ReshapeError(f'Column header {header!r} does not match month format {month_format!r} : {str(e)}') from e
    return pd.Timestamp(year=parsed.year, month=parsed.month, day=1)


def parse_month_headers(headers: Sequence[str], month_format: str = '%Y/%m') -> Dict[str, pd.Timestamp]:
    """Parses every header, keeping column order. Fails on the first bad one"""
    return {header: parse_month_header(header, month_format) for header in headers}


def to_tidy(df: pd.DataFrame, month_columns: Sequence[str], month_format: str = '%Y/%m',
            id_columns: Tuple[str, str] = ('Community', 'Category')) -> pd.DataFrame:
    """
    Converts the cleaned wide crime table to the tidy long table

    One output row per (input row, month column), ordered by input row first
    and then by month column order.

    Args:
    df (pd.DataFrame): Cleaned wide table (no missing counts)
    month_columns (Sequence[str]): Month columns to unpivot, in output order
    month_format (str): Format of the month headers
    id_columns (Tuple[str, str]): Community and Category column names

    Returns:
    pd.DataFrame: Columns Community, Category, Date, Cases

    Raises:
    ReshapeError: Unparseable header, or a month column that's missing from df
    """
    logger.info(f'Reshaping {len(df)} rows x {len(month_columns)} months to tidy format')

    missing = [col for col in month_columns if col not in df.columns]
    if missing:
        raise ReshapeError(f'Month columns {missing} are not in the crime table')

    dates = parse_month_headers(month_columns, month_format)
    community_col, category_col = id_columns

    wide = df[[community_col, category_col, *month_columns]].copy()
    wide['_row'] = range(len(wide))

    tidy = wide.melt(
        id_vars=[community_col, category_col, '_row'],
        value_vars=list(month_columns),
        var_name='_header',
        value_name='Cases',
    )
    column_order = {header: position for position, header in enumerate(month_columns)}
    tidy['_col'] = tidy['_header'].map(column_order)
    # melt emits column-major; restore row-major with a stable sort
    tidy = tidy.sort_values(['_row', '_col'], kind='mergesort').reset_index(drop=True)

    tidy['Date'] = pd.to_datetime(tidy['_header'].map(dates)).astype('datetime64[ns]')
    tidy = tidy.rename(columns={community_col: 'Community', category_col: 'Category'})
    tidy['Cases'] = tidy['Cases'].astype('int64')
    tidy = tidy[TIDY_COLUMNS]

    logger.info(f'Reshaped to {len(tidy)} tidy rows')
    return tidy
