"""
Loader - read the raw crime and census spreadsheets into DataFrames.

Inputs:
  - crime table: Community, Category, one column per reporting month
  - census table: Community, one column per census year

Only type coercion happens here. Blank cells stay missing (<NA>) so the
cleaner can tell "missing" apart from an explicit zero.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from community_crime.config import PipelineConfig
from community_crime.utils.logger_config import setup_logger
from community_crime.utils.exceptions import LoadError

logger = setup_logger(__name__)


def _read_table(path, sep: str = ',') -> pd.DataFrame:
    """
    Reads a delimited file with every cell as a string

    Args:
    path (str | Path): Location of the file
    sep (str): Field delimiter. Defaults to comma

    Returns:
    pd.DataFrame: Raw table with stripped headers

    Raises:
    LoadError: File is missing, empty or not parseable
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f'Input file not found: {path}')

    try:
        df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False, na_values=[''])
    except pd.errors.EmptyDataError:
        raise LoadError(f'Input file is empty: {path}')
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise LoadError(f'Could not read {path} : {str(e)}') from e

    df.columns = [str(col).strip() for col in df.columns]
    logger.debug(f'Read {len(df)} rows x {len(df.columns)} columns from {path}')
    return df


def _require_columns(df: pd.DataFrame, columns: Iterable[str], path) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise LoadError(f'{path} is missing expected column(s) {missing}. Found {list(df.columns)}')


def _coerce_numeric(df: pd.DataFrame, column: str, path) -> pd.Series:
    """Converts one column to numbers, failing on the first cell that isn't one"""
    raw = df[column]
    # thousands separators show up in spreadsheet exports ("1,234")
    text = raw.str.strip().str.replace(',', '', regex=False)
    text = text.mask(text == '')
    values = pd.to_numeric(text, errors='coerce')
    bad = text.notna() & values.isna()
    if bad.any():
        row = int(bad.to_numpy().argmax())
        raise LoadError(f'{path} : column {column!r} row {row + 1} has non-numeric value {raw.iloc[row]!r}')
    # to_numeric accepts 'inf' / '-inf'
    infinite = values.notna() & ~np.isfinite(values.astype('float64'))
    if infinite.any():
        raise LoadError(f'{path} : column {column!r} row {_first_row(infinite)} is not a finite number')
    return values


def _first_row(mask: pd.Series) -> int:
    return int(mask.to_numpy().argmax()) + 1


def _strip_identifier(df: pd.DataFrame, column: str, path) -> pd.Series:
    """Strips an identifier column; empty or whitespace-only cells are an error"""
    values = df[column].str.strip()
    blank = values.fillna('').eq('')
    if blank.any():
        raise LoadError(f'{path} : column {column!r} row {_first_row(blank)} is blank')
    return values


def load_crime_table(path, id_columns: Tuple[str, str] = ('Community', 'Category')) -> pd.DataFrame:
    """
    Loads the wide crime table. Identifier columns stay strings, every other
    column becomes a nullable Int64 count.

    Raises:
    LoadError: blank identifiers, missing file/columns, non-numeric, negative or fractional counts
    """
    logger.info(f'Loading crime table {path}')
    df = _read_table(path)
    _require_columns(df, id_columns, path)

    month_columns = [col for col in df.columns if col not in id_columns]
    if not month_columns:
        raise LoadError(f'{path} has no month columns besides {list(id_columns)}')

    for col in id_columns:
        df[col] = _strip_identifier(df, col, path)

    for col in month_columns:
        values = _coerce_numeric(df, col, path)
        negative = values < 0
        if negative.any():
            raise LoadError(f'{path} : column {col!r} row {_first_row(negative)} has a negative count')
        fractional = values.notna() & (values % 1 != 0)
        if fractional.any():
            raise LoadError(f'{path} : column {col!r} row {_first_row(fractional)} is not a whole count')
        df[col] = values.astype('Int64')

    logger.info(f'Loaded {len(df)} crime rows with {len(month_columns)} month columns')
    return df


def load_census_table(path, community_column: str = 'Community',
                      year_columns: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Loads the census table. Population columns become float64 with NaN for
    blanks.

    Args:
    path (str | Path): Location of the census file
    community_column (str): Name of the community identifier column
    year_columns (Iterable[str] | None): Population columns to coerce. Defaults to every other column

    Raises:
    LoadError: missing file/columns, non-numeric, infinite, negative or fractional populations
    """
    logger.info(f'Loading census table {path}')
    df = _read_table(path)
    _require_columns(df, [community_column], path)

    if year_columns is None:
        years: List[str] = [col for col in df.columns if col != community_column]
    else:
        years = list(year_columns)
        _require_columns(df, years, path)
    if not years:
        raise LoadError(f'{path} has no census year columns')

    df[community_column] = _strip_identifier(df, community_column, path)

    for col in years:
        values = _coerce_numeric(df, col, path)
        negative = values < 0
        if negative.any():
            raise LoadError(f'{path} : column {col!r} row {_first_row(negative)} has a negative population')
        fractional = values.notna() & (values % 1 != 0)
        if fractional.any():
            raise LoadError(f'{path} : column {col!r} row {_first_row(fractional)} is not a whole head count')
        df[col] = values.astype('float64')

    logger.info(f'Loaded {len(df)} census rows with year columns {years}')
    return df


def load_inputs(crime_path, census_path, config: Optional[PipelineConfig] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Loads both pipeline inputs using the column names from `config`"""
    config = config or PipelineConfig()
    crime = load_crime_table(crime_path, id_columns=config.id_columns)
    census = load_census_table(census_path, community_column=config.community_column,
                               year_columns=config.census_years)
    return crime, census
