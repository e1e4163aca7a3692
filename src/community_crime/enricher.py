"""
Enricher - attach census population to the tidy crime rows and build per-community totals.

Steps:
  1. AvgPop: flat mean of the census year columns
  2. Left join on the normalized Community name
  3. Group by Community -> TotalByCommunity, AvgPop, Per100

Communities without a census match keep their Cases with AvgPop = NaN. That
NaN is the signal that separates "no census data" from a zero population.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

import pandas as pd

from community_crime.utils.crime_taxonomy import categorize_category
from community_crime.utils.logger_config import setup_logger
from community_crime.utils.exceptions import EnrichError

logger = setup_logger(__name__)

TOTAL_COLUMNS = ['Community', 'TotalByCommunity', 'AvgPop', 'Per100']


@dataclass(frozen=True)
class JoinMismatch:
    """Communities present in the crime data but absent from the census. Informational only"""
    communities: Tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.communities)

    def __len__(self) -> int:
        return len(self.communities)


def normalize_community(series: pd.Series) -> pd.Series:
    """Join key: surrounding whitespace stripped, inner runs collapsed, upper-cased"""
    return (
        series.astype(str)
        .str.strip()
        .str.replace(r'\s+', ' ', regex=True)
        .str.upper()
    )


def average_population(census: pd.DataFrame, year_columns: Optional[Iterable[str]] = None,
                       community_column: str = 'Community') -> pd.DataFrame:
    """
    Adds AvgPop, the arithmetic mean of the population year columns

    Missing years are skipped; a row with every year missing gets NaN. Any
    AvgPop already in the input is ignored and recomputed.

    Args:
    census (pd.DataFrame): Census table from the loader
    year_columns (Iterable[str] | None): Columns to average. Defaults to every column except the community one
    community_column (str): Name of the community column

    Returns:
    pd.DataFrame: Community, the year columns and AvgPop

    Raises:
    EnrichError: A configured year column is not in the table
    """
    census = census.drop(columns=['AvgPop'], errors='ignore')
    if year_columns is None:
        years = [col for col in census.columns if col != community_column]
    else:
        years = list(year_columns)

    missing = [col for col in years if col not in census.columns]
    if missing:
        raise EnrichError(f'Census year columns {missing} are not in the census table')
    if not years:
        raise EnrichError('No census year columns to average')

    result = census[[community_column, *years]].copy()
    result['AvgPop'] = result[years].astype('float64').mean(axis=1, skipna=True)
    logger.debug(f'Computed AvgPop over {years} for {len(result)} communities')
    return result


def join_population(tidy: pd.DataFrame, census: pd.DataFrame,
                    community_column: str = 'Community') -> Tuple[pd.DataFrame, JoinMismatch]:
    """
    Left joins AvgPop onto the tidy crime rows

    Row count and order of `tidy` are preserved. Community is replaced by its
    normalized form in the output, and CategoryGroup is added.

    Args:
    tidy (pd.DataFrame): Reshaper output
    census (pd.DataFrame): Output of average_population

    Returns:
    Tuple[pd.DataFrame, JoinMismatch]: Enriched rows and the unmatched communities

    Raises:
    EnrichError: Census has two rows for the same normalized community
    """
    logger.info(f'Joining population onto {len(tidy)} tidy rows')

    lookup = pd.DataFrame({
        'Community': normalize_community(census[community_column]),
        'AvgPop': census['AvgPop'].astype('float64'),
    })
    duplicated = lookup['Community'].duplicated(keep=False)
    if duplicated.any():
        names = sorted(lookup.loc[duplicated, 'Community'].unique())
        raise EnrichError(f'Census has duplicate rows for communities {names}')

    enriched = tidy.copy()
    enriched['Community'] = normalize_community(enriched['Community'])
    enriched = enriched.merge(lookup, on='Community', how='left', sort=False, validate='many_to_one')
    enriched['CategoryGroup'] = enriched['Category'].map(categorize_category)

    unmatched = enriched.loc[~enriched['Community'].isin(lookup['Community']), 'Community']
    mismatch = JoinMismatch(tuple(unmatched.drop_duplicates()))
    if mismatch:
        logger.warning(f'{len(mismatch)} communities have no census match: {list(mismatch.communities)}')

    logger.info(f'Joined population onto {len(enriched)} rows')
    return enriched, mismatch


def community_totals(enriched: pd.DataFrame) -> pd.DataFrame:
    """
    Sums Cases per Community and computes Per100 = TotalByCommunity / AvgPop * 100

    Communities keep first-appearance order. Per100 is NaN when AvgPop is
    absent or zero.
    """
    logger.info('Aggregating community totals')
    totals = (
        enriched.groupby('Community', sort=False)
        .agg(TotalByCommunity=('Cases', 'sum'), AvgPop=('AvgPop', 'first'))
        .reset_index()
    )
    totals['TotalByCommunity'] = totals['TotalByCommunity'].astype('int64')
    totals['AvgPop'] = totals['AvgPop'].astype('float64')

    usable = totals['AvgPop'].notna() & (totals['AvgPop'] != 0)
    denom = totals['AvgPop'].where(usable)
    totals['Per100'] = (totals['TotalByCommunity'] / denom * 100).astype('float64')

    logger.info(f'Built totals for {len(totals)} communities, {int((~usable).sum())} without a usable population')
    return totals[TOTAL_COLUMNS]
