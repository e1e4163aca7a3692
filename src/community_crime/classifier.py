"""
Classifier - split community totals into outliers and the clean ranking.

A row is an outlier when Per100 is NaN/inf or above the threshold. The clean
set additionally needs AvgPop above the population floor; the two filters are
independent, so a small community can miss the clean set without being an
outlier.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from community_crime.enricher import TOTAL_COLUMNS
from community_crime.utils.logger_config import setup_logger
from community_crime.utils.exceptions import ClassifyError

logger = setup_logger(__name__)


@dataclass
class Classification:
    totals: pd.DataFrame
    outliers: pd.DataFrame
    clean: pd.DataFrame


def flag_outliers(totals: pd.DataFrame, threshold: float = 500.0) -> pd.Series:
    """True where Per100 is non-finite or greater than threshold"""
    per100 = totals['Per100'].astype('float64')
    return ~np.isfinite(per100) | (per100 > threshold)


def classify(totals: pd.DataFrame, outlier_threshold: float = 500.0, min_population: float = 500.0) -> Classification:
    """
    Flags outliers and builds the clean set

    Args:
    totals (pd.DataFrame): Output of enricher.community_totals
    outlier_threshold (float): Per100 above this is an outlier
    min_population (float): AvgPop must be strictly above this to be clean

    Returns:
    Classification: totals with IsOutlier, the outlier rows in input order,
    and the clean rows sorted by Per100 descending (ties keep input order)

    Raises:
    ClassifyError: totals is missing one of the required columns
    """
    missing = [col for col in TOTAL_COLUMNS if col not in totals.columns]
    if missing:
        raise ClassifyError(f'Totals table is missing columns {missing}')

    logger.info(f'Classifying {len(totals)} communities (threshold={outlier_threshold}, floor={min_population})')
    totals = totals.copy()
    totals['IsOutlier'] = flag_outliers(totals, outlier_threshold).astype(bool)

    outliers = totals[totals['IsOutlier']].reset_index(drop=True)

    # NaN AvgPop compares False, so communities without census data never pass the floor
    eligible = ~totals['IsOutlier'] & (totals['AvgPop'] > min_population)
    clean = (
        totals[eligible]
        .sort_values('Per100', ascending=False, kind='mergesort')
        .reset_index(drop=True)
    )

    logger.info(f'{len(outliers)} outliers, {len(clean)} clean, '
                f'{len(totals) - len(outliers) - len(clean)} below the population floor')
    return Classification(totals=totals, outliers=outliers, clean=clean)
