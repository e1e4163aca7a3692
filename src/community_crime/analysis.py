"""Summary helpers over the pipeline outputs, for charts and reports."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
from scipy import stats

from community_crime.utils.crime_taxonomy import categorize_category, expand_groups


def totals_by_category(enriched: pd.DataFrame) -> pd.DataFrame:
    """Total Cases per Category, largest first (ties keep first appearance)."""
    grouped = enriched.groupby("Category", sort=False)["Cases"].sum().rename("Cases").reset_index()
    return grouped.sort_values("Cases", ascending=False, kind="mergesort").reset_index(drop=True)


def totals_by_group(enriched: pd.DataFrame) -> pd.DataFrame:
    """Total Cases per CategoryGroup, largest first."""
    working = enriched
    if "CategoryGroup" not in working.columns:
        working = working.assign(CategoryGroup=working["Category"].map(categorize_category))
    grouped = working.groupby("CategoryGroup", sort=False)["Cases"].sum().reset_index()
    return grouped.sort_values("Cases", ascending=False, kind="mergesort").reset_index(drop=True)


def monthly_series(enriched: pd.DataFrame, category: Optional[str] = None) -> pd.DataFrame:
    """Total Cases per month, oldest first, optionally for one Category."""
    working = enriched
    if category is not None:
        working = working[working["Category"] == category]
    return working.groupby("Date")["Cases"].sum().reset_index()


def category_matrix(enriched: pd.DataFrame) -> pd.DataFrame:
    """Community x Category table of total Cases, zeros where a pair never occurs."""
    matrix = enriched.pivot_table(
        index="Community", columns="Category", values="Cases", aggfunc="sum", fill_value=0, sort=False
    )
    matrix.columns.name = None
    return matrix.astype("int64")


def mean_monthly_cases(enriched: pd.DataFrame) -> pd.Series:
    """Mean monthly Cases per Community, summed over categories first."""
    per_month = enriched.groupby(["Community", "Date"], sort=False)["Cases"].sum()
    return per_month.groupby(level="Community", sort=False).mean().rename("MeanMonthlyCases")


def top_communities(clean: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """First n rows of the clean ranking (already sorted by Per100)."""
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return clean.head(n).reset_index(drop=True)


def population_correlation(totals: pd.DataFrame) -> dict:
    """Pearson and Spearman correlation of AvgPop against TotalByCommunity."""
    x_arr = totals["AvgPop"].to_numpy(dtype=float)
    y_arr = totals["TotalByCommunity"].to_numpy(dtype=float)
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_clean, y_clean = x_arr[mask], y_arr[mask]
    if len(x_clean) < 3:
        raise ValueError("Need at least three communities with a population for correlation.")
    pearson = stats.pearsonr(x_clean, y_clean)
    spearman = stats.spearmanr(x_clean, y_clean)
    return {
        "n": int(len(x_clean)),
        "pearson_r": (float(pearson.statistic), float(pearson.pvalue)),
        "spearman_rho": (float(spearman.statistic), float(spearman.pvalue)),
    }


__all__ = [
    "categorize_category",
    "expand_groups",
    "totals_by_category",
    "totals_by_group",
    "monthly_series",
    "category_matrix",
    "mean_monthly_cases",
    "top_communities",
    "population_correlation",
]
