"""Per-capita community crime rates from a wide monthly crime table and census populations."""

from .config import PipelineConfig
from .loader import load_crime_table, load_census_table, load_inputs
from .cleaner import clean_crime_table, fill_missing_counts, missing_count_mask
from .reshaper import parse_month_header, to_tidy
from .enricher import JoinMismatch, average_population, join_population, community_totals, normalize_community
from .classifier import Classification, classify, flag_outliers
from .pipeline import CommunityCrimePipeline, PipelineResult, write_outputs

__version__ = "0.1.0"

__all__ = [
    "PipelineConfig",
    "load_crime_table",
    "load_census_table",
    "load_inputs",
    "clean_crime_table",
    "fill_missing_counts",
    "missing_count_mask",
    "parse_month_header",
    "to_tidy",
    "JoinMismatch",
    "average_population",
    "join_population",
    "community_totals",
    "normalize_community",
    "Classification",
    "classify",
    "flag_outliers",
    "CommunityCrimePipeline",
    "PipelineResult",
    "write_outputs",
]
