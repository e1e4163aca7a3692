from .crime_taxonomy import categorize_category, expand_groups, CATEGORY_GROUP_MAP, GROUP_ORDER
from .logger_config import setup_logger
from .exceptions import (
    CommunityCrimeError,
    LoadError,
    ReshapeError,
    EnrichError,
    ClassifyError,
    ConfigError,
)

__all__ = [
    "categorize_category",
    "expand_groups",
    "CATEGORY_GROUP_MAP",
    "GROUP_ORDER",
    "setup_logger",
    "CommunityCrimeError",
    "LoadError",
    "ReshapeError",
    "EnrichError",
    "ClassifyError",
    "ConfigError",
]
