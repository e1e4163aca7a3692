"""Run configuration for the community crime pipeline.

Defaults reproduce the original notebook (threshold 500, floor 500). Every
field can be overridden through a `CCR_*` environment variable, which `main`
populates from a `.env` file via python-dotenv.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Mapping, Optional, Tuple

from community_crime.utils.exceptions import ConfigError

ENV_PREFIX = "CCR_"


def _split_list(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _to_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {value!r}")


@dataclass(frozen=True)
class PipelineConfig:
    community_column: str = "Community"
    category_column: str = "Category"
    month_format: str = "%Y/%m"
    exclude_months: Tuple[str, ...] = field(default_factory=tuple)
    window_start: Optional[str] = None
    window_end: Optional[str] = None
    census_years: Optional[Tuple[str, ...]] = None
    outlier_threshold: float = 500.0
    min_population: float = 500.0

    @property
    def id_columns(self) -> Tuple[str, str]:
        return (self.community_column, self.category_column)

    def validate(self) -> "PipelineConfig":
        """Raise ConfigError for values the pipeline can't run with."""
        if not self.month_format:
            raise ConfigError("month_format must not be empty")
        if self.outlier_threshold < 0:
            raise ConfigError(f"outlier_threshold must be >= 0, got {self.outlier_threshold}")
        if self.min_population < 0:
            raise ConfigError(f"min_population must be >= 0, got {self.min_population}")
        if self.community_column == self.category_column:
            raise ConfigError("community_column and category_column must differ")
        if self.window_start and self.window_end:
            try:
                start = datetime.strptime(self.window_start, self.month_format)
                end = datetime.strptime(self.window_end, self.month_format)
            except ValueError as e:
                raise ConfigError(f"Reporting window bounds must match {self.month_format!r}: {e}")
            if start > end:
                raise ConfigError(f"window_start {self.window_start} is after window_end {self.window_end}")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """Build a config from CCR_* variables, falling back to the defaults."""
        env = os.environ if environ is None else environ
        config = cls()
        overrides = {}

        for name in ("community_column", "category_column", "month_format", "window_start", "window_end"):
            value = env.get(ENV_PREFIX + name.upper())
            if value is None:
                continue
            value = value.strip()
            # blank window bounds mean "unbounded"
            if name.startswith("window") and not value:
                value = None
            overrides[name] = value

        if ENV_PREFIX + "EXCLUDE_MONTHS" in env:
            overrides["exclude_months"] = _split_list(env[ENV_PREFIX + "EXCLUDE_MONTHS"])
        if ENV_PREFIX + "CENSUS_YEARS" in env:
            overrides["census_years"] = _split_list(env[ENV_PREFIX + "CENSUS_YEARS"]) or None
        for name in ("outlier_threshold", "min_population"):
            value = env.get(ENV_PREFIX + name.upper())
            if value is not None:
                overrides[name] = _to_float(name.upper(), value)

        return replace(config, **overrides).validate()
