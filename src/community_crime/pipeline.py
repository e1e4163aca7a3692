"""
Community crime rate pipeline.

Orchestrates the ordered stages (load -> clean -> reshape -> enrich ->
classify) and hands back every intermediate table a chart or map renderer
needs. Nothing is written unless `write_outputs` is called.

Usage:
    python -m community_crime.pipeline <crime.csv> <census.csv> [output_dir]
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from dotenv import load_dotenv

from community_crime.cleaner import clean_crime_table, count_missing, month_columns_of
from community_crime.classifier import classify
from community_crime.config import PipelineConfig
from community_crime.enricher import JoinMismatch, average_population, community_totals, join_population
from community_crime.loader import load_inputs
from community_crime.reshaper import to_tidy
from community_crime.utils.logger_config import setup_logger
from community_crime.utils.exceptions import (
    ClassifyError,
    CommunityCrimeError,
    EnrichError,
    LoadError,
    ReshapeError,
)

logger = setup_logger(__name__)


@dataclass
class PipelineResult:
    tidy: pd.DataFrame
    enriched: pd.DataFrame
    census: pd.DataFrame
    totals: pd.DataFrame
    outliers: pd.DataFrame
    clean: pd.DataFrame
    join_mismatch: JoinMismatch
    missing_cells: int

    def tables(self) -> Dict[str, pd.DataFrame]:
        """The tables handed to renderers, keyed by output file stem"""
        return {
            'totals': self.totals,
            'clean': self.clean,
            'outliers': self.outliers,
            'enriched': self.enriched,
        }


class CommunityCrimePipeline:
    """Builds per-community crime rates from the wide crime table and the census table.

    Design:
        - Pure, ordered steps; each stage's output is the next stage's only input.
        - A failing stage is logged with its name and raised as that stage's
          error type. No partial result is returned.

    Public API:
        - build(crime_path, census_path): runs every stage and returns a PipelineResult.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = (config or PipelineConfig()).validate()
        logger.info(f'Initialized CommunityCrimePipeline with {self.config}')

    def _run_stage(self, name: str, error_cls, func, *args):
        try:
            return func(*args)
        except CommunityCrimeError as e:
            e.stage = name
            logger.error(f'Stage {name} failed : {str(e)}')
            raise
        except Exception as e:
            logger.error(f'Stage {name} failed unexpectedly : {str(e)}')
            raise error_cls(f'Unexpected failure : {str(e)}', stage=name) from e

    def _load(self, crime_path, census_path):
        return load_inputs(crime_path, census_path, self.config)

    def _clean(self, crime: pd.DataFrame):
        cleaned = clean_crime_table(crime, self.config)
        # only blanks in the kept months were filled
        kept = month_columns_of(cleaned, self.config.id_columns)
        return cleaned, count_missing(crime, kept)

    def _reshape(self, cleaned: pd.DataFrame) -> pd.DataFrame:
        months = month_columns_of(cleaned, self.config.id_columns)
        return to_tidy(cleaned, months, self.config.month_format, self.config.id_columns)

    def _enrich(self, tidy: pd.DataFrame, census: pd.DataFrame):
        census = average_population(census, self.config.census_years, self.config.community_column)
        enriched, mismatch = join_population(tidy, census, self.config.community_column)
        return census, enriched, mismatch, community_totals(enriched)

    def build(self, crime_path, census_path) -> PipelineResult:
        """
        Execute every stage in order.

        Args:
            crime_path: Path to the wide crime table
            census_path: Path to the census table

        Returns:
            PipelineResult with the tidy, enriched, totals, outlier and clean tables

        Raises:
            LoadError, ReshapeError, EnrichError, ClassifyError: the failing stage
        """
        logger.info('Starting CommunityCrimePipeline...')

        # Step 1: Load
        crime, census = self._run_stage('load', LoadError, self._load, crime_path, census_path)

        # Step 2: Clean (window parsing failures are header problems)
        cleaned, missing = self._run_stage('clean', ReshapeError, self._clean, crime)

        # Step 3: Reshape
        tidy = self._run_stage('reshape', ReshapeError, self._reshape, cleaned)

        # Step 4: Enrich
        census, enriched, mismatch, totals = self._run_stage('enrich', EnrichError, self._enrich, tidy, census)

        # Step 5: Classify
        classification = self._run_stage(
            'classify', ClassifyError, classify, totals,
            self.config.outlier_threshold, self.config.min_population,
        )

        result = PipelineResult(
            tidy=tidy,
            enriched=enriched,
            census=census,
            totals=classification.totals,
            outliers=classification.outliers,
            clean=classification.clean,
            join_mismatch=mismatch,
            missing_cells=missing,
        )

        logger.info('Pipeline Summary:')
        logger.info(f'  Tidy rows: {len(tidy)}')
        logger.info(f'  Communities: {len(result.totals)}')
        logger.info(f'  Outliers: {len(result.outliers)}')
        logger.info(f'  Clean: {len(result.clean)}')
        logger.info(f'  Unmatched communities: {len(mismatch)}')
        return result


def write_outputs(result: PipelineResult, output_dir, output_format: str = 'csv') -> Dict[str, Path]:
    """
    Writes the renderer-facing tables to output_dir

    Args:
        result: PipelineResult from CommunityCrimePipeline.build
        output_dir: Folder to write into, created if needed
        output_format: 'csv' or 'parquet'

    Returns:
        Mapping of table name to written file
    """
    output_format = output_format.lower()
    if output_format not in ('csv', 'parquet'):
        raise ValueError(f'Unsupported output format: {output_format}')

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = {}
    for name, table in result.tables().items():
        path = output_dir / f'{name}.{output_format}'
        if output_format == 'parquet':
            table.to_parquet(path, engine='pyarrow', index=False)
        else:
            table.to_csv(path, index=False)
        written[name] = path
        logger.debug(f'Wrote {len(table)} rows to {path}')

    logger.info(f'Wrote {len(written)} tables to {output_dir}')
    return written


def main(argv=None) -> int:
    """CLI entry point for running the pipeline on two local files."""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2:
        print('Usage: python -m community_crime.pipeline <crime.csv> <census.csv> [output_dir]', file=sys.stderr)
        return 2

    crime_path, census_path = argv[0], argv[1]
    output_dir = argv[2] if len(argv) > 2 else 'reports'

    try:
        load_dotenv()
        config = PipelineConfig.from_env()
        result = CommunityCrimePipeline(config).build(crime_path, census_path)
    except CommunityCrimeError as e:
        logger.critical(f'Application Failure. {str(e)}')
        return 1

    try:
        write_outputs(result, output_dir)
    # pyarrow's ArrowInvalid / ArrowIOError subclass ValueError / OSError
    except (OSError, ValueError) as e:
        logger.critical(f'Could not write outputs to {output_dir}. {str(e)}')
        return 1

    print(f'Pipeline finished: {len(result.clean)} clean communities, {len(result.outliers)} outliers')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
