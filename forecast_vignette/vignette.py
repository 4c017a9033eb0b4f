"""End-to-end run: load, join, summarise."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from forecast_vignette.config import VignetteConfig
from forecast_vignette.data.cleaning import build_forecast_table
from forecast_vignette.data.loading import load_cases_csv, load_forecast_files
from forecast_vignette.summaries import SummaryResult, correctly_increases, total_overprediction

log = logging.getLogger(__name__)


@dataclass
class VignetteResult:
    table: pd.DataFrame
    overprediction: SummaryResult
    direction: SummaryResult


def summarise_table(table: pd.DataFrame, decimals: int = 0) -> VignetteResult:
    return VignetteResult(
        table=table,
        overprediction=total_overprediction(table, decimals=decimals),
        direction=correctly_increases(table, decimals=decimals),
    )


def load_table(
    config: VignetteConfig,
    raw_forecasts: Optional[pd.DataFrame] = None,
    raw_cases: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """
    Build the joined table. Frames passed explicitly take precedence over
    the files named in ``config``.
    """
    if raw_forecasts is None:
        raw_forecasts = load_forecast_files(config.forecast_paths())
    if raw_cases is None:
        raw_cases = load_cases_csv(config.cases_path())

    log.info(
        "Forecast window %s to %s at the %g interval",
        config.start or "first forecast",
        config.end or "last forecast",
        config.ci_level,
    )
    return build_forecast_table(
        raw_forecasts,
        raw_cases,
        start=config.start,
        end=config.end,
        ci_level=config.ci_level,
    )


def run_vignette(
    config: Optional[VignetteConfig] = None,
    raw_forecasts: Optional[pd.DataFrame] = None,
    raw_cases: Optional[pd.DataFrame] = None,
) -> VignetteResult:
    """Build the joined table and both summaries."""
    if config is None:
        config = VignetteConfig()
    table = load_table(config, raw_forecasts=raw_forecasts, raw_cases=raw_cases)
    return summarise_table(table, decimals=config.decimals)
