from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np
import pandas as pd

from forecast_vignette.summaries.result import Exclusion, ExclusionKind

log = logging.getLogger(__name__)

REQUIRED_COLS = {"model", "forecast_date", "target_end_date", "prediction", "true_value"}
PERIOD_KEYS = ["model", "forecast_date"]


def check_forecast_table(table: pd.DataFrame) -> None:
    """Raise ValueError when the joined table lacks a summary column."""
    missing = REQUIRED_COLS.difference(table.columns)
    if missing:
        raise ValueError(f"forecast table missing required columns: {sorted(missing)}")


def period_totals(table: pd.DataFrame) -> Tuple[pd.DataFrame, List[Exclusion]]:
    """
    Sum predictions and observations per (model, forecast_date).

    Returns (totals, exclusions) where totals has columns
      model, forecast_date, n_targets, prediction, true_value, complete
    sorted by (model, forecast_date). A period with any missing prediction or
    observation is incomplete: both sums are NaN rather than partial.
    """
    check_forecast_table(table)
    d = table[sorted(REQUIRED_COLS)].copy()
    d["missing_truth"] = d["true_value"].isna()
    d["missing_prediction"] = d["prediction"].isna()

    totals = d.groupby(PERIOD_KEYS, sort=True).agg(
        n_targets=("target_end_date", "nunique"),
        prediction=("prediction", "sum"),
        true_value=("true_value", "sum"),
        missing_truth=("missing_truth", "sum"),
        missing_prediction=("missing_prediction", "sum"),
    )
    totals[["prediction", "true_value"]] = totals[["prediction", "true_value"]].astype(float)
    totals["complete"] = (totals["missing_truth"] == 0) & (totals["missing_prediction"] == 0)
    totals.loc[~totals["complete"], ["prediction", "true_value"]] = np.nan

    exclusions: List[Exclusion] = []
    for (model, forecast_date), row in totals.loc[~totals["complete"]].iterrows():
        detail = (
            f"{int(row['missing_truth'])} target dates without observation, "
            f"{int(row['missing_prediction'])} without prediction"
        )
        log.debug("Excluding %s @ %s: %s", model, forecast_date, detail)
        exclusions.append(
            Exclusion(ExclusionKind.MISSING_OBSERVATION, model, pd.Timestamp(forecast_date), detail)
        )

    totals = totals.drop(columns=["missing_truth", "missing_prediction"]).reset_index()
    # explicit ordering; lag computations depend on it
    totals = totals.sort_values(PERIOD_KEYS, kind="mergesort").reset_index(drop=True)
    return totals, exclusions
