"""How often a model predicts an increase when cases really increased.

Periods are the per-model forecast dates in ascending order. A period is
compared with the one immediately before it; only periods whose observed
total strictly rose are scored, and the outcome is whether the predicted
total rose as well.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

import pandas as pd

from forecast_vignette.summaries.period import PERIOD_KEYS, period_totals
from forecast_vignette.summaries.result import Exclusion, ExclusionKind, SummaryResult, rate_table

log = logging.getLogger(__name__)


def lagged_totals(totals: pd.DataFrame) -> pd.DataFrame:
    """Attach lag-1 prediction/true totals within each model, by forecast_date."""
    d = totals.sort_values(PERIOD_KEYS, kind="mergesort").reset_index(drop=True)
    g = d.groupby("model", sort=False)
    d["lag_forecast_date"] = g["forecast_date"].shift(1)
    d["lag_prediction"] = g["prediction"].shift(1)
    d["lag_true_value"] = g["true_value"].shift(1)
    return d


def comparable_periods(d: pd.DataFrame) -> pd.Series:
    """Mask of lagged rows whose own and previous totals are both defined."""
    defined = d[["prediction", "true_value", "lag_prediction", "lag_true_value"]].notna().all(axis=1)
    return d["lag_forecast_date"].notna() & defined


def direction_outcomes(totals: pd.DataFrame) -> Tuple[pd.DataFrame, List[Exclusion]]:
    """
    Score true-increase periods. Returns (outcomes, exclusions); outcomes has
    columns model, forecast_date, prediction, lag_prediction, true_value,
    lag_true_value, outcome.
    """
    d = lagged_totals(totals)
    exclusions: List[Exclusion] = []

    has_lag = d["lag_forecast_date"].notna()
    comparable = comparable_periods(d)
    for _, row in d.loc[has_lag & ~comparable].iterrows():
        exclusions.append(
            Exclusion(
                ExclusionKind.MISSING_OBSERVATION,
                row["model"],
                row["forecast_date"],
                f"comparison with {pd.Timestamp(row['lag_forecast_date']):%Y-%m-%d} undefined",
            )
        )

    scored = d.loc[comparable]
    scored = scored.loc[scored["true_value"] > scored["lag_true_value"]].copy()
    scored["outcome"] = (scored["prediction"] > scored["lag_prediction"]).astype(bool)
    cols = ["model", "forecast_date", "prediction", "lag_prediction", "true_value", "lag_true_value", "outcome"]
    return scored[cols].reset_index(drop=True), exclusions


def correctly_increases(table: pd.DataFrame, decimals: int = 0) -> SummaryResult:
    """
    Share of true-increase periods on which each model also predicted an
    increase over its previous forecast date.

    A model with no defined period-to-period comparison (fewer than two
    complete forecast dates in a row), or whose comparisons never show a
    true increase, has no defined rate and gets no row.
    """
    totals, exclusions = period_totals(table)
    outcomes, lag_exclusions = direction_outcomes(totals)
    exclusions.extend(lag_exclusions)
    result_table = rate_table(outcomes, decimals=decimals)

    scored_models = set(result_table["model"])
    lagged = lagged_totals(totals)
    n_compared = comparable_periods(lagged).groupby(lagged["model"], sort=True).sum()
    for model, n in n_compared.items():
        if model in scored_models:
            continue
        if n == 0:
            n_complete = int(totals.loc[totals["model"] == model, "complete"].sum())
            kind = ExclusionKind.INSUFFICIENT_HISTORY
            detail = f"no defined comparison ({n_complete} complete forecast period(s))"
        else:
            kind, detail = ExclusionKind.NO_TRUE_INCREASE, f"none of {int(n)} comparison(s) shows a true increase"
        exclusions.append(Exclusion(kind, model, detail=detail))

    result = SummaryResult(name="direction", table=result_table, exclusions=exclusions)
    log.info("Direction rates: %s", result.as_dict())
    if exclusions:
        log.warning(
            "Direction: %d exclusions %s",
            len(exclusions),
            {k.value: n for k, n in result.exclusion_counts().items()},
        )
    return result
