"""How often a model's forecasted total exceeds the observed total.

For every (model, forecast_date) the median predictions over all target
dates of that forecast are summed and compared with the summed
observations. A model that overpredicts the total would have procured
enough; the per-model rate is the share of forecast dates where that held.
"""

from __future__ import annotations

import logging

import pandas as pd

from forecast_vignette.summaries.period import period_totals
from forecast_vignette.summaries.result import Exclusion, ExclusionKind, SummaryResult, rate_table

log = logging.getLogger(__name__)


def overprediction_outcomes(totals: pd.DataFrame) -> pd.DataFrame:
    """Per complete period: outcome = summed prediction > summed truth."""
    d = totals.loc[totals["complete"]].copy()
    d["outcome"] = (d["prediction"] > d["true_value"]).astype(bool)
    return d[["model", "forecast_date", "prediction", "true_value", "outcome"]].reset_index(drop=True)


def total_overprediction(table: pd.DataFrame, decimals: int = 0) -> SummaryResult:
    """
    Share of forecast dates on which each model's total predicted cases
    exceeded the total observed cases.

    Models without a single complete forecast date get no row; an
    EMPTY_MODEL_GROUP exclusion is recorded for them instead.
    """
    totals, exclusions = period_totals(table)
    outcomes = overprediction_outcomes(totals)
    result_table = rate_table(outcomes, decimals=decimals)

    for model in sorted(set(totals["model"]).difference(result_table["model"])):
        exclusions.append(
            Exclusion(ExclusionKind.EMPTY_MODEL_GROUP, model, detail="no complete forecast periods")
        )

    result = SummaryResult(name="overprediction", table=result_table, exclusions=exclusions)
    log.info("Overprediction rates: %s", result.as_dict())
    if exclusions:
        log.warning(
            "Overprediction: %d exclusions %s",
            len(exclusions),
            {k.value: n for k, n in result.exclusion_counts().items()},
        )
    return result
