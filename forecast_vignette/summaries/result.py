"""Result containers shared by the per-model summaries.

Data gaps never raise: a group that cannot contribute to a summary is
dropped and an :class:`Exclusion` naming the reason is attached to the
result instead, so callers can audit what was left out.
"""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

RATE_COLUMNS = ["model", "n_periods", "n_hits", "rate", "percent"]


class ExclusionKind(str, enum.Enum):
    MISSING_OBSERVATION = "missing_observation"
    INSUFFICIENT_HISTORY = "insufficient_history"
    EMPTY_MODEL_GROUP = "empty_model_group"
    NO_TRUE_INCREASE = "no_true_increase"


@dataclass(frozen=True)
class Exclusion:
    kind: ExclusionKind
    model: str
    forecast_date: Optional[pd.Timestamp] = None
    detail: str = ""


@dataclass
class SummaryResult:
    name: str
    table: pd.DataFrame                     # one row per model, RATE_COLUMNS
    exclusions: List[Exclusion] = field(default_factory=list)

    def as_dict(self) -> Dict[str, str]:
        """model -> percentage string, e.g. {"ARIMA": "90%"}."""
        return dict(zip(self.table["model"], self.table["percent"]))

    def rates(self) -> Dict[str, float]:
        return dict(zip(self.table["model"], self.table["rate"].astype(float)))

    def exclusion_counts(self) -> Dict[ExclusionKind, int]:
        return dict(Counter(e.kind for e in self.exclusions))


def format_percent(rate: float, decimals: int = 0) -> str:
    """0.3333 -> '33%' (decimals=0) or '33.3%' (decimals=1)."""
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    return f"{100.0 * float(rate):.{decimals}f}%"


def rate_table(outcomes: pd.DataFrame, decimals: int = 0) -> pd.DataFrame:
    """
    Aggregate boolean per-period outcomes (columns: model, outcome) into one
    row per model with the hit rate and its percentage string.
    """
    if outcomes.empty:
        return pd.DataFrame(columns=RATE_COLUMNS)
    table = (
        outcomes.groupby("model", sort=True)["outcome"]
        .agg(n_periods="size", n_hits="sum")
        .reset_index()
    )
    table["n_hits"] = table["n_hits"].astype(int)
    table["rate"] = table["n_hits"] / table["n_periods"]
    table["percent"] = [format_percent(r, decimals) for r in table["rate"]]
    return table[RATE_COLUMNS]
