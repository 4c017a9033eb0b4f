"""Per-model summary statistics over the joined forecast table."""

from .direction import comparable_periods, correctly_increases, direction_outcomes, lagged_totals
from .overprediction import overprediction_outcomes, total_overprediction
from .period import check_forecast_table, period_totals
from .result import (
    Exclusion,
    ExclusionKind,
    SummaryResult,
    format_percent,
    rate_table,
)

__all__ = [
    "Exclusion",
    "ExclusionKind",
    "SummaryResult",
    "check_forecast_table",
    "comparable_periods",
    "correctly_increases",
    "direction_outcomes",
    "format_percent",
    "lagged_totals",
    "overprediction_outcomes",
    "period_totals",
    "rate_table",
    "total_overprediction",
]
