"""Data utilities package (loading, reshaping and simulation tools)."""

from .cleaning import (
    attach_truth,
    build_forecast_table,
    filter_date_range,
    interval_quantiles,
    long_quantile_frame,
    pivot_quantiles,
    prepare_cases,
    prepare_forecasts,
    select_ci_level,
)
from .ensemble import add_ensemble, combine_member_matrix
from .loading import (
    DATA_DIR,
    DEFAULT_CASES_CSV_PATH,
    DEFAULT_FORECAST_FILES,
    load_cases_csv,
    load_forecast_csv,
    load_forecast_files,
    save_csv,
)
from .simulator import SimConfig, make_forecast_files, simulate_case_series

__all__ = [
    "DATA_DIR",
    "DEFAULT_CASES_CSV_PATH",
    "DEFAULT_FORECAST_FILES",
    "SimConfig",
    "add_ensemble",
    "attach_truth",
    "build_forecast_table",
    "combine_member_matrix",
    "filter_date_range",
    "interval_quantiles",
    "load_cases_csv",
    "load_forecast_csv",
    "load_forecast_files",
    "long_quantile_frame",
    "make_forecast_files",
    "pivot_quantiles",
    "prepare_cases",
    "prepare_forecasts",
    "save_csv",
    "select_ci_level",
    "simulate_case_series",
]
