import logging

import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

KEY_COLS = ["model", "forecast_date", "target_end_date"]
INTERVAL_COLS = {"mean", "lower", "upper"}
PIVOT_COLS = ["prediction", "lower", "upper"]


def _require_columns(df: pd.DataFrame, required: set[str], name: str) -> None:
    missing = required.difference(df.columns)
    if missing:
        raise ValueError(f"{name} missing required columns: {sorted(missing)}")


def _normalise_ci_level(ci: pd.Series) -> pd.Series:
    """Accept interval levels given either as 0.95 or as 95."""
    ci = pd.to_numeric(ci, errors="coerce")
    return ci.where(ci <= 1.0, ci / 100.0)


def interval_quantiles(ci_level: float = 0.95) -> tuple[float, float]:
    """Return the (lower, upper) quantile levels of a central interval."""
    if not 0.0 < ci_level < 1.0:
        raise ValueError("ci_level must lie strictly between 0 and 1")
    tail = (1.0 - ci_level) / 2.0
    return round(tail, 6), round(1.0 - tail, 6)


def prepare_forecasts(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean raw forecast records.

    Expected columns:
      - model, date, forecast_date, ci_level, mean, lower, upper
    ``date`` is the target end date and is renamed to ``target_end_date``.
    Rows with an unparseable key are dropped; missing values are kept.
    """
    cleaned = df.copy()
    cleaned.columns = [str(c).strip().lower() for c in cleaned.columns]
    _require_columns(cleaned, {"model", "date", "forecast_date", "ci_level"} | INTERVAL_COLS, "forecasts")

    cleaned = cleaned.replace(r"^\s*$", np.nan, regex=True)
    cleaned = cleaned.rename(columns={"date": "target_end_date"})

    cleaned["model"] = cleaned["model"].where(cleaned["model"].isna(), cleaned["model"].astype(str).str.strip())
    cleaned["forecast_date"] = pd.to_datetime(cleaned["forecast_date"], errors="coerce")
    cleaned["target_end_date"] = pd.to_datetime(cleaned["target_end_date"], errors="coerce")
    cleaned["ci_level"] = _normalise_ci_level(cleaned["ci_level"])
    for col in sorted(INTERVAL_COLS):
        cleaned[col] = pd.to_numeric(cleaned[col], errors="coerce")

    n_before = len(cleaned)
    cleaned = cleaned.dropna(subset=KEY_COLS + ["ci_level"])
    if len(cleaned) < n_before:
        log.warning("Dropped %d forecast rows with unparseable keys", n_before - len(cleaned))

    cols = KEY_COLS + ["ci_level", "mean", "lower", "upper"]
    return cleaned[cols].sort_values(KEY_COLS).reset_index(drop=True)


def prepare_cases(df: pd.DataFrame) -> pd.DataFrame:
    """Clean observed cases into a (target_end_date, true_value) lookup."""
    cases = df.copy()
    cases.columns = [str(c).strip().lower() for c in cases.columns]
    _require_columns(cases, {"date", "cases"}, "cases")

    cases = cases.replace(r"^\s*$", np.nan, regex=True)
    cases["target_end_date"] = pd.to_datetime(cases["date"], errors="coerce")
    cases["true_value"] = pd.to_numeric(cases["cases"], errors="coerce")
    cases = cases.dropna(subset=["target_end_date"])

    # One canonical observation series: a date may only be observed once.
    dup = cases["target_end_date"].duplicated(keep=False)
    if dup.any():
        dates = sorted(cases.loc[dup, "target_end_date"].dt.strftime("%Y-%m-%d").unique())
        raise ValueError(f"cases contain duplicated dates: {dates}")

    return cases[["target_end_date", "true_value"]].sort_values("target_end_date").reset_index(drop=True)


def select_ci_level(forecasts: pd.DataFrame, ci_level: float = 0.95) -> pd.DataFrame:
    """Keep only the rows of one interval level; files often carry several."""
    _require_columns(forecasts, {"ci_level"}, "forecasts")
    keep = np.isclose(forecasts["ci_level"].astype(float), ci_level)
    n_dropped = int((~keep).sum())
    if n_dropped:
        log.info("Dropped %d forecast rows at other interval levels than %s", n_dropped, ci_level)
    return forecasts.loc[keep].reset_index(drop=True)


def long_quantile_frame(forecasts: pd.DataFrame) -> pd.DataFrame:
    """
    Return long-format quantile records:
      model, forecast_date, target_end_date, quantile, value

    ``mean`` maps to the 0.5 quantile, ``lower``/``upper`` to the tails of
    the row's central interval.
    """
    _require_columns(forecasts, set(KEY_COLS) | {"ci_level"} | INTERVAL_COLS, "forecasts")
    long = forecasts.melt(
        id_vars=KEY_COLS + ["ci_level"],
        value_vars=["mean", "lower", "upper"],
        var_name="bound",
        value_name="value",
    )
    tail = (1.0 - long["ci_level"]) / 2.0
    long["quantile"] = np.select(
        [long["bound"] == "lower", long["bound"] == "upper"],
        [tail, 1.0 - tail],
        default=0.5,
    )
    long["quantile"] = long["quantile"].round(6)
    long = long.drop(columns=["bound", "ci_level"])
    return long.sort_values(KEY_COLS + ["quantile"]).reset_index(drop=True)


def pivot_quantiles(long: pd.DataFrame, ci_level: float = 0.95) -> pd.DataFrame:
    """
    Pivot long quantile records to one row per (model, forecast_date,
    target_end_date) with prediction (median), lower and upper columns.
    """
    _require_columns(long, set(KEY_COLS) | {"quantile", "value"}, "quantile records")
    lower_q, upper_q = interval_quantiles(ci_level)
    columns = {0.5: "prediction", lower_q: "lower", upper_q: "upper"}

    q = pd.to_numeric(long["quantile"], errors="coerce").round(6)
    selected = long.loc[q.isin(list(columns))].copy()
    selected["column"] = q[q.isin(list(columns))].map(columns)

    dup = selected.duplicated(subset=KEY_COLS + ["column"])
    if dup.any():
        raise ValueError(
            f"quantile records are not unique per {KEY_COLS}: {int(dup.sum())} duplicated rows"
        )

    wide = selected.pivot(index=KEY_COLS, columns="column", values="value")
    wide = wide.reindex(columns=PIVOT_COLS)
    wide.columns.name = None
    return wide.reset_index().sort_values(KEY_COLS).reset_index(drop=True)


def attach_truth(table: pd.DataFrame, cases: pd.DataFrame) -> pd.DataFrame:
    """Left-join observed values onto forecasts by target_end_date."""
    _require_columns(cases, {"target_end_date", "true_value"}, "cases")
    base = table.drop(columns=["true_value"], errors="ignore")
    joined = base.merge(cases[["target_end_date", "true_value"]], how="left", on="target_end_date")
    n_missing = int(joined["true_value"].isna().sum())
    if n_missing:
        log.info("%d forecast rows have no matching observation", n_missing)
    return joined


def filter_date_range(
    table: pd.DataFrame,
    start: str | pd.Timestamp | None = None,
    end: str | pd.Timestamp | None = None,
    column: str = "forecast_date",
) -> pd.DataFrame:
    """Keep rows whose ``column`` falls in the inclusive [start, end] window."""
    _require_columns(table, {column}, "table")
    start_ts = pd.Timestamp(start) if start is not None else None
    end_ts = pd.Timestamp(end) if end is not None else None
    if start_ts is not None and end_ts is not None and start_ts > end_ts:
        raise ValueError("start must not be after end")

    mask = pd.Series(True, index=table.index)
    if start_ts is not None:
        mask &= table[column] >= start_ts
    if end_ts is not None:
        mask &= table[column] <= end_ts
    return table.loc[mask].reset_index(drop=True)


def build_forecast_table(
    raw_forecasts: pd.DataFrame,
    raw_cases: pd.DataFrame,
    start: str | pd.Timestamp | None = None,
    end: str | pd.Timestamp | None = None,
    ci_level: float = 0.95,
) -> pd.DataFrame:
    """
    Create the joined analysis table:
      model, forecast_date, target_end_date, prediction, lower, upper, true_value
    """
    forecasts = select_ci_level(prepare_forecasts(raw_forecasts), ci_level=ci_level)
    cases = prepare_cases(raw_cases)
    table = pivot_quantiles(long_quantile_frame(forecasts), ci_level=ci_level)
    table = attach_truth(table, cases)
    table = filter_date_range(table, start=start, end=end)
    log.info(
        "Built forecast table: %d rows, %d models, %d forecast dates",
        len(table),
        table["model"].nunique(),
        table["forecast_date"].nunique(),
    )
    return table
