import numpy as np
import pandas as pd
import pytest

from forecast_vignette.data.cleaning import (
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


def test_prepare_forecasts_normalises_columns_and_levels(raw_frames):
    raw, _ = raw_frames
    raw = raw.rename(columns=str.upper)
    cleaned = prepare_forecasts(raw)

    assert list(cleaned.columns) == [
        "model", "forecast_date", "target_end_date", "ci_level", "mean", "lower", "upper",
    ]
    assert np.allclose(cleaned["ci_level"], 0.95)
    assert pd.api.types.is_datetime64_any_dtype(cleaned["target_end_date"])
    # sorted by key: ARIMA before ETS
    assert list(cleaned["model"]) == ["ARIMA", "ARIMA", "ETS", "ETS"]


def test_prepare_forecasts_missing_columns_raises(raw_frames):
    raw, _ = raw_frames
    with pytest.raises(ValueError, match="forecasts missing required columns"):
        prepare_forecasts(raw.drop(columns=["upper"]))


def test_prepare_forecasts_drops_unparseable_keys(raw_frames):
    raw, _ = raw_frames
    raw.loc[3, "forecast_date"] = "not a date"
    assert len(prepare_forecasts(raw)) == 3


def test_prepare_cases_rejects_duplicate_dates():
    cases = pd.DataFrame({"date": ["2021-01-09", "2021-01-09"], "cases": [1, 2]})
    with pytest.raises(ValueError, match="duplicated dates"):
        prepare_cases(cases)


def test_interval_quantiles():
    assert interval_quantiles(0.95) == (0.025, 0.975)
    assert interval_quantiles(0.8) == (0.1, 0.9)
    with pytest.raises(ValueError, match="ci_level"):
        interval_quantiles(1.5)


def test_long_then_pivot_recovers_interval(raw_frames):
    raw, _ = raw_frames
    forecasts = prepare_forecasts(raw)
    long = long_quantile_frame(forecasts)

    assert len(long) == 3 * len(forecasts)
    assert set(long["quantile"]) == {0.025, 0.5, 0.975}

    wide = pivot_quantiles(long)
    assert list(wide.columns) == ["model", "forecast_date", "target_end_date", "prediction", "lower", "upper"]
    assert np.allclose(wide["prediction"], forecasts["mean"])
    assert np.allclose(wide["lower"], forecasts["lower"])
    assert np.allclose(wide["upper"], forecasts["upper"])


def test_pivot_rejects_duplicate_keys(raw_frames):
    raw, _ = raw_frames
    long = long_quantile_frame(prepare_forecasts(raw))
    with pytest.raises(ValueError, match="not unique"):
        pivot_quantiles(pd.concat([long, long.iloc[:1]], ignore_index=True))


def test_attach_truth_leaves_unmatched_targets_missing(raw_frames):
    raw, cases = raw_frames
    table = pivot_quantiles(long_quantile_frame(prepare_forecasts(raw)))
    joined = attach_truth(table, prepare_cases(cases.iloc[:1]))

    matched = joined["target_end_date"] == pd.Timestamp("2021-01-09")
    assert (joined.loc[matched, "true_value"] == 9).all()
    assert joined.loc[~matched, "true_value"].isna().all()


def test_filter_date_range_is_inclusive():
    table = pd.DataFrame({"forecast_date": pd.date_range("2021-01-02", periods=4, freq="7D")})
    out = filter_date_range(table, start="2021-01-09", end="2021-01-16")
    assert list(out["forecast_date"].dt.strftime("%Y-%m-%d")) == ["2021-01-09", "2021-01-16"]
    assert len(filter_date_range(table)) == 4
    with pytest.raises(ValueError, match="start must not be after end"):
        filter_date_range(table, start="2021-02-01", end="2021-01-01")


def test_build_forecast_table_end_to_end(raw_frames):
    raw, cases = raw_frames
    table = build_forecast_table(raw, cases)

    assert len(table) == 4
    assert not table.duplicated(["model", "forecast_date", "target_end_date"]).any()
    ets = table.loc[table["model"] == "ETS"].set_index("target_end_date")
    assert np.isclose(ets.loc[pd.Timestamp("2021-01-16"), "prediction"], 12.0)
    assert np.isclose(ets.loc[pd.Timestamp("2021-01-16"), "true_value"], 11.0)

    assert build_forecast_table(raw, cases, start="2021-01-03").empty


def test_build_forecast_table_picks_one_interval_level(raw_frames):
    raw, cases = raw_frames
    narrow = raw.assign(ci_level=0.8, lower=raw["lower"] + 2.0, upper=raw["upper"] - 2.0)
    mixed = pd.concat([raw, narrow], ignore_index=True)

    wide95 = build_forecast_table(mixed, cases)
    assert len(wide95) == 4
    assert np.allclose(wide95.sort_values(["model", "target_end_date"])["lower"], [4.0, 4.5, 5.0, 6.0])

    wide80 = build_forecast_table(mixed, cases, ci_level=0.8)
    assert len(wide80) == 4
    assert np.allclose(wide80.sort_values(["model", "target_end_date"])["lower"], [6.0, 6.5, 7.0, 8.0])


def test_select_ci_level_keeps_duplicates_within_a_level(raw_frames):
    raw, _ = raw_frames
    forecasts = prepare_forecasts(pd.concat([raw, raw.iloc[:1]], ignore_index=True))
    selected = select_ci_level(forecasts, 0.95)
    assert len(selected) == 5
    with pytest.raises(ValueError, match="not unique"):
        pivot_quantiles(long_quantile_frame(selected))


def test_prepare_forecasts_drops_missing_model(raw_frames):
    raw, _ = raw_frames
    raw.loc[1, "model"] = None
    cleaned = prepare_forecasts(raw)
    assert len(cleaned) == 3
    assert "nan" not in set(cleaned["model"])
