import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


def make_table(model, true_sums, pred_sums, start="2021-01-02"):
    """Two target dates per forecast date, splitting each total 1:3."""
    rows = []
    fdates = pd.date_range(start, periods=len(true_sums), freq="14D")
    for fd, t, p in zip(fdates, true_sums, pred_sums):
        for k, share in enumerate((0.25, 0.75)):
            rows.append(
                {
                    "model": model,
                    "forecast_date": fd,
                    "target_end_date": fd + pd.Timedelta(weeks=k + 1),
                    "prediction": None if p is None else p * share,
                    "true_value": None if t is None else t * share,
                }
            )
    df = pd.DataFrame(rows)
    df["prediction"] = df["prediction"].astype(float)
    df["true_value"] = df["true_value"].astype(float)
    return df


@pytest.fixture
def scenario_table():
    return make_table("A", [100.0, 150.0, 120.0], [90.0, 140.0, 130.0])


@pytest.fixture
def raw_frames():
    forecasts = pd.DataFrame(
        {
            "model": ["ETS", "ETS", "ARIMA", "ARIMA"],
            "date": ["2021-01-09", "2021-01-16", "2021-01-09", "2021-01-16"],
            "ci_level": [0.95, 0.95, 95, 95],
            "forecast_date": ["2021-01-02"] * 4,
            "mean": [10.0, 12.0, 8.0, 9.0],
            "lower": [5.0, 6.0, 4.0, 4.5],
            "upper": [15.0, 18.0, 12.0, 13.5],
        }
    )
    cases = pd.DataFrame({"date": ["2021-01-09", "2021-01-16"], "cases": [9, 11]})
    return forecasts, cases


@pytest.fixture
def table_factory():
    return make_table
