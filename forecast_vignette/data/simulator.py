import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# -----------------------------
# 1) Weekly case series
# -----------------------------

@dataclass
class SimConfig:
    n_weeks: int = 60                  # length of the observed series
    start: str = "2020-03-07"          # first observation (weekly, Saturdays)
    seed: int = 0

    # log(cases_t) = log(cases_{t-1}) + drift + wave + sigma * eps
    initial_cases: float = 200.0
    drift: float = 0.01
    wave_amplitude: float = 0.15       # seasonal wave in the weekly growth rate
    wave_period: float = 26.0          # weeks
    sigma: float = 0.08

    # forecasting set-up
    horizon: int = 4                   # weeks ahead per forecast date
    first_forecast_week: int = 8       # forecasts need some history
    ci_level: float = 0.95

    # model -> (multiplicative log bias, log noise scale per sqrt(h))
    models: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "ETS": (0.05, 0.10),
        "ARIMA": (-0.02, 0.12),
        "ARIMA+Twitter": (0.00, 0.08),
    })


def simulate_case_series(cfg: Optional[SimConfig] = None) -> pd.DataFrame:
    """
    Simulates weekly case counts from a log-growth random walk with a
    seasonal wave in the growth rate.

    Returns DataFrame with columns: date, cases
    """
    if cfg is None:
        cfg = SimConfig()

    rng = np.random.default_rng(cfg.seed)
    t = np.arange(cfg.n_weeks)
    growth = cfg.drift + cfg.wave_amplitude * np.sin(2.0 * np.pi * t / cfg.wave_period)
    shocks = cfg.sigma * rng.normal(size=cfg.n_weeks)
    shocks[0] = 0.0
    log_cases = np.log(cfg.initial_cases) + np.cumsum(growth + shocks) - growth[0]

    dates = pd.date_range(cfg.start, periods=cfg.n_weeks, freq="7D")
    cases = np.round(np.exp(log_cases)).astype(int)
    return pd.DataFrame({"date": dates.strftime("%Y-%m-%d"), "cases": cases})


# -----------------------------
# 2) Per-model forecast files
# -----------------------------

def _z_for_level(ci_level: float) -> float:
    # two-sided normal quantiles for the usual interval levels
    table = {0.8: 1.2816, 0.9: 1.6449, 0.95: 1.9600, 0.99: 2.5758}
    key = round(float(ci_level), 2)
    if key not in table:
        raise ValueError(f"ci_level must be one of {sorted(table)}")
    return table[key]


def make_forecast_files(
    cfg: Optional[SimConfig] = None,
) -> Tuple[pd.DataFrame, Dict[str, pd.DataFrame]]:
    """
    Build the observed series plus one raw forecast frame per model, laid
    out like the pre-computed CSVs:
      model, date, ci_level, forecast_date, mean, lower, upper

    Each model forecasts the truth with its own log bias and a noise scale
    that widens with sqrt(horizon).
    """
    if cfg is None:
        cfg = SimConfig()
    if cfg.first_forecast_week + cfg.horizon > cfg.n_weeks:
        raise ValueError("n_weeks too short for first_forecast_week + horizon")

    cases = simulate_case_series(cfg)
    truth = cases["cases"].to_numpy(dtype=float)
    dates = pd.to_datetime(cases["date"])
    z = _z_for_level(cfg.ci_level)

    forecasts: Dict[str, pd.DataFrame] = {}
    for k, (name, (bias, scale)) in enumerate(cfg.models.items()):
        rng = np.random.default_rng(cfg.seed + 1000 * (k + 1))
        rows = []
        for origin in range(cfg.first_forecast_week, cfg.n_weeks - cfg.horizon + 1):
            for h in range(1, cfg.horizon + 1):
                target = origin + h - 1
                sd = scale * np.sqrt(h)
                mean = truth[target] * np.exp(bias + sd * rng.normal())
                rows.append({
                    "model": name,
                    "date": dates[target].strftime("%Y-%m-%d"),
                    "ci_level": cfg.ci_level,
                    "forecast_date": dates[origin].strftime("%Y-%m-%d"),
                    "mean": mean,
                    "lower": mean * np.exp(-z * sd),
                    "upper": mean * np.exp(z * sd),
                })
        forecasts[name] = pd.DataFrame(rows)
    return cases, forecasts
