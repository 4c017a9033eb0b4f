from pathlib import Path
from typing import Dict, Mapping

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CASES_CSV_PATH = DATA_DIR / "cases.csv"

# Pre-computed forecast files shipped alongside the vignette, one per model.
DEFAULT_FORECAST_FILES: Dict[str, str] = {
    "ETS": "forecasts_ets.csv",
    "ARIMA": "forecasts_arima.csv",
    "ARIMA+Twitter": "forecasts_arima_twitter.csv",
    "ensemble": "forecasts_ensemble.csv",
}


def load_cases_csv(csv_path: str | Path = DEFAULT_CASES_CSV_PATH) -> pd.DataFrame:
    """Load the observed case counts (columns: date, cases)."""
    return pd.read_csv(Path(csv_path))


def load_forecast_csv(csv_path: str | Path, model: str | None = None) -> pd.DataFrame:
    """
    Load one forecast CSV.

    When ``model`` is given it fills (or overrides) the ``model`` column, so
    per-model files without a model column can be stacked later.
    """
    df = pd.read_csv(Path(csv_path))
    if model is not None:
        df["model"] = model
    return df


def load_forecast_files(paths: Mapping[str, str | Path]) -> pd.DataFrame:
    """Load and stack per-model forecast CSVs given as model name -> path."""
    if not paths:
        raise ValueError("paths must name at least one forecast file")
    frames = [load_forecast_csv(path, model=model) for model, path in paths.items()]
    return pd.concat(frames, ignore_index=True)


def save_csv(df: pd.DataFrame, csv_path: str | Path) -> Path:
    """Save the DataFrame to CSV and return the resolved path."""
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
