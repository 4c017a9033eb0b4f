from __future__ import annotations

from typing import Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from forecast_vignette.summaries.result import SummaryResult


# ----------------------------
# Display tables
# ----------------------------

def rates_table(result: SummaryResult, label: Optional[str] = None) -> pd.DataFrame:
    """Model -> percentage table for display."""
    label = label or result.name.title()
    return (
        result.table[["model", "percent"]]
        .rename(columns={"model": "Model", "percent": label})
        .reset_index(drop=True)
    )


def combined_table(
    overprediction: SummaryResult,
    direction: SummaryResult,
    missing: str = "n/a",
) -> pd.DataFrame:
    """One row per model with both summaries; undefined rates shown as ``missing``."""
    over = rates_table(overprediction, "Sufficient procurement")
    dirn = rates_table(direction, "Predicted increase")
    out = over.merge(dirn, how="outer", on="Model").fillna(missing)
    return out.sort_values("Model").reset_index(drop=True)


# ----------------------------
# Prose interpretation
# ----------------------------

def _best_and_worst(result: SummaryResult) -> Tuple[pd.Series, pd.Series]:
    t = result.table.sort_values(["rate", "model"], ascending=[False, True])
    return t.iloc[0], t.iloc[-1]


def describe_overprediction(result: SummaryResult) -> str:
    if result.table.empty:
        return "None of the models had a complete forecast period to compare against observed cases."
    best, worst = _best_and_worst(result)
    text = (
        f"If supplies had been procured according to the forecasted case totals, "
        f"{best['model']} would have covered the cases that actually occurred in "
        f"{best['percent']} of forecast weeks ({best['n_hits']} of {best['n_periods']})."
    )
    if best["model"] != worst["model"]:
        text += (
            f" {worst['model']} was the least cautious, covering observed cases in "
            f"{worst['percent']} of forecast weeks."
        )
    return text


def describe_direction(result: SummaryResult) -> str:
    if result.table.empty:
        return "No model had a week of rising cases it could be scored on."
    best, worst = _best_and_worst(result)
    text = (
        f"In weeks where cases really increased, {best['model']} also forecast an "
        f"increase {best['percent']} of the time ({best['n_hits']} of {best['n_periods']})."
    )
    if best["model"] != worst["model"]:
        text += f" {worst['model']} anticipated the rise {worst['percent']} of the time."
    return text


# ----------------------------
# Plot
# ----------------------------

def plot_rates(
    result: SummaryResult,
    title: Optional[str] = None,
    ylabel: str = "Share of periods",
    figsize: Tuple[int, int] = (8, 4),
    show: bool = True,
) -> plt.Figure:
    """Bar chart of per-model rates."""
    fig = plt.figure(figsize=figsize)
    plt.bar(result.table["model"], result.table["rate"].astype(float), color="#4C78A8")
    plt.ylim(0.0, 1.0)
    plt.ylabel(ylabel)
    plt.title(title or f"{result.name.title()} by model")
    plt.tight_layout()
    if show:
        plt.show()
    return fig
