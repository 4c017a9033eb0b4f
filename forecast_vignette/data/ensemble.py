"""Equal-weight combination of member model forecasts into an extra model."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from forecast_vignette.data.cleaning import PIVOT_COLS

_COMBINERS = {
    "mean": lambda F: np.mean(F, axis=1),
    "median": lambda F: np.median(F, axis=1),
}


def combine_member_matrix(F: np.ndarray, how: str = "mean") -> np.ndarray:
    """
    F: (T,N) member forecasts, one column per model.
    Returns the (T,) equal-weight mean or median combination.
    """
    F = np.asarray(F, dtype=float)
    if F.ndim != 2:
        raise ValueError("F must be (T,N)")
    if how not in _COMBINERS:
        raise ValueError("how must be 'mean' or 'median'")
    return _COMBINERS[how](F)


def add_ensemble(
    table: pd.DataFrame,
    members: Optional[Sequence[str]] = None,
    name: str = "ensemble",
    how: str = "mean",
) -> pd.DataFrame:
    """
    Append an ensemble model built from ``members`` (default: every model in
    the table). Only (forecast_date, target_end_date) pairs reported by all
    members are combined; true_value is carried over unchanged.
    """
    if how not in _COMBINERS:
        raise ValueError("how must be 'mean' or 'median'")
    models = list(pd.unique(table["model"]))
    if name in models:
        raise ValueError(f"model {name!r} already present in table")
    members = list(models if members is None else members)
    unknown = sorted(set(members).difference(models))
    if unknown:
        raise ValueError(f"unknown ensemble members: {unknown}")
    if not members:
        raise ValueError("members must name at least one model")

    d = table.loc[table["model"].isin(members)]
    index = ["forecast_date", "target_end_date"]
    pieces = {}
    for col in PIVOT_COLS:
        wide = d.pivot_table(index=index, columns="model", values=col, aggfunc="last")
        wide = wide.reindex(columns=members).dropna()
        pieces[col] = pd.Series(combine_member_matrix(wide.to_numpy(), how=how), index=wide.index)

    out = pd.DataFrame(pieces).dropna().reset_index()
    out.insert(0, "model", name)
    if "true_value" in table.columns:
        truth = d.groupby(index, as_index=False)["true_value"].first()
        out = out.merge(truth, how="left", on=index)

    combined = pd.concat([table, out[table.columns.intersection(out.columns)]], ignore_index=True)
    return combined.sort_values(["model"] + index).reset_index(drop=True)
