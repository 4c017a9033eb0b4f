from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import pandas as pd

from forecast_vignette.config import VignetteConfig
from forecast_vignette.data.ensemble import add_ensemble
from forecast_vignette.data.loading import DATA_DIR, save_csv
from forecast_vignette.data.simulator import SimConfig, make_forecast_files
from forecast_vignette.reporting import (
    combined_table,
    describe_direction,
    describe_overprediction,
    plot_rates,
    rates_table,
)
from forecast_vignette.vignette import VignetteResult, load_table, summarise_table

log = logging.getLogger("run_vignette")


def demo_frames(seed: int) -> tuple[pd.DataFrame, pd.DataFrame]:
    cases, forecasts = make_forecast_files(SimConfig(seed=seed))
    return pd.concat(forecasts.values(), ignore_index=True), cases


def render(result: VignetteResult) -> str:
    over, dirn = result.overprediction, result.direction
    parts = [
        "Sufficient procurement (forecasted total > observed total)",
        rates_table(over, "Sufficient procurement").to_string(index=False),
        "",
        describe_overprediction(over),
        "",
        "Predicted increase (in weeks where cases increased)",
        rates_table(dirn, "Predicted increase").to_string(index=False),
        "",
        describe_direction(dirn),
    ]
    for summary in (over, dirn):
        counts = summary.exclusion_counts()
        if counts:
            listed = ", ".join(f"{k.value}={n}" for k, n in sorted(counts.items(), key=lambda kv: kv[0].value))
            parts += ["", f"Excluded from {summary.name}: {listed}"]
    return "\n".join(parts)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Summarise pre-computed case forecasts for policy makers.")
    parser.add_argument("--data-dir", type=str, default=str(DATA_DIR))
    parser.add_argument("--cases-file", type=str, default="cases.csv")
    parser.add_argument("--start", type=str, default=None, help="first forecast date (inclusive)")
    parser.add_argument("--end", type=str, default=None, help="last forecast date (inclusive)")
    parser.add_argument("--ci-level", type=float, default=0.95)
    parser.add_argument("--decimals", type=int, default=0)
    parser.add_argument("--demo", action="store_true", help="use simulated forecasts instead of files")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--ensemble", action="store_true", help="add an equal-weight mean ensemble")
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--plot", action="store_true")
    parser.add_argument("--log-level", type=str.upper, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    cfg = VignetteConfig(
        data_dir=Path(args.data_dir),
        cases_file=args.cases_file,
        start=args.start,
        end=args.end,
        ci_level=args.ci_level,
        decimals=args.decimals,
        verbose=args.verbose,
    )
    level = cfg.log_level() if args.verbose else getattr(logging, args.log_level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    raw_forecasts, raw_cases = demo_frames(args.seed) if args.demo else (None, None)
    table = load_table(cfg, raw_forecasts=raw_forecasts, raw_cases=raw_cases)
    if args.ensemble:
        table = add_ensemble(table, name="mean_ensemble")
    result = summarise_table(table, decimals=cfg.decimals)

    print(render(result))

    if args.out_dir is not None:
        out_dir = Path(args.out_dir).resolve()
        summary = combined_table(result.overprediction, result.direction)
        path = save_csv(summary, out_dir / "summary.csv")
        log.info("Wrote %s", path)
        if args.plot:
            for s in (result.overprediction, result.direction):
                fig = plot_rates(s, show=False)
                fig.savefig(out_dir / f"{s.name}.png", dpi=120)
                plt.close(fig)
                log.info("Wrote %s", out_dir / f"{s.name}.png")


if __name__ == "__main__":
    main()
