from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from forecast_vignette.data.loading import DATA_DIR, DEFAULT_FORECAST_FILES


@dataclass
class VignetteConfig:
    data_dir: Path = DATA_DIR
    forecast_files: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FORECAST_FILES))
    cases_file: str = "cases.csv"

    # inclusive forecast_date window; None leaves that side open
    start: Optional[str] = None
    end: Optional[str] = None

    ci_level: float = 0.95
    decimals: int = 0                  # digits after the point in "NN%"
    verbose: bool = False              # per-group exclusion detail in the log

    def forecast_paths(self) -> Dict[str, Path]:
        return {model: Path(self.data_dir) / name for model, name in self.forecast_files.items()}

    def cases_path(self) -> Path:
        return Path(self.data_dir) / self.cases_file

    def log_level(self) -> int:
        return logging.DEBUG if self.verbose else logging.INFO
