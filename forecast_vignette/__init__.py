from .config import VignetteConfig
from .summaries import correctly_increases, total_overprediction
from .vignette import VignetteResult, load_table, run_vignette, summarise_table

__all__ = [
    "VignetteConfig",
    "VignetteResult",
    "correctly_increases",
    "load_table",
    "run_vignette",
    "summarise_table",
    "total_overprediction",
]
