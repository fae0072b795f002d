"""Run configuration loading."""
from .loader import load_config, parse_config
from .models import REPORT_FORMATS, RunConfig

__all__ = [
    "REPORT_FORMATS",
    "RunConfig",
    "load_config",
    "parse_config",
]
