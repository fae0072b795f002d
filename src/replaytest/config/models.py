"""Run configuration dataclasses."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

REPORT_FORMATS = ("terminal", "json")


@dataclass(frozen=True)
class RunConfig:
    target: Optional[str] = None
    report: str = "terminal"
    report_path: Optional[str] = None
    color: bool = True
    breakpoints: bool = True
    show_stack: bool = True

    def with_overrides(self, **overrides: object) -> "RunConfig":
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)
