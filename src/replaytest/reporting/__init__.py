"""Reporting exports."""
from .base import ReportManager, Reporter, RunSummary, TestOutcome
from .json_reporter import JsonReporter
from .terminal import TerminalReporter

__all__ = [
    "ReportManager",
    "Reporter",
    "RunSummary",
    "TestOutcome",
    "JsonReporter",
    "TerminalReporter",
]
