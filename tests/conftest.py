from __future__ import annotations

import itertools
from typing import List

import pytest

from replaytest import Harness
from replaytest.core import ReportEnvelope, RunServices


class RecordingBreakpoint:
    """Remembers each breakpoint request and how many reports preceded it."""

    def __init__(self, reports: List[ReportEnvelope]) -> None:
        self.reports = reports
        self.requests: list = []

    def request_break(self, context: object) -> None:
        self.requests.append((context, len(self.reports)))


@pytest.fixture
def reports() -> List[ReportEnvelope]:
    return []


@pytest.fixture
def breakpoints(reports: List[ReportEnvelope]) -> RecordingBreakpoint:
    return RecordingBreakpoint(reports)


@pytest.fixture
def harness(breakpoints: RecordingBreakpoint) -> Harness:
    counter = itertools.count(1)
    services = RunServices(breakpoints=breakpoints, id_factory=lambda: f"run-{next(counter)}")
    return Harness(services=services)
