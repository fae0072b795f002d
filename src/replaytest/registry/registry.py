"""Test registry implementation."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from replaytest.core import DuplicateTestError, ReportSink, RunServices, TestCase, TestRun, UnknownTestError


class TestRegistry:
    """Stores test cases by unique name, preserving registration order."""

    __test__ = False

    def __init__(self) -> None:
        self._cases: Dict[str, TestCase] = {}
        self._ordered: List[TestCase] = []

    def add_case(self, case: TestCase) -> TestCase:
        if case.name in self._cases:
            raise DuplicateTestError(case.name)
        self._cases[case.name] = case
        self._ordered.append(case)
        return case

    def get(self, name: str) -> TestCase:
        try:
            return self._cases[name]
        except KeyError as exc:
            raise UnknownTestError(name) from exc

    def __contains__(self, name: str) -> bool:
        return name in self._cases

    def __iter__(self) -> Iterator[TestCase]:
        return iter(tuple(self._ordered))

    def __len__(self) -> int:
        return len(self._ordered)

    def names(self) -> Iterable[str]:
        return tuple(case.name for case in self._ordered)

    def snapshot(self) -> Tuple[TestCase, ...]:
        return tuple(self._ordered)

    def create_run(self, on_report: ReportSink, services: Optional[RunServices] = None) -> TestRun:
        return TestRun(self, on_report, services)
