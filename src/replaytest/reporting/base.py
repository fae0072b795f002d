"""Reporter interface definitions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from replaytest.core import EventType, ExceptionEvent, FailureEvent, ReportEnvelope


@dataclass
class TestOutcome:
    """Everything reported so far for one test case."""

    __test__ = False

    group_path: Tuple[str, ...]
    test: str
    ok: int = 0
    failures: List[FailureEvent] = field(default_factory=list)
    expected_failures: List[FailureEvent] = field(default_factory=list)
    exception: Optional[ExceptionEvent] = None
    time_ms: Optional[float] = None
    finished: bool = False

    @property
    def status(self) -> str:
        if self.exception is not None:
            return "error"
        if not self.finished:
            return "running"
        return "failed" if self.failures else "passed"

    @property
    def label(self) -> str:
        return " > ".join((*self.group_path[1:], self.test))


class RunSummary:
    """Folds a stream of report envelopes into per-test outcomes."""

    def __init__(self) -> None:
        self._outcomes: Dict[Tuple[Tuple[str, ...], str], TestOutcome] = {}

    def record(self, envelope: ReportEnvelope) -> TestOutcome:
        key = (envelope.group_path, envelope.test)
        outcome = self._outcomes.get(key)
        if outcome is None:
            outcome = TestOutcome(group_path=envelope.group_path, test=envelope.test)
            self._outcomes[key] = outcome
        for event in envelope.events:
            if event.type is EventType.OK:
                outcome.ok += 1
            elif event.type is EventType.FAIL:
                outcome.failures.append(event)
            elif event.type is EventType.EXPECTED_FAIL:
                outcome.expected_failures.append(event)
            elif event.type is EventType.EXCEPTION:
                outcome.exception = event
            elif event.type is EventType.FINISH:
                outcome.time_ms = event.time_ms
                outcome.finished = True
        return outcome

    def outcomes(self) -> List[TestOutcome]:
        return list(self._outcomes.values())

    def count(self, status: str) -> int:
        return sum(1 for outcome in self._outcomes.values() if outcome.status == status)

    @property
    def succeeded(self) -> bool:
        return all(outcome.status == "passed" for outcome in self._outcomes.values())


class Reporter:
    """Interface for output renderers."""

    def on_start(self, total: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_report(self, envelope: ReportEnvelope, outcome: TestOutcome) -> None:  # pragma: no cover
        raise NotImplementedError

    def on_complete(self, summary: RunSummary) -> None:  # pragma: no cover
        raise NotImplementedError


class ReportManager:
    """Report sink dispatching every envelope to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)
        self.summary = RunSummary()

    def __call__(self, envelope: ReportEnvelope) -> None:
        outcome = self.summary.record(envelope)
        for reporter in self._reporters:
            reporter.on_report(envelope, outcome)

    def start(self, total: int) -> None:
        for reporter in self._reporters:
            reporter.on_start(total)

    def complete(self) -> None:
        for reporter in self._reporters:
            reporter.on_complete(self.summary)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)
