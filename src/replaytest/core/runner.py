"""Run orchestrator executing registered test cases one at a time."""
from __future__ import annotations

import enum
import logging
import time
import traceback
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from .case import TestCase
from .models import Cookie, Event, ExceptionEvent, FinishEvent, ReportEnvelope
from .services import RunServices

if TYPE_CHECKING:
    from replaytest.registry import TestRegistry

logger = logging.getLogger(__name__)

ReportSink = Callable[[ReportEnvelope], None]


class RunState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class TestRun:
    """Executes a registry snapshot sequentially, or replays a single case.

    Every event is forwarded to ``on_report`` as soon as it is produced,
    wrapped with the owning test's group path and short name.
    """

    __test__ = False

    def __init__(
        self,
        registry: "TestRegistry",
        on_report: ReportSink,
        services: Optional[RunServices] = None,
    ) -> None:
        self._registry = registry
        self._on_report = on_report
        self._services = services or RunServices()
        self._state = RunState.IDLE
        self._current_index = -1

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._current_index

    def run(self, on_complete: Callable[[], None]) -> None:
        """Run every case registered so far, in registration order."""

        self._start()
        self._run_sequence(self._registry.snapshot(), on_complete)

    def debug(self, cookie: Cookie, on_complete: Callable[[], None]) -> None:
        """Re-run the case named by ``cookie`` and break at its failure offset."""

        case = self._registry.get(cookie.name)
        self._start()
        logger.debug("Replaying '%s' up to failure %d", case.name, cookie.offset)
        self._run_sequence((case,), on_complete, stop_at_offset=cookie.offset)

    def _start(self) -> None:
        if self._state is not RunState.IDLE:
            raise RuntimeError("A TestRun can only be started once")
        self._state = RunState.RUNNING

    def _run_sequence(
        self,
        cases: Sequence[TestCase],
        on_complete: Callable[[], None],
        stop_at_offset: Optional[int] = None,
    ) -> None:
        pending = list(cases)

        def run_next() -> None:
            if not pending:
                self._state = RunState.DONE
                on_complete()
                return
            self._current_index += 1
            self._run_one(pending.pop(0), run_next, stop_at_offset)

        run_next()

    def _run_one(
        self,
        case: TestCase,
        on_done: Callable[[], None],
        stop_at_offset: Optional[int],
    ) -> None:
        start_time = time.perf_counter()
        finished = False

        def on_event(event: Event) -> None:
            if finished:
                logger.warning("Dropping %s event from '%s' after it finished", event.type.value, case.name)
                return
            self._report(case, event)

        def terminate(event: Event) -> bool:
            nonlocal finished
            if finished:
                logger.warning("Ignoring second completion of '%s'", case.name)
                return False
            finished = True
            self._report(case, event)
            return True

        def on_complete() -> None:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            if terminate(FinishEvent(time_ms=elapsed_ms)):
                logger.debug("'%s' finished in %.2f ms", case.name, elapsed_ms)
                on_done()

        def on_exception(error: BaseException) -> None:
            if terminate(_exception_event(error)):
                logger.debug("'%s' raised %r", case.name, error)
                on_done()

        case.run(on_event, on_complete, on_exception, stop_at_offset, services=self._services)

    def _report(self, case: TestCase, event: Event) -> None:
        envelope = ReportEnvelope(group_path=case.group_path, test=case.short_name, events=(event,))
        try:
            self._on_report(envelope)
        except Exception:
            # Sink errors are logged only; the run continues and the case is not charged.
            logger.exception("Report sink failed on %s event from '%s'", event.type.value, case.name)


def _exception_event(error: BaseException) -> ExceptionEvent:
    if not isinstance(error, BaseException):
        return ExceptionEvent(message=str(error), stack="")
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return ExceptionEvent(message=str(error) or type(error).__name__, stack=stack)
