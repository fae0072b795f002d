"""Per-execution recorder turning assertion outcomes into events."""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Collection, Dict, Mapping, Optional, Type

from .comparator import deep_equal, describe
from .models import Cookie, Event, ExpectedFailEvent, FailEvent, OkEvent
from .services import BreakpointTrigger, InteractiveBreakpoint, new_run_id

if TYPE_CHECKING:
    from .case import TestCase

logger = logging.getLogger(__name__)

Details = Any


class ResultRecorder:
    """Assertion API handed to a test body for one execution.

    Every assertion emits exactly one event and returns; none of them raise.
    Unexpected errors inside a test body are reported by the run, or by the
    body itself through :meth:`exception` when they happen in a callback.
    """

    def __init__(
        self,
        case: "TestCase",
        on_event: Callable[[Event], None],
        on_exception: Callable[[BaseException], None],
        stop_at_offset: Optional[int] = None,
        *,
        breakpoints: Optional[BreakpointTrigger] = None,
        id_factory: Callable[[], str] = new_run_id,
        opaque_types: Collection[Type[Any]] = (),
    ) -> None:
        self._case = case
        self._on_event = on_event
        self._on_exception = on_exception
        self._stop_at_offset = stop_at_offset
        self._breakpoints = breakpoints or InteractiveBreakpoint()
        self._expecting_failure = False
        self._failure_count = 0
        self._id = id_factory()
        self._opaque_types = tuple(opaque_types)

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def run_id(self) -> str:
        """Unique id of this execution, for the test body's own use."""

        return self._id

    def ok(self, details: Details = None) -> None:
        details = _as_details(details)
        if self._expecting_failure:
            self._expecting_failure = False
            details = {**(details or {}), "was_expecting_failure": True}
        self._on_event(OkEvent(details=details))

    def expect_fail(self) -> None:
        """Mark the next assertion as expected to fail."""

        self._expecting_failure = True

    def fail(self, details: Details) -> None:
        offset = self._failure_count
        cookie = Cookie(
            name=self._case.name,
            offset=offset,
            group_path=self._case.group_path,
            short_name=self._case.short_name,
        )
        event_cls = ExpectedFailEvent if self._expecting_failure else FailEvent
        self._expecting_failure = False
        self._failure_count += 1
        self._on_event(event_cls(details=_as_details(details), cookie=cookie))
        if self._stop_at_offset is not None and offset == self._stop_at_offset:
            self._stop_at_offset = None
            logger.debug("Reached failure %d of '%s'; requesting breakpoint", offset, self._case.name)
            self._breakpoints.request_break(cookie)

    def exception(self, error: BaseException) -> None:
        """Report an error caught inside an async callback.

        The body must then neither call its completion callback nor raise.
        """

        self._on_exception(error)

    # Convenience assertions, patterned after vows.js.

    def equal(self, actual: Any, expected: Any, message: Optional[str] = None) -> None:
        self._assert_equal(actual, expected, message, negate=False)

    def not_equal(self, actual: Any, expected: Any, message: Optional[str] = None) -> None:
        self._assert_equal(actual, expected, message, negate=True)

    def instance_of(self, obj: Any, klass: type) -> None:
        if isinstance(obj, klass):
            self.ok()
        else:
            self.fail({"type": "instance_of", "expected": klass.__name__, "actual": type(obj).__name__})

    def length(self, obj: Any, expected_length: int) -> None:
        try:
            actual_length = len(obj)
        except TypeError as exc:
            self.fail({"type": "length", "expected": expected_length, "error": str(exc)})
            return
        if actual_length == expected_length:
            self.ok()
        else:
            self.fail({"type": "length", "expected": expected_length, "actual": actual_length})

    def throws(self, fn: Callable[[], Any]) -> None:
        try:
            fn()
        except Exception as exc:
            self.ok({"message": str(exc), "exception": type(exc).__name__})
            return
        self.fail({"type": "throws"})

    def is_true(self, value: Any) -> None:
        if value:
            self.ok()
        else:
            self.fail({"type": "true", "actual": self._describe(value)})

    def is_false(self, value: Any) -> None:
        if value:
            self.fail({"type": "false", "actual": self._describe(value)})
        else:
            self.ok()

    def is_none(self, value: Any) -> None:
        if value is None:
            self.ok()
        else:
            self.fail({"type": "none", "actual": self._describe(value)})

    def is_not_none(self, value: Any) -> None:
        if value is None:
            self.fail({"type": "not_none"})
        else:
            self.ok()

    def matches(self, text: str, pattern: str) -> None:
        try:
            found = re.search(pattern, text) is not None
        except (TypeError, re.error) as exc:
            self.fail({"type": "matches", "pattern": pattern, "error": str(exc)})
            return
        if found:
            self.ok()
        else:
            self.fail({"type": "matches", "pattern": pattern, "actual": self._describe(text)})

    def _assert_equal(self, actual: Any, expected: Any, message: Optional[str], *, negate: bool) -> None:
        details: Dict[str, Any] = {
            "type": "assert_equal",
            "message": message,
            "expected": self._describe(expected),
            "actual": self._describe(actual),
            "not": negate,
        }
        try:
            matched = deep_equal(actual, expected, self._opaque_types)
        except Exception as exc:
            details["error"] = f"{type(exc).__name__}: {exc}"
            self.fail(details)
            return
        if matched == negate:
            self.fail(details)
        else:
            self.ok()

    def _describe(self, value: Any) -> str:
        return describe(value, self._opaque_types)


def _as_details(details: Details) -> Optional[Mapping[str, Any]]:
    """Mappings pass through; any other value becomes ``{"message": value}``."""

    if details is None or isinstance(details, Mapping):
        return details
    return {"message": details}
