"""Core dataclasses shared across replaytest subsystems."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

ROOT_GROUP = "replaytest"
NAME_DELIMITER = " - "


class TestMode(enum.Enum):
    """How a test body signals completion."""

    __test__ = False

    SYNC = "sync"
    ASYNC = "async"


class EventType(str, enum.Enum):
    OK = "ok"
    FAIL = "fail"
    EXPECTED_FAIL = "expected_fail"
    EXCEPTION = "exception"
    FINISH = "finish"


def split_name(name: str) -> Tuple[Tuple[str, ...], str]:
    """Split ``"group - sub - leaf"`` into ``(("replaytest", "group", "sub"), "leaf")``."""

    parts = [part.strip() for part in name.split(NAME_DELIMITER)]
    short_name = parts.pop()
    return (ROOT_GROUP, *parts), short_name


@dataclass(frozen=True)
class Cookie:
    """Locates the Nth failure inside a named test for replay."""

    name: str
    offset: int
    group_path: Tuple[str, ...] = tuple()
    short_name: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Cookie":
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Cookie requires a non-empty 'name'")
        offset = data.get("offset")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ValueError(f"Cookie offset must be a non-negative integer, got {offset!r}")
        group_path = data.get("groupPath", data.get("group_path")) or ()
        short_name = data.get("shortName", data.get("short_name")) or ""
        return cls(
            name=name,
            offset=offset,
            group_path=tuple(str(part) for part in group_path),
            short_name=str(short_name),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "offset": self.offset,
            "groupPath": list(self.group_path),
            "shortName": self.short_name,
        }


@dataclass(frozen=True)
class OkEvent:
    details: Optional[Mapping[str, Any]] = None

    @property
    def type(self) -> EventType:
        return EventType.OK

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"type": self.type.value}
        if self.details is not None:
            record["details"] = _details_dict(self.details)
        return record


@dataclass(frozen=True)
class _Failure:
    details: Optional[Mapping[str, Any]]
    cookie: Cookie

    @property
    def type(self) -> EventType:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "details": _details_dict(self.details) if self.details is not None else None,
            "cookie": self.cookie.to_dict(),
        }


@dataclass(frozen=True)
class FailEvent(_Failure):
    @property
    def type(self) -> EventType:
        return EventType.FAIL


@dataclass(frozen=True)
class ExpectedFailEvent(_Failure):
    """A failure recorded right after ``expect_fail()``."""

    @property
    def type(self) -> EventType:
        return EventType.EXPECTED_FAIL


@dataclass(frozen=True)
class ExceptionEvent:
    message: str
    stack: str

    @property
    def type(self) -> EventType:
        return EventType.EXCEPTION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "details": {"message": self.message, "stack": self.stack},
        }


@dataclass(frozen=True)
class FinishEvent:
    time_ms: float

    @property
    def type(self) -> EventType:
        return EventType.FINISH

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "timeMs": self.time_ms}


Event = Union[OkEvent, FailEvent, ExpectedFailEvent, ExceptionEvent, FinishEvent]
TERMINAL_EVENT_TYPES = frozenset({EventType.FINISH, EventType.EXCEPTION})
FailureEvent = Union[FailEvent, ExpectedFailEvent]


@dataclass(frozen=True)
class ReportEnvelope:
    """Unit delivered to a report sink: one test identity plus its events."""

    group_path: Tuple[str, ...]
    test: str
    events: Tuple[Event, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupPath": list(self.group_path),
            "test": self.test,
            "events": [event.to_dict() for event in self.events],
        }


def _details_dict(details: Any) -> Dict[str, Any]:
    if isinstance(details, Mapping):
        return dict(details)
    return {"message": details}
