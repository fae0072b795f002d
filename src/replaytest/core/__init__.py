"""Core models and helpers exposed at the package level."""
from .case import TestCase
from .comparator import Opaque, deep_equal, describe
from .errors import ConfigurationError, DuplicateTestError, UnknownTestError
from .models import (
    Cookie,
    Event,
    EventType,
    ExceptionEvent,
    ExpectedFailEvent,
    FailEvent,
    FailureEvent,
    FinishEvent,
    OkEvent,
    ReportEnvelope,
    TestMode,
)
from .results import ResultRecorder
from .runner import ReportSink, RunState, TestRun
from .services import (
    InteractiveBreakpoint,
    LoopScheduler,
    NullBreakpoint,
    RunServices,
    run_to_completion,
)

__all__ = [
    "ConfigurationError",
    "Cookie",
    "DuplicateTestError",
    "Event",
    "EventType",
    "ExceptionEvent",
    "ExpectedFailEvent",
    "FailEvent",
    "FailureEvent",
    "FinishEvent",
    "InteractiveBreakpoint",
    "LoopScheduler",
    "NullBreakpoint",
    "OkEvent",
    "Opaque",
    "ReportEnvelope",
    "ReportSink",
    "ResultRecorder",
    "RunServices",
    "RunState",
    "TestCase",
    "TestMode",
    "TestRun",
    "UnknownTestError",
    "deep_equal",
    "describe",
    "run_to_completion",
]
