from __future__ import annotations

import asyncio
import logging
from typing import List

import pytest

from replaytest.core import (
    Cookie,
    EventType,
    ReportEnvelope,
    RunState,
    UnknownTestError,
    run_to_completion,
)


def _types(reports: List[ReportEnvelope]) -> List[str]:
    return [event.type.value for envelope in reports for event in envelope.events]


def _tests(reports: List[ReportEnvelope]) -> List[str]:
    return [envelope.test for envelope in reports]


def test_sync_case_reports_ok_fail_finish(harness, reports) -> None:
    def body(t):
        t.is_true(1 == 1)
        t.is_true(1 == 2)

    harness.add("A", body)
    harness.run(reports.append)

    assert _types(reports) == ["ok", "fail", "finish"]
    fail = reports[1].events[0]
    assert fail.cookie == Cookie(name="A", offset=0, group_path=("replaytest",), short_name="A")
    assert reports[2].events[0].time_ms >= 0
    assert all(len(envelope.events) == 1 for envelope in reports)
    assert all(envelope.group_path == ("replaytest",) and envelope.test == "A" for envelope in reports)


def test_async_case_completes_through_callback(harness, reports) -> None:
    order: List[str] = []

    def body(t, done):
        def later():
            t.equal(2 + 2, 4)
            done()

        asyncio.get_running_loop().call_soon(later)

    harness.add_async("B", body)

    def sink(envelope: ReportEnvelope) -> None:
        reports.append(envelope)
        order.append(envelope.events[0].type.value)

    def start(done):
        def on_complete():
            order.append("complete")
            done()

        harness.run_all(sink, on_complete)

    run_to_completion(start)
    assert _types(reports) == ["ok", "finish"]
    assert order == ["ok", "finish", "complete"]


def test_exception_is_reported_and_run_continues(harness, reports) -> None:
    def explode(t):
        raise RuntimeError("boom")

    harness.add("C", explode)
    harness.add("D", lambda t: t.ok())
    harness.run(reports.append)

    assert _tests(reports) == ["C", "D", "D"]
    exception = reports[0].events[0]
    assert exception.type is EventType.EXCEPTION
    assert exception.message == "boom"
    assert "Traceback" in exception.stack
    assert "RuntimeError: boom" in exception.stack
    assert _types(reports)[1:] == ["ok", "finish"]


def test_cases_run_in_registration_order_without_overlap(harness, reports) -> None:
    def slow(t, done):
        def later():
            t.ok()
            done()

        asyncio.get_running_loop().call_later(0.01, later)

    harness.add_async("group - slow", slow)
    harness.add("group - fast", lambda t: t.ok())
    harness.add("other - last", lambda t: t.is_false(False))
    harness.run(reports.append)

    assert _tests(reports) == ["slow", "slow", "fast", "fast", "last", "last"]
    assert reports[0].group_path == ("replaytest", "group")
    assert reports[-1].group_path == ("replaytest", "other")


def test_each_case_gets_exactly_one_terminal_event(harness, reports) -> None:
    harness.add("passes", lambda t: t.ok())
    harness.add("fails", lambda t: t.fail({"type": "manual"}))

    def raises(t):
        t.ok()
        raise ValueError("bad")

    harness.add("raises", raises)
    harness.run(reports.append)

    terminal = [
        (envelope.test, event.type)
        for envelope in reports
        for event in envelope.events
        if event.type in (EventType.FINISH, EventType.EXCEPTION)
    ]
    assert terminal == [
        ("passes", EventType.FINISH),
        ("fails", EventType.FINISH),
        ("raises", EventType.EXCEPTION),
    ]


def test_run_uses_snapshot_taken_at_start(harness, reports) -> None:
    def registers_more(t):
        harness.add("late", lambda inner: inner.ok())
        t.ok()

    harness.add("first", registers_more)
    harness.run(reports.append)

    assert "late" not in _tests(reports)
    assert "late" in harness.registry


def test_run_all_never_executes_in_callers_stack(harness, reports) -> None:
    harness.add("deferred", lambda t: t.ok())
    seen_before_return: List[int] = []

    def start(done):
        harness.run_all(reports.append, done)
        seen_before_return.append(len(reports))

    run_to_completion(start)
    assert seen_before_return == [0]
    assert _types(reports) == ["ok", "finish"]


def test_second_completion_is_dropped(harness, reports, caplog) -> None:
    def twice(t, done):
        t.ok()
        done()
        done()

    harness.add_async("twice", twice)
    harness.add("after", lambda t: t.ok())
    with caplog.at_level(logging.WARNING, logger="replaytest.core.runner"):
        harness.run(reports.append)

    assert _types(reports) == ["ok", "finish", "ok", "finish"]
    assert "second completion" in caplog.text


def test_events_after_finish_are_dropped(harness, reports, caplog) -> None:
    def late_event(t, done):
        done()
        asyncio.get_running_loop().call_soon(t.ok)

    harness.add_async("late", late_event)
    harness.add_async("waits", lambda t, done: asyncio.get_running_loop().call_later(0.01, done))
    with caplog.at_level(logging.WARNING, logger="replaytest.core.runner"):
        harness.run(reports.append)

    assert [(e.test, e.events[0].type.value) for e in reports] == [("late", "finish"), ("waits", "finish")]
    assert "after it finished" in caplog.text


def test_async_body_can_report_exception_from_callback(harness, reports) -> None:
    def body(t, done):
        def callback():
            try:
                raise KeyError("missing")
            except KeyError as exc:
                t.exception(exc)

        asyncio.get_running_loop().call_soon(callback)

    harness.add_async("callback error", body)
    harness.run(reports.append)

    assert _types(reports) == ["exception"]
    assert "missing" in reports[0].events[0].message


def test_full_run_never_requests_breakpoints(harness, reports, breakpoints) -> None:
    harness.add("A", lambda t: t.is_true(False))
    harness.run(reports.append)
    assert breakpoints.requests == []


def test_debug_breaks_right_after_requested_failure(harness, reports, breakpoints) -> None:
    def body(t):
        t.is_true(1 == 1)
        t.is_true(1 == 2)

    harness.add("A", body)
    harness.debug({"name": "A", "offset": 0, "groupPath": ["replaytest"], "shortName": "A"}, reports.append)

    assert _types(reports) == ["ok", "fail", "finish"]
    assert len(breakpoints.requests) == 1
    cookie, reports_seen = breakpoints.requests[0]
    assert cookie.offset == 0
    assert reports_seen == 2


def test_debug_counts_failures_up_to_offset(harness, reports, breakpoints) -> None:
    def body(t):
        t.fail({"n": 0})
        t.ok()
        t.expect_fail()
        t.fail({"n": 1})
        t.fail({"n": 2})

    harness.add("many", body)
    harness.add("other", lambda t: t.fail({"n": "x"}))
    harness.debug(Cookie(name="many", offset=1), reports.append)

    assert _tests(reports) == ["many"] * 5
    assert breakpoints.requests == [(reports[2].events[0].cookie, 3)]


def test_debug_unknown_test_raises(harness, reports) -> None:
    harness.add("A", lambda t: t.ok())
    with pytest.raises(UnknownTestError) as exc:
        harness.debug_one(Cookie(name="nope", offset=0), reports.append, lambda: None)
    assert "No such test 'nope'" in str(exc.value)
    assert reports == []


def test_run_states_and_single_use(harness, reports) -> None:
    harness.add("A", lambda t: t.ok())
    test_run = harness.registry.create_run(reports.append, harness.services)
    assert test_run.state is RunState.IDLE

    run_to_completion(test_run.run)
    assert test_run.state is RunState.DONE
    assert test_run.current_index == 0
    with pytest.raises(RuntimeError):
        test_run.run(lambda: None)


def test_empty_registry_completes_immediately(harness, reports) -> None:
    completed: List[bool] = []
    harness.run_all(reports.append, lambda: completed.append(True))
    assert completed == [True]
    assert reports == []


def _raising_on(event_type: str, reports: List[ReportEnvelope]):
    def sink(envelope: ReportEnvelope) -> None:
        reports.append(envelope)
        if envelope.events[0].type.value == event_type:
            raise RuntimeError(f"sink rejected {event_type}")

    return sink


def test_sink_error_on_finish_does_not_stall_run(harness, reports, caplog) -> None:
    harness.add("A", lambda t: t.ok())
    harness.add("B", lambda t: t.ok())
    with caplog.at_level(logging.ERROR, logger="replaytest.core.runner"):
        harness.run(_raising_on("finish", reports))

    assert [(e.test, e.events[0].type.value) for e in reports] == [
        ("A", "ok"),
        ("A", "finish"),
        ("B", "ok"),
        ("B", "finish"),
    ]
    assert "sink rejected finish" in caplog.text


def test_sink_error_on_fail_is_not_reported_as_exception(harness, reports) -> None:
    harness.add("A", lambda t: t.is_true(False))
    harness.run(_raising_on("fail", reports))

    assert _types(reports) == ["fail", "finish"]


def test_async_sink_error_from_callback_still_completes(harness, reports) -> None:
    def body(t, done):
        def later():
            t.fail("plain message")
            done()

        asyncio.get_running_loop().call_soon(later)

    harness.add_async("async", body)
    harness.run(_raising_on("fail", reports))

    assert _types(reports) == ["fail", "finish"]
    assert reports[0].events[0].details == {"message": "plain message"}


def test_string_details_from_async_callback(harness, reports) -> None:
    def body(t, done):
        def later():
            t.fail("plain message")
            done()

        asyncio.get_running_loop().call_soon(later)

    harness.add_async("async", body)
    harness.run(reports.append)

    assert _types(reports) == ["fail", "finish"]
