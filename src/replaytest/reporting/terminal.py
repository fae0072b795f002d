"""Terminal reporter rendering live progress and summaries."""
from __future__ import annotations

import json
import time
from typing import Any, Mapping, Optional

import click
from colorama import Fore, Style

from replaytest.core import EventType, ReportEnvelope

from .base import Reporter, RunSummary, TestOutcome

STATUS_LABELS = {
    "passed": ("PASS", Fore.GREEN),
    "failed": ("FAIL", Fore.RED),
    "error": ("ERROR", Fore.RED),
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True, show_stack: bool = True) -> None:
        self._use_color = use_color
        self._show_stack = show_stack
        self._start_time = 0.0
        self._total = 0
        self._index = 0

    def on_start(self, total: int) -> None:
        self._start_time = time.perf_counter()
        self._total = total
        self._index = 0
        click.echo(self._styled(f"Starting run: {total} test(s)", Fore.CYAN))

    def on_report(self, envelope: ReportEnvelope, outcome: TestOutcome) -> None:
        for event in envelope.events:
            if event.type is EventType.FAIL:
                click.echo(f"    fail #{event.cookie.offset} in {outcome.label}: {_format_details(event.details)}")
                click.echo(f"      cookie: {json.dumps(event.cookie.to_dict())}")
            elif event.type is EventType.EXPECTED_FAIL:
                click.echo(f"    expected fail #{event.cookie.offset}: {_format_details(event.details)}")
            elif event.type is EventType.FINISH:
                self._print_terminal(outcome, f"({event.time_ms:.2f} ms)")
            elif event.type is EventType.EXCEPTION:
                self._print_terminal(outcome, "")
                click.echo(f"    exception: {event.message}")
                if self._show_stack and event.stack:
                    for line in event.stack.rstrip().splitlines():
                        click.echo(f"      {line}")

    def on_complete(self, summary: RunSummary) -> None:
        duration = time.perf_counter() - self._start_time
        outcomes = summary.outcomes()
        color = Fore.GREEN if summary.succeeded else Fore.RED
        click.echo(
            self._styled(
                f"Summary: total={len(outcomes)} passed={summary.count('passed')} "
                f"failed={summary.count('failed')} errors={summary.count('error')} "
                f"duration={duration:.2f}s",
                color,
            )
        )

    def _print_terminal(self, outcome: TestOutcome, suffix: str) -> None:
        self._index += 1
        label, color = STATUS_LABELS.get(outcome.status, (outcome.status.upper(), ""))
        counter = f"[{self._index}/{self._total}] " if self._total else ""
        assertions = f"ok={outcome.ok} fail={len(outcome.failures)}"
        if outcome.expected_failures:
            assertions += f" xfail={len(outcome.expected_failures)}"
        text = f"{counter}{self._styled(f'{label:<5}', color)} {outcome.label} {assertions}"
        click.echo(f"{text} {suffix}".rstrip())

    def _styled(self, text: str, color: Optional[str]) -> str:
        if not self._use_color or not color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"


def _format_details(details: Any) -> str:
    if details is None:
        return "(no details)"
    if not isinstance(details, Mapping):
        return str(details)
    if not details:
        return "(no details)"
    return ", ".join(f"{key}={value}" for key, value in details.items() if value is not None)
