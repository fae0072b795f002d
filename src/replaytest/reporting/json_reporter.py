"""JSON reporter emitting the structured event stream per test."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
import time
from typing import Any, Dict, List, Tuple

import click
from jsonschema import validate

from replaytest.core import ReportEnvelope

from .base import Reporter, RunSummary, TestOutcome
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION


class JsonReporter(Reporter):
    """Writes all events to a JSON file validated against the schema."""

    def __init__(self, path: str) -> None:
        self._path = pathlib.Path(path)
        self._events: Dict[Tuple[Tuple[str, ...], str], List[Dict[str, Any]]] = {}
        self._start_time = 0.0

    def on_start(self, total: int) -> None:
        self._events.clear()
        self._start_time = time.perf_counter()

    def on_report(self, envelope: ReportEnvelope, outcome: TestOutcome) -> None:
        records = self._events.setdefault((envelope.group_path, envelope.test), [])
        records.extend(_jsonify(event.to_dict()) for event in envelope.events)

    def on_complete(self, summary: RunSummary) -> None:
        payload = build_payload(summary, self._events, time.perf_counter() - self._start_time)
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}")


def build_payload(
    summary: RunSummary,
    events: Dict[Tuple[Tuple[str, ...], str], List[Dict[str, Any]]],
    duration: float,
) -> Dict[str, Any]:
    outcomes = summary.outcomes()
    return {
        "schema_version": SCHEMA_VERSION,
        "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "summary": {
            "total": len(outcomes),
            "passed": summary.count("passed"),
            "failed": summary.count("failed"),
            "errors": summary.count("error"),
            "duration_s": duration,
        },
        "tests": [
            {
                "groupPath": list(outcome.group_path),
                "test": outcome.test,
                "status": outcome.status,
                "timeMs": outcome.time_ms,
                "events": events.get((outcome.group_path, outcome.test), []),
            }
            for outcome in outcomes
        ],
    }


def _jsonify(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _jsonify(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonify(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return repr(value)
