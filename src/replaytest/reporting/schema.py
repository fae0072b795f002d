"""JSON schema definition for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

_COOKIE = {
    "type": "object",
    "required": ["name", "offset", "groupPath", "shortName"],
    "properties": {
        "name": {"type": "string"},
        "offset": {"type": "integer", "minimum": 0},
        "groupPath": {"type": "array", "items": {"type": "string"}},
        "shortName": {"type": "string"},
    },
}

_EVENT = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"enum": ["ok", "fail", "expected_fail", "exception", "finish"]},
        "details": {"type": ["object", "null"]},
        "cookie": _COOKIE,
        "timeMs": {"type": "number"},
    },
}

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "replaytest report",
    "type": "object",
    "required": ["schema_version", "generated_at", "summary", "tests"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": {
            "type": "object",
            "required": ["total", "passed", "failed", "errors", "duration_s"],
            "properties": {
                "total": {"type": "integer"},
                "passed": {"type": "integer"},
                "failed": {"type": "integer"},
                "errors": {"type": "integer"},
                "duration_s": {"type": "number"},
            },
        },
        "tests": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["groupPath", "test", "status", "events"],
                "properties": {
                    "groupPath": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                    "test": {"type": "string"},
                    "status": {"enum": ["passed", "failed", "error", "running"]},
                    "timeMs": {"type": ["number", "null"]},
                    "events": {"type": "array", "items": _EVENT},
                },
            },
        },
    },
}
