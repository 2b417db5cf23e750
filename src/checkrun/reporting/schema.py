"""JSON schema definition for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "checkrun report",
    "type": "object",
    "required": ["schema_version", "generated_at", "suite", "summary", "cases"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "suite": {"type": "string"},
        "summary": {
            "type": "object",
            "required": ["cases", "checks", "errors", "empty", "skipped", "exit_code"],
            "properties": {
                "cases": {"type": "integer", "minimum": 0},
                "checks": {"type": "integer", "minimum": 0},
                "errors": {"type": "integer", "minimum": 0},
                "empty": {"type": "integer", "minimum": 0},
                "skipped": {"type": "integer", "minimum": 0},
                "exit_code": {"type": "integer", "enum": [0, 1, 2]},
            },
        },
        "cases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name", "status", "checks", "messages"],
                "properties": {
                    "id": {"type": "integer", "minimum": 1},
                    "name": {"type": "string"},
                    "status": {"type": "string", "enum": ["ok", "failed", "skipped", "empty"]},
                    "checks": {"type": "integer", "minimum": 0},
                    "messages": {"type": "array", "items": {"type": "string"}},
                    "skip_message": {"type": "string"},
                },
            },
        },
    },
}
