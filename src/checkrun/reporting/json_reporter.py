"""JSON reporter emitting structured run results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
from typing import Any, Dict, List, Sequence

from jsonschema import validate

from checkrun.core.models import TestCase
from checkrun.core.results import CaseResult, CheckEvent, RunSummary

from .base import Reporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION


class JsonReporter(Reporter):
    """Writes results to a JSON file validated against the schema."""

    def __init__(self, path: str) -> None:
        self._path = pathlib.Path(path)
        self._records: List[Dict[str, Any]] = []
        self._suite = ""

    def on_start(self, suite: str, cases: Sequence[TestCase]) -> None:
        self._suite = suite
        self._records.clear()

    def on_check(self, event: CheckEvent) -> None:
        pass

    def on_case_result(self, result: CaseResult) -> None:
        self._records.append(_case_to_dict(result))

    def on_complete(self, summary: RunSummary) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "suite": self._suite,
            "summary": {
                "cases": len(summary.results),
                "checks": summary.checks,
                "errors": summary.errors,
                "empty": summary.empty,
                "skipped": summary.skipped,
                "exit_code": int(summary.exit_status),
            },
            "cases": self._records,
        }
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc


def _case_to_dict(result: CaseResult) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": result.case.id,
        "name": result.case.name,
        "status": result.outcome.value,
        "checks": result.checks,
        "messages": list(result.messages),
    }
    if result.skip_message is not None:
        record["skip_message"] = result.skip_message
    return record
