"""Per-run event log for scaffold invocations.

Every ``scaffold init`` owns a :class:`RunLog` with a short run id; each
pipeline phase appends one JSON line tagged with that id to
``<log_dir>/telemetry.jsonl``. ``scaffold telemetry report`` folds the lines
back into runs. Set ``SCAFFOLDKIT_TELEMETRY=0`` to switch the log off.

Writing is best effort: an unwritable log directory prints one notice and
disables the log for the rest of the run instead of aborting the scaffold.
"""

from __future__ import annotations

import json
import os
import sys
import time
from collections import deque
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator
from uuid import uuid4

from jsonschema import Draft202012Validator

from scaffoldkit.settings import RuntimeSettings

LOG_FILENAME = "telemetry.jsonl"
RUN_EVENT = "init"


def telemetry_enabled() -> bool:
    return os.getenv("SCAFFOLDKIT_TELEMETRY", "1").strip().lower() not in {"0", "false", "no", "off"}


def log_path(settings: RuntimeSettings) -> Path:
    return settings.log_dir / LOG_FILENAME


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files("scaffoldkit.resources") / "telemetry.schema.json"
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


class RunLog:
    """Appends the phase events of a single scaffold run."""

    def __init__(self, settings: RuntimeSettings, run_id: str | None = None) -> None:
        self.run_id = run_id or uuid4().hex[:12]
        self._path = log_path(settings)
        self._enabled = telemetry_enabled()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def record(
        self,
        event: str,
        payload: dict[str, Any] | None = None,
        *,
        level: str = "info",
        status: str | None = None,
        duration_ms: float | None = None,
    ) -> None:
        if not self._enabled:
            return
        record: dict[str, Any] = {
            "ts": time.time(),
            "runId": self.run_id,
            "event": event,
            "level": level,
            "payload": payload or {},
        }
        if status:
            record["status"] = status
        if duration_ms is not None:
            record["durationMs"] = round(duration_ms, 3)
        # malformed records are programming errors and still raise
        _validator().validate(record)
        line = json.dumps(record, ensure_ascii=False, default=str)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            self._enabled = False
            print(f"scaffold: telemetry disabled for this run ({exc})", file=sys.stderr)


def read_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    path = log_path(settings)
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(record, dict):
                yield record


def group_runs(events: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group events by run id, keeping the order runs first appear in."""
    runs: dict[str, list[dict[str, Any]]] = {}
    for record in events:
        runs.setdefault(str(record.get("runId", "unknown")), []).append(record)
    return runs


def run_outcome(events: Iterable[dict[str, Any]]) -> str:
    # the closing "init" event carries the outcome; runs without one were cut short
    for record in events:
        if record.get("event") == RUN_EVENT:
            return str(record.get("status", "unknown"))
    return "incomplete"


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    runs = group_runs(events)
    outcomes: dict[str, int] = {}
    phases: dict[str, int] = {}
    failures: list[dict[str, Any]] = []
    for run_id, records in runs.items():
        outcome = run_outcome(records)
        outcomes[outcome] = outcomes.get(outcome, 0) + 1
        for record in records:
            name = str(record.get("event"))
            phases[name] = phases.get(name, 0) + 1
            if record.get("event") == RUN_EVENT and record.get("status") == "failed":
                failures.append({"runId": run_id, "error": record.get("payload", {}).get("error")})
    return {
        "runs": len(runs),
        "events": sum(phases.values()),
        "outcomes": outcomes,
        "phases": phases,
        "failures": failures,
    }


def tail(settings: RuntimeSettings, limit: int) -> list[dict[str, Any]]:
    return list(deque(read_events(settings), maxlen=max(limit, 0)))


def clear(settings: RuntimeSettings) -> bool:
    path = log_path(settings)
    if not path.exists():
        return False
    path.unlink()
    return True


__all__ = [
    "LOG_FILENAME",
    "RunLog",
    "clear",
    "group_runs",
    "log_path",
    "read_events",
    "run_outcome",
    "summarize",
    "tail",
    "telemetry_enabled",
]
