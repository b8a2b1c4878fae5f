"""Local telemetry events for scaffolding runs (opt-out).

Events are appended to ``<log_dir>/telemetry.jsonl``. Writing is best effort:
a log that cannot be written never interrupts a scaffolding run.
"""

from __future__ import annotations

import json
import os
import time
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator

from jsonschema import Draft202012Validator

from scaffolder.settings import RuntimeSettings

TELEMETRY_FILENAME = "telemetry.jsonl"
RUN_OUTCOMES = {"workflow.done": "done", "workflow.failed": "failed", "workflow.aborted": "aborted"}

_DISABLE_VALUES = {"0", "false", "no", "off"}


def telemetry_enabled() -> bool:
    value = os.getenv("SCAFFOLDER_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


def log_path(settings: RuntimeSettings) -> Path:
    return settings.log_dir / TELEMETRY_FILENAME


def record_event(
    settings: RuntimeSettings,
    event: str,
    payload: dict[str, Any] | None = None,
    *,
    level: str = "info",
    status: str | None = None,
    duration_ms: float | None = None,
) -> bool:
    """Append one event; returns False when telemetry is off or the log is unwritable.

    Malformed records raise ``ValueError``.
    """

    if not telemetry_enabled():
        return False
    record: dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "payload": payload or {},
        "level": level,
        "cliVersion": settings.cli_version,
    }
    if status:
        record["status"] = status
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    error = next(iter(_validator().iter_errors(record)), None)
    if error is not None:
        field = ".".join(str(part) for part in error.absolute_path) or "record"
        raise ValueError(f"Invalid telemetry {field}: {error.message}")

    path = log_path(settings)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError:
        return False
    return True


def iter_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    """Yield logged events oldest first, skipping lines that are not JSON objects."""
    path = log_path(settings)
    if not path.is_file():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(event, dict):
            yield event


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Aggregate run outcomes, failing stages and the templates that were scaffolded."""
    runs = {outcome: 0 for outcome in RUN_OUTCOMES.values()}
    failed_stages: dict[str, int] = {}
    templates: dict[str, int] = {}
    acquisitions: dict[str, list[float]] = {}
    total = 0
    for event in events:
        total += 1
        name = event.get("event", "")
        payload = event.get("payload") if isinstance(event.get("payload"), dict) else {}
        outcome = RUN_OUTCOMES.get(name)
        if outcome is not None:
            runs[outcome] += 1
        if name == "workflow.failed":
            stage = str(payload.get("stage", "unknown"))
            failed_stages[stage] = failed_stages.get(stage, 0) + 1
        elif name == "workflow.done" and payload.get("template"):
            template = str(payload["template"])
            templates[template] = templates.get(template, 0) + 1
        elif name.startswith("acquire.") and isinstance(event.get("durationMs"), (int, float)):
            acquisitions.setdefault(name.split(".", 1)[1], []).append(float(event["durationMs"]))

    return {
        "total": total,
        "runs": runs,
        "failed_stages": failed_stages,
        "templates": templates,
        "acquire_ms": {
            action: round(sum(durations) / len(durations), 1) for action, durations in acquisitions.items()
        },
    }


def clear(settings: RuntimeSettings) -> bool:
    path = log_path(settings)
    if not path.exists():
        return False
    path.unlink()
    return True


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema_resource = resources.files("scaffolder.resources") / "telemetry.schema.json"
    with schema_resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


__all__ = ["clear", "iter_events", "log_path", "record_event", "summarize", "telemetry_enabled"]
