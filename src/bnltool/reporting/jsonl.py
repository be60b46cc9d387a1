"""JSON lines backend (``-r json``): one event object per line on stdout.

Event shapes::

    {"event": "task_start", "id", "name", "total", ...meta}
    {"event": "task_progress", "id", "completed", ...meta}
    {"event": "task_end", "id", "status", "completed", "total",
     "duration_seconds", ...meta}
    {"event": "summary", "summary_type", ...fields}
    {"event": "status", "message", "level", ...fields}
    {"event": "section", "title"}
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict

from .base import Reporter, TaskRecord, format_summary, get_verbosity


class JsonLinesReporter(Reporter):
    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, obj: Dict[str, Any]) -> None:
        self.stream.write(json.dumps(obj, sort_keys=True, default=str) + "\n")

    def _task_started(self, rec: TaskRecord) -> None:
        self._emit(
            {
                "event": "task_start",
                "id": rec.task_id,
                "name": rec.name,
                "total": rec.total,
                **rec.meta,
            }
        )

    def _task_advanced(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        self._emit(
            {
                "event": "task_progress",
                "id": rec.task_id,
                "completed": rec.completed,
                **meta,
            }
        )

    def _task_ended(self, rec: TaskRecord) -> None:
        self._emit(
            {
                "event": "task_end",
                "id": rec.task_id,
                "status": rec.status.name.lower(),
                "completed": rec.completed,
                "total": rec.total,
                "duration_seconds": rec.duration,
                **rec.meta,
            }
        )

    def summary(self, kind: str, **fields: Any) -> None:
        # Field values keep their JSON types; the rendered line rides along
        # for consumers that only show text.
        self._emit(
            {
                "event": "summary",
                "summary_type": kind,
                "raw": format_summary(kind, fields),
                **fields,
            }
        )

    def _status(self, message: str, level: str, **fields: Any) -> None:
        self._emit(
            {"event": "status", "message": message, "level": level, **fields}
        )

    def status(self, message: str, **fields: Any) -> None:
        self._status(message, "info", **fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._status(message, f"verbose{level}", vlevel=level, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._status(message, "error", **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._status(message, "warning", **fields)

    def section(self, title: str) -> None:
        self._emit({"event": "section", "title": title})
