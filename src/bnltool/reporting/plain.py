from __future__ import annotations

import sys
from typing import Any, Dict, Tuple

from .base import Reporter, TaskRecord, TaskStatus, format_stats, get_verbosity

ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}

# level -> (ANSI colour, tag)
_LEVELS: Dict[str, Tuple[str, str]] = {
    "info": ("32", "INFO"),
    "warning": ("33", "WARN"),
    "error": ("31", "ERROR"),
}


class PlainReporter(Reporter):
    """Line oriented output on stderr, coloured when attached to a terminal."""

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _tag(self, colour: str, text: str) -> str:
        return f"\x1b[{colour}m{text}\x1b[0m" if self.use_color else text

    def _line(self, level: str, message: str) -> None:
        colour, tag = _LEVELS[level]
        self.stream.write(f"{self._tag(colour, tag)}: {message}\n")

    def _task_advanced(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        if get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"item#{rec.completed}"
        self.stream.write(f"   · {rec.name}: {item} ({rec.progress_text})\n")

    def _task_ended(self, rec: TaskRecord) -> None:
        icon = ICONS.get(rec.status, "?")
        counts = f" {rec.progress_text}" if rec.total is not None else ""
        self.stream.write(
            f" {icon} {rec.name}{counts} ({rec.duration:.2f}s)"
            f"{format_stats(rec.meta)}\n"
        )

    def status(self, message: str, **fields: Any) -> None:
        self._line("info", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self.stream.write(f"{self._tag('36', f'VERB{level}')}: {message}\n")

    def error(self, message: str, **fields: Any) -> None:
        self._line("error", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._line("warning", message)

    def section(self, title: str) -> None:
        self.stream.write(f"\n[{title}]\n")
