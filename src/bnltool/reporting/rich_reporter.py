from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Reporter, TaskRecord, TaskStatus, format_stats, get_verbosity

_STATUS_STYLE = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[red]✖[/]",
    TaskStatus.SKIPPED: "[yellow]→[/]",
}

# BNLTOOL_PROGRESS_TRANSIENT=1 clears finished bars and prints completion
# lines once all tasks are done.
_TRANSIENT_ENV = "BNLTOOL_PROGRESS_TRANSIENT"


class RichReporter(Reporter):
    """Progress bars for counted tasks and styled lines on stderr."""

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = os.getenv(_TRANSIENT_ENV, "0").lower() in (
            "1",
            "true",
            "yes",
        )
        self.progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._completions: List[str] = []

    def _progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.fields[name]}"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TextColumn("{task.fields[item]}", style="dim"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def _task_started(self, rec: TaskRecord) -> None:
        # Uncounted tasks render as a rule instead of a bar.
        if rec.total is None:
            self.console.rule(rec.name)
            return
        self._bars[rec.task_id] = self._progress().add_task(
            "", total=rec.total, name=rec.name, item=""
        )

    def _task_advanced(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        bar = self._bars.get(rec.task_id)
        if bar is not None and self.progress is not None:
            self.progress.update(
                bar,
                completed=rec.completed,
                item=str(meta.get("current_item") or ""),
            )

    def _task_ended(self, rec: TaskRecord) -> None:
        bar = self._bars.pop(rec.task_id, None)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, completed=rec.total, item="")
        counts = f" {rec.progress_text}" if rec.total is not None else ""
        line = (
            f"{_STATUS_STYLE.get(rec.status, '')} {rec.name}{counts} "
            f"({rec.duration:.2f}s){format_stats(rec.meta)}"
        )
        if self._transient:
            self._completions.append(line)
        else:
            self.console.print(line)
        if not self._bars:
            self.flush()

    def summary(self, kind: str, **fields: Any) -> None:
        pairs = " ".join(f"[bold]{k}[/]={v}" for k, v in fields.items())
        self.console.print(f"[green]{kind.capitalize()} summary[/]: {pairs}")

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {message}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self.console.print(f"[cyan]VERB{level}[/]: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {message}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {message}")

    def section(self, title: str) -> None:
        self.console.rule(title)

    def flush(self) -> None:
        if self.progress is None:
            return
        try:
            self.progress.stop()
        finally:
            self.progress = None
            if self._completions:
                self.console.print("\n".join(self._completions))
                self._completions.clear()
