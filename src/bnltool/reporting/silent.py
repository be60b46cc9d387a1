from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .base import Reporter


class SilentReporter(Reporter):
    """Prints nothing (``-r silent``).

    Warnings, errors and summaries are still kept in memory so embedding
    code can look at them after an operation.
    """

    def __init__(self) -> None:
        super().__init__()
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.summaries: List[Tuple[str, Dict[str, Any]]] = []

    def summary(self, kind: str, **fields: Any) -> None:
        self.summaries.append((kind, fields))

    def status(self, message: str, **fields: Any) -> None:
        pass

    def error(self, message: str, **fields: Any) -> None:
        self.errors.append(message)

    def warning(self, message: str, **fields: Any) -> None:
        self.warnings.append(message)

    def section(self, title: str) -> None:
        pass
