"""Pluggable progress and status output (``-r plain|rich|json|silent``)."""

from typing import Callable, Dict

from .base import (
    Reporter,
    TaskStatus,
    format_summary,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

_FACTORIES: Dict[str, Callable[[], Reporter]] = {
    "plain": PlainReporter,
    "rich": RichReporter,
    "json": JsonLinesReporter,
    "silent": SilentReporter,
}

REPORTER_CHOICES = tuple(_FACTORIES)


def create_reporter(name: str) -> Reporter:
    try:
        factory = _FACTORIES[name]
    except KeyError:
        raise ValueError(f"Unknown reporter: {name!r}") from None
    return factory()


__all__ = [
    "Reporter",
    "TaskStatus",
    "format_summary",
    "get_reporter",
    "set_reporter",
    "task",
    "set_verbosity",
    "get_verbosity",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
    "REPORTER_CHOICES",
    "create_reporter",
]
