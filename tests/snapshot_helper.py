from __future__ import annotations

"""Snapshot helper utilities for bnltool tests.

Supports auto-updating snapshots when environment variable
BNLTOOL_UPDATE_SNAPSHOTS is set to a truthy value ("1", "true", "yes").

Usage:
    from snapshot_helper import assert_matches_snapshot
    assert_matches_snapshot(actual_dict, 'plan_sample.json')

Snapshots live in tests/_snapshots/.
"""
import difflib
import json
import os
from pathlib import Path
from typing import Any, Mapping

_SNAPSHOT_DIR = Path(__file__).parent / "_snapshots"


def _is_truthy(val: str | None) -> bool:
    if val is None:
        return False
    return val.lower() in {"1", "true", "yes", "on", "update"}


def _dump(obj) -> str:
    return json.dumps(obj, indent=2, sort_keys=True)


def assert_matches_snapshot(actual: Mapping[str, Any], snapshot_name: str) -> None:
    """Compare mapping against stored JSON snapshot, optionally updating it.

    Tuples compare equal to the lists they are stored as.
    """
    _SNAPSHOT_DIR.mkdir(parents=True, exist_ok=True)
    snapshot_path = _SNAPSHOT_DIR / snapshot_name
    actual = json.loads(_dump(actual))
    if _is_truthy(os.getenv("BNLTOOL_UPDATE_SNAPSHOTS")) or not snapshot_path.exists():
        snapshot_path.write_text(_dump(actual), encoding="utf-8")
        return

    expected = json.loads(snapshot_path.read_text(encoding="utf-8"))
    if actual != expected:
        diff = "\n".join(
            difflib.unified_diff(
                _dump(expected).splitlines(),
                _dump(actual).splitlines(),
                fromfile="expected",
                tofile="actual",
                lineterm="",
            )
        )
        raise AssertionError(f"Snapshot mismatch for {snapshot_name}\n{diff}")
