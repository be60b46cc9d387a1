"""Structural diff between two decoded archives.

The result is a JSON-serializable dict with a stable shape::

    {"added": [...], "removed": [...], "reordered": [...],
     "changed": [{"name", "field", "left", "right"}, ...],
     "summary": {"count": N}}

Payload comparisons report sizes and CRC32s rather than raw bytes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import zlib

from .archive.container import BNLFile
from .archive.raw_asset import RawAsset
from .archive.types import type_label

__all__ = ["diff_bnls", "describe_raw_asset"]


def _crc(data: bytes) -> str:
    return f"{zlib.crc32(data) & 0xFFFFFFFF:08x}"


def describe_raw_asset(raw: RawAsset) -> Dict[str, Any]:
    chunks: Optional[List[bytes]] = raw.resource_chunks
    return {
        "asset_type": type_label(raw.asset_type),
        "descriptor": {
            "size": len(raw.descriptor_bytes),
            "crc32": _crc(raw.descriptor_bytes),
        },
        "resource": None
        if chunks is None
        else {
            "chunks": [len(c) for c in chunks],
            "crc32": _crc(b"".join(chunks)),
        },
        "unk": [raw.metadata.unk_1, raw.metadata.unk_2],
    }


def _first_by_name(bnl: BNLFile) -> Dict[str, RawAsset]:
    out: Dict[str, RawAsset] = {}
    for raw in bnl.assets:
        out.setdefault(raw.name, raw)
    return out


def _reordered(left: List[str], right: List[str]) -> List[str]:
    """Shared names whose position relative to the other shared names moved."""
    common = set(left) & set(right)
    l_order = [n for n in dict.fromkeys(left) if n in common]
    r_order = [n for n in dict.fromkeys(right) if n in common]
    return [a for a, b in zip(l_order, r_order) if a != b]


def diff_bnls(
    left: BNLFile,
    right: BNLFile,
    *,
    names_only: bool = False,
    ignore_order: bool = False,
) -> Dict[str, Any]:
    l_names = left.names()
    r_names = right.names()
    l_set, r_set = set(l_names), set(r_names)
    added = sorted(r_set - l_set)
    removed = sorted(l_set - r_set)
    reordered = [] if ignore_order else _reordered(l_names, r_names)

    changed: List[Dict[str, Any]] = []
    if not names_only:
        l_map = _first_by_name(left)
        r_map = _first_by_name(right)
        for name in [n for n in dict.fromkeys(l_names) if n in r_set]:
            a = describe_raw_asset(l_map[name])
            b = describe_raw_asset(r_map[name])
            for field_name in ("asset_type", "descriptor", "resource", "unk"):
                if a[field_name] != b[field_name]:
                    changed.append(
                        {
                            "name": name,
                            "field": field_name,
                            "left": a[field_name],
                            "right": b[field_name],
                        }
                    )

    count = len(added) + len(removed) + len(reordered) + len(changed)
    return {
        "added": added,
        "removed": removed,
        "reordered": reordered,
        "changed": changed,
        "summary": {
            "count": count,
            "left_assets": len(l_names),
            "right_assets": len(r_names),
        },
    }
