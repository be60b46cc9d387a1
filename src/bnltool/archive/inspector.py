"""Structural inspection of BNL archives.

Public functions:
- inspect_bnl(data) -> dict
- validate_bnl(info) -> list[str]

Inspection reads as much as the bytes allow and reports structure as plain
dicts; it only raises when the header itself is unreadable.
"""

from __future__ import annotations

import struct
from typing import Any, Dict, List, Optional

from .constants import DATAVIEW_LIST_HEADER_SIZE, DATAVIEW_SIZE, HEADER_SIZE
from .container import decompress_payload
from .errors import DecompressionError
from .records import AssetDescription, BnlHeader, RecordLayout

__all__ = ["inspect_bnl", "validate_bnl"]

_LIST_HEADER = struct.Struct("<II")


def _dataview_list_info(
    buffer_views: bytes, ptr: int
) -> Optional[Dict[str, Any]]:
    if ptr + DATAVIEW_LIST_HEADER_SIZE > len(buffer_views):
        return None
    total, count = _LIST_HEADER.unpack_from(buffer_views, ptr)
    end = ptr + DATAVIEW_LIST_HEADER_SIZE + count * DATAVIEW_SIZE
    views = []
    if end <= len(buffer_views):
        views = [
            list(struct.unpack_from("<II", buffer_views, p))
            for p in range(ptr + DATAVIEW_LIST_HEADER_SIZE, end, DATAVIEW_SIZE)
        ]
    return {"total_byte_size": total, "count": count, "end": end, "views": views}


def inspect_bnl(
    data: bytes, layout: RecordLayout | None = None
) -> Dict[str, Any]:
    layout = layout or RecordLayout()
    header = BnlHeader.from_bytes(data)
    result: Dict[str, Any] = {
        "file_size": len(data),
        "compressed_size": len(data) - HEADER_SIZE,
        "name_size": layout.name_size,
        "record_size": layout.record_size,
        "header": header.to_dict(),
        "errors": [],
    }
    try:
        payload = decompress_payload(data)
    except DecompressionError as exc:
        result["errors"].append(exc.message)
        result["decompressed_size"] = None
        return result
    full = bytes(data[:HEADER_SIZE]) + payload
    result["decompressed_size"] = len(full)

    def section(name: str) -> bytes:
        loc = header.sections[name]
        return full[loc.offset : loc.end]

    table = section("asset_desc")
    buffer_views = section("buffer_views")
    records = []
    for i in range(min(header.file_count, len(table) // layout.record_size)):
        desc = AssetDescription.from_bytes(table, i * layout.record_size, layout)
        entry = {"index": i, **desc.to_dict()}
        if desc.resource_size:
            entry["dataview_list"] = _dataview_list_info(
                buffer_views, desc.dataview_list_ptr
            )
        records.append(entry)
    result["records"] = records
    return result


def validate_bnl(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = list(info.get("errors", []))
    size = info.get("decompressed_size")
    if size is None:
        return issues
    sections = info["header"]["sections"]
    for name, loc in sections.items():
        if loc["offset"] + loc["size"] > size:
            issues.append(
                f"Section {name} ({loc['offset']}+{loc['size']}) exceeds "
                f"decompressed size {size}"
            )
    file_count = info["header"]["file_count"]
    table_size = sections["asset_desc"]["size"]
    if file_count * info["record_size"] != table_size:
        issues.append(
            f"file_count={file_count} does not match asset description "
            f"section size {table_size} (record size {info['record_size']})"
        )
    if len(info.get("records", [])) < file_count:
        issues.append(
            f"Only {len(info.get('records', []))} of {file_count} records readable"
        )
    desc_size = sections["descriptor"]["size"]
    views_size = sections["buffer_views"]["size"]
    buffer_size = sections["buffer"]["size"]
    for rec in info.get("records", []):
        name = rec["name"]
        if rec["descriptor_ptr"] + rec["descriptor_size"] > desc_size:
            issues.append(f"Descriptor of {name} exceeds descriptor section")
        dvl = rec.get("dataview_list")
        if not rec["resource_size"]:
            continue
        if dvl is None or dvl["end"] > views_size:
            issues.append(f"Data view list of {name} exceeds buffer views section")
            continue
        if dvl["end"] - rec["dataview_list_ptr"] != rec["resource_size"]:
            issues.append(
                f"resource_size of {name} is {rec['resource_size']}, "
                f"data view list is {dvl['end'] - rec['dataview_list_ptr']} bytes"
            )
        for offset, view_size in dvl["views"]:
            if offset + view_size > buffer_size:
                issues.append(
                    f"Data view {offset}+{view_size} of {name} exceeds buffer section"
                )
    return issues
