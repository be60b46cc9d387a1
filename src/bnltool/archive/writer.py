"""Emit an archive strictly following an :class:`ArchivePlan`.

Every section is built from the asset list and checked against the planned
size; any divergence is an internal error since the plan is the single source
of truth for offsets.
"""

from __future__ import annotations

from typing import Sequence
import zlib

from ..logging import get_logger
from .constants import DEFAULT_COMPRESSION_LEVEL, HEADER_SIZE
from .errors import internal_error
from .planner import ArchivePlan
from .raw_asset import RawAsset

__all__ = ["build_payload", "write_archive"]


def _check(plan: ArchivePlan, name: str, emitted: int) -> None:
    planned = plan.section(name).size
    if emitted != planned:
        raise internal_error(
            f"Section size mismatch for {name}: plan={planned} written={emitted}",
            {"section": name, "planned": planned, "written": emitted},
        )


def build_payload(plan: ArchivePlan, assets: Sequence[RawAsset]) -> bytes:
    """Return the uncompressed payload (everything after the header)."""
    if len(assets) != len(plan.assets):
        raise internal_error(
            f"Asset count mismatch plan={len(plan.assets)} actual={len(assets)}"
        )
    asset_desc = bytearray()
    buffer_views = bytearray()
    buffer = bytearray()
    descriptors = bytearray()
    for raw, ap in zip(assets, plan.assets):
        desc = ap.description
        if len(asset_desc) != ap.record_offset:
            raise internal_error(
                f"Record offset mismatch for {ap.name}: "
                f"plan={ap.record_offset} actual={len(asset_desc)}"
            )
        asset_desc += desc.to_bytes(plan.layout)

        if ap.dataview_list is not None:
            if len(buffer_views) != desc.dataview_list_ptr:
                raise internal_error(
                    f"Data view list pointer mismatch for {ap.name}: "
                    f"plan={desc.dataview_list_ptr} actual={len(buffer_views)}"
                )
            for view, chunk in zip(
                ap.dataview_list.views, raw.resource_chunks or ()
            ):
                if view.offset != len(buffer) or view.size != len(chunk):
                    raise internal_error(
                        f"Data view mismatch for {ap.name}: plan="
                        f"{view.offset}+{view.size} actual={len(buffer)}+{len(chunk)}"
                    )
                buffer += chunk
            buffer_views += ap.dataview_list.to_bytes()

        if len(descriptors) != desc.descriptor_ptr:
            raise internal_error(
                f"Descriptor pointer mismatch for {ap.name}: "
                f"plan={desc.descriptor_ptr} actual={len(descriptors)}"
            )
        descriptors += raw.descriptor_bytes

    _check(plan, "asset_desc", len(asset_desc))
    _check(plan, "buffer_views", len(buffer_views))
    _check(plan, "buffer", len(buffer))
    _check(plan, "descriptor", len(descriptors))
    return bytes(asset_desc + buffer_views + buffer + descriptors)


def write_archive(
    plan: ArchivePlan,
    assets: Sequence[RawAsset],
    *,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> bytes:
    """Serialize ``assets`` as laid out by ``plan``: header + zlib(payload)."""
    logger = get_logger()
    payload = build_payload(plan, assets)
    if HEADER_SIZE + len(payload) != plan.decompressed_size:
        raise internal_error(
            "Decompressed size mismatch vs plan: "
            f"plan={plan.decompressed_size} actual={HEADER_SIZE + len(payload)}"
        )
    header = plan.header.to_bytes()
    if len(header) != HEADER_SIZE:  # pragma: no cover
        raise internal_error(f"Header packed to {len(header)} bytes")
    compressed = zlib.compress(payload, compression_level)
    logger.info(
        "Encoded %d assets: payload=%d compressed=%d level=%d",
        len(assets),
        len(payload),
        len(compressed),
        compression_level,
    )
    return header + compressed
