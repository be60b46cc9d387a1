"""Layout planning: compute every section offset and record pointer up front.

The planner never touches payload bytes beyond measuring them. The resulting
:class:`ArchivePlan` is immutable input to :func:`bnltool.archive.writer.write_archive`,
which must reproduce it exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_CHUNK_COUNT,
    HEADER_RESERVED_SIZE,
    HEADER_SIZE,
    MAX_FILE_COUNT,
    MAX_U32,
    SECTION_ORDER,
)
from .dataview import DataView, DataViewList
from .errors import E_LIMIT, BnlError
from .raw_asset import RawAsset
from .records import AssetDescription, BnlHeader, RecordLayout

__all__ = [
    "SectionPlan",
    "AssetPlan",
    "ArchivePlan",
    "plan_archive",
    "to_plan_dict",
]


@dataclass(frozen=True, slots=True)
class SectionPlan:
    name: str
    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True, slots=True)
class AssetPlan:
    index: int
    description: AssetDescription
    dataview_list: Optional[DataViewList]
    record_offset: int

    @property
    def name(self) -> str:
        return self.description.name


@dataclass(frozen=True, slots=True)
class ArchivePlan:
    layout: RecordLayout
    header: BnlHeader
    sections: Tuple[SectionPlan, ...]
    assets: Tuple[AssetPlan, ...]

    @property
    def decompressed_size(self) -> int:
        """Size of ``header || payload`` before compression."""
        return self.sections[-1].end if self.sections else HEADER_SIZE

    def section(self, name: str) -> SectionPlan:
        for s in self.sections:
            if s.name == name:
                return s
        raise KeyError(name)

    def descriptor_occupants(self, start: int, end: int) -> List[AssetPlan]:
        """Assets whose planned descriptor bytes intersect ``[start, end)``."""
        out = []
        for a in self.assets:
            d = a.description
            a_start = d.descriptor_ptr
            a_end = a_start + d.descriptor_size
            if start < a_end and a_start < end:
                out.append(a)
        return out


def _check_u32(value: int, what: str) -> None:
    if value > MAX_U32:
        raise BnlError(
            code=E_LIMIT,
            message=f"{what} exceeds 4GiB ({value} bytes)",
            context={"value": value},
        )


def plan_archive(
    assets: Sequence[RawAsset],
    layout: RecordLayout | None = None,
    *,
    flags: int = 0,
    reserved: bytes = b"\x00" * HEADER_RESERVED_SIZE,
) -> ArchivePlan:
    """Lay out ``assets`` in section order asset_desc, buffer_views, buffer, descriptor.

    Pointers stored in records are relative to their own section. Any offsets
    the assets carried before are ignored.
    """
    layout = layout or RecordLayout()
    if len(assets) > MAX_FILE_COUNT:
        raise BnlError(
            code=E_LIMIT,
            message=f"Too many assets: {len(assets)}/{MAX_FILE_COUNT}",
            context={"count": len(assets)},
        )

    buffer_views_cursor = 0
    buffer_cursor = 0
    descriptor_cursor = 0
    planned: List[AssetPlan] = []
    for index, raw in enumerate(assets):
        desc = replace(
            AssetDescription.from_metadata(raw.metadata),
            chunk_count=DEFAULT_CHUNK_COUNT,
        )
        dvl: Optional[DataViewList] = None
        if raw.resource_chunks is not None:
            dvl = DataViewList.from_chunk_sizes(
                (len(c) for c in raw.resource_chunks), buffer_cursor
            )
            buffer_cursor += sum(v.size for v in dvl.views)
            desc.dataview_list_ptr = buffer_views_cursor
            desc.resource_size = dvl.bytes_required()
            buffer_views_cursor += dvl.bytes_required()
        desc.descriptor_ptr = descriptor_cursor
        desc.descriptor_size = len(raw.descriptor_bytes)
        descriptor_cursor += desc.descriptor_size
        planned.append(
            AssetPlan(
                index=index,
                description=desc,
                dataview_list=dvl,
                record_offset=index * layout.record_size,
            )
        )

    sizes = {
        "asset_desc": len(assets) * layout.record_size,
        "buffer_views": buffer_views_cursor,
        "buffer": buffer_cursor,
        "descriptor": descriptor_cursor,
    }
    sections: List[SectionPlan] = []
    cursor = HEADER_SIZE
    for name in SECTION_ORDER:
        sections.append(SectionPlan(name, cursor, sizes[name]))
        cursor += sizes[name]
        _check_u32(cursor, f"Archive payload up to {name} section")

    header = BnlHeader(
        file_count=len(assets),
        flags=flags,
        reserved=bytes(reserved),
        sections={s.name: DataView(s.offset, s.size) for s in sections},
    )
    return ArchivePlan(
        layout=layout,
        header=header,
        sections=tuple(sections),
        assets=tuple(planned),
    )


def to_plan_dict(plan: ArchivePlan) -> Dict[str, Any]:
    return {
        "name_size": plan.layout.name_size,
        "record_size": plan.layout.record_size,
        "file_count": plan.header.file_count,
        "decompressed_size": plan.decompressed_size,
        "sections": [
            {"name": s.name, "offset": s.offset, "size": s.size}
            for s in plan.sections
        ],
        "assets": [
            {
                "index": a.index,
                "record_offset": a.record_offset,
                "views": a.dataview_list.pairs() if a.dataview_list else None,
                **a.description.to_dict(),
            }
            for a in plan.assets
        ],
    }
