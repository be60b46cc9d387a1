"""Data views: (offset, size) ranges into the archive's shared buffer section.

A DataViewList is stored in the buffer-views section as::

    total_byte_size u32 | count u32 | count x (offset u32, size u32)

``total_byte_size`` is the serialized size of the list itself
(``8 + 8 * count``), which is what asset description records carry as
``resource_size``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import struct
from typing import Iterable, List, Tuple

from .constants import DATAVIEW_LIST_HEADER_SIZE, DATAVIEW_SIZE, MAX_U32
from .errors import (
    E_LIMIT,
    E_RECORD,
    BnlError,
    FormatError,
    offset_out_of_bounds,
    size_out_of_bounds,
)

__all__ = ["DataView", "DataViewList"]

_VIEW = struct.Struct("<II")
_LIST_HEADER = struct.Struct("<II")


@dataclass(frozen=True, slots=True)
class DataView:
    offset: int
    size: int

    @classmethod
    def read(cls, buf: bytes | memoryview, pos: int = 0) -> "DataView":
        if pos < 0 or len(buf) - pos < DATAVIEW_SIZE:
            raise FormatError(
                code=E_RECORD,
                message=f"Short read for data view at {pos} (buffer {len(buf)})",
                context={"pos": pos, "available": max(0, len(buf) - pos)},
            )
        offset, size = _VIEW.unpack_from(buf, pos)
        return cls(offset, size)

    def to_bytes(self) -> bytes:
        return _VIEW.pack(self.offset, self.size)

    def as_range(self) -> range:
        return range(self.offset, self.offset + self.size)

    @property
    def end(self) -> int:
        return self.offset + self.size

    def overlaps(self, other: "DataView") -> bool:
        """True when both views are non-empty and share at least one byte."""
        if not self.size or not other.size:
            return False
        return self.offset < other.end and other.offset < self.end


@dataclass(slots=True)
class DataViewList:
    views: List[DataView] = field(default_factory=list)
    total_byte_size: int = 0

    def __post_init__(self) -> None:
        if not self.total_byte_size:
            self.total_byte_size = self.bytes_required()

    @classmethod
    def from_bytes(cls, buf: bytes | memoryview) -> "DataViewList":
        if len(buf) < DATAVIEW_LIST_HEADER_SIZE:
            raise FormatError(
                code=E_RECORD,
                message=(
                    "Data view list header needs "
                    f"{DATAVIEW_LIST_HEADER_SIZE} bytes, got {len(buf)}"
                ),
            )
        total_byte_size, count = _LIST_HEADER.unpack_from(buf, 0)
        required = DATAVIEW_LIST_HEADER_SIZE + count * DATAVIEW_SIZE
        if len(buf) < required:
            raise FormatError(
                code=E_RECORD,
                message=(
                    f"Data view list declares {count} views ({required} bytes) "
                    f"but only {len(buf)} bytes are available"
                ),
                context={"count": count, "available": len(buf)},
            )
        views = [
            DataView.read(buf, DATAVIEW_LIST_HEADER_SIZE + i * DATAVIEW_SIZE)
            for i in range(count)
        ]
        return cls(views=views, total_byte_size=total_byte_size)

    @classmethod
    def from_chunk_sizes(
        cls, sizes: Iterable[int], start: int = 0
    ) -> "DataViewList":
        """Views for chunks laid out back to back from ``start``."""
        views: List[DataView] = []
        offset = start
        for size in sizes:
            if offset + size > MAX_U32:
                raise BnlError(
                    code=E_LIMIT,
                    message="Buffer section exceeds 4GiB",
                    context={"offset": offset, "size": size},
                )
            views.append(DataView(offset, size))
            offset += size
        return cls(views=views)

    def __len__(self) -> int:
        return len(self.views)

    def bytes_required(self) -> int:
        return DATAVIEW_LIST_HEADER_SIZE + DATAVIEW_SIZE * len(self.views)

    def to_bytes(self) -> bytes:
        out = bytearray(
            _LIST_HEADER.pack(self.bytes_required(), len(self.views))
        )
        for view in self.views:
            out += view.to_bytes()
        return bytes(out)

    def pairs(self) -> List[Tuple[int, int]]:
        return [(v.offset, v.size) for v in self.views]

    def slices(self, pool: bytes | memoryview) -> List[memoryview]:
        """Resolve every view against ``pool`` without copying.

        Raises OffsetOutOfBoundsError when a view starts beyond the pool and
        SizeOutOfBoundsError when it would run past the end of it.
        """
        mv = pool if isinstance(pool, memoryview) else memoryview(pool)
        limit = len(mv)
        out: List[memoryview] = []
        for view in self.views:
            if view.offset > limit:
                raise offset_out_of_bounds(view.offset, limit, "buffer pool")
            if limit - view.offset < view.size:
                raise size_out_of_bounds(
                    view.offset, view.size, limit, "buffer pool"
                )
            out.append(mv[view.offset : view.offset + view.size])
        return out
