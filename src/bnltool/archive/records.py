"""Fixed-size binary records: archive header, asset metadata, asset descriptions.

All functions are side-effect free; every multi-byte field is little-endian.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import struct
from typing import Dict

from .constants import (
    DEFAULT_CHUNK_COUNT,
    DEFAULT_NAME_SIZE,
    HEADER_RESERVED_SIZE,
    HEADER_SIZE,
    METADATA_FIELDS_SIZE,
    RECORD_FIELDS_SIZE,
    SECTION_ORDER,
)
from .dataview import DataView
from .errors import E_RECORD, E_TRUNCATED, FormatError
from .types import type_label

__all__ = [
    "RecordLayout",
    "BnlHeader",
    "AssetMetadata",
    "AssetDescription",
    "pack_name",
]

_HEADER = struct.Struct("<HB5s8I")
_METADATA_FIELDS = struct.Struct("<III")
_RECORD_FIELDS = struct.Struct("<8I")


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """Widths of the fixed-size asset description record."""

    name_size: int = DEFAULT_NAME_SIZE

    def __post_init__(self) -> None:
        if self.name_size <= 0:
            raise ValueError(f"name_size must be positive (got {self.name_size})")

    @property
    def record_size(self) -> int:
        return self.name_size + RECORD_FIELDS_SIZE


def pack_name(name: str | bytes, size: int) -> bytes:
    """NUL-pad ``name`` to ``size`` bytes; names that do not fit are rejected."""
    raw = name.encode("utf-8") if isinstance(name, str) else bytes(name)
    raw = raw.split(b"\x00", 1)[0]
    if len(raw) > size:
        raise FormatError(
            code=E_RECORD,
            message=f"Asset name {raw!r} does not fit in {size} bytes",
            context={"name_size": size, "length": len(raw)},
        )
    return raw + b"\x00" * (size - len(raw))


@dataclass(slots=True)
class BnlHeader:
    file_count: int = 0
    flags: int = 0
    reserved: bytes = b"\x00" * HEADER_RESERVED_SIZE
    sections: Dict[str, DataView] = field(
        default_factory=lambda: {name: DataView(0, 0) for name in SECTION_ORDER}
    )

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> "BnlHeader":
        if len(data) < HEADER_SIZE:
            raise FormatError(
                code=E_TRUNCATED,
                message=f"Header needs {HEADER_SIZE} bytes, got {len(data)}",
            )
        file_count, flags, reserved, *locs = _HEADER.unpack_from(data, 0)
        sections = {
            name: DataView(locs[2 * i], locs[2 * i + 1])
            for i, name in enumerate(SECTION_ORDER)
        }
        return cls(
            file_count=file_count,
            flags=flags,
            reserved=reserved,
            sections=sections,
        )

    def to_bytes(self) -> bytes:
        locs = []
        for name in SECTION_ORDER:
            view = self.sections[name]
            locs.extend((view.offset, view.size))
        return _HEADER.pack(self.file_count, self.flags, self.reserved, *locs)

    def to_dict(self) -> dict:
        return {
            "file_count": self.file_count,
            "flags": self.flags,
            "reserved": self.reserved.hex(),
            "sections": {
                name: {"offset": v.offset, "size": v.size}
                for name, v in self.sections.items()
            },
        }


@dataclass(slots=True)
class AssetMetadata:
    raw_name: bytes
    asset_type: int
    unk_1: int = 0
    unk_2: int = 0

    @classmethod
    def create(
        cls,
        name: str,
        asset_type: int,
        unk_1: int = 0,
        unk_2: int = 0,
        *,
        name_size: int = DEFAULT_NAME_SIZE,
    ) -> "AssetMetadata":
        return cls(pack_name(name, name_size), int(asset_type), unk_1, unk_2)

    @property
    def name(self) -> str:
        return self.raw_name.split(b"\x00", 1)[0].decode("utf-8", "replace")

    @property
    def type_label(self) -> str:
        return type_label(self.asset_type)

    def to_bytes(self) -> bytes:
        return bytes(self.raw_name) + self._pack_fields()

    def _pack_fields(self) -> bytes:
        try:
            return _METADATA_FIELDS.pack(self.asset_type, self.unk_1, self.unk_2)
        except struct.error as exc:
            raise FormatError(
                code=E_RECORD,
                message=f"Metadata field out of range for {self.name!r}: {exc}",
                context={"name": self.name},
            ) from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "AssetMetadata":
        if len(data) <= METADATA_FIELDS_SIZE:
            raise FormatError(
                code=E_RECORD,
                message=f"Metadata needs more than {METADATA_FIELDS_SIZE} bytes",
                context={"size": len(data)},
            )
        split = len(data) - METADATA_FIELDS_SIZE
        asset_type, unk_1, unk_2 = _METADATA_FIELDS.unpack_from(data, split)
        return cls(bytes(data[:split]), asset_type, unk_1, unk_2)


@dataclass(slots=True)
class AssetDescription:
    metadata: AssetMetadata
    chunk_count: int = DEFAULT_CHUNK_COUNT
    descriptor_ptr: int = 0
    descriptor_size: int = 0
    dataview_list_ptr: int = 0
    resource_size: int = 0

    @classmethod
    def from_metadata(cls, metadata: AssetMetadata) -> "AssetDescription":
        return cls(metadata=replace(metadata))

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def descriptor_range(self) -> range:
        return range(
            self.descriptor_ptr, self.descriptor_ptr + self.descriptor_size
        )

    @classmethod
    def from_bytes(
        cls, data: bytes | memoryview, pos: int, layout: RecordLayout
    ) -> "AssetDescription":
        if pos < 0 or len(data) - pos < layout.record_size:
            raise FormatError(
                code=E_RECORD,
                message=(
                    f"Asset description at {pos} needs {layout.record_size} "
                    f"bytes, {max(0, len(data) - pos)} available"
                ),
            )
        raw_name = bytes(data[pos : pos + layout.name_size])
        (
            asset_type,
            unk_1,
            unk_2,
            chunk_count,
            descriptor_ptr,
            descriptor_size,
            dataview_list_ptr,
            resource_size,
        ) = _RECORD_FIELDS.unpack_from(data, pos + layout.name_size)
        return cls(
            metadata=AssetMetadata(raw_name, asset_type, unk_1, unk_2),
            chunk_count=chunk_count,
            descriptor_ptr=descriptor_ptr,
            descriptor_size=descriptor_size,
            dataview_list_ptr=dataview_list_ptr,
            resource_size=resource_size,
        )

    def to_bytes(self, layout: RecordLayout) -> bytes:
        m = self.metadata
        try:
            fields = _RECORD_FIELDS.pack(
                m.asset_type,
                m.unk_1,
                m.unk_2,
                self.chunk_count,
                self.descriptor_ptr,
                self.descriptor_size,
                self.dataview_list_ptr,
                self.resource_size,
            )
        except struct.error as exc:
            raise FormatError(
                code=E_RECORD,
                message=f"Record field out of range for {m.name!r}: {exc}",
                context={"name": m.name},
            ) from exc
        out = pack_name(m.raw_name, layout.name_size) + fields
        if len(out) != layout.record_size:  # pragma: no cover
            raise FormatError(
                code=E_RECORD, message="Asset description size mismatch"
            )
        return out

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "asset_type": self.metadata.asset_type,
            "type_label": self.metadata.type_label,
            "unk_1": self.metadata.unk_1,
            "unk_2": self.metadata.unk_2,
            "chunk_count": self.chunk_count,
            "descriptor_ptr": self.descriptor_ptr,
            "descriptor_size": self.descriptor_size,
            "dataview_list_ptr": self.dataview_list_ptr,
            "resource_size": self.resource_size,
        }
