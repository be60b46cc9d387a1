"""In-memory BNL archive.

Decoding resolves every entry into an owned :class:`RawAsset`; mutation
operates on that list and is committed by a full re-encode in
:meth:`BNLFile.to_bytes`, which recomputes every offset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
)
import zlib

from ..config import BnlConfig
from ..logging import get_logger
from .constants import HEADER_SIZE, SECTION_ORDER
from .dataview import DataView, DataViewList
from .errors import (
    E_DECOMPRESS,
    E_GROW_IN_PLACE,
    E_NOT_FOUND,
    E_OVERLAP,
    E_RECORD,
    E_TRUNCATED,
    AssetError,
    AssetNotFoundError,
    DecompressionError,
    FormatError,
    OverlapError,
    TypeMismatchError,
    E_TYPE_MISMATCH,
    UnsupportedMutationError,
)
from .planner import ArchivePlan, plan_archive
from .raw_asset import RawAsset
from .records import AssetDescription, AssetMetadata, BnlHeader, RecordLayout
from .types import type_label
from .writer import write_archive

if TYPE_CHECKING:  # pragma: no cover
    from ..assets.base import Asset, AssetDescriptor, AssetLike

__all__ = ["BNLFile", "ResourceOverlap", "decompress_payload"]

T = TypeVar("T", bound="AssetLike")


@dataclass(frozen=True, slots=True)
class ResourceOverlap:
    first: str
    second: str
    start: int
    end: int

    def to_dict(self) -> dict:
        return {
            "first": self.first,
            "second": self.second,
            "start": self.start,
            "end": self.end,
        }


def decompress_payload(data: bytes | memoryview) -> bytes:
    try:
        return zlib.decompress(bytes(data[HEADER_SIZE:]))
    except zlib.error as exc:
        raise DecompressionError(
            code=E_DECOMPRESS,
            message=f"Unable to inflate archive payload: {exc}",
            context={"compressed_size": max(0, len(data) - HEADER_SIZE)},
        ) from exc


def _section_views(
    header: BnlHeader, full: memoryview
) -> Dict[str, memoryview]:
    out: Dict[str, memoryview] = {}
    for name in SECTION_ORDER:
        loc = header.sections[name]
        if loc.end > len(full):
            raise FormatError(
                code=E_TRUNCATED,
                message=(
                    f"Section {name} ({loc.offset}+{loc.size}) extends past "
                    f"decompressed data of {len(full)} bytes"
                ),
                context={
                    "section": name,
                    "offset": loc.offset,
                    "size": loc.size,
                    "available": len(full),
                },
            )
        out[name] = full[loc.offset : loc.end]
    return out


def _find_overlaps(owned: List[tuple[str, DataView]]) -> List[ResourceOverlap]:
    """Pairwise intersections between different assets' views (sweep line)."""
    spans = sorted(
        ((v.offset, v.end, name) for name, v in owned if v.size),
        key=lambda s: (s[0], s[1]),
    )
    found: List[ResourceOverlap] = []
    active: List[tuple[int, int, str]] = []
    for start, end, name in spans:
        active = [a for a in active if a[1] > start]
        for a_start, a_end, a_name in active:
            if a_name != name:
                found.append(
                    ResourceOverlap(a_name, name, start, min(a_end, end))
                )
        active.append((start, end, name))
    return found


class BNLFile:
    """A decoded archive: header fields plus an ordered list of raw assets."""

    def __init__(
        self,
        assets: Optional[List[RawAsset]] = None,
        *,
        flags: int = 0,
        reserved: bytes = b"\x00" * 5,
        config: Optional[BnlConfig] = None,
    ):
        self.config = config or BnlConfig()
        self.assets: List[RawAsset] = list(assets or [])
        self.flags = flags
        self.reserved = bytes(reserved)
        self.overlaps: List[ResourceOverlap] = []

    # Decode -----------------------------------------------------------------
    @classmethod
    def from_bytes(
        cls, data: bytes | memoryview, config: Optional[BnlConfig] = None
    ) -> "BNLFile":
        """Parse a complete archive.

        Raises FormatError for truncated or inconsistent structure,
        DecompressionError when the payload is not a valid zlib stream and
        AddressingError when a data view leaves the buffer section. Nothing is
        returned on failure.
        """
        config = config or BnlConfig()
        logger = get_logger()
        layout = config.layout
        header = BnlHeader.from_bytes(data)
        full = memoryview(bytes(data[:HEADER_SIZE]) + decompress_payload(data))
        sections = _section_views(header, full)

        table = sections["asset_desc"]
        needed = header.file_count * layout.record_size
        if len(table) < needed:
            raise FormatError(
                code=E_TRUNCATED,
                message=(
                    f"Asset description section holds {len(table)} bytes, "
                    f"{header.file_count} records need {needed}"
                ),
                context={"file_count": header.file_count, "size": len(table)},
            )
        if len(table) != needed:
            logger.warning(
                "Asset description section is %d bytes, expected %d for %d records",
                len(table),
                needed,
                header.file_count,
            )

        bnl = cls(
            flags=header.flags, reserved=header.reserved, config=config
        )
        owned_views: List[tuple[str, DataView]] = []
        for i in range(header.file_count):
            desc = AssetDescription.from_bytes(table, i * layout.record_size, layout)
            raw, views = cls._resolve_entry(desc, sections, config)
            bnl.assets.append(raw)
            owned_views.extend((raw.name, v) for v in views)

        bnl.overlaps = _find_overlaps(owned_views)
        bnl._apply_overlap_policy()
        logger.info(
            "Decoded %d assets (%d bytes decompressed)",
            len(bnl.assets),
            len(full),
        )
        return bnl

    @staticmethod
    def _resolve_entry(
        desc: AssetDescription,
        sections: Dict[str, memoryview],
        config: BnlConfig,
    ) -> tuple[RawAsset, List[DataView]]:
        descriptors = sections["descriptor"]
        start = desc.descriptor_ptr
        end = start + desc.descriptor_size
        if end > len(descriptors):
            raise FormatError(
                code=E_RECORD,
                message=(
                    f"Descriptor of {desc.name!r} ({start}+{desc.descriptor_size}) "
                    f"is outside the descriptor section ({len(descriptors)} bytes)"
                ),
                context={"name": desc.name, "ptr": start, "size": desc.descriptor_size},
            )
        descriptor = bytes(descriptors[start:end])

        if desc.resource_size == 0:
            return RawAsset(desc.metadata, descriptor, None), []

        buffer_views = sections["buffer_views"]
        if desc.dataview_list_ptr > len(buffer_views):
            raise FormatError(
                code=E_RECORD,
                message=(
                    f"Data view list of {desc.name!r} at {desc.dataview_list_ptr} "
                    f"is outside the buffer views section ({len(buffer_views)} bytes)"
                ),
                context={"name": desc.name, "ptr": desc.dataview_list_ptr},
            )
        dvl = DataViewList.from_bytes(buffer_views[desc.dataview_list_ptr :])
        if config.verify_resource_size and dvl.bytes_required() != desc.resource_size:
            get_logger().warning(
                "Asset %s: resource_size=%d but its data view list is %d bytes",
                desc.name,
                desc.resource_size,
                dvl.bytes_required(),
            )
        chunks = [bytes(s) for s in dvl.slices(sections["buffer"])]
        return RawAsset(desc.metadata, descriptor, chunks), list(dvl.views)

    def _apply_overlap_policy(self) -> None:
        if not self.overlaps or self.config.overlap_policy == "ignore":
            return
        if self.config.overlap_policy == "error":
            first = self.overlaps[0]
            raise OverlapError(
                code=E_OVERLAP,
                message=(
                    f"{len(self.overlaps)} overlapping resource ranges, first: "
                    f"{first.first} / {first.second} at {first.start}..{first.end}"
                ),
                context={"overlaps": [o.to_dict() for o in self.overlaps]},
            )
        logger = get_logger()
        for o in self.overlaps:
            logger.warning(
                "Resource ranges overlap: %s and %s share buffer bytes %d..%d",
                o.first,
                o.second,
                o.start,
                o.end,
            )

    # Encode -----------------------------------------------------------------
    @property
    def layout(self) -> RecordLayout:
        return self.config.layout

    def plan(self) -> ArchivePlan:
        return plan_archive(
            self.assets, self.layout, flags=self.flags, reserved=self.reserved
        )

    def to_bytes(self) -> bytes:
        return write_archive(
            self.plan(),
            self.assets,
            compression_level=self.config.compression_level,
        )

    # Container protocol ---------------------------------------------------------
    def __len__(self) -> int:
        return len(self.assets)

    def __iter__(self) -> Iterator[RawAsset]:
        return iter(self.assets)

    def names(self) -> List[str]:
        return [a.name for a in self.assets]

    def _index_of(self, name: str) -> int:
        for i, raw in enumerate(self.assets):
            if raw.name == name:
                return i
        raise AssetNotFoundError(
            code=E_NOT_FOUND,
            message=f"No asset named {name!r}",
            context={"name": name},
        )

    # Queries ------------------------------------------------------------------
    def get_raw_asset(self, name: str) -> Optional[RawAsset]:
        for raw in self.assets:
            if raw.name == name:
                return raw
        return None

    def get_raw_asset_mut(self, name: str) -> Optional[RawAsset]:
        """Same object as :meth:`get_raw_asset`; edits land in the next encode."""
        return self.get_raw_asset(name)

    def get_raw_assets(self) -> List[RawAsset]:
        return self.assets

    def get_asset(self, kind: Type[T], name: str) -> "Asset[T]":
        return self.assets[self._index_of(name)].to_asset(kind)

    def get_assets(self, kind: Type[T]) -> List["Asset[T]"]:
        """Every entry decodable as ``kind``; undecodable ones are skipped."""
        logger = get_logger()
        out = []
        for raw in self.assets:
            if not kind.accepts(raw.asset_type):
                continue
            try:
                out.append(raw.to_asset(kind))
            except AssetError as exc:
                logger.warning("Skipping %s: %s", raw.name, exc.message)
        return out

    def get_assets_occupying_descriptor_range(
        self, start: int, end: int
    ) -> List[AssetDescription]:
        """Records whose descriptor bytes, as laid out on encode, meet ``[start, end)``."""
        return [a.description for a in self.plan().descriptor_occupants(start, end)]

    def find_resource_overlaps(self) -> List[ResourceOverlap]:
        """Overlaps between different assets' data views seen when decoding."""
        return list(self.overlaps)

    # Mutation -----------------------------------------------------------------
    def append_raw_asset(self, raw: RawAsset) -> None:
        self.assets.append(raw)

    def append_asset(self, metadata: AssetMetadata, asset: "AssetLike") -> None:
        if not asset.accepts(metadata.asset_type):
            raise TypeMismatchError(
                code=E_TYPE_MISMATCH,
                message=(
                    f"Cannot store {type(asset).__name__} as "
                    f"{type_label(metadata.asset_type)}"
                ),
                context={"name": metadata.name},
            )
        from ..assets.base import Asset  # local import to avoid cycle

        self.append_raw_asset(Asset(metadata, asset).to_raw_asset())

    def modify_asset(
        self,
        kind: Type[T],
        name: str,
        f: Callable[["Asset[T]"], Optional["Asset[T]"]],
    ) -> None:
        """Decode ``name`` as ``kind``, let ``f`` edit it, store it re-encoded.

        ``f`` may mutate its argument in place or return a replacement.
        """
        index = self._index_of(name)
        asset = self.assets[index].to_asset(kind)
        result = f(asset)
        if result is not None:
            asset = result
        self.assets[index] = asset.to_raw_asset()

    def remove_asset(self, name: str) -> RawAsset:
        return self.assets.pop(self._index_of(name))

    def update_descriptor_in_place(
        self, name: str, descriptor: "AssetDescriptor | bytes"
    ) -> None:
        """Replace the descriptor of ``name`` without letting it grow.

        Growth would overwrite the following assets' descriptor bytes in a
        layout-preserving update, so it raises UnsupportedMutationError naming
        the occupants instead. Callers wanting growth re-encode with
        :meth:`to_bytes` after editing :attr:`RawAsset.descriptor_bytes`.
        """
        index = self._index_of(name)
        raw = self.assets[index]
        if isinstance(descriptor, (bytes, bytearray, memoryview)):
            new_bytes = bytes(descriptor)
        else:
            if descriptor.asset_type() != raw.asset_type:
                raise TypeMismatchError(
                    code=E_TYPE_MISMATCH,
                    message=(
                        f"Descriptor for {type_label(descriptor.asset_type())} "
                        f"cannot replace {raw.type_label} asset {name!r}"
                    ),
                    context={"name": name},
                )
            new_bytes = bytes(descriptor.to_bytes())

        old_size = len(raw.descriptor_bytes)
        if len(new_bytes) > old_size:
            planned = self.plan().assets[index].description
            start = planned.descriptor_ptr
            end = start + len(new_bytes)
            occupants = [
                d.name
                for d in self.get_assets_occupying_descriptor_range(start, end)
                if d.name != name
            ]
            raise UnsupportedMutationError(
                code=E_GROW_IN_PLACE,
                message=(
                    f"Descriptor of {name!r} cannot grow in place "
                    f"({old_size} -> {len(new_bytes)} bytes)"
                ),
                context={
                    "name": name,
                    "old_size": old_size,
                    "new_size": len(new_bytes),
                    "occupants": occupants,
                },
            )
        raw.descriptor_bytes = new_bytes
