"""RawAsset: an archive entry as owned bytes, independent of any layout."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
import re
from typing import TYPE_CHECKING, List, Optional, Type, TypeVar

from .errors import E_TYPE_MISMATCH, TypeMismatchError, parse_error
from .records import AssetMetadata
from .resource import VirtualResource
from .types import type_label

if TYPE_CHECKING:  # pragma: no cover
    from ..assets.base import Asset, AssetLike

__all__ = [
    "RawAsset",
    "METADATA_FILE",
    "DESCRIPTOR_FILE",
    "RESOURCE_PREFIX",
]

METADATA_FILE = "metadata"
DESCRIPTOR_FILE = "descriptor"
RESOURCE_PREFIX = "resource"

_RESOURCE_RE = re.compile(rf"^{RESOURCE_PREFIX}(\d+)$")

T = TypeVar("T", bound="AssetLike")


@dataclass(slots=True)
class RawAsset:
    metadata: AssetMetadata
    descriptor_bytes: bytes = b""
    resource_chunks: Optional[List[bytes]] = field(default=None)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def asset_type(self) -> int:
        return self.metadata.asset_type

    @property
    def type_label(self) -> str:
        return type_label(self.metadata.asset_type)

    def virtual_resource(self) -> VirtualResource:
        if self.resource_chunks is None:
            return VirtualResource.absent()
        return VirtualResource.from_slices(self.resource_chunks)

    def to_asset(self, kind: Type[T]) -> "Asset[T]":
        """Decode into ``kind``.

        Raises TypeMismatchError when the type codes differ and
        AssetParseError when the descriptor or resource cannot be decoded.
        """
        from ..assets.base import Asset  # local import to avoid cycle

        if not kind.accepts(self.metadata.asset_type):
            raise TypeMismatchError(
                code=E_TYPE_MISMATCH,
                message=(
                    f"Asset {self.name!r} is {self.type_label}, "
                    f"not {type_label(kind.asset_type())}"
                ),
                context={
                    "name": self.name,
                    "actual": self.metadata.asset_type,
                    "expected": kind.asset_type(),
                },
            )
        descriptor = kind.DESCRIPTOR.from_bytes(self.descriptor_bytes)
        asset = kind.new(descriptor, self.virtual_resource())
        return Asset(metadata=replace(self.metadata), asset=asset)

    def to_dir(self, path: Path) -> None:
        """Write ``metadata``, ``descriptor`` and ``resource{N}`` under ``path``.

        Stale ``resource{N}`` files from an earlier extraction are removed.
        """
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        for entry in path.iterdir():
            if _RESOURCE_RE.match(entry.name) and entry.is_file():
                entry.unlink()
        (path / METADATA_FILE).write_bytes(self.metadata.to_bytes())
        (path / DESCRIPTOR_FILE).write_bytes(self.descriptor_bytes)
        for i, chunk in enumerate(self.resource_chunks or ()):
            (path / f"{RESOURCE_PREFIX}{i}").write_bytes(chunk)

    @classmethod
    def from_dir(cls, path: Path) -> "RawAsset":
        path = Path(path)
        meta_path = path / METADATA_FILE
        if not meta_path.is_file():
            raise parse_error(
                f"Missing {METADATA_FILE} file in {path}",
                {"path": str(path)},
            )
        metadata = AssetMetadata.from_bytes(meta_path.read_bytes())
        desc_path = path / DESCRIPTOR_FILE
        descriptor = desc_path.read_bytes() if desc_path.is_file() else b""

        indexed = []
        for entry in path.iterdir():
            m = _RESOURCE_RE.match(entry.name)
            if m and entry.is_file():
                indexed.append((int(m.group(1)), entry))
        indexed.sort(key=lambda pair: pair[0])
        chunks = [p.read_bytes() for _, p in indexed]
        return cls(
            metadata=metadata,
            descriptor_bytes=descriptor,
            resource_chunks=chunks or None,
        )
