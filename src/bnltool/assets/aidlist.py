"""Asset-id lists: the descriptor is a packed array of 128-byte names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..archive.errors import parse_error
from ..archive.records import pack_name
from ..archive.resource import VirtualResource
from ..archive.types import AssetType
from .base import AssetDescriptor, AssetLike

__all__ = ["AID_SIZE", "AidListDescriptor", "AidList"]

AID_SIZE = 128


@dataclass(slots=True)
class AidListDescriptor(AssetDescriptor):
    ASSET_TYPE = AssetType.AIDLIST

    asset_ids: List[bytes] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "AidListDescriptor":
        if len(data) % AID_SIZE:
            raise parse_error(
                f"AID list must be a multiple of {AID_SIZE} bytes "
                f"(received {len(data)})",
                {"size": len(data)},
            )
        return cls(
            [bytes(data[i : i + AID_SIZE]) for i in range(0, len(data), AID_SIZE)]
        )

    def to_bytes(self) -> bytes:
        return b"".join(self.asset_ids)

    def size(self) -> int:
        return len(self.asset_ids) * AID_SIZE


@dataclass(slots=True)
class AidList(AssetLike):
    DESCRIPTOR = AidListDescriptor

    asset_ids: List[str] = field(default_factory=list)

    @classmethod
    def new(
        cls, descriptor: AidListDescriptor, resource: VirtualResource
    ) -> "AidList":
        ids = []
        for raw in descriptor.asset_ids:
            try:
                ids.append(raw.split(b"\x00", 1)[0].decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise parse_error(
                    f"AID is not valid UTF-8: {raw[:32]!r}"
                ) from exc
        return cls(ids)

    @classmethod
    def from_text(cls, text: str) -> "AidList":
        """One AID per line; blank lines are ignored."""
        return cls([line.strip() for line in text.splitlines() if line.strip()])

    def to_text(self) -> str:
        return "\n".join(self.asset_ids)

    def get_descriptor(self) -> AidListDescriptor:
        return AidListDescriptor(
            [pack_name(aid, AID_SIZE) for aid in self.asset_ids]
        )

    def get_resource_chunks(self) -> Optional[List[bytes]]:
        return None
