"""Fallback kind for asset types without a dedicated decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..archive.resource import VirtualResource
from .base import AssetDescriptor, AssetLike

__all__ = ["OpaqueDescriptor", "OpaqueAsset"]


@dataclass(slots=True)
class OpaqueDescriptor(AssetDescriptor):
    ASSET_TYPE = -1

    data: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes) -> "OpaqueDescriptor":
        return cls(bytes(data))

    def to_bytes(self) -> bytes:
        return self.data


@dataclass(slots=True)
class OpaqueAsset(AssetLike):
    """Accepts every type code; descriptor and chunks pass through unchanged."""

    DESCRIPTOR = OpaqueDescriptor

    descriptor: OpaqueDescriptor
    chunks: Optional[List[bytes]] = None

    @classmethod
    def accepts(cls, code: int) -> bool:
        return True

    @classmethod
    def new(
        cls, descriptor: OpaqueDescriptor, resource: VirtualResource
    ) -> "OpaqueAsset":
        chunks = resource.chunks() if resource.present else None
        return cls(descriptor, chunks)

    def get_descriptor(self) -> OpaqueDescriptor:
        return self.descriptor

    def get_resource_chunks(self) -> Optional[List[bytes]]:
        return list(self.chunks) if self.chunks is not None else None
