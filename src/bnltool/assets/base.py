"""Typed-asset framework.

A concrete asset kind pairs an :class:`AssetDescriptor` (the fixed or
variable-size record stored in the archive's descriptor section) with an
:class:`AssetLike` (the in-memory object built from that descriptor plus the
asset's resolved resource bytes). The archive never looks inside either; it
only moves descriptor bytes and resource chunks around.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import ClassVar, Generic, List, Optional, Type, TypeVar

from ..archive.raw_asset import RawAsset
from ..archive.records import AssetMetadata
from ..archive.resource import VirtualResource
from ..archive.types import type_label

__all__ = ["AssetDescriptor", "AssetLike", "Asset"]


class AssetDescriptor(ABC):
    ASSET_TYPE: ClassVar[int]

    @classmethod
    @abstractmethod
    def from_bytes(cls, data: bytes) -> "AssetDescriptor":
        """Decode; raise AssetParseError on malformed input."""

    @abstractmethod
    def to_bytes(self) -> bytes: ...

    def size(self) -> int:
        return len(self.to_bytes())

    @classmethod
    def asset_type(cls) -> int:
        return int(cls.ASSET_TYPE)


A = TypeVar("A", bound="AssetLike")


class AssetLike(ABC):
    DESCRIPTOR: ClassVar[Type[AssetDescriptor]]

    @classmethod
    def asset_type(cls) -> int:
        return cls.DESCRIPTOR.asset_type()

    @classmethod
    def accepts(cls, code: int) -> bool:
        return code == cls.asset_type()

    @classmethod
    @abstractmethod
    def new(
        cls: Type[A], descriptor: AssetDescriptor, resource: VirtualResource
    ) -> A: ...

    @abstractmethod
    def get_descriptor(self) -> AssetDescriptor: ...

    @abstractmethod
    def get_resource_chunks(self) -> Optional[List[bytes]]:
        """Chunks to store, or ``None`` when the asset has no resource."""


T = TypeVar("T", bound=AssetLike)


@dataclass(slots=True)
class Asset(Generic[T]):
    metadata: AssetMetadata
    asset: T

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def type_label(self) -> str:
        return type_label(self.metadata.asset_type)

    def to_raw_asset(self) -> RawAsset:
        metadata = replace(self.metadata)
        # Out-of-range metadata fails here rather than at archive encode.
        metadata.to_bytes()
        chunks = self.asset.get_resource_chunks()
        return RawAsset(
            metadata=metadata,
            descriptor_bytes=bytes(self.asset.get_descriptor().to_bytes()),
            resource_chunks=[bytes(c) for c in chunks]
            if chunks is not None
            else None,
        )
