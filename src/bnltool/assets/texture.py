"""Textures. Only the container-facing shape is modelled; pixels stay opaque."""

from __future__ import annotations

from dataclasses import dataclass, replace
import struct
from typing import List, Optional

from ..archive.errors import AddressingError, parse_error
from ..archive.resource import VirtualResource
from ..archive.types import AssetType
from .base import AssetDescriptor, AssetLike

__all__ = ["TEXTURE_DESCRIPTOR_SIZE", "TextureDescriptor", "Texture"]

_TEXTURE = struct.Struct("<IIHHIIII")
TEXTURE_DESCRIPTOR_SIZE = _TEXTURE.size  # 28


@dataclass(slots=True)
class TextureDescriptor(AssetDescriptor):
    ASSET_TYPE = AssetType.TEXTURE

    format: int = 0
    header_size: int = TEXTURE_DESCRIPTOR_SIZE
    width: int = 0
    height: int = 0
    flags: int = 1
    unknown_3a: int = 0
    texture_offset: int = 0
    texture_size: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "TextureDescriptor":
        if len(data) < TEXTURE_DESCRIPTOR_SIZE:
            raise parse_error(
                f"Texture descriptor needs {TEXTURE_DESCRIPTOR_SIZE} bytes, "
                f"got {len(data)}",
                {"size": len(data)},
            )
        return cls(*_TEXTURE.unpack_from(data, 0))

    def to_bytes(self) -> bytes:
        try:
            return _TEXTURE.pack(
                self.format,
                self.header_size,
                self.width,
                self.height,
                self.flags,
                self.unknown_3a,
                self.texture_offset,
                self.texture_size,
            )
        except struct.error as exc:
            raise parse_error(
                f"Texture descriptor field out of range: {exc}"
            ) from exc

    def size(self) -> int:
        return TEXTURE_DESCRIPTOR_SIZE


@dataclass(slots=True)
class Texture(AssetLike):
    DESCRIPTOR = TextureDescriptor

    descriptor: TextureDescriptor
    data: bytes = b""

    @classmethod
    def new(
        cls, descriptor: TextureDescriptor, resource: VirtualResource
    ) -> "Texture":
        if resource.is_empty():
            raise parse_error("Unable to create a texture from 0 data views")
        try:
            data = resource.get_bytes(
                descriptor.texture_offset, descriptor.texture_size
            )
        except AddressingError as exc:
            raise parse_error(
                f"Texture bytes out of range: {exc.message}", exc.context
            ) from exc
        return cls(descriptor, data)

    @property
    def width(self) -> int:
        return self.descriptor.width

    @property
    def height(self) -> int:
        return self.descriptor.height

    def get_descriptor(self) -> TextureDescriptor:
        # Re-emitted as a single chunk, so the image starts at offset 0.
        return replace(
            self.descriptor, texture_offset=0, texture_size=len(self.data)
        )

    def get_resource_chunks(self) -> Optional[List[bytes]]:
        return [bytes(self.data)]
