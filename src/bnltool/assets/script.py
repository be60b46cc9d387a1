"""Scripts: a stream of ``(size u32, opcode u32, operands)`` operations.

The stream ends with an 8-byte operation whose opcode is 0; it is kept as the
last element of :attr:`ScriptDescriptor.operations` so re-encoding reproduces
the input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import struct
from typing import List, Optional

from ..archive.errors import parse_error
from ..archive.resource import VirtualResource
from ..archive.types import AssetType
from .base import AssetDescriptor, AssetLike

__all__ = ["END_SCRIPT", "ScriptOperation", "ScriptDescriptor", "Script"]

_OP_HEADER = struct.Struct("<II")
END_SCRIPT = 0


@dataclass(slots=True)
class ScriptOperation:
    opcode: int
    operand_bytes: bytes = b""

    @property
    def size(self) -> int:
        return _OP_HEADER.size + len(self.operand_bytes)

    def to_bytes(self) -> bytes:
        try:
            header = _OP_HEADER.pack(self.size, self.opcode)
        except struct.error as exc:
            raise parse_error(
                f"Script opcode {self.opcode!r} out of range: {exc}",
                {"opcode": self.opcode},
            ) from exc
        return header + bytes(self.operand_bytes)


@dataclass(slots=True)
class ScriptDescriptor(AssetDescriptor):
    ASSET_TYPE = AssetType.SCRIPT

    operations: List[ScriptOperation] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ScriptDescriptor":
        ops: List[ScriptOperation] = []
        pos = 0
        while True:
            if len(data) - pos < _OP_HEADER.size:
                raise parse_error(
                    f"Script truncated at byte {pos} (no end-of-script op)",
                    {"pos": pos, "size": len(data)},
                )
            size, opcode = _OP_HEADER.unpack_from(data, pos)
            if opcode == END_SCRIPT:
                if size != _OP_HEADER.size:
                    raise parse_error(
                        f"End-of-script op at {pos} has size {size}",
                        {"pos": pos},
                    )
                ops.append(ScriptOperation(END_SCRIPT))
                break
            if size < _OP_HEADER.size or pos + size > len(data):
                raise parse_error(
                    f"Script op at {pos} has invalid size {size}",
                    {"pos": pos, "size": size},
                )
            ops.append(
                ScriptOperation(
                    opcode, bytes(data[pos + _OP_HEADER.size : pos + size])
                )
            )
            pos += size
        return cls(ops)

    def to_bytes(self) -> bytes:
        return b"".join(op.to_bytes() for op in self.operations)

    def size(self) -> int:
        return sum(op.size for op in self.operations)


@dataclass(slots=True)
class Script(AssetLike):
    DESCRIPTOR = ScriptDescriptor

    descriptor: ScriptDescriptor
    data: Optional[List[bytes]] = None

    @classmethod
    def new(
        cls, descriptor: ScriptDescriptor, resource: VirtualResource
    ) -> "Script":
        return cls(descriptor, resource.chunks() if resource.present else None)

    @property
    def operations(self) -> List[ScriptOperation]:
        return self.descriptor.operations

    def get_descriptor(self) -> ScriptDescriptor:
        return self.descriptor

    def get_resource_chunks(self) -> Optional[List[bytes]]:
        return list(self.data) if self.data is not None else None
