"""Sound cue lists: ``group<TAB>cue`` lines grouped by consecutive group name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..archive.errors import parse_error
from ..archive.resource import VirtualResource
from ..archive.types import AssetType
from .base import AssetDescriptor, AssetLike

__all__ = ["CueGroup", "CueListDescriptor", "CueList"]


@dataclass(slots=True)
class CueGroup:
    name: str
    cues: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CueListDescriptor(AssetDescriptor):
    ASSET_TYPE = AssetType.XCUELIST

    groups: List[CueGroup] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "CueListDescriptor":
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise parse_error("Cue list is not valid UTF-8") from exc

        groups: List[CueGroup] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line:
                continue
            parts = line.split("\t")
            if len(parts) != 2:
                raise parse_error(
                    f"Cue list line {lineno} is not 'group<TAB>cue'",
                    {"line": lineno},
                )
            group_name, cue = parts
            if not groups or groups[-1].name != group_name:
                groups.append(CueGroup(group_name))
            groups[-1].cues.append(cue)
        return cls(groups)

    def validate(self) -> bool:
        return all(g.name and all(g.cues) for g in self.groups)

    def to_bytes(self) -> bytes:
        if not self.validate():
            raise parse_error("Cue list contains an empty group or cue name")
        lines = [f"{g.name}\t{cue}" for g in self.groups for cue in g.cues]
        return "\n".join(lines).encode("utf-8")


@dataclass(slots=True)
class CueList(AssetLike):
    DESCRIPTOR = CueListDescriptor

    descriptor: CueListDescriptor
    data: Optional[List[bytes]] = None

    @classmethod
    def new(
        cls, descriptor: CueListDescriptor, resource: VirtualResource
    ) -> "CueList":
        return cls(descriptor, resource.chunks() if resource.present else None)

    def get_descriptor(self) -> CueListDescriptor:
        return self.descriptor

    def get_resource_chunks(self) -> Optional[List[bytes]]:
        return list(self.data) if self.data is not None else None
