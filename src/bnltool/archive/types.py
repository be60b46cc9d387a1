"""Asset type codes.

Known codes form a closed enumeration; any other code read from an archive is
kept as a plain int and treated as an opaque asset kind.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

__all__ = ["AssetType", "type_label", "known_type"]


class AssetType(IntEnum):
    AIDLIST = 0
    TEXTURE = 1
    ANIM = 2
    UNKNOWN3 = 3
    MODEL = 4
    ANIMEVENTS = 5
    CUTSCENE = 6
    CUTSCENEEVENTS = 7
    MISC = 8
    ACTORGOALS = 9
    MARKER = 10
    FXCALLOUT = 11
    LOCTEXT = 12
    XSOUNDBANK = 13
    XDSP = 14
    XCUELIST = 15
    FONT = 16
    GHOULYBOX = 17
    GHOULYSPAWN = 18
    SCRIPT = 19
    ACTORATTRIBS = 20
    EMITTER = 21
    PARTICLE = 22
    RUMBLE = 23
    SHAKECAM = 24

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "AssetType":
        """Parse the type segment of an AID (``aid_<type>_...``)."""
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown asset type label: {label!r}") from None


def known_type(code: int) -> Optional[AssetType]:
    try:
        return AssetType(code)
    except ValueError:
        return None


def type_label(code: int) -> str:
    kind = known_type(code)
    return kind.label if kind is not None else f"unknown{code}"
