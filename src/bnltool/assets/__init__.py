"""Concrete asset kinds built on the typed-asset framework."""

from .base import Asset, AssetDescriptor, AssetLike
from .aidlist import AidList, AidListDescriptor
from .cuelist import CueGroup, CueList, CueListDescriptor
from .opaque import OpaqueAsset, OpaqueDescriptor
from .script import Script, ScriptDescriptor, ScriptOperation
from .texture import Texture, TextureDescriptor

__all__ = [
    "Asset",
    "AssetDescriptor",
    "AssetLike",
    "AidList",
    "AidListDescriptor",
    "CueGroup",
    "CueList",
    "CueListDescriptor",
    "OpaqueAsset",
    "OpaqueDescriptor",
    "Script",
    "ScriptDescriptor",
    "ScriptOperation",
    "Texture",
    "TextureDescriptor",
]
