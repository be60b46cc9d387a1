"""Helpers shared by the bnltool tests.

Usage:
    from bnl_helpers import make_raw, sample_bnl, craft_archive
"""

from __future__ import annotations

import struct
import zlib
from typing import List, Optional, Sequence, Tuple

from bnltool.archive.container import BNLFile
from bnltool.archive.raw_asset import RawAsset
from bnltool.archive.records import AssetMetadata
from bnltool.archive.types import AssetType
from bnltool.assets.aidlist import AidList
from bnltool.assets.texture import TextureDescriptor


def make_raw(
    name: str,
    asset_type: int = AssetType.MISC,
    descriptor: bytes = b"",
    chunks: Optional[List[bytes]] = None,
    unk_1: int = 0,
    unk_2: int = 0,
) -> RawAsset:
    return RawAsset(
        AssetMetadata.create(name, asset_type, unk_1, unk_2),
        descriptor,
        chunks,
    )


def texture_raw(name: str, pixels: bytes, width: int = 2, height: int = 2) -> RawAsset:
    desc = TextureDescriptor(
        format=0x12,
        width=width,
        height=height,
        texture_offset=0,
        texture_size=len(pixels),
    )
    return make_raw(name, AssetType.TEXTURE, desc.to_bytes(), [pixels])


def aidlist_raw(name: str, aids: Sequence[str]) -> RawAsset:
    return make_raw(
        name, AssetType.AIDLIST, AidList(list(aids)).get_descriptor().to_bytes()
    )


def sample_bnl() -> BNLFile:
    """Four assets: a texture, an aidlist, a two-chunk misc asset, a bare one."""
    return BNLFile(
        [
            texture_raw("aid_texture_ui_icons_heart", bytes(range(16))),
            aidlist_raw(
                "aid_aidlist_ghoulies_sceneorder_game",
                ["aid_script_level_one_a", "aid_script_level_two_a"],
            ),
            make_raw(
                "aid_misc_world_props_barrel",
                AssetType.MISC,
                b"\x01\x02\x03\x04",
                [b"A" * 10, b"B" * 5],
                unk_1=7,
                unk_2=9,
            ),
            make_raw("aid_marker_world_spawn_start", AssetType.MARKER, b"\xff" * 8),
        ],
        flags=0x03,
        reserved=b"\x01\x02\x03\x04\x05",
    )


def record(
    name: str,
    asset_type: int,
    descriptor: Tuple[int, int],
    dataview_list: Tuple[int, int] = (0, 0),
    name_size: int = 128,
) -> bytes:
    """One asset description record (descriptor/dvl given as (ptr, size))."""
    raw_name = name.encode("utf-8").ljust(name_size, b"\x00")
    return raw_name + struct.pack(
        "<8I",
        asset_type,
        0,
        0,
        2,
        descriptor[0],
        descriptor[1],
        dataview_list[0],
        dataview_list[1],
    )


def dataview_list(views: Sequence[Tuple[int, int]]) -> bytes:
    out = struct.pack("<II", 8 + 8 * len(views), len(views))
    for offset, size in views:
        out += struct.pack("<II", offset, size)
    return out


def craft_archive(
    records: Sequence[bytes],
    buffer_views: bytes = b"",
    buffer: bytes = b"",
    descriptors: bytes = b"",
    *,
    file_count: Optional[int] = None,
    flags: int = 0,
    extra_section_sizes: Tuple[int, int, int, int] = (0, 0, 0, 0),
) -> bytes:
    """Assemble an archive byte by byte, bypassing the writer."""
    table = b"".join(records)
    sizes = [len(table), len(buffer_views), len(buffer), len(descriptors)]
    locs = []
    cursor = 40
    for size, extra in zip(sizes, extra_section_sizes):
        locs.extend((cursor, size + extra))
        cursor += size
    header = struct.pack(
        "<HB5s8I",
        len(records) if file_count is None else file_count,
        flags,
        b"\x00" * 5,
        *locs,
    )
    payload = table + buffer_views + buffer + descriptors
    return header + zlib.compress(payload)
