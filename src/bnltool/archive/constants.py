"""Binary layout constants for BNL archives."""

from __future__ import annotations

HEADER_SIZE = 40
HEADER_RESERVED_SIZE = 5

DATAVIEW_SIZE = 8
DATAVIEW_LIST_HEADER_SIZE = 8

# Fixed part of an asset description record following the name field:
# asset_type, unk_1, unk_2, chunk_count, descriptor_ptr, descriptor_size,
# dataview_list_ptr, resource_size (all u32).
RECORD_FIELDS_SIZE = 32
DEFAULT_NAME_SIZE = 128

# Metadata file (extraction layout): name + asset_type + unk_1 + unk_2
METADATA_FIELDS_SIZE = 12

# Value written into newly encoded records.
DEFAULT_CHUNK_COUNT = 2

DEFAULT_COMPRESSION_LEVEL = 1

MAX_FILE_COUNT = 0xFFFF
MAX_U32 = 0xFFFFFFFF

SECTION_ORDER = ("asset_desc", "buffer_views", "buffer", "descriptor")

OVERLAP_POLICIES = ("ignore", "warn", "error")

__all__ = [
    "HEADER_SIZE",
    "HEADER_RESERVED_SIZE",
    "DATAVIEW_SIZE",
    "DATAVIEW_LIST_HEADER_SIZE",
    "RECORD_FIELDS_SIZE",
    "DEFAULT_NAME_SIZE",
    "METADATA_FIELDS_SIZE",
    "DEFAULT_CHUNK_COUNT",
    "DEFAULT_COMPRESSION_LEVEL",
    "MAX_FILE_COUNT",
    "MAX_U32",
    "SECTION_ORDER",
    "OVERLAP_POLICIES",
]
