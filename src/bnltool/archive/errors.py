"""Error definitions for bnltool."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_TRUNCATED = "E_TRUNCATED"
E_RECORD = "E_RECORD"
E_DECOMPRESS = "E_DECOMPRESS"
E_OFFSET_OOB = "E_OFFSET_OOB"
E_SIZE_OOB = "E_SIZE_OOB"
E_NOT_FOUND = "E_NOT_FOUND"
E_TYPE_MISMATCH = "E_TYPE_MISMATCH"
E_PARSE = "E_PARSE"
E_GROW_IN_PLACE = "E_GROW_IN_PLACE"
E_OVERLAP = "E_OVERLAP"
E_CONFIG = "E_CONFIG"
E_MOD = "E_MOD"
E_LIMIT = "E_LIMIT"
E_INTERNAL = "E_INTERNAL"


@dataclass
class BnlError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class FormatError(BnlError):
    pass


class DecompressionError(FormatError):
    pass


class AddressingError(BnlError):
    pass


class OffsetOutOfBoundsError(AddressingError):
    pass


class SizeOutOfBoundsError(AddressingError):
    pass


class AssetError(BnlError):
    pass


class AssetNotFoundError(AssetError):
    pass


class TypeMismatchError(AssetError):
    pass


class AssetParseError(AssetError):
    pass


class UnsupportedMutationError(BnlError):
    pass


class OverlapError(FormatError):
    pass


class ConfigError(BnlError):
    pass


class ModError(BnlError):
    pass


def format_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> FormatError:
    return FormatError(code=E_TRUNCATED, message=message, context=context)


def offset_out_of_bounds(
    offset: int, limit: int, label: str = "buffer"
) -> OffsetOutOfBoundsError:
    return OffsetOutOfBoundsError(
        code=E_OFFSET_OOB,
        message=f"Offset {offset} is beyond {label} of size {limit}",
        context={"offset": offset, "limit": limit},
    )


def size_out_of_bounds(
    offset: int, size: int, limit: int, label: str = "buffer"
) -> SizeOutOfBoundsError:
    return SizeOutOfBoundsError(
        code=E_SIZE_OOB,
        message=(
            f"Size {size} at offset {offset} would reach {offset + size}, "
            f"beyond {label} of size {limit}"
        ),
        context={"offset": offset, "size": size, "limit": limit},
    )


def parse_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> AssetParseError:
    return AssetParseError(code=E_PARSE, message=message, context=context)


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> BnlError:
    return BnlError(code=E_INTERNAL, message=message, context=context)


__all__ = [
    "BnlError",
    "FormatError",
    "DecompressionError",
    "AddressingError",
    "OffsetOutOfBoundsError",
    "SizeOutOfBoundsError",
    "AssetError",
    "AssetNotFoundError",
    "TypeMismatchError",
    "AssetParseError",
    "UnsupportedMutationError",
    "OverlapError",
    "ConfigError",
    "ModError",
    "format_error",
    "offset_out_of_bounds",
    "size_out_of_bounds",
    "parse_error",
    "internal_error",
    "E_TRUNCATED",
    "E_RECORD",
    "E_DECOMPRESS",
    "E_OFFSET_OOB",
    "E_SIZE_OOB",
    "E_NOT_FOUND",
    "E_TYPE_MISMATCH",
    "E_PARSE",
    "E_GROW_IN_PLACE",
    "E_OVERLAP",
    "E_CONFIG",
    "E_MOD",
    "E_LIMIT",
    "E_INTERNAL",
]
