"""Virtual resource: one logically contiguous view over disjoint byte slices.

Slices are kept as ``memoryview`` objects so wrapping the resolved data views
of an asset never copies the underlying buffer section. Reads copy only the
requested window.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .dataview import DataViewList
from .errors import offset_out_of_bounds, size_out_of_bounds

__all__ = ["VirtualResource"]


class VirtualResource:
    __slots__ = ("_slices", "_length", "_present")

    def __init__(
        self,
        slices: Iterable[bytes | bytearray | memoryview] = (),
        *,
        present: bool = True,
    ):
        self._slices: List[memoryview] = [
            s if isinstance(s, memoryview) else memoryview(s) for s in slices
        ]
        self._length = sum(len(s) for s in self._slices)
        self._present = present

    @classmethod
    def from_slices(
        cls, slices: Iterable[bytes | bytearray | memoryview]
    ) -> "VirtualResource":
        return cls(slices)

    @classmethod
    def absent(cls) -> "VirtualResource":
        """The resource of an entry that has no data view list at all."""
        return cls(present=False)

    @classmethod
    def from_dataview_list(
        cls, dataview_list: DataViewList, pool: bytes | memoryview
    ) -> "VirtualResource":
        return cls(dataview_list.slices(pool))

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:  # pragma: no cover
        sizes = [len(s) for s in self._slices]
        return f"VirtualResource(len={self._length}, slices={sizes})"

    def is_empty(self) -> bool:
        return self._length == 0

    @property
    def present(self) -> bool:
        """False only for :meth:`absent`; an empty view list is still present."""
        return self._present

    def slices(self) -> Sequence[memoryview]:
        return tuple(self._slices)

    def get_bytes(self, start: int, size: int) -> bytes:
        """Return ``size`` bytes starting at logical offset ``start``.

        The read may straddle any number of consecutive slices.
        """
        if start < 0 or start > self._length:
            raise offset_out_of_bounds(start, self._length, "virtual resource")
        if size < 0 or self._length - start < size:
            raise size_out_of_bounds(
                start, size, self._length, "virtual resource"
            )

        out = bytearray(size)
        written = 0
        slice_start = 0
        for chunk in self._slices:
            if written == size:
                break
            chunk_len = len(chunk)
            slice_end = slice_start + chunk_len
            if slice_end > start:
                src = max(start - slice_start, 0)
                count = min(size - written, chunk_len - src)
                out[written : written + count] = chunk[src : src + count]
                written += count
            slice_start = slice_end

        if written != size:
            raise size_out_of_bounds(
                start, size, self._length, "virtual resource"
            )
        return bytes(out)

    def get_all_bytes(self) -> bytes:
        return b"".join(self._slices)

    def chunks(self) -> List[bytes]:
        """Owned copies of each slice, in order."""
        return [bytes(s) for s in self._slices]
