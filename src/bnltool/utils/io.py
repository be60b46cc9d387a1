"""File helpers shared by the API and the mod loader."""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List

from ..archive.errors import E_LIMIT, BnlError

__all__ = ["MAX_INPUT_SIZE", "safe_read_file", "write_file", "leaf_dirs"]

MAX_INPUT_SIZE = 512 * 1024 * 1024


def safe_read_file(path: Path, max_size: int = MAX_INPUT_SIZE) -> bytes:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(path)
    size = path.stat().st_size
    if size > max_size:
        raise BnlError(
            code=E_LIMIT,
            message=f"File too large: {path} ({size}>{max_size})",
            context={"path": str(path), "size": size},
        )
    return path.read_bytes()


def write_file(path: Path, data: bytes) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return len(data)


def leaf_dirs(roots: Iterable[Path]) -> List[Path]:
    """Directories under ``roots`` (inclusive) that have no sub-directories.

    Sorted so archives built from the same tree are identical.
    """
    found = set()
    for root in roots:
        root = Path(root)
        if not root.is_dir():
            raise NotADirectoryError(root)
        candidates = [root, *(p for p in root.rglob("*") if p.is_dir())]
        for d in candidates:
            if not any(child.is_dir() for child in d.iterdir()):
                found.add(d)
    return sorted(found)
