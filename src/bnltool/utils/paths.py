"""Path utilities (safe resolution, extraction roots)."""

from __future__ import annotations
from pathlib import Path

__all__ = ["safe_file_path", "archive_output_dir"]


def safe_file_path(base_dir: Path, relative: str) -> Path:
    """Resolve ``relative`` under ``base_dir``.

    Raises ValueError when the result is ``base_dir`` itself or lies outside
    it (``..`` segments, absolute names, symlinks pointing away).
    """
    base_dir = Path(base_dir).resolve()
    resolved = (base_dir / relative).resolve()
    if resolved == base_dir or base_dir not in resolved.parents:
        raise ValueError(f"{relative!r} does not resolve inside {base_dir}")
    return resolved


def archive_output_dir(out_dir: Path, archive: Path) -> Path:
    """``<out_dir>/<stem>_bnl``, the extraction root for ``archive``."""
    return Path(out_dir) / f"{Path(archive).stem}_bnl"
