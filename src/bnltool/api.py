"""High-level operations behind the ``bnltool`` commands.

Each function works on paths, reports progress through the active reporter
and returns a small result dataclass; the CLI only formats those results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .archive.container import BNLFile
from .archive.errors import E_RECORD, BnlError
from .archive.inspector import inspect_bnl, validate_bnl
from .archive.raw_asset import RawAsset
from .archive.types import AssetType, type_label
from .config import BnlConfig
from .diff import diff_bnls
from .logging import get_logger
from .modding import Mod
from .reporting import get_reporter, task
from .utils.io import leaf_dirs, safe_read_file, write_file
from .utils.paths import archive_output_dir, safe_file_path

__all__ = [
    "ExtractOptions",
    "ExtractResult",
    "CreateOptions",
    "CreateResult",
    "ListOptions",
    "ModResult",
    "load_bnl",
    "save_bnl",
    "extract_bnl",
    "extract_bnls",
    "create_bnl",
    "list_assets",
    "type_summary",
    "diff_bnl_files",
    "inspect_bnl_file",
    "apply_mod",
]


@dataclass(slots=True)
class ExtractOptions:
    bnl_files: List[Path]
    output_dir: Path = Path("out")
    config: Optional[BnlConfig] = None


@dataclass(slots=True)
class ExtractResult:
    archive: Path
    output_dir: Path
    assets_written: int
    files_written: int


@dataclass(slots=True)
class CreateOptions:
    asset_dirs: List[Path]
    output_file: Path
    config: Optional[BnlConfig] = None


@dataclass(slots=True)
class CreateResult:
    output_file: Path
    asset_count: int
    bytes_written: int


@dataclass(slots=True)
class ListOptions:
    bnl_path: Path
    type_filter: Optional[str] = None
    alphabetical: bool = False
    summary: bool = False
    config: Optional[BnlConfig] = None


@dataclass(slots=True)
class ModResult:
    output_file: Path
    applied: int
    overrides: int
    bytes_written: int
    skipped: List[str] = field(default_factory=list)


def load_bnl(path: str | Path, config: Optional[BnlConfig] = None) -> BNLFile:
    p = Path(path)
    bnl = BNLFile.from_bytes(safe_read_file(p), config)
    get_reporter().summary(
        "load", file=p.name, assets=len(bnl), overlaps=len(bnl.overlaps)
    )
    return bnl


def save_bnl(bnl: BNLFile, path: str | Path) -> int:
    p = Path(path)
    written = write_file(p, bnl.to_bytes())
    get_reporter().summary("write", file=p.name, assets=len(bnl), bytes=written)
    return written


def _asset_dir(root: Path, raw: RawAsset) -> Path:
    try:
        return safe_file_path(root, raw.name)
    except ValueError as exc:
        raise BnlError(
            code=E_RECORD,
            message=f"Unsafe asset name {raw.name!r}: {exc}",
            context={"name": raw.name},
        ) from exc


def _reject_duplicate_names(bnl: BNLFile, bnl_path: Path) -> None:
    # Asset directories are keyed by name.
    seen = set()
    dupes = []
    for name in bnl.names():
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    if dupes:
        raise BnlError(
            code=E_RECORD,
            message=(
                f"Cannot extract {bnl_path.name}: duplicate asset names "
                + ", ".join(dupes)
            ),
            context={"duplicates": dupes},
        )


def extract_bnl(
    bnl_path: str | Path,
    output_dir: str | Path,
    config: Optional[BnlConfig] = None,
) -> ExtractResult:
    """Write every asset of ``bnl_path`` to ``<output_dir>/<stem>_bnl/<name>/``."""
    logger = get_logger()
    bnl_path = Path(bnl_path)
    bnl = load_bnl(bnl_path, config)
    _reject_duplicate_names(bnl, bnl_path)
    root = archive_output_dir(Path(output_dir), bnl_path)
    root.mkdir(parents=True, exist_ok=True)
    files = 0
    task_id = f"extract.{bnl_path.stem}"
    with task(task_id, f"Extract {bnl_path.name}", total=len(bnl)) as rep:
        for raw in bnl.assets:
            asset_path = _asset_dir(root, raw)
            if asset_path.is_file():
                raise FileExistsError(
                    f"Unable to write to {asset_path} "
                    "(a file already exists by that name)"
                )
            raw.to_dir(asset_path)
            files += 2 + len(raw.resource_chunks or ())
            logger.debug("Extracted %s to %s", raw.name, asset_path)
            rep.advance(task_id, current_item=raw.name, files=files)
    rep.summary(
        "extract", file=bnl_path.name, assets=len(bnl), files=files, out=str(root)
    )
    return ExtractResult(bnl_path, root, len(bnl), files)


def extract_bnls(options: ExtractOptions) -> List[ExtractResult]:
    return [
        extract_bnl(p, options.output_dir, options.config)
        for p in options.bnl_files
    ]


def create_bnl(options: CreateOptions) -> CreateResult:
    """Build an archive from extracted asset directories."""
    dirs = leaf_dirs(options.asset_dirs)
    bnl = BNLFile(config=options.config)
    with task("create.read", "Read asset directories", total=len(dirs)) as rep:
        for d in dirs:
            raw = RawAsset.from_dir(d)
            bnl.append_raw_asset(raw)
            rep.advance("create.read", current_item=raw.name)
    written = save_bnl(bnl, options.output_file)
    rep.summary(
        "create",
        file=Path(options.output_file).name,
        assets=len(bnl),
        bytes=written,
    )
    return CreateResult(Path(options.output_file), len(bnl), written)


def _matches_type(code: int, type_filter: str) -> bool:
    wanted = type_filter.strip().lower()
    if wanted.isdigit():
        return code == int(wanted)
    return type_label(code) == wanted


def list_assets(
    bnl: BNLFile,
    type_filter: Optional[str] = None,
    alphabetical: bool = False,
) -> List[RawAsset]:
    """Assets sorted by type code, or by type label with ``alphabetical``.

    Both sorts are stable, so archive order is kept within a type.
    """
    if type_filter:
        valid = {t.label for t in AssetType}
        if not type_filter.strip().isdigit() and type_filter.lower() not in valid:
            get_logger().warning("Unknown asset type filter %r", type_filter)
    assets = [
        raw
        for raw in bnl.assets
        if not type_filter or _matches_type(raw.asset_type, type_filter)
    ]
    assets.sort(key=lambda raw: raw.asset_type)
    if alphabetical:
        assets.sort(key=lambda raw: raw.type_label)
    return assets


def type_summary(assets: List[RawAsset]) -> List[str]:
    return sorted({raw.type_label for raw in assets})


def diff_bnl_files(
    left: str | Path,
    right: str | Path,
    *,
    names_only: bool = False,
    ignore_order: bool = False,
    config: Optional[BnlConfig] = None,
) -> Dict[str, Any]:
    with task("diff", "Diff archives"):
        result = diff_bnls(
            load_bnl(left, config),
            load_bnl(right, config),
            names_only=names_only,
            ignore_order=ignore_order,
        )
    return result


def inspect_bnl_file(
    path: str | Path, config: Optional[BnlConfig] = None
) -> Tuple[Dict[str, Any], List[str]]:
    config = config or BnlConfig()
    info = inspect_bnl(safe_read_file(Path(path)), config.layout)
    info["path"] = str(path)
    return info, validate_bnl(info)


def apply_mod(
    bnl_path: str | Path,
    mod_dir: str | Path,
    output_file: str | Path,
    config: Optional[BnlConfig] = None,
) -> ModResult:
    bnl = load_bnl(bnl_path, config)
    mod = Mod.from_dir(Path(mod_dir))
    skipped = sorted(aid for aid in mod.overrides if bnl.get_raw_asset(aid) is None)
    applied = mod.apply(bnl)
    written = save_bnl(bnl, output_file)
    get_reporter().summary(
        "mod",
        mod=mod.spec.name,
        applied=applied,
        overrides=len(mod.overrides),
        bytes=written,
    )
    return ModResult(
        Path(output_file), applied, len(mod.overrides), written, skipped
    )
