"""Mod overlays: directories of asset overrides applied onto an archive.

Layout::

    <mod>/mod.json                      {"version": 1, "name": "..."}
    <mod>/overrides/<aid>/override.txt  replacement for asset <aid>

``<aid>`` follows ``aid_<type>_<category>_<group>_<entry>``. Only aidlist
overrides are understood; other known types are skipped with a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
import re
from typing import Dict, List, Optional

from .archive.container import BNLFile
from .archive.errors import E_MOD, BnlError, ModError
from .archive.types import AssetType
from .assets.aidlist import AidList
from .logging import get_logger

__all__ = [
    "AID_PATTERN",
    "MOD_FILE",
    "OVERRIDES_DIR",
    "OVERRIDE_FILE",
    "AssetId",
    "ModSpecification",
    "AssetOverride",
    "Mod",
    "parse_aid",
]

AID_PATTERN = re.compile(r"^aid_([a-z0-9]+)_([a-z0-9]+)_([a-z0-9]+)_([a-z0-9]+)$")
MOD_FILE = "mod.json"
OVERRIDES_DIR = "overrides"
OVERRIDE_FILE = "override.txt"


@dataclass(frozen=True, slots=True)
class AssetId:
    asset_type: AssetType
    category: str
    group: str
    entry: str


def parse_aid(aid: str) -> AssetId:
    m = AID_PATTERN.match(aid)
    if not m:
        raise ModError(
            code=E_MOD,
            message=(
                f"Asset name {aid} did not match AID pattern "
                "(aid_[TYPE]_[CATEGORY]_[GROUP]_[ENTRY])"
            ),
            context={"aid": aid},
        )
    raw_type, category, group, entry = m.groups()
    try:
        asset_type = AssetType.from_label(raw_type)
    except ValueError:
        raise ModError(
            code=E_MOD,
            message=f"Asset type {raw_type} does not match any known type",
            context={"aid": aid},
        ) from None
    return AssetId(asset_type, category, group, entry)


@dataclass(slots=True)
class ModSpecification:
    version: int
    name: str

    @classmethod
    def from_file(cls, path: Path) -> "ModSpecification":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ModError(
                code=E_MOD,
                message=f"Unable to parse {path}: {exc}",
                context={"path": str(path)},
            ) from exc
        if (
            not isinstance(data, dict)
            or not isinstance(data.get("version"), int)
            or not isinstance(data.get("name"), str)
        ):
            raise ModError(
                code=E_MOD,
                message=f"{path} must define integer 'version' and string 'name'",
                context={"path": str(path)},
            )
        return cls(version=data["version"], name=data["name"])


@dataclass(slots=True)
class AssetOverride:
    descriptor_bytes: bytes
    resource_chunks: Optional[List[bytes]] = None


@dataclass(slots=True)
class Mod:
    spec: ModSpecification
    overrides: Dict[str, AssetOverride] = field(default_factory=dict)

    @classmethod
    def from_dir(cls, mod_dir: Path) -> "Mod":
        logger = get_logger()
        mod_dir = Path(mod_dir)
        spec_path = mod_dir / MOD_FILE
        if not spec_path.is_file():
            raise ModError(
                code=E_MOD,
                message=f"Unable to find root {MOD_FILE} file in {mod_dir}",
                context={"path": str(mod_dir)},
            )
        overrides_dir = mod_dir / OVERRIDES_DIR
        if not overrides_dir.is_dir():
            raise ModError(
                code=E_MOD,
                message=f"Unable to find {OVERRIDES_DIR} directory in {mod_dir}",
                context={"path": str(mod_dir)},
            )
        spec = ModSpecification.from_file(spec_path)

        overrides: Dict[str, AssetOverride] = {}
        for override_dir in sorted(overrides_dir.iterdir()):
            if not override_dir.is_dir():
                continue
            aid = override_dir.name
            asset_id = parse_aid(aid)
            if asset_id.asset_type is not AssetType.AIDLIST:
                logger.warning(
                    "Skipping override %s: %s overrides are not supported",
                    aid,
                    asset_id.asset_type.label,
                )
                continue
            if aid in overrides:
                raise ModError(
                    code=E_MOD,
                    message=f"Asset {aid} has already been overridden",
                    context={"aid": aid},
                )
            text_path = override_dir / OVERRIDE_FILE
            if not text_path.is_file():
                raise ModError(
                    code=E_MOD,
                    message=f"Missing {OVERRIDE_FILE} for {aid}",
                    context={"path": str(override_dir)},
                )
            aid_list = AidList.from_text(text_path.read_text(encoding="utf-8"))
            try:
                descriptor = aid_list.get_descriptor().to_bytes()
            except BnlError as exc:
                raise ModError(
                    code=E_MOD,
                    message=f"Unable to encode override {aid}: {exc.message}",
                    context={"aid": aid},
                ) from exc
            overrides[aid] = AssetOverride(descriptor_bytes=descriptor)
        logger.info("Loaded mod %s v%d (%d overrides)", spec.name, spec.version, len(overrides))
        return cls(spec=spec, overrides=overrides)

    def apply(self, bnl: BNLFile) -> int:
        """Replace every overridden asset present in ``bnl``; return how many.

        Each replaced asset is removed and re-appended, so it moves to the end
        of the archive. Overrides for assets missing from ``bnl`` are skipped.
        """
        logger = get_logger()
        applied = 0
        for aid, override in self.overrides.items():
            raw = bnl.get_raw_asset(aid)
            if raw is None:
                logger.info("Override %s has no matching asset", aid)
                continue
            raw = bnl.remove_asset(aid)
            raw.descriptor_bytes = override.descriptor_bytes
            if override.resource_chunks is not None:
                raw.resource_chunks = list(override.resource_chunks)
            bnl.append_raw_asset(raw)
            applied += 1
        return applied
