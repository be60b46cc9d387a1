"""Tool configuration (YAML or JSON file plus environment overrides)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .archive.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_NAME_SIZE,
    OVERLAP_POLICIES,
)
from .archive.errors import E_CONFIG, ConfigError
from .archive.records import RecordLayout

__all__ = ["BnlConfig", "load_config", "ENV_PREFIX"]

ENV_PREFIX = "BNLTOOL_"
_ENV_KEYS = ("name_size", "compression_level", "overlap_policy")


@dataclass(slots=True)
class BnlConfig:
    name_size: int = DEFAULT_NAME_SIZE
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    overlap_policy: str = "warn"
    verify_resource_size: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.name_size, int) or self.name_size <= 0:
            raise ConfigError(
                code=E_CONFIG,
                message=f"name_size must be a positive integer (got {self.name_size!r})",
            )
        if not isinstance(self.compression_level, int) or not (
            -1 <= self.compression_level <= 9
        ):
            raise ConfigError(
                code=E_CONFIG,
                message=(
                    "compression_level must be between -1 and 9 "
                    f"(got {self.compression_level!r})"
                ),
            )
        if self.overlap_policy not in OVERLAP_POLICIES:
            raise ConfigError(
                code=E_CONFIG,
                message=(
                    f"overlap_policy must be one of {', '.join(OVERLAP_POLICIES)} "
                    f"(got {self.overlap_policy!r})"
                ),
            )

    @property
    def layout(self) -> RecordLayout:
        return RecordLayout(self.name_size)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BnlConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                code=E_CONFIG,
                message=f"Unknown configuration keys: {', '.join(unknown)}",
                context={"keys": unknown},
            )
        return cls(**dict(data))


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _ENV_KEYS:
        raw = environ.get(ENV_PREFIX + key.upper())
        if raw is None or raw == "":
            continue
        if key == "overlap_policy":
            out[key] = raw.strip().lower()
            continue
        try:
            out[key] = int(raw, 0)
        except ValueError:
            raise ConfigError(
                code=E_CONFIG,
                message=f"{ENV_PREFIX}{key.upper()} must be an integer (got {raw!r})",
            ) from None
    return out


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(
            code=E_CONFIG,
            message=f"Config file not found: {path}",
            context={"path": str(path)},
        )
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(
            code=E_CONFIG,
            message=f"Unable to parse {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            code=E_CONFIG,
            message="Root of configuration must be a mapping",
            context={"path": str(path)},
        )
    return data


def load_config(
    path: str | Path | None = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> BnlConfig:
    """Defaults, then ``path`` (if given), then ``BNLTOOL_*`` variables."""
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(_read_config_file(Path(path)))
    data.update(_env_overrides(os.environ if environ is None else environ))
    return BnlConfig.from_mapping(data)
