from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "config/gtopo30.yaml"
NODATA = -9999


@dataclass(slots=True)
class GtopoConfig:
    """
    Settings for a GTOPO30 tile directory.

    Attributes:
        base_dir: directory holding the <TILEID>.HDR / <TILEID>.DEM pairs.
        nodata: sentinel returned alongside errors (matches the tiles' NODATA).
        center_registered: treat ULXMAP/ULYMAP as pixel centers (half-pixel
            shift) instead of corners.
        log_level: optional level name handed to setup_logging().
    """
    base_dir: str = "data/gtopo30"
    nodata: int = NODATA
    center_registered: bool = False
    log_level: Optional[str] = None

    def __post_init__(self) -> None:
        self.base_dir = str(self.base_dir)
        self.nodata = int(self.nodata)
        self.center_registered = bool(self.center_registered)

    @property
    def base_path(self) -> Path:
        return Path(self.base_dir)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GtopoConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"unknown gtopo30 config keys: {', '.join(unknown)}")
        return cls(**d)


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> GtopoConfig:
    """
    Load the `gtopo30:` section of a YAML file.
    A missing file yields defaults; an empty section too.
    """
    p = Path(path)
    if not p.exists():
        return GtopoConfig()
    with p.open("r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}
    if not isinstance(doc, dict):
        raise ValueError(f"{p}: expected a YAML mapping at top level")
    section = doc.get("gtopo30") or {}
    if not isinstance(section, dict):
        raise ValueError(f"{p}: 'gtopo30' must be a mapping")
    return GtopoConfig.from_dict(section)
