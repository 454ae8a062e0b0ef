from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from common.config import GtopoConfig, load_config
from common.logging_setup import get_logger, setup_logging
from gtopo30.errors import NODATA, GtopoError, QueryError
from gtopo30.header import read_header
from gtopo30.sampler import sample
from gtopo30.tiles import ALL_TILE_IDS, locate, tile_paths

log = get_logger(__name__)


def lookup_elevation(lat: float, lon: float, base_dir: str | Path,
                     center_registered: bool = False) -> int:
    """
    Elevation (m) at lat/lon from the GTOPO30 tiles in base_dir.

    locate -> <base>/<ID>.HDR -> <base>/<ID>.DEM. Any failure is re-raised
    as QueryError tagged with the phase; the underlying error is __cause__.
    """
    try:
        tile_id = locate(lat, lon)
    except GtopoError as e:
        raise QueryError("locate", lat, lon, e) from e

    hdr_path, dem_path = tile_paths(base_dir, tile_id)
    try:
        geometry = read_header(hdr_path)
    except GtopoError as e:
        raise QueryError("header", lat, lon, e, tile_id=tile_id) from e

    try:
        elev = sample(dem_path, geometry, lat, lon, center_registered=center_registered)
    except GtopoError as e:
        raise QueryError("sample", lat, lon, e, tile_id=tile_id) from e

    log.debug("elevation", extra={"lat": lat, "lon": lon, "tile": tile_id, "elev_m": elev})
    return elev


def get_elevation(lat: float, lon: float, base_dir: str | Path,
                  center_registered: bool = False) -> Tuple[int, Optional[QueryError]]:
    """
    (elevation_m, None) on success, (-9999, QueryError) on failure.
    """
    try:
        return lookup_elevation(lat, lon, base_dir, center_registered=center_registered), None
    except QueryError as e:
        log.warning(
            "elevation query failed",
            extra={"phase": e.phase, "lat": lat, "lon": lon, "tile": e.tile_id, "error": str(e.__cause__)},
        )
        return NODATA, e


class GtopoTileSet:
    """
    A directory of GTOPO30 tiles:

        base_dir/
          ├─ W020N40.HDR
          ├─ W020N40.DEM
          └─ ...

    Every query re-reads the header and the sample; nothing is cached.
    """

    def __init__(self, base_dir: str | Path = "data/gtopo30", center_registered: bool = False,
                 nodata: int = NODATA):
        self.base_dir = Path(base_dir)
        self.center_registered = center_registered
        self.nodata = nodata

    @classmethod
    def from_config(cls, config: GtopoConfig | str | Path | None = None) -> "GtopoTileSet":
        """Build from a GtopoConfig, or from a YAML path (default config/gtopo30.yaml)."""
        if not isinstance(config, GtopoConfig):
            config = load_config(config) if config is not None else load_config()
        if config.log_level:
            setup_logging(config.log_level, force=True)
        return cls(config.base_dir, center_registered=config.center_registered, nodata=config.nodata)

    def available_tiles(self) -> List[str]:
        """Tile ids whose .HDR and .DEM are both present."""
        out: List[str] = []
        for tile_id in ALL_TILE_IDS:
            hdr, dem = tile_paths(self.base_dir, tile_id)
            if hdr.is_file() and dem.is_file():
                out.append(tile_id)
        return out

    def elevation(self, lat: float, lon: float) -> Tuple[int, Optional[QueryError]]:
        elev, err = get_elevation(lat, lon, self.base_dir, center_registered=self.center_registered)
        return (self.nodata, err) if err is not None else (elev, None)

    def sample_many(self, coords: Iterable[Tuple[float, float]]) -> List[Tuple[float, float, int]]:
        """
        (lon, lat, elev_m) for each (lon, lat); failed points carry the nodata value.
        """
        out: List[Tuple[float, float, int]] = []
        for lon, lat in coords:
            elev, _ = self.elevation(lat, lon)
            out.append((lon, lat, elev))
        return out
