from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from common.geo import in_geographic_domain
from gtopo30.errors import OutOfRangeError


@dataclass(frozen=True)
class Slice:
    """
    Degree interval with the label it contributes to a tile id. contains()
    tests [lo, hi), or [lo, hi] with closed_hi; latitude bands are matched
    closed by _pick_band().
    """
    lo: float
    hi: float
    label: str

    def contains(self, v: float, closed_hi: bool = False) -> bool:
        return self.lo <= v < self.hi or (closed_hi and v == self.hi)


# Latitude bands, north to south. The first band whose closed interval holds
# the latitude wins, so lat=40 lands in N90 and lat=-10 in N40.
LAT_BANDS: Tuple[Slice, ...] = (
    Slice(40, 90, "N90"),
    Slice(-10, 40, "N40"),
    Slice(-60, -10, "S10"),
    Slice(-90, -60, "S60"),
)

# 40-degree longitude slices used north of -60.
LON_SLICES_40: Tuple[Slice, ...] = (
    Slice(-180, -140, "W180"),
    Slice(-140, -100, "W140"),
    Slice(-100, -60, "W100"),
    Slice(-60, -20, "W060"),
    Slice(-20, 20, "W020"),
    Slice(20, 60, "E020"),
    Slice(60, 100, "E060"),
    Slice(100, 140, "E100"),
    Slice(140, 180, "E140"),
)

# Antarctica is cut into 60-degree slices.
LON_SLICES_60: Tuple[Slice, ...] = (
    Slice(-180, -120, "W180"),
    Slice(-120, -60, "W120"),
    Slice(-60, 0, "W060"),
    Slice(0, 60, "W000"),
    Slice(60, 120, "E060"),
    Slice(120, 180, "E120"),
)

POLAR_BAND = "S60"


def _slices_for(band: Slice) -> Tuple[Slice, ...]:
    return LON_SLICES_60 if band.label == POLAR_BAND else LON_SLICES_40


def _build_index() -> Dict[str, Tuple[float, float, float, float]]:
    index: Dict[str, Tuple[float, float, float, float]] = {}
    for band in LAT_BANDS:
        for sl in _slices_for(band):
            # (lon_min, lat_min, lon_max, lat_max)
            index[sl.label + band.label] = (float(sl.lo), float(band.lo), float(sl.hi), float(band.hi))
    return index


_TILE_BOUNDS = _build_index()

ALL_TILE_IDS: Tuple[str, ...] = tuple(_TILE_BOUNDS)


def _pick_band(lat: float) -> Slice | None:
    """First band, north to south, whose closed interval [lo, hi] holds lat."""
    for band in LAT_BANDS:
        if band.lo <= lat <= band.hi:
            return band
    return None


def _pick_slice(slices: Tuple[Slice, ...], lon: float) -> Slice | None:
    """Slice holding lon; [lo, hi) except the easternmost, which is closed."""
    last = len(slices) - 1
    for i, sl in enumerate(slices):
        if sl.contains(lon, closed_hi=(i == last)):
            return sl
    return None


def locate(lat: float, lon: float) -> str:
    """
    Return the GTOPO30 tile id (e.g. 'W020N40') covering lat/lon (WGS84 degrees).

    Raises OutOfRangeError for coordinates outside [-90, 90] x [-180, 180]
    (NaN included).
    """
    if not in_geographic_domain(lat, lon):
        raise OutOfRangeError(lat, lon)
    band = _pick_band(lat)
    if band is None:
        raise OutOfRangeError(lat, lon)
    sl = _pick_slice(_slices_for(band), lon)
    if sl is None:
        raise OutOfRangeError(lat, lon)
    return sl.label + band.label


def tile_bounds(tile_id: str) -> Tuple[float, float, float, float]:
    """(lon_min, lat_min, lon_max, lat_max) of a tile, in degrees."""
    try:
        return _TILE_BOUNDS[tile_id]
    except KeyError:
        raise OutOfRangeError(float("nan"), float("nan"), f"unknown GTOPO30 tile id {tile_id!r}") from None


def tile_paths(base_dir: str | Path, tile_id: str) -> Tuple[Path, Path]:
    """Paths of the <ID>.HDR and <ID>.DEM pair under base_dir."""
    base = Path(base_dir)
    return base / f"{tile_id}.HDR", base / f"{tile_id}.DEM"
