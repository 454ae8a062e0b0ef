from __future__ import annotations

import math
from typing import Tuple


# -------------------------
# Pixel/Geo helpers for north-up lat/lon rasters
# -------------------------
def geo2pix(lon: float, lat: float, origin_lon: float, origin_lat: float,
            dx: float, dy: float) -> Tuple[float, float]:
    """
    Fractional (col, row) of lon/lat in a north-up grid.

    origin_lon/origin_lat is the reference point of pixel (0, 0); dx/dy are
    positive degrees per pixel (rows grow southward).
    """
    col = (lon - origin_lon) / dx
    row = (origin_lat - lat) / dy
    return col, row


def pix2geo(col: float, row: float, origin_lon: float, origin_lat: float,
            dx: float, dy: float) -> Tuple[float, float]:
    """Inverse of geo2pix(): lon/lat (deg) of a (col, row) position."""
    return origin_lon + col * dx, origin_lat - row * dy


INDEX_SNAP = 1e-9


def floor_index(v: float) -> int:
    """
    Floor toward -inf; int() would truncate negatives toward zero.
    Values within INDEX_SNAP of an integer snap to it first, so a point on a
    pixel edge is not pushed one pixel back by rounding in the division.
    """
    nearest = round(v)
    if abs(v - nearest) < INDEX_SNAP:
        return int(nearest)
    return int(math.floor(v))


def is_finite_latlon(lat: float, lon: float) -> bool:
    return math.isfinite(lat) and math.isfinite(lon)


def in_geographic_domain(lat: float, lon: float) -> bool:
    """WGS84 decimal degrees: lat in [-90, 90], lon in [-180, 180]."""
    return is_finite_latlon(lat, lon) and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
