from __future__ import annotations

from typing import Optional

NODATA = -9999


class GtopoError(Exception):
    """Base class for every failure raised by this package."""


class OutOfRangeError(GtopoError, ValueError):
    """Coordinates outside the globe, or no tile matches."""

    def __init__(self, lat: float, lon: float, msg: Optional[str] = None):
        self.lat = lat
        self.lon = lon
        super().__init__(msg or f"no GTOPO30 tile for lat={lat!r} lon={lon!r}")


class GtopoIOError(GtopoError, OSError):
    """File missing, unreadable or short."""

    def __init__(self, path: object, msg: str):
        self.path = str(path)
        super().__init__(f"{self.path}: {msg}")


class HeaderParseError(GtopoError, ValueError):
    """A recognized .HDR key carries a malformed numeric value."""

    def __init__(self, key: str, value: str, path: Optional[object] = None):
        self.key = key
        self.value = value
        self.path = None if path is None else str(path)
        where = f"{self.path}: " if self.path else ""
        super().__init__(f"{where}error parsing {key}: {value!r}")


class InvalidGeometryError(GtopoError, ValueError):
    """Header geometry is missing a required field or breaks an invariant."""


class OutOfBoundsError(GtopoError, IndexError):
    """Pixel index computed from the coordinates falls outside the grid."""

    def __init__(self, row: int, col: int, nrows: int, ncols: int):
        self.row = row
        self.col = col
        self.nrows = nrows
        self.ncols = ncols
        super().__init__(f"coordinates out of bounds: row={row} col={col} grid={nrows}x{ncols}")


class QueryError(GtopoError):
    """
    Failure of a full elevation query, tagged with the phase that failed
    ("locate", "header", "sample"). The underlying error is __cause__.
    """
    PHASES = ("locate", "header", "sample")

    def __init__(self, phase: str, lat: float, lon: float, cause: BaseException,
                 tile_id: Optional[str] = None):
        if phase not in self.PHASES:
            raise ValueError(f"unknown phase {phase!r}")
        self.phase = phase
        self.lat = lat
        self.lon = lon
        self.tile_id = tile_id
        self.elevation = NODATA
        tile = f" tile={tile_id}" if tile_id else ""
        super().__init__(f"{phase} failed for lat={lat!r} lon={lon!r}{tile}: {cause}")
