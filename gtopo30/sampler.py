from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Tuple

import numpy as np

from common.geo import floor_index, geo2pix, is_finite_latlon
from common.logging_setup import get_logger
from gtopo30.errors import GtopoIOError, InvalidGeometryError, OutOfBoundsError, OutOfRangeError
from gtopo30.header import TileGeometry

log = get_logger(__name__)

SUPPORTED_NBITS = 16


def _check_geometry(geometry: TileGeometry) -> None:
    if (geometry.nbits or SUPPORTED_NBITS) != SUPPORTED_NBITS:
        raise InvalidGeometryError(f"only 16-bit samples are supported (NBITS={geometry.nbits})")
    geometry.validate()


def _check_size(f: BinaryIO, path: Path, geometry: TileGeometry) -> None:
    """
    A file shorter than the header promises is an I/O error. With no row
    padding and no band gap the size must match exactly.
    """
    size = os.fstat(f.fileno()).st_size
    packed = (
        not geometry.band_gap_bytes
        and geometry.row_stride == geometry.ncols * geometry.bytes_per_sample * geometry.band_count
    )
    required = geometry.expected_size if packed else geometry.nrows * geometry.row_stride
    if size < required:
        raise GtopoIOError(path, f"short DEM file: {size} bytes, header needs {required}")
    if packed and size != required:
        raise InvalidGeometryError(f"{path}: DEM is {size} bytes, header describes {required}")


def _open(path: Path) -> BinaryIO:
    try:
        return path.open("rb")
    except OSError as e:
        raise GtopoIOError(path, e.strerror or str(e)) from e


def pixel_index(geometry: TileGeometry, lat: float, lon: float,
                center_registered: bool = False) -> Tuple[int, int]:
    """
    (row, col) of the pixel holding lat/lon.

    By default ULXMAP/ULYMAP are treated as the upper-left pixel corner:
      col = floor((lon - ulxmap) / xdim), row = floor((ulymap - lat) / ydim)
    center_registered=True honours them as pixel centers (half-pixel shift).
    No bounds check; the result may lie outside the grid.
    """
    if not is_finite_latlon(lat, lon):
        raise OutOfRangeError(lat, lon)
    col_f, row_f = geo2pix(lon, lat, geometry.ulxmap, geometry.ulymap, geometry.xdim, geometry.ydim)
    if center_registered:
        col_f += 0.5
        row_f += 0.5
    if not is_finite_latlon(row_f, col_f):
        raise OutOfRangeError(lat, lon, f"pixel index overflow for lat={lat!r} lon={lon!r}")
    return floor_index(row_f), floor_index(col_f)


def read_grid(dem_path: str | Path, geometry: TileGeometry) -> np.ndarray:
    """
    Load the whole first band as an (nrows, ncols) native int16 array.
    Rows are read with the header's stride so BIL padding and extra bands
    are skipped.
    """
    _check_geometry(geometry)
    path = Path(dem_path)
    bps = geometry.bytes_per_sample
    with _open(path) as f:
        _check_size(f, path, geometry)
        try:
            raw = np.fromfile(f, dtype=np.uint8, count=geometry.nrows * geometry.row_stride)
        except OSError as e:
            raise GtopoIOError(path, str(e)) from e
    if raw.size < geometry.nrows * geometry.row_stride:
        raise GtopoIOError(path, "short read")
    rows = raw.reshape(geometry.nrows, geometry.row_stride)[:, : geometry.ncols * bps]
    grid = np.ascontiguousarray(rows).view(geometry.dtype).reshape(geometry.nrows, geometry.ncols)
    return grid.astype(np.int16)


def sample(dem_path: str | Path, geometry: TileGeometry, lat: float, lon: float,
           center_registered: bool = False) -> int:
    """
    Elevation (m) of the pixel holding lat/lon.

    Seeks straight to the sample instead of loading the grid; the result is
    the same as read_grid(...)[row, col]. NODATA is returned as-is.

    Raises:
        InvalidGeometryError: header lacks fields or breaks an invariant.
        GtopoIOError: DEM missing, unreadable or short.
        OutOfBoundsError: lat/lon maps outside the grid.
    """
    _check_geometry(geometry)
    path = Path(dem_path)
    bps = geometry.bytes_per_sample
    with _open(path) as f:
        _check_size(f, path, geometry)
        row, col = pixel_index(geometry, lat, lon, center_registered=center_registered)
        if not (0 <= row < geometry.nrows and 0 <= col < geometry.ncols):
            raise OutOfBoundsError(row, col, geometry.nrows, geometry.ncols)
        try:
            f.seek(row * geometry.row_stride + col * bps)
            raw = f.read(bps)
        except OSError as e:
            raise GtopoIOError(path, str(e)) from e
    if len(raw) != bps:
        raise GtopoIOError(path, f"short read at row={row} col={col}")
    value = int(np.frombuffer(raw, dtype=geometry.dtype)[0])
    log.debug("sampled", extra={"dem": str(path), "row": row, "col": col, "elev_m": value})
    return value
