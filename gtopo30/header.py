from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import rasterio

from common.geo import pix2geo
from common.logging_setup import get_logger
from gtopo30.errors import GtopoIOError, HeaderParseError, InvalidGeometryError

log = get_logger(__name__)

BIG_ENDIAN = "M"
LITTLE_ENDIAN = "L"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _parse_int(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(value)
    return int(value)


def _parse_float(value: str) -> float:
    if "_" in value:
        raise ValueError(value)
    return float(value)


def _parse_byte_order(value: str) -> str:
    return BIG_ENDIAN if value == BIG_ENDIAN else LITTLE_ENDIAN


# HDR key -> (TileGeometry attribute, value parser)
HEADER_KEYS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "BYTEORDER": ("byte_order", _parse_byte_order),
    "LAYOUT": ("layout", str),
    "NROWS": ("nrows", _parse_int),
    "NCOLS": ("ncols", _parse_int),
    "NBANDS": ("nbands", _parse_int),
    "NBITS": ("nbits", _parse_int),
    "BANDROWBYTES": ("band_row_bytes", _parse_int),
    "TOTALROWBYTES": ("total_row_bytes", _parse_int),
    "BANDGAPBYTES": ("band_gap_bytes", _parse_int),
    "NODATA": ("nodata", _parse_int),
    "ULXMAP": ("ulxmap", _parse_float),
    "ULYMAP": ("ulymap", _parse_float),
    "XDIM": ("xdim", _parse_float),
    "YDIM": ("ydim", _parse_float),
}


@dataclass(slots=True)
class TileGeometry:
    """
    Geometry of one GTOPO30 tile as described by its .HDR file.

    Attributes:
        byte_order: "M" (big-endian, Motorola) or "L" (little-endian), as
            declared; samples are decoded big-endian regardless.
        layout: band interleave, "BIL" for GTOPO30.
        nrows, ncols: grid dimensions.
        nbands, nbits: band count and bits per sample (1 and 16 in practice).
        band_row_bytes, total_row_bytes, band_gap_bytes: BIL row layout.
        nodata: sentinel sample value (-9999 for ocean).
        ulxmap, ulymap: lon/lat of the upper-left pixel center.
        xdim, ydim: pixel size in degrees.

    Fields stay None when the header omits them; validate() decides
    whether the record is usable.
    """
    byte_order: str = BIG_ENDIAN
    layout: Optional[str] = None
    nrows: Optional[int] = None
    ncols: Optional[int] = None
    nbands: Optional[int] = None
    nbits: Optional[int] = None
    band_row_bytes: Optional[int] = None
    total_row_bytes: Optional[int] = None
    band_gap_bytes: Optional[int] = None
    nodata: Optional[int] = None
    ulxmap: Optional[float] = None
    ulymap: Optional[float] = None
    xdim: Optional[float] = None
    ydim: Optional[float] = None

    REQUIRED = ("nrows", "ncols", "ulxmap", "ulymap", "xdim", "ydim")

    def validate(self) -> "TileGeometry":
        """Check the fields needed for pixel lookup. Returns self."""
        missing = [name for name in self.REQUIRED if getattr(self, name) is None]
        if missing:
            raise InvalidGeometryError(f"header is missing {', '.join(missing)}")
        if self.nrows <= 0 or self.ncols <= 0:
            raise InvalidGeometryError(f"grid must be non-empty (nrows={self.nrows}, ncols={self.ncols})")
        if not (self.xdim > 0 and self.ydim > 0):
            raise InvalidGeometryError(f"pixel size must be positive (xdim={self.xdim}, ydim={self.ydim})")
        if self.nbits is not None and (self.nbits <= 0 or self.nbits % 8 != 0):
            raise InvalidGeometryError(f"NBITS must be a positive multiple of 8 (got {self.nbits})")
        if self.nbands is not None and self.nbands <= 0:
            raise InvalidGeometryError(f"NBANDS must be positive (got {self.nbands})")
        if self.total_row_bytes is not None and self.total_row_bytes < self.ncols * self.bytes_per_sample:
            raise InvalidGeometryError(
                f"TOTALROWBYTES={self.total_row_bytes} is smaller than one row of samples"
            )
        return self

    # ---- derived views ----

    @property
    def bytes_per_sample(self) -> int:
        return (self.nbits or 16) // 8

    @property
    def band_count(self) -> int:
        return self.nbands or 1

    @property
    def row_stride(self) -> int:
        """Bytes from the start of one row to the next."""
        if self.total_row_bytes:
            return self.total_row_bytes
        return self.ncols * self.bytes_per_sample * self.band_count

    @property
    def expected_size(self) -> int:
        """Exact .DEM size in bytes when BANDGAPBYTES is 0."""
        return self.nrows * self.ncols * self.bytes_per_sample * self.band_count

    @property
    def dtype(self) -> str:
        """
        numpy dtype string of one sample. GTOPO30 DEMs are decoded big-endian
        whatever BYTEORDER says; byte_order is kept as header metadata only.
        """
        return f">i{self.bytes_per_sample}"

    @property
    def transform(self) -> rasterio.Affine:
        """
        Affine (col, row) -> (lon, lat), with ULXMAP/ULYMAP used as the
        upper-left corner the way the sampler indexes pixels.
        """
        return rasterio.Affine(self.xdim, 0.0, self.ulxmap, 0.0, -self.ydim, self.ulymap)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        # [lon_min, lat_min, lon_max, lat_max]
        lon_max, lat_min = pix2geo(self.ncols, self.nrows, self.ulxmap, self.ulymap, self.xdim, self.ydim)
        return (self.ulxmap, lat_min, lon_max, self.ulymap)

    def pixel_to_lat_lon(self, row: int, col: int) -> Tuple[float, float]:
        lon, lat = self.transform * (col, row)
        return lat, lon

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_header(lines: Iterable[str], source: Optional[object] = None) -> TileGeometry:
    """
    Build a TileGeometry from `KEY VALUE` lines.

    Unknown keys and lines that are not exactly two tokens are skipped.
    A duplicated key keeps its last value. A malformed number for a known
    key raises HeaderParseError.
    """
    geom = TileGeometry()
    for line in lines:
        parts = line.split()
        if len(parts) != 2:
            continue
        key, value = parts
        entry = HEADER_KEYS.get(key)
        if entry is None:
            continue
        attr, parse = entry
        try:
            setattr(geom, attr, parse(value))
        except ValueError:
            raise HeaderParseError(key, value, source) from None
    return geom


def read_header(path: str | Path) -> TileGeometry:
    """Read and parse a .HDR file. File access failures raise GtopoIOError."""
    p = Path(path)
    try:
        with p.open("r", encoding="ascii", errors="replace") as f:
            geom = parse_header(f, source=p)
    except OSError as e:
        raise GtopoIOError(p, e.strerror or str(e)) from e
    log.debug("header parsed", extra={"path": str(p), "nrows": geom.nrows, "ncols": geom.ncols})
    return geom
