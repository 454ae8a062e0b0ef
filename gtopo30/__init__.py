"""
GTOPO30 point elevation lookup

- Picks one of the 33 GTOPO30 tiles for a lat/lon (tiles.locate)
- Parses the tile's ASCII .HDR descriptor (header.read_header)
- Reads one signed 16-bit sample out of the .DEM raster (sampler.sample)
- get_elevation() chains the three and returns (meters, error)
"""

from gtopo30.errors import (
    GtopoError,
    GtopoIOError,
    HeaderParseError,
    InvalidGeometryError,
    OutOfBoundsError,
    OutOfRangeError,
    QueryError,
)
from gtopo30.header import TileGeometry, read_header
from gtopo30.query import GtopoTileSet, get_elevation, lookup_elevation
from gtopo30.sampler import sample
from gtopo30.tiles import ALL_TILE_IDS, locate

__all__ = [
    "ALL_TILE_IDS",
    "GtopoError",
    "GtopoIOError",
    "GtopoTileSet",
    "HeaderParseError",
    "InvalidGeometryError",
    "OutOfBoundsError",
    "OutOfRangeError",
    "QueryError",
    "TileGeometry",
    "get_elevation",
    "locate",
    "lookup_elevation",
    "read_header",
    "sample",
]
