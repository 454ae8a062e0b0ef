"""
Unit tests for the elevation sampler
"""

import numpy as np
import pytest

from gtopo30.errors import GtopoIOError, InvalidGeometryError, OutOfBoundsError, OutOfRangeError
from gtopo30.header import TileGeometry, read_header
from gtopo30.sampler import pixel_index, read_grid, sample


@pytest.fixture
def tile_2x2(write_tile):
    """ulxmap=0.5, ulymap=1.5, 1-degree pixels, DEM [10, 20, 30, 40]"""
    hdr, dem = write_tile("TEST", [[10, 20], [30, 40]], ulxmap=0.5, ulymap=1.5, xdim=1.0, ydim=1.0)
    return read_header(hdr), dem


class TestSample:
    """Test cases for sample()"""

    def test_upper_left_and_lower_right(self, tile_2x2):
        g, dem = tile_2x2
        assert sample(dem, g, 1.5, 0.5) == 10
        assert sample(dem, g, 0.5, 1.5) == 40

    def test_each_cell(self, tile_2x2):
        g, dem = tile_2x2
        assert sample(dem, g, 1.2, 1.7) == 20
        assert sample(dem, g, 0.3, 0.6) == 30

    def test_nodata_returned_as_is(self, write_tile):
        hdr, dem = write_tile("TEST", [[-9999, 5]])
        assert sample(dem, read_header(hdr), 0.5, 0.5) == -9999

    def test_negative_elevations(self, write_tile):
        hdr, dem = write_tile("TEST", [[-400, -32768], [32767, 0]])
        g = read_header(hdr)
        assert sample(dem, g, 1.5, 0.5) == -400
        assert sample(dem, g, 1.5, 1.5) == -32768
        assert sample(dem, g, 0.5, 0.5) == 32767

    @pytest.mark.parametrize(
        "lat, lon",
        [(2.0, 0.5), (1.5, 0.4), (-0.5, 0.5), (1.5, 2.5), (100.0, 100.0), (-0.51, 0.5)],
    )
    def test_outside_grid(self, tile_2x2, lat, lon):
        g, dem = tile_2x2
        with pytest.raises(OutOfBoundsError):
            sample(dem, g, lat, lon)

    def test_exclusive_east_and_south_edge(self, tile_2x2):
        g, dem = tile_2x2
        with pytest.raises(OutOfBoundsError) as exc:
            sample(dem, g, 1.5, 2.5)
        assert (exc.value.row, exc.value.col) == (0, 2)

    def test_missing_dem(self, tile_2x2, tmp_path):
        g, _ = tile_2x2
        with pytest.raises(GtopoIOError):
            sample(tmp_path / "NONE.DEM", g, 1.5, 0.5)

    def test_short_dem(self, tile_2x2):
        g, dem = tile_2x2
        dem.write_bytes(dem.read_bytes()[:6])
        with pytest.raises(GtopoIOError, match="short"):
            sample(dem, g, 1.5, 0.5)

    def test_oversized_dem(self, tile_2x2):
        g, dem = tile_2x2
        dem.write_bytes(dem.read_bytes() + b"\x00\x00")
        with pytest.raises(InvalidGeometryError):
            sample(dem, g, 1.5, 0.5)

    def test_incomplete_geometry(self, tile_2x2):
        _, dem = tile_2x2
        with pytest.raises(InvalidGeometryError):
            sample(dem, TileGeometry(nrows=2, ncols=2), 1.5, 0.5)

    def test_unsupported_nbits(self, tile_2x2):
        g, dem = tile_2x2
        g.nbits = 32
        with pytest.raises(InvalidGeometryError, match="16-bit"):
            sample(dem, g, 1.5, 0.5)

    @pytest.mark.parametrize("byteorder", ["M", "L", "I"])
    def test_decodes_big_endian_whatever_byteorder_says(self, write_tile, byteorder):
        """BYTEORDER is metadata; the DEM is always read as big-endian int16"""
        hdr, dem = write_tile("TEST", [[258, -2]], dtype=">i2", byteorder=byteorder)
        g = read_header(hdr)
        assert sample(dem, g, 0.5, 0.5) == 258
        assert sample(dem, g, 0.5, 1.5) == -2
        assert read_grid(dem, g).tolist() == [[258, -2]]

    def test_padded_rows(self, tmp_path):
        """TOTALROWBYTES larger than the samples in a row"""
        rows = [np.array([1, 2], dtype=">i2").tobytes() + b"\xff\xff",
                np.array([3, 4], dtype=">i2").tobytes() + b"\xff\xff"]
        dem = tmp_path / "PAD.DEM"
        dem.write_bytes(b"".join(rows))
        g = TileGeometry(nrows=2, ncols=2, total_row_bytes=6, ulxmap=0.5, ulymap=1.5, xdim=1.0, ydim=1.0)
        assert sample(dem, g, 0.5, 1.5) == 4
        assert read_grid(dem, g).tolist() == [[1, 2], [3, 4]]

    def test_upper_left_center_returns_first_sample(self, write_tile):
        grid = np.arange(12).reshape(3, 4) * 7
        hdr, dem = write_tile("TEST", grid, ulxmap=-19.99583333333333, ulymap=39.99583333333333,
                              xdim=0.00833333333333, ydim=0.00833333333333)
        g = read_header(hdr)
        assert sample(dem, g, g.ulymap, g.ulxmap) == grid[0, 0]

    def test_matches_full_grid(self, write_tile):
        rng = np.random.default_rng(3)
        grid = rng.integers(-500, 8000, size=(6, 5))
        hdr, dem = write_tile("TEST", grid, ulxmap=10.0, ulymap=20.0, xdim=0.5, ydim=0.25)
        g = read_header(hdr)
        full = read_grid(dem, g)
        for row in range(6):
            for col in range(5):
                lat, lon = g.pixel_to_lat_lon(row, col)
                assert sample(dem, g, lat - 0.1, lon + 0.2) == full[row, col]


class TestPixelIndex:
    """Test cases for pixel_index()"""

    def test_round_trip(self):
        g = TileGeometry(nrows=40, ncols=30, ulxmap=-20.0, ulymap=40.0, xdim=0.125, ydim=0.25)
        for row in range(g.nrows):
            for col in range(g.ncols):
                lat = g.ulymap - row * g.ydim
                lon = g.ulxmap + col * g.xdim
                assert pixel_index(g, lat, lon) == (row, col)

    def test_round_trip_real_tile_geometry(self):
        """Pixel edges of the W020N40 tile resolve to their own pixel"""
        g = TileGeometry(nrows=6000, ncols=4800, ulxmap=-19.99583333333333, ulymap=39.99583333333333,
                         xdim=0.00833333333333, ydim=0.00833333333333)
        mismatches = []
        for row in list(range(0, g.nrows, 37)) + [g.nrows - 1]:
            for col in list(range(0, g.ncols, 29)) + [53, 159, g.ncols - 1]:
                lat = g.ulymap - row * g.ydim
                lon = g.ulxmap + col * g.xdim
                got = pixel_index(g, lat, lon)
                if got != (row, col):
                    mismatches.append((row, col, got))
        assert mismatches == []

    def test_real_tile_edges_sample_their_own_pixel(self, write_tile):
        grid = np.arange(60 * 48).reshape(60, 48)
        hdr, dem = write_tile("TEST", grid, ulxmap=-19.99583333333333, ulymap=39.99583333333333,
                              xdim=0.00833333333333, ydim=0.00833333333333)
        g = read_header(hdr)
        for row, col in [(0, 5), (7, 31), (59, 47), (12, 0)]:
            lat, lon = g.pixel_to_lat_lon(row, col)
            assert sample(dem, g, lat, lon) == grid[row, col]

    def test_floor_not_truncation(self):
        g = TileGeometry(nrows=2, ncols=2, ulxmap=0.5, ulymap=1.5, xdim=1.0, ydim=1.0)
        assert pixel_index(g, 1.5, 0.2) == (0, -1)
        assert pixel_index(g, 1.8, 0.5) == (-1, 0)

    def test_center_registered_shift(self):
        g = TileGeometry(nrows=2, ncols=2, ulxmap=0.5, ulymap=1.5, xdim=1.0, ydim=1.0)
        assert pixel_index(g, 1.5, 0.5, center_registered=True) == (0, 0)
        assert pixel_index(g, 1.9, 0.1, center_registered=True) == (0, 0)
        assert pixel_index(g, 0.9, 1.1, center_registered=True) == (1, 1)
        assert pixel_index(g, 1.9, 0.1) == (-1, -1)

    def test_nan(self):
        g = TileGeometry(nrows=2, ncols=2, ulxmap=0.5, ulymap=1.5, xdim=1.0, ydim=1.0)
        with pytest.raises(OutOfRangeError):
            pixel_index(g, float("nan"), 0.5)


class TestReadGrid:
    """Test cases for read_grid()"""

    def test_row_major_top_down(self, tile_2x2):
        g, dem = tile_2x2
        grid = read_grid(dem, g)
        assert grid.dtype == np.int16
        assert grid.shape == (2, 2)
        assert grid.tolist() == [[10, 20], [30, 40]]

    def test_short_file(self, tile_2x2):
        g, dem = tile_2x2
        dem.write_bytes(b"\x00")
        with pytest.raises(GtopoIOError):
            read_grid(dem, g)
