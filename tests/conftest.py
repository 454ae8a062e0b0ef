import os
import sys

import numpy as np
import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)


def hdr_text(**fields):
    """Render HDR `KEY VALUE` lines; keyword names are the lowercase keys."""
    return "".join(f"{k.upper():<14}{v}\n" for k, v in fields.items())


@pytest.fixture
def write_tile(tmp_path):
    """
    Write <tile_id>.HDR and <tile_id>.DEM into tmp_path.

    `grid` is a 2D sequence of elevations, stored big-endian int16.
    Header fields default to a GTOPO30-style single band BIL tile.
    """

    def _write(tile_id, grid, dtype=">i2", **overrides):
        data = np.asarray(grid, dtype=dtype)
        nrows, ncols = data.shape
        fields = {
            "byteorder": "M",
            "layout": "BIL",
            "nrows": nrows,
            "ncols": ncols,
            "nbands": 1,
            "nbits": 16,
            "bandrowbytes": ncols * 2,
            "totalrowbytes": ncols * 2,
            "bandgapbytes": 0,
            "nodata": -9999,
            "ulxmap": 0.5,
            "ulymap": float(nrows) - 0.5,
            "xdim": 1.0,
            "ydim": 1.0,
        }
        fields.update(overrides)
        hdr = tmp_path / f"{tile_id}.HDR"
        dem = tmp_path / f"{tile_id}.DEM"
        hdr.write_text(hdr_text(**fields))
        data.tofile(dem)
        return hdr, dem

    return _write
