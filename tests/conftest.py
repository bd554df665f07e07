# tests/conftest.py

import pytest
import numpy as np
import rasterio
from rasterio.transform import Affine
from rasterio.crs import CRS

from mapalgebra.raster import Raster, from_array, resources
from helpers import FakeMemory

@pytest.fixture(autouse=True)
def plenty_of_memory(monkeypatch):
    """Fixture: Reports 64 GB of free RAM so memory checks do not depend on the host."""
    monkeypatch.setattr(resources.psutil, "virtual_memory", lambda: FakeMemory(64 * 1024**3))

@pytest.fixture
def grid_2x2():
    """Single band 2x2 raster with values [[1, 2], [3, 4]] (row-major)."""
    return from_array([[1, 2], [3, 4]])

@pytest.fixture
def ones_3x3():
    return from_array(np.ones((3, 3)))

@pytest.fixture
def counting_raster():
    """
    Fixture: Returns a factory building rasters that record every evaluator call.
    The raster value of cell (x, y) is x + 10 * y.
    """
    def factory(width=3, height=3):
        calls = []

        def evaluator(x, y):
            calls.append((x, y))
            return x + 10 * y

        return Raster(width, height, evaluator), calls

    return factory

@pytest.fixture
def geotiff_factory(tmp_path):
    """
    Fixture: Writes small synthetic GeoTIFFs into a temp dir.
    """
    def factory(name, data, dtype='float32', descriptions=None):
        data = np.asarray(data, dtype=dtype)
        if data.ndim == 2:
            data = data[np.newaxis, :, :]

        count, height, width = data.shape
        path = tmp_path / name
        profile = {
            'driver': 'GTiff',
            'height': height,
            'width': width,
            'count': count,
            'dtype': dtype,
            'crs': CRS.from_epsg(32619),
            'transform': Affine.translation(500000, 5000000) * Affine.scale(30, -30)
        }

        with rasterio.open(path, 'w', **profile) as dst:
            dst.write(data)
            if descriptions:
                for idx, desc in enumerate(descriptions, start=1):
                    dst.set_band_description(idx, desc)

        return path

    return factory

@pytest.fixture
def dem_path(geotiff_factory):
    """A 4x3 tilted plane rising 30 units per column to the right."""
    dem = np.tile(np.arange(4, dtype='float32') * 30, (3, 1))
    return geotiff_factory("dem.tif", dem)

@pytest.fixture
def multiband_path(geotiff_factory):
    """3 band 3x2 raster, band b holds b * 100 + row * 10 + col."""
    rows, cols = np.mgrid[0:2, 0:3]
    data = np.stack([b * 100 + rows * 10 + cols for b in (1, 2, 3)])
    return geotiff_factory("multiband.tif", data, dtype='int32', descriptions=("Red", "Green", "Blue"))
