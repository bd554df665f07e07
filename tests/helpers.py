# tests/helpers.py

from collections import namedtuple

import numpy as np
from mapalgebra.raster import Raster

# Stand-in for psutil.virtual_memory() results
FakeMemory = namedtuple("FakeMemory", ["available"])

def cells(raster: Raster):
    """Evaluate every cell of a raster as a nested list (row-major)."""
    return [
        [raster.evaluate(x, y) for x in range(raster.width)]
        for y in range(raster.height)
    ]

def assert_cells_equal(raster: Raster, expected):
    """Strictly verify every cell value against a row-major nested list."""
    expected = np.asarray(expected)
    assert raster.shape == expected.shape[:2], \
        f"Shape mismatch: {raster.shape} != {expected.shape[:2]}"

    actual = np.asarray(cells(raster))
    assert np.array_equal(actual, expected, equal_nan=True), \
        f"Cell mismatch:\n{actual}\n!=\n{expected}"
