# tests/unit/test_engine.py

import numpy as np
import pytest

from mapalgebra.raster import Raster, from_array, focal_sample, iter_rows, materialize, band_count, band_component

def test_iter_rows_evaluates_each_cell_once(counting_raster):
    r, calls = counting_raster(width=3, height=2)
    rows = list(iter_rows(r))

    assert rows == [(0, [0, 1, 2]), (1, [10, 11, 12])]
    assert sorted(calls) == sorted((x, y) for x in range(3) for y in range(2))

def test_materialize_single_band(grid_2x2):
    out = materialize((grid_2x2 * 2) + 1)
    assert out.shape == (1, 2, 2)
    assert np.array_equal(out[0], [[3, 5], [7, 9]])

def test_materialize_multiband():
    data = np.arange(12, dtype=float).reshape(3, 2, 2)
    out = materialize(from_array(data) + 1, dtype="float32")

    assert out.dtype == np.float32
    assert np.array_equal(out, data + 1)

def test_materialize_propagates_evaluator_faults():
    def evaluator(x, y):
        if (x, y) == (1, 1):
            raise ZeroDivisionError("bad cell")
        return 0

    with pytest.raises(ZeroDivisionError):
        materialize(Raster(2, 2, evaluator))

def test_band_helpers():
    assert band_count(3.0) == 1
    assert band_count(np.array([1, 2, 3])) == 3
    assert band_component(7, 1) == 7
    assert band_component(np.array([4, 5]), 2) == 5

    with pytest.raises(IndexError):
        band_component(7, 2)

def test_materialize_keeps_later_fractional_rows(grid_2x2):
    # Row 0 evaluates to ints (2, 1), row 1 to floats (0.5, 0.25)
    out = materialize(2 ** (2 - grid_2x2))

    assert out.dtype == np.float64
    assert np.array_equal(out[0], [[2, 1], [0.5, 0.25]])

def test_materialize_keeps_focal_nan_edges(grid_2x2):
    below = focal_sample(grid_2x2, lambda sample: sample(1, 0))
    out = materialize(below)

    assert np.array_equal(out[0, 0], [3, 4])
    assert np.isnan(out[0, 1]).all()

def test_materialize_explicit_dtype(grid_2x2):
    out = materialize(grid_2x2 * 2, dtype="int32")
    assert out.dtype == np.int32
    assert np.array_equal(out[0], [[2, 4], [6, 8]])
