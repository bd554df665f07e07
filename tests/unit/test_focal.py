# tests/unit/test_focal.py

import math
import warnings

import numpy as np
import pytest

from mapalgebra.exceptions import SampleUnavailable, OutOfRange
from mapalgebra.raster import Raster, from_array, focal_sample, focal_mean, window_offsets
from helpers import assert_cells_equal

def test_out_of_range_offset_yields_default(ones_3x3):
    r = focal_sample(ones_3x3, lambda sample: sample(0, 5), default=-1)
    assert_cells_equal(r, np.full((3, 3), -1))

def test_in_range_reads_pass_through(ones_3x3):
    r = focal_sample(ones_3x3, lambda sample: sample(0, 0) + sample(1, 1), default=-1)
    # (x - 1, y + 1) exists only for x >= 1 and y <= 1
    assert_cells_equal(r, [[0, 2, 2], [0, 2, 2], [0, 0, 0]])

def test_offset_convention():
    grid = from_array([[0, 1, 2], [10, 11, 12], [20, 21, 22]])

    def neighbors(sample):
        return (sample(-1, 0), sample(1, 0), sample(0, 1), sample(0, -1))

    up, down, left, right = focal_sample(grid, neighbors, default=None).evaluate(1, 1)
    assert (up, down, left, right) == (1, 21, 10, 12)

def test_focal_is_lazy(counting_raster):
    r, calls = counting_raster()
    focal_sample(r, lambda sample: sample(0, 0))
    assert calls == []

def test_sampler_absorbs_sample_unavailable():
    def evaluator(x, y):
        if x == 1:
            raise SampleUnavailable("masked")
        return x

    r = Raster(3, 1, evaluator)
    out = focal_sample(r, lambda sample: sample(0, 1), default=-5)

    assert out.evaluate(2, 0) == -5
    assert out.evaluate(1, 0) == 0

def test_sampler_absorbs_out_of_range_from_evaluator():
    def evaluator(x, y):
        raise OutOfRange(x, y, 1, 1)

    out = focal_sample(Raster(2, 2, evaluator), lambda sample: sample.center, default=0)
    assert out.evaluate(1, 1) == 0

def test_sampler_does_not_absorb_unrelated_errors():
    def evaluator(x, y):
        raise TypeError("genuine bug")

    out = focal_sample(Raster(2, 2, evaluator), lambda sample: sample(0, 0), default=0)

    with pytest.raises(TypeError):
        out.evaluate(0, 0)

def test_aggregation_errors_propagate(ones_3x3):
    def broken(sample):
        sample(0, 0)
        raise KeyError("aggregation bug")

    with pytest.raises(KeyError):
        focal_sample(ones_3x3, broken).evaluate(1, 1)

def test_default_is_nan(ones_3x3):
    value = focal_sample(ones_3x3, lambda sample: sample(5, 0)).evaluate(0, 0)
    assert math.isnan(value)

def test_multiband_focal_output(ones_3x3):
    out = focal_sample(ones_3x3, lambda sample: np.array([sample(0, 0), sample(-1, 0)]), default=0)
    assert np.array_equal(out.evaluate(0, 0), [1, 0])
    assert np.array_equal(out.evaluate(0, 1), [1, 1])

def test_window_offsets():
    assert window_offsets(0) == [(0, 0)]
    offsets = window_offsets(1)
    assert len(offsets) == 9
    assert offsets[0] == (-1, -1) and offsets[-1] == (1, 1)

    with pytest.raises(ValueError):
        window_offsets(-1)

def test_focal_mean_ignores_missing_neighbors():
    grid = from_array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]])
    mean = focal_mean(grid, radius=1)

    assert mean.evaluate(1, 1) == pytest.approx(5.0)
    assert mean.evaluate(0, 0) == pytest.approx((1 + 2 + 4 + 5) / 4)
    assert mean.evaluate(2, 2) == pytest.approx((5 + 6 + 8 + 9) / 4)

def _masked():
    """2x1 raster whose every read is unavailable."""
    def evaluator(x, y):
        raise SampleUnavailable("masked")
    return Raster(2, 1, evaluator)

def test_focal_mean_all_unavailable_multiband():
    value = focal_mean(_masked(), radius=0, bands=2).evaluate(0, 0)

    assert np.ndim(value) == 1
    assert len(value) == 2
    assert np.isnan(value).all()

def test_focal_mean_all_unavailable_scalar():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        value = focal_mean(_masked(), radius=0).evaluate(1, 0)

    assert np.ndim(value) == 0
    assert math.isnan(value)
