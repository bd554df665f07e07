# src/mapalgebra/raster/focal.py

"""
This module implements neighborhood (focal) operations on lazy rasters.

A focal operation hands a Sampler to a user function for each requested
cell. The Sampler reads the input raster at offsets relative to that cell,
and reads that cannot be satisfied resolve to a caller supplied default.
"""

from typing import Any, Callable, List, Tuple

import numpy as np

from mapalgebra.exceptions import SampleUnavailable

from .layer import Raster

__all__ = [
    "Sampler",
    "focal_sample",
    "window_offsets",
    "focal_mean"
]

class Sampler:
    """
    Neighborhood reader bound to one cell of a raster.

    Calling `sampler(row_offset, col_offset)` reads the cell at
    (x - col_offset, y + row_offset). Positive row offsets move down the
    grid, positive column offsets move left.

    Reads outside the extent, and reads whose evaluator raises
    SampleUnavailable, return `default`. Every other error propagates.

    Args:
        raster: Raster to sample.
        x: Column of the cell being computed.
        y: Row of the cell being computed.
        default: Value returned for unavailable reads.
    """
    def __init__(self, raster: Raster, x: int, y: int, default: Any):
        self._raster = raster
        self._evaluator = raster.evaluator
        self.x = x
        self.y = y
        self.default = default

    def __call__(self, row_offset: int, col_offset: int) -> Any:
        col = self.x - col_offset
        row = self.y + row_offset

        if not self._raster.contains(col, row):
            return self.default

        try:
            return self._evaluator(col, row)
        except SampleUnavailable:
            return self.default

    @property
    def center(self) -> Any:
        """Value of the cell being computed."""
        return self(0, 0)

    def __repr__(self) -> str:
        return f"<Sampler x={self.x} y={self.y} default={self.default!r}>"

def focal_sample(
    raster: Raster,
    func: Callable[[Sampler], Any],
    default: Any = np.nan
) -> Raster:
    """
    Build a raster whose cells aggregate a neighborhood of `raster`.

    Args:
        raster: Input raster.
        func: Aggregation function receiving a Sampler bound to each cell.
              Errors raised by its own logic are not intercepted.
        default: Value substituted for unavailable neighborhood reads.

    Returns:
        Raster: Extent of `raster`, evaluator (x, y) -> func(Sampler(x, y)).
    """
    def evaluator(x, y):
        return func(Sampler(raster, x, y, default))

    return Raster(raster.width, raster.height, evaluator)

def window_offsets(radius: int) -> List[Tuple[int, int]]:
    """
    List the (row_offset, col_offset) pairs of a square window.

    Args:
        radius: Half size of the window. 1 gives a 3x3 window.

    Returns:
        List of offsets in row-major order, center included.
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    span = range(-radius, radius + 1)
    return [(row, col) for row in span for col in span]

def focal_mean(raster: Raster, radius: int = 1, bands: int = 1) -> Raster:
    """
    Moving-window mean over a square neighborhood.

    Cells outside the extent are ignored rather than counted as zero, so
    edge cells average fewer neighbors.

    Args:
        raster: Input raster (scalar or multi-band values).
        radius: Half size of the window.
        bands: Number of bands per cell, used to shape the NaN result of a
               window where no sample is available.

    Returns:
        Raster: Mean of the available neighbors of each cell.
    """
    offsets = window_offsets(radius)
    empty = np.nan if bands == 1 else np.full(bands, np.nan)

    def mean(sample: Sampler):
        values = [sample(row, col) for row, col in offsets]
        available = [v for v in values if v is not None]
        if not available:
            return empty if bands == 1 else empty.copy()
        return np.nanmean(np.asarray(available, dtype=float), axis=0)

    return focal_sample(raster, mean, default=None)
