# src/mapalgebra/raster/engine.py

"""
This module turns lazy rasters into pixels.

It is the only place where evaluators are driven over a whole grid,
either into a numpy array or row by row into a pixel sink. Errors raised
by evaluators are never wrapped here; they reach the caller unchanged.
"""

import logging
from pathlib import Path
from typing import Any, Generator, List, Optional, Tuple, Union

import numpy as np

from .layer import Raster
from .io import SinkConfig, create_sink
from .resources import ensure_memory
from .utils import band_count, band_component

log = logging.getLogger(__name__)

__all__ = [
    "iter_rows",
    "materialize",
    "save"
]

def iter_rows(raster: Raster) -> Generator[Tuple[int, List[Any]], None, None]:
    """
    Evaluate a raster one row at a time.

    Each cell is evaluated exactly once, left to right, top to bottom.

    Args:
        raster: Raster to evaluate.

    Yields:
        (row_index, values): The row index and its `width` cell values.
    """
    evaluate = raster.evaluator
    for row in range(raster.height):
        yield row, [evaluate(col, row) for col in range(raster.width)]

def _row_bands(values: List[Any], count: int) -> np.ndarray:
    """Arrange a row of cell values as a (count, width) array."""
    if count == 1:
        return np.asarray([band_component(v, 1) for v in values])[np.newaxis, :]
    return np.stack([np.asarray(v) for v in values], axis=1)

def materialize(
    raster: Raster,
    dtype: Union[str, np.dtype] = "float64",
    check_memory: bool = True
) -> np.ndarray:
    """
    Evaluate every cell of a raster into an array.

    The band count is taken from the first cell; all cells must agree.

    Args:
        raster: Raster to evaluate.
        dtype: Output pixel type. Default=float64, so NaN and fractional
               cells survive whatever the first row holds.
        check_memory: If True (default), refuse grids too large for available RAM.

    Returns:
        np.ndarray: Pixels in (Bands, Height, Width) format.
    """
    rows = iter_rows(raster)
    first_index, first_values = next(rows)
    count = band_count(first_values[0])

    if check_memory:
        ensure_memory(raster.width, raster.height, count, dtype)

    log.debug(f"Materializing {raster!r} into {count}x{raster.height}x{raster.width} array")

    first = _row_bands(first_values, count)
    out = np.empty((count, raster.height, raster.width), dtype=dtype)
    out[:, first_index, :] = first

    for row, values in rows:
        out[:, row, :] = _row_bands(values, count)

    return out

def save(
    raster: Raster,
    path: Union[str, Path],
    config: Optional[SinkConfig] = None
) -> Path:
    """
    Evaluate a raster and stream it to disk row by row.

    The output band count is inferred from the first evaluated row, so the
    file is only created once evaluation has started successfully.

    Args:
        raster: Raster to write.
        path: Output file path. All supported GDAL formats are accepted.
        config: Output driver and profile settings.

    Returns:
        Path: The written file.
    """
    path = Path(path)
    config = config or SinkConfig()

    rows = iter_rows(raster)
    first_index, first_values = next(rows)
    count = band_count(first_values[0])

    log.info(f"Saving raster {count}x{raster.height}x{raster.width} → {path}")

    with create_sink(path, raster.width, raster.height, count, config=config) as sink:
        for row, values in _chain_first(first_index, first_values, rows):
            bands = _row_bands(values, count)
            for band in range(1, count + 1):
                sink.write_row(band, row, bands[band - 1])

    return path

def _chain_first(index, values, rest):
    yield index, values
    yield from rest
