# src/mapalgebra/raster/terrain.py

"""
This module derives terrain products from elevation rasters.
"""

import numpy as np

from .layer import Raster
from .focal import Sampler, focal_sample

__all__ = [
    "SLOPE_SPACING",
    "SLOPE_BANDS",
    "anisotropic_slope"
]

# Nominal ground sample distance, in elevation units per pixel.
SLOPE_SPACING = 30.0

SLOPE_BANDS = ("up", "down", "left", "right")

# (row_offset, col_offset) for each band of SLOPE_BANDS
_NEIGHBORS = (
    (-1, 0),
    (1, 0),
    (0, 1),
    (0, -1)
)

def anisotropic_slope(elevation: Raster, spacing: float = SLOPE_SPACING) -> Raster:
    """
    Directional slope towards the four axis-aligned neighbors of each cell.

    For every cell, each band holds arctan((neighbor - center) / spacing) in
    radians, ordered as SLOPE_BANDS. Neighbors outside the grid give NaN.

    Args:
        elevation (Raster): Single band elevation model.
        spacing (float): Distance between cell centers, in elevation units.

    Returns:
        Raster: Four band raster of slope angles.
    """
    if spacing == 0:
        raise ValueError("spacing must be non-zero")

    def slopes(sample: Sampler) -> np.ndarray:
        center = sample.center
        rises = np.array([sample(row, col) for row, col in _NEIGHBORS], dtype=float) - center
        return np.arctan(rises / spacing)

    return focal_sample(elevation, slopes, default=np.nan)
