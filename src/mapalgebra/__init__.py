# src/mapalgebra/__init__.py
#
# Copyright (c) The mapalgebra project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
mapalgebra: lazy, composable map algebra over raster grids.
"""

from . import raster
from .raster import Raster
from .exceptions import (
    RasterError,
    RasterValidationError,
    DimensionMismatch,
    SampleUnavailable,
    OutOfRange,
    RasterIOError,
    SourceClosedError
)

__version__ = "0.1.0"

__all__ = [
    "raster",
    "Raster",
    "RasterError",
    "RasterValidationError",
    "DimensionMismatch",
    "SampleUnavailable",
    "OutOfRange",
    "RasterIOError",
    "SourceClosedError"
]
