# src/mapalgebra/exceptions.py

"""
Exception hierarchy shared by every mapalgebra module.
"""

__all__ = [
    "RasterError",
    "RasterValidationError",
    "DimensionMismatch",
    "SampleUnavailable",
    "OutOfRange",
    "RasterIOError",
    "SourceClosedError"
]

class RasterError(Exception):
    """Base class for all mapalgebra errors."""

class RasterValidationError(RasterError, ValueError):
    """A raster was constructed or combined with invalid parameters."""

class DimensionMismatch(RasterValidationError):
    """
    Two rasters with different extents were combined cell by cell.

    Args:
        left: (width, height) of the left operand.
        right: (width, height) of the right operand.
    """
    def __init__(self, left, right):
        self.left = tuple(left)
        self.right = tuple(right)
        super().__init__(
            f"Raster extents differ: {self.left[0]}x{self.left[1]} "
            f"vs {self.right[0]}x{self.right[1]}"
        )

class SampleUnavailable(RasterError, LookupError):
    """A pixel read could not produce a value for the requested cell."""

class OutOfRange(SampleUnavailable):
    """
    A pixel read addressed a cell outside the source extent.

    Args:
        x: Requested column.
        y: Requested row.
        width: Extent width of the source.
        height: Extent height of the source.
    """
    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        super().__init__(
            f"Cell ({x}, {y}) is outside the {width}x{height} extent"
        )

class RasterIOError(RasterError, IOError):
    """Reading from or writing to a raster dataset failed."""

class SourceClosedError(RasterIOError):
    """A pixel source was read after it had been closed."""
