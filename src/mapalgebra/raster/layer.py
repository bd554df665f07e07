# src/mapalgebra/raster/layer.py

"""
This module defines the lazy Raster and the combinators that compose it.

A Raster never holds pixels. It is an extent plus an evaluator, and every
combinator returns a new Raster whose evaluator wraps the evaluators of its
operands. Nothing is computed until a cell is requested.
"""

import operator
from numbers import Integral
from typing import Any, Callable, Tuple

from mapalgebra.exceptions import RasterValidationError, DimensionMismatch

__all__ = [
    "Raster",
    "Evaluator",
    "map_cells",
    "zip_cells",
    "zip_with_constant"
]

Evaluator = Callable[[int, int], Any]

class Raster:
    """
    The fundamental unit of mapalgebra.

    A Raster is a deferred computation over a fixed grid:
    1. The extent: width (columns) and height (rows), fixed for life.
    2. The evaluator: a pure function (x, y) -> value.

    Values are either a scalar or a 1-D numpy array (one entry per band).
    The band count is a contract between producer and consumer and is not
    checked here.

    Attributes:
        width (int): Number of columns.
        height (int): Number of rows.
        evaluator (Evaluator): Function returning the value of cell (x, y).
    """

    # Makes numpy defer to the reflected operators below, so that
    # np.float64(2) * raster builds a Raster instead of an object array.
    __array_ufunc__ = None

    def __init__(self, width: int, height: int, evaluator: Evaluator):
        """
        Initialize a Raster object.

        Args:
            width: Number of columns, must be > 0.
            height: Number of rows, must be > 0.
            evaluator: Pure function of (x, y). Trusted, never called here.

        Raises:
            TypeError: If the extent is not integral or evaluator is not callable.
            RasterValidationError: If the extent is not strictly positive.
        """
        self.validate_inputs(width, height, evaluator)

        self._width = int(width)
        self._height = int(height)
        self._evaluator = evaluator

    @staticmethod
    def validate_inputs(width: int, height: int, evaluator: Evaluator):
        """Internal validation logic."""
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
            if value <= 0:
                raise RasterValidationError(f"{name} must be > 0, got {value}")

        if not callable(evaluator):
            raise TypeError(f"evaluator must be callable, got {type(evaluator).__name__}")

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def shape(self) -> Tuple[int, int]:
        """Returns (Height, Width)."""
        return (self._height, self._width)

    def contains(self, x: int, y: int) -> bool:
        """True if (x, y) addresses a cell of this raster."""
        return 0 <= x < self._width and 0 <= y < self._height

    def evaluate(self, x: int, y: int) -> Any:
        """Compute the value of cell (x, y)."""
        return self._evaluator(x, y)

    def map(self, func: Callable[[Any], Any]) -> 'Raster':
        """Shorthand for map_cells(func, self)."""
        return map_cells(func, self)

    # Operator sugar. Semantics live in zip_cells / zip_with_constant.

    def _binary(self, op: Callable[[Any, Any], Any], other: Any) -> 'Raster':
        if isinstance(other, Raster):
            return zip_cells(op, self, other)
        return zip_with_constant(_flip(op), other, self)

    def _reflected(self, op: Callable[[Any, Any], Any], other: Any) -> 'Raster':
        return zip_with_constant(op, other, self)

    def __add__(self, other):
        return self._binary(operator.add, other)

    def __radd__(self, other):
        return self._reflected(operator.add, other)

    def __sub__(self, other):
        return self._binary(operator.sub, other)

    def __rsub__(self, other):
        return self._reflected(operator.sub, other)

    def __mul__(self, other):
        return self._binary(operator.mul, other)

    def __rmul__(self, other):
        return self._reflected(operator.mul, other)

    def __truediv__(self, other):
        return self._binary(operator.truediv, other)

    def __rtruediv__(self, other):
        return self._reflected(operator.truediv, other)

    def __pow__(self, other):
        return self._binary(operator.pow, other)

    def __rpow__(self, other):
        return self._reflected(operator.pow, other)

    def __neg__(self):
        return map_cells(operator.neg, self)

    def __abs__(self):
        return map_cells(abs, self)

    def __repr__(self) -> str:
        """Returns a string representation of the Raster based on its extent."""
        name = getattr(self._evaluator, "__qualname__", type(self._evaluator).__name__)
        return f"<Raster width={self._width} height={self._height} evaluator={name}>"

def _flip(func: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
    """Swap the argument order of a binary function."""
    def flipped(a, b):
        return func(b, a)
    flipped.__qualname__ = f"flip({getattr(func, '__name__', 'func')})"
    return flipped

def map_cells(func: Callable[[Any], Any], raster: Raster) -> Raster:
    """
    Apply a function lazily to every cell value of a raster.

    Args:
        func: Pure function of one cell value.
        raster: Input raster, left untouched.

    Returns:
        Raster: Same extent, evaluator (x, y) -> func(raster(x, y)).
    """
    source = raster.evaluator

    def evaluator(x, y):
        return func(source(x, y))

    return Raster(raster.width, raster.height, evaluator)

def zip_cells(func: Callable[[Any, Any], Any], left: Raster, right: Raster) -> Raster:
    """
    Combine two rasters cell by cell with a function of two arguments.

    Can be used to define new binary operators on rasters.

    Args:
        func: Pure function of (left value, right value).
        left: First operand.
        right: Second operand, must share the extent of `left`.

    Returns:
        Raster: Extent of `left`, evaluator (x, y) -> func(left(x, y), right(x, y)).

    Raises:
        DimensionMismatch: If the two extents differ.
    """
    if left.width != right.width or left.height != right.height:
        raise DimensionMismatch((left.width, left.height), (right.width, right.height))

    first = left.evaluator
    second = right.evaluator

    def evaluator(x, y):
        return func(first(x, y), second(x, y))

    return Raster(left.width, left.height, evaluator)

def zip_with_constant(func: Callable[[Any, Any], Any], constant: Any, raster: Raster) -> Raster:
    """
    Combine a constant with every cell of a raster.

    The argument order is always (constant, cell value). Callers needing the
    raster on the left of a non-commutative operator must pass a function
    with its arguments swapped.

    Args:
        func: Pure function of (constant, cell value).
        constant: Scalar, or 1-D array for per-band constants.
        raster: Input raster.

    Returns:
        Raster: Extent of `raster`, evaluator (x, y) -> func(constant, raster(x, y)).
    """
    source = raster.evaluator

    def evaluator(x, y):
        return func(constant, source(x, y))

    return Raster(raster.width, raster.height, evaluator)
