# src/mapalgebra/raster/ops.py

"""
Named raster operations built on the layer combinators.

Unary functions use numpy ufuncs so that they apply to scalar cells and to
multi-band cells alike. Binary functions accept a raster on either side and
a constant on the other.
"""

import operator
from typing import Any, Callable

import numpy as np

from .layer import Raster, map_cells, zip_cells, zip_with_constant

__all__ = [
    "cos",
    "sin",
    "tan",
    "atan",
    "log",
    "exp",
    "sqrt",
    "absolute",
    "negative",
    "add",
    "subtract",
    "multiply",
    "divide",
    "power",
    "lift"
]

# Unary operations

def cos(raster: Raster) -> Raster:
    return map_cells(np.cos, raster)

def sin(raster: Raster) -> Raster:
    return map_cells(np.sin, raster)

def tan(raster: Raster) -> Raster:
    return map_cells(np.tan, raster)

def atan(raster: Raster) -> Raster:
    return map_cells(np.arctan, raster)

def log(raster: Raster) -> Raster:
    """Natural logarithm."""
    return map_cells(np.log, raster)

def exp(raster: Raster) -> Raster:
    return map_cells(np.exp, raster)

def sqrt(raster: Raster) -> Raster:
    return map_cells(np.sqrt, raster)

def absolute(raster: Raster) -> Raster:
    return map_cells(np.abs, raster)

def negative(raster: Raster) -> Raster:
    return map_cells(operator.neg, raster)

# Binary operations

def lift(func: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Raster]:
    """
    Turn a function of two cell values into a function of rasters/constants.

    The returned function accepts (raster, raster), (raster, constant) or
    (constant, raster) and keeps the operands in the order given, which
    matters for non-commutative functions.

    Args:
        func: Pure function of two values.

    Returns:
        Callable building a Raster from two operands.
    """
    def lifted(left, right):
        left_is_raster = isinstance(left, Raster)
        right_is_raster = isinstance(right, Raster)

        if left_is_raster and right_is_raster:
            return zip_cells(func, left, right)
        if right_is_raster:
            return zip_with_constant(func, left, right)
        if left_is_raster:
            return zip_with_constant(lambda c, v: func(v, c), right, left)

        raise TypeError(
            f"{getattr(func, '__name__', 'operation')} needs at least one Raster operand, "
            f"got {type(left).__name__} and {type(right).__name__}"
        )

    lifted.__name__ = getattr(func, "__name__", "lifted")
    lifted.__doc__ = f"Cell-wise {lifted.__name__} of two operands, at least one a Raster."
    return lifted

add = lift(operator.add)
subtract = lift(operator.sub)
multiply = lift(operator.mul)
divide = lift(operator.truediv)
power = lift(operator.pow)
