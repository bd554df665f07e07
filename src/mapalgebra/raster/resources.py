# src/mapalgebra/raster/resources.py

"""
This module checks whether a raster grid fits in system memory.

It is consulted before anything is pulled into RAM as a whole:
- loading a file into an in-memory source
- materializing a lazy raster into a numpy array
"""

import logging
from dataclasses import dataclass

import numpy as np
import psutil

log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SAFETY_FACTOR",
    "MIN_FREE_GB",
    "MemoryEstimate",
    "estimate_memory",
    "ensure_memory"
]

DEFAULT_SAFETY_FACTOR = 3.0
MIN_FREE_GB = 2.0

@dataclass(frozen=True)
class MemoryEstimate:
    """
    Estimation of memory requirements and safety for holding a grid in RAM.

    Args:
        total_required_bytes: Total bytes required (with overhead)
        available_system_bytes: Currently available system memory in bytes
        is_safe: Boolean indicating if allocation is considered safe
        reason: Explanation for the safety assessment (e.g. "Req: 1.20GB, Avail: 8.00GB")
    """
    total_required_bytes: int
    available_system_bytes: int
    is_safe: bool
    reason: str

def estimate_memory(
    width: int,
    height: int,
    bands: int = 1,
    dtype = "float64",
    safety_factor: float = DEFAULT_SAFETY_FACTOR,
    min_free_gb: float = MIN_FREE_GB
) -> MemoryEstimate:
    """
    Checks if a (bands, height, width) grid fits in RAM safely.

    Args:
        width: Grid width in pixels.
        height: Grid height in pixels.
        bands: Number of bands.
        dtype: Pixel type of the grid.
        safety_factor: Multiplier to account for overhead (default 3.0)
        min_free_gb: Minimum free GB to leave available after allocation (default 2.0)

    Returns:
        MemoryEstimate: Contains total required bytes, available bytes, safety boolean, and reason.
    """
    raw_bytes = width * height * bands * np.dtype(dtype).itemsize
    overhead_bytes = int(raw_bytes * (safety_factor - 1.0))
    total_required = raw_bytes + overhead_bytes

    mem = psutil.virtual_memory()
    min_free_bytes = int(min_free_gb * (1024**3))
    is_safe = (total_required + min_free_bytes) <= mem.available

    reason = f"Req: {total_required/1e9:.2f}GB, Avail: {mem.available/1e9:.2f}GB"

    return MemoryEstimate(total_required, mem.available, is_safe, reason)

def ensure_memory(
    width: int,
    height: int,
    bands: int = 1,
    dtype = "float64",
    safety_factor: float = DEFAULT_SAFETY_FACTOR
) -> MemoryEstimate:
    """
    Same as estimate_memory, but refuses unsafe allocations.

    Raises:
        MemoryError: If the grid is not safe to hold in RAM.
    """
    estimate = estimate_memory(width, height, bands, dtype, safety_factor=safety_factor)

    if not estimate.is_safe:
        log.error(f"Insufficient memory for {bands}x{height}x{width} grid. {estimate.reason}")
        raise MemoryError(
            f"Insufficient memory for a {bands}x{height}x{width} {np.dtype(dtype).name} grid. "
            f"{estimate.reason}\n"
            "Tip: keep the raster lazy and stream it with save()"
        )

    log.debug(f"Memory check passed. {estimate.reason}")
    return estimate
