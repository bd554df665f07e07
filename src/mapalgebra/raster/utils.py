# src/mapalgebra/raster/utils.py

"""
This module provides shared utility functions for raster operations.

Functions include path resolution for ENVI files, band selection
and cell value inspection.
"""
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import numpy as np

log = logging.getLogger(__name__)

__all__ = [
    "resolve_envi_path",
    "normalize_bands",
    "band_count",
    "band_component"
]

def resolve_envi_path(path: Union[str, Path]) -> Path:
    """
    Resolve ENVI header/binary file confusion.
    If 'image.hdr' is passed, redirects to 'image' (binary).
    """
    path = Path(path)
    if path.suffix.lower() == '.hdr':
        binary_path = path.with_suffix('')
        if binary_path.exists():
            log.debug(f"Redirecting {path.name} to binary file {binary_path.name}")
            return binary_path
    return path

def normalize_bands(
    count: int,
    bands: Optional[Union[int, Sequence[int]]]
) -> List[int]:
    """
    Normalize band selection to a list of 1-based indices.

    Raises:
        IndexError: If an index falls outside 1..count.
    """
    if bands is None:
        indices = list(range(1, count + 1))
    elif isinstance(bands, (int, np.integer)):
        indices = [int(bands)]
    else:
        indices = [int(b) for b in bands]

    if not indices:
        raise ValueError("At least one band must be selected")

    for idx in indices:
        if not 1 <= idx <= count:
            raise IndexError(f"Band index {idx} out of range (1-{count})")
    return indices

def band_count(value: Any) -> int:
    """Number of bands carried by a cell value (1 for scalars)."""
    if np.ndim(value) == 0:
        return 1
    return len(value)

def band_component(value: Any, band: int) -> Any:
    """Extract the 1-based band `band` from a cell value."""
    if np.ndim(value) == 0:
        if band != 1:
            raise IndexError(f"Band index {band} out of range (1-1)")
        return value
    return value[band - 1]
