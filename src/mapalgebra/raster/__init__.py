# src/mapalgebra/raster/__init__.py
#
# Copyright (c) The mapalgebra project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The raster subpackage provides the lazy raster algebra: the Raster value and
its combinators, focal operations, derived terrain products, pixel sources
and sinks, and materialization.
"""
# Core data structure and combinators
from .layer import (
    Raster,
    map_cells,
    zip_cells,
    zip_with_constant
)

# Focal operations
from .focal import (
    Sampler,
    focal_sample,
    window_offsets,
    focal_mean
)

# Named operations
from .ops import (
    cos,
    sin,
    tan,
    atan,
    log,
    exp,
    sqrt,
    absolute,
    negative,
    add,
    subtract,
    multiply,
    divide,
    power,
    lift
)

# Derived products
from .terrain import (
    SLOPE_SPACING,
    SLOPE_BANDS,
    anisotropic_slope
)

# I/O operations
from .io import (
    PixelSource,
    DatasetSource,
    ArraySource,
    open_source,
    read_raster,
    from_array,
    load,
    read_info,
    SinkConfig,
    PixelSink,
    create_sink
)

# Resource management
from .resources import (
    MemoryEstimate,
    estimate_memory,
    ensure_memory
)

# Engine operations
from .engine import (
    iter_rows,
    materialize,
    save
)

# Shared utilities
from .utils import (
    resolve_envi_path,
    normalize_bands,
    band_count,
    band_component
)

__all__ = [
    # Layer
    "Raster",
    "map_cells",
    "zip_cells",
    "zip_with_constant",

    # Focal
    "Sampler",
    "focal_sample",
    "window_offsets",
    "focal_mean",

    # Ops
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
    "lift",

    # Terrain
    "SLOPE_SPACING",
    "SLOPE_BANDS",
    "anisotropic_slope",

    # I/O
    "PixelSource",
    "DatasetSource",
    "ArraySource",
    "open_source",
    "read_raster",
    "from_array",
    "load",
    "read_info",
    "SinkConfig",
    "PixelSink",
    "create_sink",

    # Resources
    "MemoryEstimate",
    "estimate_memory",
    "ensure_memory",

    # Engine
    "iter_rows",
    "materialize",
    "save",

    # Utils
    "resolve_envi_path",
    "normalize_bands",
    "band_count",
    "band_component"
]
