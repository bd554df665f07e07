# src/mapalgebra/raster/io.py

"""
This module handles all disk-based operations for raster data.

Pixel sources feed leaf rasters one cell at a time, pixel sinks receive
materialized rows. Both hold a live dataset handle and must be closed;
a source read after closing raises SourceClosedError.
"""

import logging
from pathlib import Path
from typing import Union, Optional, List, Dict, Any, Sequence

import numpy as np
import rasterio
from rasterio.errors import RasterioError
from rasterio.windows import Window

from mapalgebra.exceptions import (
    RasterIOError,
    RasterValidationError,
    OutOfRange,
    SourceClosedError
)

from .layer import Raster
from .resources import ensure_memory
from .utils import resolve_envi_path, normalize_bands

log = logging.getLogger(__name__)

__all__ = [
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
    "create_sink"
]

# Pixel sources

class PixelSource:
    """
    Capability to read single pixels from a grid of bands.

    Subclasses implement `_read` and `_read_many`. This base class owns
    extent and band checks plus the closed state, so every source fails
    the same way.

    Attributes:
        width (int): Number of columns.
        height (int): Number of rows.
        count (int): Number of bands.
    """
    def __init__(self, width: int, height: int, count: int):
        self.width = width
        self.height = height
        self.count = count
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read_pixel(self, band: int, x: int, y: int) -> Any:
        """
        Read one band of one pixel.

        Args:
            band: 1-based band index.
            x: Column.
            y: Row.

        Returns:
            The pixel value as a Python scalar.

        Raises:
            SourceClosedError: If the source has been closed.
            OutOfRange: If (x, y) is outside the extent.
            IndexError: If the band does not exist.
        """
        self._check_cell(x, y)
        if not 1 <= band <= self.count:
            raise IndexError(f"Band index {band} out of range (1-{self.count})")
        return self._read(band, x, y)

    def read_bands(self, x: int, y: int, bands: Optional[Sequence[int]] = None) -> np.ndarray:
        """
        Read several bands of one pixel as a float64 vector.

        Args:
            x: Column.
            y: Row.
            bands: 1-based band indices (None=all).
        """
        self._check_cell(x, y)
        indices = normalize_bands(self.count, bands)
        return self._read_many(indices, x, y)

    def close(self):
        self._closed = True

    def _check_cell(self, x: int, y: int):
        if self._closed:
            raise SourceClosedError(f"Cannot read pixel ({x}, {y}): {self!r} is closed")
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRange(x, y, self.width, self.height)

    def _read(self, band: int, x: int, y: int) -> Any:
        raise NotImplementedError

    def _read_many(self, bands: List[int], x: int, y: int) -> np.ndarray:
        return np.array([self._read(b, x, y) for b in bands], dtype=np.float64)

    def __enter__(self) -> 'PixelSource':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.width}x{self.height}x{self.count} {state}>"

class DatasetSource(PixelSource):
    """
    Pixel source backed by an open rasterio dataset.

    Each read is a 1x1 windowed read, nothing is cached.

    Args:
        dataset: Opened rasterio DatasetReader. Ownership passes to the source.
        path: Path the dataset was opened from (for messages).
    """
    def __init__(self, dataset: rasterio.DatasetReader, path: Optional[Path] = None):
        super().__init__(dataset.width, dataset.height, dataset.count)
        self._dataset = dataset
        self.path = path
        self.nodata = dataset.nodata

    def _read(self, band: int, x: int, y: int) -> Any:
        try:
            data = self._dataset.read(band, window=Window(x, y, 1, 1))
        except RasterioError as e:
            raise RasterIOError(f"Failed to read pixel ({x}, {y}) of band {band}: {e}") from e
        return data[0, 0].item()

    def _read_many(self, bands: List[int], x: int, y: int) -> np.ndarray:
        try:
            data = self._dataset.read(bands, window=Window(x, y, 1, 1))
        except RasterioError as e:
            raise RasterIOError(f"Failed to read pixel ({x}, {y}) of bands {bands}: {e}") from e
        return data[:, 0, 0].astype(np.float64)

    def close(self):
        if not self._closed:
            log.debug(f"Closing pixel source {self.path.name if self.path else self!r}")
            self._dataset.close()
        super().close()

class ArraySource(PixelSource):
    """
    Pixel source backed by an in-memory array.

    Args:
        data: Array in (Bands, Height, Width) or (Height, Width) format.
              2D arrays are promoted to a single band.

    Raises:
        RasterValidationError: If the array is not 2D or 3D, or is empty.
    """
    def __init__(self, data):
        data = np.asarray(data)

        if data.ndim == 2:
            data = data[np.newaxis, :, :]

        if data.ndim != 3:
            raise RasterValidationError(f"Data must be 2D or 3D, got shape {data.shape}")
        if 0 in data.shape:
            raise RasterValidationError(f"Data must not be empty, got shape {data.shape}")

        super().__init__(data.shape[2], data.shape[1], data.shape[0])
        self._data = data

    def _read(self, band: int, x: int, y: int) -> Any:
        return self._data[band - 1, y, x].item()

    def _read_many(self, bands: List[int], x: int, y: int) -> np.ndarray:
        return self._data[[b - 1 for b in bands], y, x].astype(np.float64)

    def close(self):
        self._data = None
        super().close()

def open_source(
    path: Union[str, Path],
    driver: Optional[str] = None
) -> DatasetSource:
    """
    Open a raster file as a pixel source.

    The returned source is a context manager; use it in a `with` block so
    the dataset is released on every exit path:

        with open_source("dem.tif") as src:
            dem = read_raster(src)
            save(anisotropic_slope(dem), "slope.tif")

    Args:
        path: Path to raster file. All supported GDAL formats are accepted.
        driver: Optional GDAL driver name.

    Returns:
        DatasetSource: Open pixel source.
    """
    path = resolve_envi_path(Path(path))

    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    log.debug(f"Opening pixel source: {path.name}")

    try:
        dataset = rasterio.open(path, driver=driver)
    except RasterioError as e:
        raise RasterIOError(f"Failed to open raster {path}: {e}") from e

    return DatasetSource(dataset, path)

def read_raster(
    source: PixelSource,
    bands: Optional[Union[int, List[int]]] = None
) -> Raster:
    """
    Build a leaf raster over a pixel source.

    The raster reads through the source at evaluation time, so the source
    must stay open while the raster (or anything derived from it) is
    evaluated.

    Args:
        source: Open pixel source.
        bands: Band(s) to expose (None=all, int=single, list=subset).
               A single band gives scalar cells, several bands give
               float64 vectors.

    Returns:
        Raster: Leaf raster with the extent of the source.
    """
    indices = normalize_bands(source.count, bands)

    if isinstance(bands, (int, np.integer)) or (bands is None and len(indices) == 1):
        band = indices[0]

        def evaluator(x, y):
            return source.read_pixel(band, x, y)
    else:
        def evaluator(x, y):
            return source.read_bands(x, y, indices)

    return Raster(source.width, source.height, evaluator)

def from_array(
    data,
    bands: Optional[Union[int, List[int]]] = None
) -> Raster:
    """
    Build a leaf raster over an in-memory array.

    Args:
        data: Array-like in (Bands, Height, Width) or (Height, Width) format,
              indexed as data[row][col] for 2D input.
        bands: Band(s) to expose, as in read_raster.

    Returns:
        Raster: Leaf raster.
    """
    return read_raster(ArraySource(data), bands=bands)

def load(
    path: Union[str, Path],
    bands: Optional[Union[int, List[int]]] = None,
    driver: Optional[str] = None,
    check_memory: bool = True
) -> Raster:
    """
    Load a raster from disk into memory.

    Unlike open_source, the file is read once and closed, so the returned
    raster does not depend on any open handle.

    Args:
        path: Path to raster file. All supported GDAL formats are accepted.
        bands: Specific band(s) to load (None=all, int=single, list=subset).
        driver: Optional GDAL driver name.
        check_memory: If True (default), refuse files too large for available RAM.

    Returns:
        Raster: Leaf raster over an in-memory source.

    Raises:
        MemoryError: If check_memory is True and the file is too large.
    """
    path = resolve_envi_path(Path(path))

    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    log.debug(f"Loading raster: {path.name}")

    try:
        with rasterio.open(path, driver=driver) as src:
            indices = normalize_bands(src.count, bands)

            if check_memory:
                ensure_memory(src.width, src.height, len(indices), src.dtypes[indices[0] - 1])

            data = src.read(indices)

    except RasterioError as e:
        raise RasterIOError(f"Failed to read raster from {path}: {e}") from e

    if isinstance(bands, (int, np.integer)):
        return from_array(data, bands=1)
    return from_array(data)

def read_info(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Inspects a raster file and returns its grid and band metadata without
    reading pixels.
    """
    path = resolve_envi_path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with rasterio.open(path) as src:
            band_names = {}
            for i in src.indexes:
                desc = src.descriptions[i - 1]
                band_names[desc or f"Band_{i}"] = i

            return {
                'crs': src.crs,
                'transform': src.transform,
                'width': src.width,
                'height': src.height,
                'count': src.count,
                'dtypes': list(src.dtypes),
                'driver': src.driver,
                'nodata': src.nodata,
                'band_names': band_names
            }
    except RasterioError as e:
        raise RasterIOError(f"Failed to read metadata from {path}: {e}") from e

# Pixel sinks

class SinkConfig:
    """
    Configuration for writing materialized rasters.

    Args:
        driver: GDAL driver name. Default='GTiff'.
        dtype: Pixel type of the output. Default='float32'.
        nodata: Optional nodata value recorded in the output.
        compress: Compression codec (GTiff only). Default='lzw'.
        tiled: Write internal tiles (GTiff only). Default=True.
        band_names: Optional descriptions for output bands, in band order.
        **profile_kwargs: Extra rasterio profile entries (e.g. crs, transform).
    """
    def __init__(
        self,
        driver: str = "GTiff",
        dtype: str = "float32",
        nodata: Optional[Union[float, int]] = None,
        compress: Optional[str] = "lzw",
        tiled: bool = True,
        band_names: Optional[Sequence[str]] = None,
        **profile_kwargs
    ):
        self.driver = driver
        self.dtype = dtype
        self.nodata = nodata
        self.compress = compress
        self.tiled = tiled
        self.band_names = list(band_names) if band_names else []
        self.profile_kwargs = profile_kwargs

    def profile(self, width: int, height: int, count: int, dtype: Optional[str] = None) -> Dict[str, Any]:
        """Generates a rasterio-compliant profile for a grid of the given size."""
        profile = {
            'driver': self.driver,
            'dtype': dtype or self.dtype,
            'nodata': self.nodata,
            'width': width,
            'height': height,
            'count': count
        }
        if self.driver == "GTiff":
            profile['tiled'] = self.tiled
            if self.compress:
                profile['compress'] = self.compress

        profile.update(self.profile_kwargs)
        return profile

class PixelSink:
    """
    Row-oriented writer over an open rasterio dataset.

    Use as a context manager, or call flush() once all rows are written.

    Args:
        dataset: Dataset opened in 'w' mode. Ownership passes to the sink.
        path: Output path (for messages).
    """
    def __init__(self, dataset, path: Optional[Path] = None):
        self._dataset = dataset
        self.path = path
        self.width = dataset.width
        self.height = dataset.height
        self.count = dataset.count
        self.dtype = dataset.dtypes[0]

    @property
    def closed(self) -> bool:
        return self._dataset.closed

    def write_row(self, band: int, row: int, values: Sequence[Any]):
        """
        Write one row of one band.

        Args:
            band: 1-based band index.
            row: 0-based row index.
            values: `width` scalars, left to right.
        """
        if self.closed:
            raise RasterIOError(f"Cannot write row {row}: sink {self.path} is already flushed")
        if not 1 <= band <= self.count:
            raise IndexError(f"Band index {band} out of range (1-{self.count})")
        if not 0 <= row < self.height:
            raise IndexError(f"Row index {row} out of range (0-{self.height - 1})")

        arr = np.asarray(values, dtype=self.dtype)
        if arr.shape != (self.width,):
            raise RasterValidationError(
                f"Row must hold {self.width} values, got shape {arr.shape}"
            )

        try:
            self._dataset.write(arr[np.newaxis, :], band, window=Window(0, row, self.width, 1))
        except RasterioError as e:
            raise RasterIOError(f"Failed to write row {row} of band {band} to {self.path}: {e}") from e

    def set_band_names(self, names: Sequence[str]):
        for idx, name in enumerate(names, start=1):
            if idx <= self.count:
                self._dataset.set_band_description(idx, name)

    def flush(self):
        """Commit written rows to disk and release the dataset."""
        if not self.closed:
            try:
                self._dataset.close()
            except RasterioError as e:
                raise RasterIOError(f"Failed to flush {self.path}: {e}") from e
            log.debug(f"Flushed pixel sink {self.path}")

    def __enter__(self) -> 'PixelSink':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.flush()

def create_sink(
    path: Union[str, Path],
    width: int,
    height: int,
    count: int = 1,
    dtype: Optional[str] = None,
    config: Optional[SinkConfig] = None
) -> PixelSink:
    """
    Create a new raster file and return a row writer for it.

    Args:
        path: Output file path. Parent directories are created.
        width: Output width in pixels.
        height: Output height in pixels.
        count: Number of bands.
        dtype: Pixel type, overriding the config's.
        config: Output driver and profile settings.

    Returns:
        PixelSink: Open row writer.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    config = config or SinkConfig()
    profile = config.profile(width, height, count, dtype=dtype)

    log.debug(f"Creating pixel sink {path.name} ({count}x{height}x{width}, {profile['dtype']})")

    try:
        dataset = rasterio.open(path, 'w', **profile)
    except RasterioError as e:
        raise RasterIOError(f"Failed to create raster {path}: {e}") from e

    sink = PixelSink(dataset, path)
    if config.band_names:
        sink.set_band_names(config.band_names)
    return sink
