# src/mapalgebra/cli.py

import argparse
import sys
import logging
import os
from typing import List, Optional

from mapalgebra.exceptions import RasterError
from mapalgebra.raster import (
    SinkConfig,
    SLOPE_BANDS,
    SLOPE_SPACING,
    anisotropic_slope,
    open_source,
    read_info,
    read_raster,
    save
)

LOG_LEVEL_ENV = "MAPALGEBRA_LOG_LEVEL"

def setup_logging(level: Optional[int] = None) -> None:
    """
    Configures the standard logging format and level for the command-line interface.

    Args:
        level (int): The logging threshold level. Falls back to the
            MAPALGEBRA_LOG_LEVEL environment variable, then INFO.
    """
    if level is None:
        level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def _output_config(src_path: str, band_names=None) -> SinkConfig:
    """Carry the georeferencing of the input over to the output file."""
    info = read_info(src_path)
    return SinkConfig(
        band_names=band_names,
        crs=info['crs'],
        transform=info['transform']
    )

def show_info(path: str) -> None:
    """
    Prints the grid and band layout of a raster file.

    Args:
        path (str): Raster file to inspect.
    """
    info = read_info(path)
    print(f"{path}: {info['width']}x{info['height']}, {info['count']} band(s), driver {info['driver']}")
    for name, idx in info['band_names'].items():
        print(f"  band {idx}: {name} ({info['dtypes'][idx - 1]})")

def compute_slope(src: str, dst: str, spacing: float, band: int) -> None:
    """
    Writes the four band anisotropic slope of an elevation raster.

    Args:
        src (str): Elevation raster.
        dst (str): Output raster.
        spacing (float): Distance between cell centers, in elevation units.
        band (int): Band of `src` holding elevation.
    """
    config = _output_config(src, band_names=SLOPE_BANDS)
    with open_source(src) as source:
        elevation = read_raster(source, bands=band)
        save(anisotropic_slope(elevation, spacing=spacing), dst, config=config)
    logging.info(f"Slope written to {dst}")

def rescale(src: str, dst: str, scale: float, offset: float) -> None:
    """
    Writes `src * scale + offset` for every band of a raster.

    Args:
        src (str): Input raster.
        dst (str): Output raster.
        scale (float): Multiplicative factor.
        offset (float): Additive offset applied after scaling.
    """
    config = _output_config(src)
    with open_source(src) as source:
        raster = read_raster(source)
        save(raster * scale + offset, dst, config=config)
    logging.info(f"Rescaled raster written to {dst}")

def main(argv: Optional[List[str]] = None) -> None:
    """
    Parses command-line arguments and routes execution to the appropriate subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="mapalgebra",
        description="Lazy map algebra over raster files"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser(
        "info",
        help="Prints the size and bands of a raster file."
    )
    info_parser.add_argument("path", type=str, help="Raster file to inspect.")

    slope_parser = subparsers.add_parser(
        "slope",
        help="Computes the four band anisotropic slope of an elevation raster."
    )
    slope_parser.add_argument("src", type=str, help="Input elevation raster.")
    slope_parser.add_argument("dst", type=str, help="Output slope raster.")
    slope_parser.add_argument(
        "--spacing",
        type=float,
        default=SLOPE_SPACING,
        help=f"Distance between cell centers. Defaults to {SLOPE_SPACING}."
    )
    slope_parser.add_argument(
        "--band",
        type=int,
        default=1,
        help="Band holding elevation. Defaults to 1."
    )

    rescale_parser = subparsers.add_parser(
        "rescale",
        help="Applies a linear transform (value * scale + offset) to every band."
    )
    rescale_parser.add_argument("src", type=str, help="Input raster.")
    rescale_parser.add_argument("dst", type=str, help="Output raster.")
    rescale_parser.add_argument("--scale", type=float, default=1.0, help="Defaults to 1.")
    rescale_parser.add_argument("--offset", type=float, default=0.0, help="Defaults to 0.")

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else None)

    try:
        if args.command == "info":
            show_info(args.path)
        elif args.command == "slope":
            compute_slope(args.src, args.dst, spacing=args.spacing, band=args.band)
        elif args.command == "rescale":
            rescale(args.src, args.dst, scale=args.scale, offset=args.offset)
    except (RasterError, FileNotFoundError, IndexError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
