#!/usr/bin/env python3
"""
thumbnailer: Generate sequentially numbered thumbnail images.

Each frame is a background (one shared image, or one image per frame), an
optional title overlay, and a "#<number>" label with an outline, written as
thumbnail_<base-name>_<number>.png.
"""

from __future__ import annotations

# Standard library imports
import argparse
import platform
import signal
import sys
import threading
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

# Local application imports
from .. import __version__
from ..config import (
    Config,
    Placement,
    build_config,
    load_app_config,
    parse_hex_color,
)
from ..core.errors import ConfigInvalid, ThumbnailerError
from ..output.logger import FORMATS, LEVELS, SimpleLogger, log_settings_from_env, normalize_format, normalize_level
from ..processing.sequence import BatchRunner
from ..processing.sources import load_resources

APP_NAME = "thumbnailer"
APP_DESCRIPTION = "Generates sequentially numbered thumbnail images based on the given image and text settings."
DEFAULT_FONT_FILE = Path("assets") / "fonts" / "tahomabd.ttf"
VERSION_DEPENDENCIES = ("numpy", "opencv-python", "pillow", "pydantic", "pydantic-settings", "rich")


def hex_color(value: str) -> tuple[int, int, int, int]:
    """argparse type for RGB / RGBA hex codes."""
    try:
        return parse_hex_color(value)
    except ValueError as ex:
        raise argparse.ArgumentTypeError(str(ex)) from ex


def add_render_args(p: argparse.ArgumentParser) -> None:
    """Flags shared by both generate subcommands."""
    p.add_argument("--base-name", required=True, help="The base name for the image files")
    p.add_argument("--output-dest", type=Path, required=True, help="Full path to the output destination")
    p.add_argument("--font-file", type=Path, default=DEFAULT_FONT_FILE, help="TrueType/OpenType font used for the sequence number")
    p.add_argument("--font-size", type=float, default=30.0, help="Font size in points")
    p.add_argument("--font-color", type=hex_color, default="000000", help="Sequence number text color (RGB or RGBA hex code)")
    p.add_argument("--font-border-color", type=hex_color, default="FFFFFF", help="Sequence number outline color (RGB or RGBA hex code)")
    p.add_argument("--font-border-width", type=int, default=2, help="Sequence number outline thickness (in pixels)")
    p.add_argument(
        "--font-border-alpha-thresh",
        type=int,
        default=0,
        help="The alpha value at or below which a pixel is considered empty and may become a border pixel",
    )
    p.add_argument(
        "--seq-num-digits",
        type=int,
        default=2,
        help="Number of fixed places in the generated sequence number (ie. how many 0s to pad single digits with)",
    )
    p.add_argument("--seq-start", type=int, default=1, help="Number to start the sequence with")
    p.add_argument("--seq-end", type=int, default=10, help="Number to end the sequence on (inclusive)")
    p.add_argument(
        "--placement",
        choices=[pl.value for pl in Placement],
        default=Placement.LOWER_RIGHT.value,
        help="Where the sequence number is placed; 'manual' uses --seq-num-pos-x/--seq-num-pos-y",
    )
    p.add_argument("--seq-num-pos-x", type=int, default=975, help="X coordinate the sequence number is drawn at (manual placement)")
    p.add_argument("--seq-num-pos-y", type=int, default=600, help="Y coordinate the sequence number is drawn at (manual placement)")
    p.add_argument(
        "--text-layer-width",
        type=int,
        default=1920,
        help="Width of the temporary image the text is drawn onto; must fit the label plus its border or glyphs are clipped",
    )
    p.add_argument(
        "--text-layer-height",
        type=int,
        default=1080,
        help="Height of the temporary image the text is drawn onto; must fit the label plus its border or glyphs are clipped",
    )
    p.add_argument("--output-width", type=int, default=1920, help="Frames wider than this are resized to the output size")
    p.add_argument("--output-height", type=int, default=1080, help="Frames taller than this are resized to the output size")
    p.add_argument("--debug-text-layer", action="store_true", help="Also write the uncropped text layer of every frame")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    env_level, env_format = log_settings_from_env()
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--log-level", type=normalize_level, choices=list(LEVELS), default=env_level, help="The log level")
    p.add_argument("--log-format", type=normalize_format, choices=list(FORMATS), default=env_format, help="The log format")
    p.add_argument("--log-file", type=Path, default=None, help="Also append log lines to this file")

    sub = p.add_subparsers(dest="command", required=True)

    static = sub.add_parser(
        "generatepng",
        help="generate thumbnails in PNG format from one shared background",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    static.add_argument("--bg-image", type=Path, required=True, help="Full path to the background image")
    add_render_args(static)

    dynamic = sub.add_parser(
        "generatedynamic",
        help="generate thumbnails in PNG format from one background image per frame",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    dynamic.add_argument("--source-dir", type=Path, required=True, help="Directory holding one background per sequence number")
    dynamic.add_argument("--source-prefix", default="", help="File name prefix of the per-frame backgrounds")
    dynamic.add_argument("--source-ext", default=".png", help="File extension of the per-frame backgrounds")
    dynamic.add_argument("--title-image", type=Path, default=None, help="Optional title overlay drawn over every frame")
    add_render_args(dynamic)

    sub.add_parser("version", help="output the version")
    return p.parse_args(argv)


def build_run_config(args: argparse.Namespace) -> Config:
    """Create a Config object from parsed args."""
    if args.command == "generatepng":
        source = {"kind": "static", "background_path": args.bg_image}
    else:
        source = {
            "kind": "dynamic",
            "source_dir": args.source_dir,
            "file_prefix": args.source_prefix,
            "file_extension": args.source_ext,
            "title_path": args.title_image,
        }
    return build_config(
        base_name=args.base_name,
        dest_path=args.output_dest,
        font_path=args.font_file,
        font_size=args.font_size,
        num_digits=args.seq_num_digits,
        seq_start=args.seq_start,
        seq_end=args.seq_end,
        font_color=args.font_color,
        border_color=args.font_border_color,
        border_width=args.font_border_width,
        border_alpha_threshold=args.font_border_alpha_thresh,
        text_layer_width=args.text_layer_width,
        text_layer_height=args.text_layer_height,
        output_width=args.output_width,
        output_height=args.output_height,
        placement=Placement(args.placement),
        pos_x=args.seq_num_pos_x,
        pos_y=args.seq_num_pos_y,
        debug_text_layer=args.debug_text_layer,
        source=source,
    )


def install_signal_handlers(stop_event: threading.Event, logger: SimpleLogger) -> None:
    """Handle Ctrl+C by asking the runner to stop after the current frame."""

    def handler(signum, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt
        stop_event.set()
        logger.warning("Ctrl+C received. Stopping after the current frame...")

    signal.signal(signal.SIGINT, handler)


def print_version() -> None:
    print(f"{APP_NAME} {__version__}")
    print()
    print(f"  Python Version: {platform.python_version()}")
    print(f"  Implementation: {platform.python_implementation()}")
    print()
    for dist in VERSION_DEPENDENCIES:
        try:
            print(f"  {dist} {metadata.version(dist)}")
        except metadata.PackageNotFoundError:
            print(f"  {dist} (not installed)")


def print_run_header(logger: SimpleLogger, config: Config) -> None:
    """Print the run configuration."""
    logger.section("Run Configuration")
    if config.is_static:
        source_rows = [["Background:", str(config.source.background_path)]]
    else:
        pattern = f"{config.source.file_prefix}<number>{config.source.file_extension}"
        source_rows = [
            ["Source:", str(config.source.source_dir / pattern)],
            ["Title:", str(config.source.title_path) if config.source.title_path else "none"],
        ]
    rows = [
        ["Mode:", config.source.kind],
        *source_rows,
        ["Output:", str(config.dest_path.resolve())],
        ["Sequence:", f"{config.seq_start}..{config.seq_end} ({config.num_digits} digits)"],
        ["Font:", f"{config.font_path} @ {config.font_size}pt"],
        ["Placement:", config.placement.value],
        ["Output size:", f"{config.output_width}x{config.output_height}"],
    ]
    logger.table(["Setting", "Value"], rows)
    logger.debug("running config", conf=config.model_dump_json())


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)

    if args.command == "version":
        print_version()
        return 0

    try:
        logger = SimpleLogger(args.log_file, level=args.log_level, fmt=args.log_format)
    except ValueError as ex:
        print(f"{APP_NAME}: error: {ex}", file=sys.stderr)
        return 2

    try:
        config = build_run_config(args)
    except ConfigInvalid as ex:
        logger.error(f"Invalid configuration: {ex.message}")
        logger.error("No files were written.")
        return 1

    settings = load_app_config().render
    print_run_header(logger, config)

    stop_ev = threading.Event()
    install_signal_handlers(stop_ev, logger)

    try:
        resources = load_resources(config, settings)
        result = BatchRunner(config, resources, settings, logger).run(stop_ev)
    except ThumbnailerError as ex:
        logger.error(f"application exited with an error: {ex.message}", app=APP_NAME, **ex.context())
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 1

    logger.section("Summary")
    rows = [
        ["Frames written:", str(len(result.written))],
        ["Frames skipped:", str(len(result.skipped))],
        ["Cancelled:", "yes" if result.cancelled else "no"],
    ]
    logger.table(["Result", "Count"], rows)
    for failure in result.skipped:
        logger.warning(f"skipped: {failure.message}", seq=failure.number, path=failure.path, stage=failure.stage)
    return 0


if __name__ == "__main__":
    sys.exit(main())
