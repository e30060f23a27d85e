"""
Path and file system utilities for thumbnailer.

This module handles all path-related functionality including:
- Output and debug file naming
- Per-frame source file naming for dynamic runs
- Destination directory preparation
"""

from __future__ import annotations

from pathlib import Path

OUTPUT_PREFIX = "thumbnail"
OUTPUT_EXT = ".png"
DEBUG_TEXT_LAYER_SUFFIX = "_debug_textlayer"


def output_path(dest: Path, base_name: str, label: str) -> Path:
    """Return the output path for one frame.

    Examples:
        (Path("out"), "ep", "007") -> out/thumbnail_ep_007.png
    """
    return dest / f"{OUTPUT_PREFIX}_{base_name}_{label}{OUTPUT_EXT}"


def debug_text_layer_path(dest: Path, base_name: str, label: str) -> Path:
    """Return the path of the pre-crop text layer dump for one frame."""
    return dest / f"{OUTPUT_PREFIX}_{base_name}_{label}{DEBUG_TEXT_LAYER_SUFFIX}{OUTPUT_EXT}"


def frame_source_path(source_dir: Path, prefix: str, label: str, ext: str) -> Path:
    """Return the background file expected for one frame of a dynamic run.

    Examples:
        (Path("src"), "frame_", "03", ".jpg") -> src/frame_03.jpg
    """
    return source_dir / f"{prefix}{label}{ext}"


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if needed and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path
