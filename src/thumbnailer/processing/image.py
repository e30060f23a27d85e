"""
Image processing utilities for thumbnailer.

This module handles all raster-level functionality including:
- Decoding image files into one fixed RGBA layout
- PNG encoding
- Font parsing
- Source-over alpha blending
"""

from __future__ import annotations

import math
from pathlib import Path

import cv2
import numpy as np
from PIL import ImageFont

from ..core.errors import EncodeFailure, InvalidGeometry, ResourceLoadFailure

# Image processing constants
MIN_ALPHA_CHANNELS = 4
POINTS_PER_INCH = 72


def new_canvas(width: int, height: int) -> np.ndarray:
    """Return a fully transparent RGBA raster."""
    if width <= 0 or height <= 0:
        raise InvalidGeometry(f"cannot allocate a {width}x{height} canvas", stage="allocate")
    return np.zeros((height, width, 4), dtype=np.uint8)


def to_rgba(img: np.ndarray) -> np.ndarray:
    """Normalize an OpenCV image (gray, gray+alpha, BGR, BGRA; 8 or 16 bit) to 8-bit RGBA."""
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(np.ascontiguousarray(img[:, :, 0]), cv2.COLOR_GRAY2RGBA)
    if channels == 2:
        # grayscale + alpha
        rgba = cv2.cvtColor(np.ascontiguousarray(img[:, :, 0]), cv2.COLOR_GRAY2RGBA)
        rgba[:, :, 3] = img[:, :, 1]
        return rgba
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(np.ascontiguousarray(img[:, :, :MIN_ALPHA_CHANNELS]), cv2.COLOR_BGRA2RGBA)


def load_raster(path: Path) -> np.ndarray:
    """Decode an image file into an RGBA raster.

    Raises:
        ResourceLoadFailure: If the file is missing or OpenCV cannot decode it.
    """
    if not path.is_file():
        raise ResourceLoadFailure("image file not found", path=path, stage="load")
    try:
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if img is None:
            raise ResourceLoadFailure("OpenCV could not decode the file", path=path, stage="load")
        if img.shape[0] == 0 or img.shape[1] == 0:
            raise ResourceLoadFailure("image has zero size", path=path, stage="load")
        return to_rgba(img)
    except cv2.error as ex:
        raise ResourceLoadFailure(f"OpenCV failed to decode the file: {ex}", path=path, stage="load") from ex


def save_png(raster: np.ndarray, path: Path) -> None:
    """Encode an RGBA raster to a PNG file.

    Raises:
        EncodeFailure: If the image cannot be encoded or written.
    """
    try:
        bgra = cv2.cvtColor(np.ascontiguousarray(raster), cv2.COLOR_RGBA2BGRA)
        ok, buffer = cv2.imencode(".png", bgra)
        if not ok:
            raise EncodeFailure("OpenCV failed to encode PNG", path=path, stage="encode")
        path.write_bytes(buffer.tobytes())
    except cv2.error as ex:
        raise EncodeFailure(f"OpenCV failed to encode PNG: {ex}", path=path, stage="encode") from ex
    except OSError as ex:
        raise EncodeFailure(f"failed to write PNG: {ex}", path=path, stage="write") from ex


def font_pixel_size(points: float, dpi: int) -> int:
    """Convert a point size into the pixel size used by the rasterizer."""
    return max(1, int(math.ceil(points * dpi / POINTS_PER_INCH)))


def load_font(path: Path, points: float, dpi: int) -> ImageFont.FreeTypeFont:
    """Parse a TrueType/OpenType font at the pixel size matching ``points`` at ``dpi``.

    Raises:
        ResourceLoadFailure: If the font file is missing or cannot be parsed.
    """
    if not path.is_file():
        raise ResourceLoadFailure("font file not found", path=path, stage="load")
    try:
        return ImageFont.truetype(str(path), size=font_pixel_size(points, dpi))
    except OSError as ex:
        raise ResourceLoadFailure(f"cannot parse font: {ex}", path=path, stage="load") from ex


def _clip_region(dst_shape: tuple[int, ...], src_shape: tuple[int, ...], x: int, y: int):
    """Return matching (dst, src) slices for ``src`` placed at (x, y), or None when fully outside."""
    dh, dw = dst_shape[:2]
    sh, sw = src_shape[:2]
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(dw, x + sw), min(dh, y + sh)
    if x1 <= x0 or y1 <= y0:
        return None
    dst_sl = (slice(y0, y1), slice(x0, x1))
    src_sl = (slice(y0 - y, y1 - y), slice(x0 - x, x1 - x))
    return dst_sl, src_sl


def _over(dst: np.ndarray, src_rgb: np.ndarray, src_a: np.ndarray) -> np.ndarray:
    """Source-over for non-premultiplied pixels; ``src_a`` is float in [0, 1]."""
    dst_rgb = dst[..., :3].astype(np.float32)
    dst_a = dst[..., 3:4].astype(np.float32) / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)
    num = src_rgb * src_a + dst_rgb * dst_a * (1.0 - src_a)
    out_rgb = np.divide(num, out_a, out=np.zeros_like(num), where=out_a > 0)
    out = np.empty(dst.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    out[..., 3:4] = np.clip(np.rint(out_a * 255.0), 0, 255).astype(np.uint8)
    return out


def blend_over(dst: np.ndarray, src: np.ndarray, x: int = 0, y: int = 0) -> None:
    """Composite ``src`` over ``dst`` in place with its top-left corner at (x, y), clipped to ``dst``."""
    region = _clip_region(dst.shape, src.shape, x, y)
    if region is None:
        return
    dst_sl, src_sl = region
    patch = src[src_sl]
    src_a = patch[..., 3:4].astype(np.float32) / 255.0
    dst[dst_sl] = _over(dst[dst_sl], patch[..., :3].astype(np.float32), src_a)


def fill_over(dst: np.ndarray, color: tuple[int, int, int, int], coverage: np.ndarray) -> None:
    """Composite a uniform ``color`` over ``dst`` in place through an 8-bit coverage mask."""
    if coverage.shape != dst.shape[:2]:
        raise InvalidGeometry(
            f"coverage mask {coverage.shape} does not match raster {dst.shape[:2]}", stage="draw"
        )
    covered = coverage > 0
    if not covered.any():
        return
    src_a = (coverage[covered].astype(np.float32) / 255.0) * (color[3] / 255.0)
    src_rgb = np.asarray(color[:3], dtype=np.float32)
    dst[covered] = _over(dst[covered], src_rgb, src_a[:, None])
