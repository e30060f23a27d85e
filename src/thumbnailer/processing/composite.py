"""
Frame composition: background, optional title overlay and the cropped label.

Layers are stacked on one canvas in a fixed order with source-over blending,
then the canvas is downscaled to the target output size when it is larger.
"""

from __future__ import annotations

import numpy as np
from PIL import Image, ImageFont

from ..config import Config, Placement, RenderSettings
from ..core.errors import InvalidGeometry, RenderFailure
from ..core.types import BoundingRect, FrameContext
from .crop import scan_occupied_area
from .image import blend_over, new_canvas
from .text import render_label

# Catmull-Rom: Pillow's bicubic kernel uses a = -0.5
SCALE_FILTER = Image.Resampling.BICUBIC


def placement_offset(
    placement: Placement,
    canvas_size: tuple[int, int],
    rect: BoundingRect,
    config: Config,
    settings: RenderSettings,
) -> tuple[int, int]:
    """Return the top-left position of the cropped label on a (width, height) canvas."""
    if placement is Placement.MANUAL:
        return config.pos_x, config.pos_y

    width, height = canvas_size
    margin = settings.corner_margin
    x = width - rect.width - margin
    if placement is Placement.UPPER_RIGHT:
        return x, margin
    if placement is Placement.LOWER_RIGHT:
        return x, height - rect.height - margin
    raise ValueError(f"Unsupported placement: {placement}")


def scale_to_target(canvas: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize ``canvas`` to exactly (width, height) when it exceeds either dimension.

    The aspect ratio is not preserved. A canvas that already fits is returned as-is.

    Raises:
        RenderFailure: If Pillow cannot resample the canvas.
    """
    h, w = canvas.shape[:2]
    if w <= width and h <= height:
        return canvas
    try:
        img = Image.fromarray(np.ascontiguousarray(canvas))
        return np.asarray(img.resize((width, height), SCALE_FILTER), dtype=np.uint8).copy()
    except (ValueError, OSError) as ex:
        raise RenderFailure(f"cannot resize {w}x{h} frame to {width}x{height}: {ex}", stage="scale") from ex


def composite(
    frame: FrameContext,
    placement: Placement,
    font: ImageFont.FreeTypeFont,
    config: Config,
    settings: RenderSettings,
) -> np.ndarray:
    """Stack the frame's layers and return the final raster.

    The pre-crop text layer is kept on ``frame.text_layer`` for debug export.

    Raises:
        InvalidGeometry: If the background or overlay has zero width or height.
    """
    bg = frame.background
    h, w = bg.shape[:2]
    if h == 0 or w == 0:
        raise InvalidGeometry("background has zero size", number=frame.number, stage="composite")

    canvas = new_canvas(w, h)
    if frame.copy_background:
        canvas[...] = bg
    else:
        blend_over(canvas, bg)

    if frame.overlay is not None:
        if frame.overlay.shape[0] == 0 or frame.overlay.shape[1] == 0:
            raise InvalidGeometry("title overlay has zero size", number=frame.number, stage="composite")
        blend_over(canvas, frame.overlay)

    frame.text_layer = render_label(frame.label, font, config, settings)
    rect = scan_occupied_area(frame.text_layer, settings.crop_alpha_threshold)
    if not rect.is_empty:
        x, y = placement_offset(placement, (w, h), rect, config, settings)
        blend_over(canvas, rect.crop(frame.text_layer), x, y)
    frame.canvas = canvas

    frame.result = scale_to_target(canvas, config.output_width, config.output_height)
    return frame.result
