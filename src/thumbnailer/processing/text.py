"""
Text layer rendering for sequence-number labels.

The label is rasterized onto a transparent canvas the size of the configured
text layer, outlined with the hard border, drawn a second time to restore
full interior coverage, then softened with two translucent rings. Cropping the
result is left to the caller.
"""

from __future__ import annotations

import math

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..config import Config, RenderSettings
from ..core.errors import RenderFailure
from .border import add_border, add_soft_rings
from .image import POINTS_PER_INCH, fill_over, new_canvas

LABEL_PREFIX = "#"


def label_text(label: str) -> str:
    """Return the string actually drawn for a padded label."""
    return f"{LABEL_PREFIX}{label}"


def text_anchor(config: Config, settings: RenderSettings) -> tuple[int, int]:
    """Compute the baseline-left point the label is drawn at.

    The baseline sits one em (font size at the render DPI) below the top,
    pushed down by twice the margin plus border width so ascenders and the
    outline stay inside the layer.
    """
    pad = settings.text_margin + config.border_width
    y = int(math.ceil(config.font_size * settings.font_dpi / POINTS_PER_INCH))
    return pad, y + pad * 2


def glyph_coverage(text: str, font: ImageFont.FreeTypeFont, size: tuple[int, int], anchor: tuple[int, int]) -> np.ndarray:
    """Rasterize ``text`` into an 8-bit coverage mask of ``size`` with its baseline at ``anchor``."""
    mask = Image.new("L", size, 0)
    draw = ImageDraw.Draw(mask)
    try:
        draw.text(anchor, text, fill=255, font=font, anchor="ls")
    except (OSError, ValueError) as ex:
        raise RenderFailure(f"cannot rasterize {text!r}: {ex}", stage="text") from ex
    return np.asarray(mask, dtype=np.uint8)


def render_label(label: str, font: ImageFont.FreeTypeFont, config: Config, settings: RenderSettings) -> np.ndarray:
    """Render ``#<label>`` with its border and halo onto a fresh text layer.

    The text layer must be at least as large as the label extent plus
    ``text_margin + border_width`` on each side; anything beyond it is clipped.

    Returns:
        np.ndarray: The full, uncropped RGBA text layer.
    """
    layer = new_canvas(config.text_layer_width, config.text_layer_height)
    anchor = text_anchor(config, settings)
    coverage = glyph_coverage(label_text(label), font, (config.text_layer_width, config.text_layer_height), anchor)

    fill_over(layer, config.font_color, coverage)
    add_border(layer, config.border_color, config.border_width, config.border_alpha_threshold)
    fill_over(layer, config.font_color, coverage)
    add_soft_rings(layer, config.border_color, config.border_alpha_threshold, settings)
    return layer
