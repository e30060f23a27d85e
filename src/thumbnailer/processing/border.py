"""
Outline and halo generation around glyph silhouettes.

A border pass paints every empty pixel lying within ``width`` pixels
(Chebyshev distance) of an occupied pixel. The halo is three such passes:
the configured hard border followed by two 1 pixel rings of decreasing
opacity that soften the outer edge.
"""

from __future__ import annotations

import cv2
import numpy as np

from ..config import RGBA, RenderSettings
from .crop import occupied_mask


def add_border(raster: np.ndarray, color: RGBA, width: int, alpha_threshold: int) -> None:
    """Paint a ring of ``color`` around the occupied pixels of ``raster`` in place.

    Painted pixels are replaced, not blended. ``width <= 0`` leaves the raster untouched.
    """
    if width <= 0:
        return
    occupied = occupied_mask(raster, alpha_threshold)
    if not occupied.any():
        return

    # A square kernel dilates by Chebyshev distance
    kernel = np.ones((2 * width + 1, 2 * width + 1), dtype=np.uint8)
    reach = cv2.dilate(occupied.astype(np.uint8), kernel, iterations=1).astype(bool)
    ring = reach & ~occupied
    raster[ring] = np.asarray(color, dtype=np.uint8)


def soft_color(color: RGBA, alpha: int) -> RGBA:
    """Return ``color`` with its alpha replaced by ``alpha`` scaled by the color's own alpha."""
    r, g, b, a = color
    return r, g, b, int(round(alpha * a / 255))


def add_soft_rings(raster: np.ndarray, color: RGBA, alpha_threshold: int, settings: RenderSettings) -> None:
    """Apply the two 1 pixel rings that fade the hard border outwards."""
    add_border(raster, soft_color(color, settings.soft_border_alpha), 1, alpha_threshold)
    # Independent of alpha_threshold: the first soft ring must stay occupied here
    add_border(raster, soft_color(color, settings.softer_border_alpha), 1, settings.softer_alpha_threshold)
