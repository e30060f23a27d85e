"""
Cropping utilities for thumbnailer.

This module finds the tight rectangle around the occupied pixels of a raster,
used to cut the rendered label out of its oversized text layer.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..core.types import BoundingRect

# Margin kept around the detected extrema so anti-aliased edges survive the crop
CROP_MARGIN_PIXELS = 1


def occupied_mask(raster: np.ndarray, alpha_threshold: int) -> np.ndarray:
    """Return a boolean mask of pixels whose alpha exceeds ``alpha_threshold``."""
    return raster[:, :, 3] > alpha_threshold


def _first_present(pres: Sequence[bool]) -> int | None:
    """Index of the first True entry, or None."""
    return next((i for i, p in enumerate(pres) if p), None)


def _last_present(pres: Sequence[bool]) -> int | None:
    """Index of the last True entry, or None."""
    found = _first_present(pres[::-1])
    if found is None:
        return None
    return len(pres) - 1 - found


def scan_occupied_area(raster: np.ndarray, alpha_threshold: int = 0) -> BoundingRect:
    """Compute the rectangle enclosing every occupied pixel plus a 1 pixel margin.

    Args:
        raster (np.ndarray): RGBA raster, shape (h, w, 4).
        alpha_threshold (int): A pixel is occupied when its alpha is above this.

    Returns:
        BoundingRect: Half-open rectangle clamped to the raster, or an empty
        rectangle when no pixel is occupied.
    """
    h, w = raster.shape[:2]
    if h == 0 or w == 0:
        return BoundingRect.empty()

    mask = occupied_mask(raster, alpha_threshold)
    row_pres = mask.any(axis=1)
    col_pres = mask.any(axis=0)

    # top, bottom, left, right
    min_y = _first_present(row_pres)
    if min_y is None:
        return BoundingRect.empty()
    max_y = _last_present(row_pres)
    min_x = _first_present(col_pres)
    max_x = _last_present(col_pres)

    return BoundingRect(
        min_x=max(0, min_x - CROP_MARGIN_PIXELS),
        min_y=max(0, min_y - CROP_MARGIN_PIXELS),
        max_x=min(w, max_x + CROP_MARGIN_PIXELS + 1),
        max_y=min(h, max_y + CROP_MARGIN_PIXELS + 1),
    )
