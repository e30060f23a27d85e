"""
Core data types for thumbnailer.

This module contains the per-frame and per-run data classes used by the
rendering pipeline. Rasters are ``(height, width, 4)`` uint8 RGBA arrays.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from PIL.ImageFont import FreeTypeFont

    from ..processing.sources import FrameSource


@dataclass(frozen=True)
class BoundingRect:
    """Tight enclosure of occupied pixels; ``max_x``/``max_y`` are exclusive."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def empty(cls) -> BoundingRect:
        return cls(0, 0, 0, 0)

    @property
    def width(self) -> int:
        return max(0, self.max_x - self.min_x)

    @property
    def height(self) -> int:
        return max(0, self.max_y - self.min_y)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def crop(self, raster: np.ndarray) -> np.ndarray:
        """Return the view of ``raster`` covered by this rectangle."""
        return raster[self.min_y : self.max_y, self.min_x : self.max_x]


@dataclass(frozen=True)
class ResourceBundle:
    """Resources loaded once per run and shared read-only by every frame."""

    font: FreeTypeFont
    source: FrameSource


@dataclass
class FrameContext:
    """State for one frame, built fresh per sequence number."""

    number: int
    label: str
    background: np.ndarray
    overlay: np.ndarray | None = None
    copy_background: bool = True
    text_layer: np.ndarray | None = None
    canvas: np.ndarray | None = None
    result: np.ndarray | None = None


@dataclass(frozen=True)
class FrameFailure:
    """A frame that was skipped, with enough context to diagnose it."""

    number: int
    stage: str
    path: Path | None
    message: str


@dataclass
class RunResult:
    """Outcome of a batch run."""

    written: list[Path] = field(default_factory=list)
    skipped: list[FrameFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def completed(self) -> bool:
        """True when every sequence number was attempted."""
        return not self.cancelled

    @property
    def ok(self) -> bool:
        """True when every frame was written and nothing was skipped."""
        return self.completed and not self.skipped
