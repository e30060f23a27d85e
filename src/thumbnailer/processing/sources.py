"""
Frame sources: where each frame's background (and overlay) comes from.

Two variants share one interface. A static source hands every frame the same
background array by reference and fails the whole run on any error. A dynamic
source loads one background per sequence number and lets the runner skip
frames that fail.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np

from ..config import Config, DynamicSource, RenderSettings, StaticSource
from ..core.types import ResourceBundle
from ..utils.path import frame_source_path
from .image import load_font, load_raster


class StaticFrameSource:
    """One shared background, loaded once."""

    fail_fast = True
    copy_background = True

    def __init__(self, background: np.ndarray) -> None:
        background.setflags(write=False)
        self._background = background

    @classmethod
    def load(cls, cfg: StaticSource) -> StaticFrameSource:
        return cls(load_raster(cfg.background_path))

    @property
    def overlay(self) -> np.ndarray | None:
        return None

    def background_path(self, label: str) -> Path | None:
        return None

    def background(self, label: str) -> np.ndarray:
        return self._background


class DynamicFrameSource:
    """A distinct background per frame plus an optional shared title overlay."""

    fail_fast = False
    copy_background = False

    def __init__(self, cfg: DynamicSource, overlay: np.ndarray | None = None) -> None:
        self.cfg = cfg
        if overlay is not None:
            overlay.setflags(write=False)
        self._overlay = overlay

    @classmethod
    def load(cls, cfg: DynamicSource) -> DynamicFrameSource:
        overlay = load_raster(cfg.title_path) if cfg.title_path is not None else None
        return cls(cfg, overlay)

    @property
    def overlay(self) -> np.ndarray | None:
        return self._overlay

    def background_path(self, label: str) -> Path:
        return frame_source_path(self.cfg.source_dir, self.cfg.file_prefix, label, self.cfg.file_extension)

    def background(self, label: str) -> np.ndarray:
        return load_raster(self.background_path(label))


FrameSource = Union[StaticFrameSource, DynamicFrameSource]


def open_frame_source(cfg: StaticSource | DynamicSource) -> FrameSource:
    """Build the runtime frame source matching a configured source variant."""
    if isinstance(cfg, StaticSource):
        return StaticFrameSource.load(cfg)
    return DynamicFrameSource.load(cfg)


def load_resources(config: Config, settings: RenderSettings) -> ResourceBundle:
    """Load the frame source and the font once for the whole run.

    Raises:
        ResourceLoadFailure: If the background, overlay or font cannot be loaded.
    """
    source = open_frame_source(config.source)
    font = load_font(config.font_path, config.font_size, settings.font_dpi)
    return ResourceBundle(font=font, source=source)
