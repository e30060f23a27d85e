"""
Sequence processing module for thumbnailer.

This module walks the configured sequence-number range, renders one
thumbnail per number and writes it to disk, applying the failure policy of
the frame source: static runs stop at the first error, dynamic runs log and
skip the failing frame.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path

from ..config import Config, RenderSettings
from ..core.errors import EncodeFailure, ThumbnailerError
from ..core.types import FrameContext, FrameFailure, ResourceBundle, RunResult
from ..output.logger import SimpleLogger
from ..utils.path import debug_text_layer_path, ensure_dir, output_path
from .composite import composite
from .image import save_png


def pad_label(number: int, digits: int) -> str:
    """Left-pad the decimal form of ``number`` with zeros to ``digits`` characters.

    Never truncates: numbers already ``digits`` long or longer are returned unchanged.
    """
    return str(number).zfill(digits)


class BatchRunner:
    """Render and export every frame of a run, one after another."""

    def __init__(
        self,
        config: Config,
        resources: ResourceBundle,
        settings: RenderSettings,
        logger: SimpleLogger,
    ) -> None:
        self.config = config
        self.resources = resources
        self.settings = settings
        self.logger = logger

    def run(self, stop_event: threading.Event | None = None) -> RunResult:
        """Process ``seq_start..seq_end`` inclusive.

        Raises:
            ThumbnailerError: On the first failure when the frame source is fail-fast.
        """
        config = self.config
        source = self.resources.source
        result = RunResult()
        total = config.seq_end - config.seq_start + 1
        start = time.time()

        try:
            ensure_dir(config.dest_path)
        except OSError as ex:
            raise EncodeFailure(f"cannot create output directory: {ex}", path=config.dest_path, stage="write") from ex

        for i, number in enumerate(range(config.seq_start, config.seq_end + 1), 1):
            if stop_event is not None and stop_event.is_set():
                self.logger.warning("Run cancelled before frame", seq=number)
                result.cancelled = True
                break

            label = pad_label(number, config.num_digits)
            self.logger.debug("padded sequence number", seq=number, label=label, digits=config.num_digits)
            try:
                written = self.render_frame(number, label)
            except ThumbnailerError as ex:
                if ex.number is None:
                    ex.number = number
                if source.fail_fast:
                    raise
                stage = ex.stage or "render"
                path = Path(ex.path) if ex.path is not None else source.background_path(label)
                result.skipped.append(FrameFailure(number=number, stage=stage, path=path, message=ex.message))
                self.logger.error(f"[{i:02d}/{total}] skipped frame: {ex.message}", seq=number, path=path, stage=stage)
                continue

            result.written.append(written)
            self.logger.success(f"[{i:02d}/{total}] -> {written.name}", seq=number)

        elapsed = time.time() - start
        self.logger.info(
            f"Rendered {len(result.written)}/{total} frames in {elapsed:.1f}s",
            skipped=len(result.skipped),
            cancelled=result.cancelled,
        )
        return result

    def render_frame(self, number: int, label: str) -> Path:
        """Build, composite and export one frame; returns the written path."""
        config = self.config
        source = self.resources.source

        background = source.background(label)

        frame = FrameContext(
            number=number,
            label=label,
            background=background,
            overlay=source.overlay,
            copy_background=source.copy_background,
        )
        composite(frame, config.placement, self.resources.font, config, self.settings)

        if config.debug_text_layer and frame.text_layer is not None:
            debug_path = debug_text_layer_path(config.dest_path, config.base_name, label)
            save_png(frame.text_layer, debug_path)
            self.logger.debug("wrote debug text layer", seq=number, path=debug_path)

        out = output_path(config.dest_path, config.base_name, label)
        save_png(frame.result, out)
        return out
