"""Error hierarchy for thumbnail generation.

Every error may carry the sequence number, file path and pipeline stage it
happened in, so a failure can be diagnosed from the log line alone.
"""

from __future__ import annotations

from pathlib import Path


class ThumbnailerError(Exception):
    """Base class for all thumbnailer failures."""

    def __init__(
        self,
        message: str,
        *,
        number: int | None = None,
        path: Path | str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.number = number
        self.path = path
        self.stage = stage

    def context(self) -> dict[str, object]:
        """Return the non-empty context fields as a dict."""
        fields: dict[str, object] = {}
        if self.number is not None:
            fields["seq"] = self.number
        if self.path is not None:
            fields["path"] = str(self.path)
        if self.stage is not None:
            fields["stage"] = self.stage
        return fields

    def __str__(self) -> str:
        ctx = " ".join(f"{k}={v}" for k, v in self.context().items())
        return f"{self.message} ({ctx})" if ctx else self.message


class ConfigInvalid(ThumbnailerError):
    """The run configuration is inconsistent; no frame is attempted."""


class ResourceLoadFailure(ThumbnailerError):
    """A background, overlay or font file is missing or cannot be decoded."""


class RenderFailure(ThumbnailerError):
    """Glyph rendering or compositing could not produce a frame."""


class InvalidGeometry(RenderFailure):
    """A raster involved in compositing has zero width or height."""


class EncodeFailure(ThumbnailerError):
    """An output file could not be encoded or written."""
