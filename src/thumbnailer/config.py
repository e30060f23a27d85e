"""
Consolidated configuration system for thumbnailer.

This module provides the Pydantic-based run configuration (validated once and
read-only for the whole run), the environment-driven render settings, and the
hex color parsing used by the CLI.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigInvalid

# =============================================================================
# COLORS
# =============================================================================

RGBA = tuple[int, int, int, int]


def parse_hex_color(value: str) -> RGBA:
    """Convert a 6 (RGB) or 8 (RGBA) digit hex string into an RGBA tuple.

    A leading "#" is accepted. RGB codes are fully opaque.

    Raises:
        ValueError: If the string is not a valid hex color.
    """
    s = value.strip().lstrip("#")
    if len(s) not in (6, 8):
        raise ValueError(f"invalid hex color {value!r}: expected 6 or 8 hex digits")
    try:
        channels = bytes.fromhex(s)
    except ValueError as ex:
        raise ValueError(f"invalid hex color {value!r}: {ex}") from ex
    if len(channels) == 3:
        return channels[0], channels[1], channels[2], 255
    return channels[0], channels[1], channels[2], channels[3]


# =============================================================================
# RENDER SETTINGS
# =============================================================================

class RenderSettings(BaseModel):
    """Fixed rendering constants, overridable from the environment."""

    font_dpi: Annotated[int, Field(
        default=300,
        gt=0,
        description="Resolution used to convert font points into pixels"
    )] = 300

    text_margin: Annotated[int, Field(
        default=2,
        ge=0,
        description="Margin in pixels around the label before the border width is added"
    )] = 2

    corner_margin: Annotated[int, Field(
        default=25,
        ge=0,
        description="Distance in pixels between the label and the anchored canvas corner"
    )] = 25

    soft_border_alpha: Annotated[int, Field(
        default=150,
        ge=0,
        le=255,
        description="Alpha of the first anti-aliasing ring around the hard border"
    )] = 150

    softer_border_alpha: Annotated[int, Field(
        default=65,
        ge=0,
        le=255,
        description="Alpha of the outermost anti-aliasing ring"
    )] = 65

    softer_alpha_threshold: Annotated[int, Field(
        default=149,
        ge=0,
        le=255,
        description="Emptiness threshold used by the outermost ring"
    )] = 149

    crop_alpha_threshold: Annotated[int, Field(
        default=0,
        ge=0,
        le=255,
        description="Alpha above which a text layer pixel counts when cropping"
    )] = 0

    model_config = ConfigDict(frozen=True)


class AppConfig(BaseSettings):
    """
    Application-wide settings with environment variable support.

    Example: THUMBNAILER_RENDER__CORNER_MARGIN=40
    """

    render: RenderSettings = RenderSettings()

    model_config = SettingsConfigDict(
        env_prefix="THUMBNAILER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )


# =============================================================================
# PLACEMENT
# =============================================================================

class Placement(str, Enum):
    """Where the cropped label is placed on the frame."""

    MANUAL = "manual"
    UPPER_RIGHT = "upper-right"
    LOWER_RIGHT = "lower-right"


# =============================================================================
# FRAME SOURCES
# =============================================================================

class StaticSource(BaseModel):
    """One background image shared by every frame."""

    kind: Literal["static"] = "static"
    background_path: Path

    model_config = ConfigDict(frozen=True)


class DynamicSource(BaseModel):
    """One background per frame, found as <source_dir>/<file_prefix><label><file_extension>."""

    kind: Literal["dynamic"] = "dynamic"
    source_dir: Path
    file_prefix: str = ""
    file_extension: str = ".png"
    title_path: Path | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("file_extension")
    @classmethod
    def validate_extension_format(cls, v):
        """Ensure extension starts with dot."""
        if not v.startswith("."):
            raise ValueError(f"Extension must start with dot, got: {v}")
        return v


FrameSourceConfig = Annotated[Union[StaticSource, DynamicSource], Field(discriminator="kind")]


# =============================================================================
# RUN CONFIGURATION
# =============================================================================

class Config(BaseModel):
    """Immutable run configuration.

    The text layer must be large enough to hold the rendered label plus
    ``2 + border_width`` pixels on each side. This is not checked; glyphs that
    fall outside the layer are clipped.
    """

    base_name: Annotated[str, Field(min_length=1)]
    dest_path: Path
    font_path: Path
    font_size: Annotated[float, Field(gt=0)] = 30.0
    num_digits: Annotated[int, Field(ge=0)] = 2
    seq_start: Annotated[int, Field(ge=0)] = 1
    seq_end: Annotated[int, Field(gt=0)] = 10
    font_color: RGBA = (0, 0, 0, 255)
    border_color: RGBA = (255, 255, 255, 255)
    border_width: Annotated[int, Field(ge=0)] = 2
    border_alpha_threshold: Annotated[int, Field(ge=0, le=255)] = 0
    text_layer_width: Annotated[int, Field(gt=0)] = 1920
    text_layer_height: Annotated[int, Field(gt=0)] = 1080
    output_width: Annotated[int, Field(gt=0)] = 1920
    output_height: Annotated[int, Field(gt=0)] = 1080
    placement: Placement = Placement.LOWER_RIGHT
    pos_x: int = 975
    pos_y: int = 600
    debug_text_layer: bool = False
    source: FrameSourceConfig

    model_config = ConfigDict(frozen=True)

    @field_validator("font_color", "border_color", mode="before")
    @classmethod
    def validate_color(cls, v):
        """Accept hex strings as well as RGBA tuples."""
        if isinstance(v, str):
            return parse_hex_color(v)
        return v

    @field_validator("font_color", "border_color")
    @classmethod
    def validate_channels(cls, v):
        """Ensure every channel fits in a byte."""
        if any(c < 0 or c > 255 for c in v):
            raise ValueError(f"color channels must be in 0..255, got {v}")
        return v

    @model_validator(mode="after")
    def validate_sequence(self):
        """Ensure the sequence range is not inverted."""
        if self.seq_start > self.seq_end:
            raise ValueError(
                f"invalid sequence: start number {self.seq_start} is after the end number {self.seq_end}"
            )
        return self

    @property
    def is_static(self) -> bool:
        return isinstance(self.source, StaticSource)


def build_config(**values) -> Config:
    """Validate raw values into a Config, raising ConfigInvalid with every problem found."""
    try:
        return Config(**values)
    except ValidationError as ex:
        problems = []
        for err in ex.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "config"
            problems.append(f"{loc}: {err['msg']}")
        raise ConfigInvalid("; ".join(problems), stage="config") from ex


def load_app_config() -> AppConfig:
    """Create a new settings instance from environment variables."""
    return AppConfig()
