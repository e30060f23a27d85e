import io
from pathlib import Path

import cv2
import numpy as np
import pytest
from PIL import ImageFont
from rich.console import Console

from thumbnailer.config import RenderSettings, build_config
from thumbnailer.output.logger import SimpleLogger


@pytest.fixture
def font_file(tmp_path: Path) -> Path:
    """Write Pillow's bundled FreeType font to disk so it can be loaded by path."""
    font = ImageFont.load_default(size=20)
    data = getattr(font, "font_bytes", None)
    if not isinstance(font, ImageFont.FreeTypeFont) or not data:
        pytest.skip("Pillow was built without FreeType support")
    path = tmp_path / "font.ttf"
    path.write_bytes(data)
    return path


@pytest.fixture
def settings() -> RenderSettings:
    return RenderSettings()


@pytest.fixture
def logger() -> SimpleLogger:
    return SimpleLogger(
        console=Console(file=io.StringIO(), width=120),
        err_console=Console(file=io.StringIO(), width=120),
    )


def write_png(path: Path, rgba: np.ndarray) -> Path:
    """Write an RGBA array as PNG through OpenCV (which expects BGRA)."""
    ok = cv2.imwrite(str(path), cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    assert ok, f"failed to write {path}"
    return path


def solid(width: int, height: int, color=(90, 120, 150, 255)) -> np.ndarray:
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :] = color
    return img


@pytest.fixture
def make_config(tmp_path: Path, font_file: Path):
    """Build a small, valid run config; keyword overrides replace any field."""

    def _make(**overrides):
        values = dict(
            base_name="ep",
            dest_path=tmp_path / "out",
            font_path=font_file,
            font_size=6,
            num_digits=2,
            seq_start=1,
            seq_end=3,
            font_color=(0, 0, 0, 255),
            border_color=(255, 255, 255, 255),
            border_width=2,
            border_alpha_threshold=0,
            text_layer_width=160,
            text_layer_height=60,
            output_width=1920,
            output_height=1080,
            source={"kind": "static", "background_path": tmp_path / "bg.png"},
        )
        values.update(overrides)
        return build_config(**values)

    return _make
