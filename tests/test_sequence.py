import threading
from pathlib import Path

import cv2
import pytest

from conftest import solid, write_png
from thumbnailer.core.errors import EncodeFailure, ResourceLoadFailure
from thumbnailer.processing import sequence
from thumbnailer.processing.sequence import BatchRunner, pad_label
from thumbnailer.processing.sources import load_resources


@pytest.mark.parametrize(
    "number,digits,expected",
    [(1, 3, "001"), (7, 2, "07"), (42, 2, "42"), (1234, 2, "1234"), (5, 0, "5"), (0, 2, "00")],
)
def test_pad_label(number, digits, expected):
    assert pad_label(number, digits) == expected


def test_pad_label_never_truncates():
    for n in range(0, 2000, 37):
        for d in range(0, 6):
            label = pad_label(n, d)
            assert len(label) == max(d, len(str(n)))
            assert int(label) == n


def test_static_run_writes_every_frame(tmp_path: Path, make_config, settings, logger):
    write_png(tmp_path / "bg.png", solid(300, 200))
    config = make_config(num_digits=3)
    resources = load_resources(config, settings)

    result = BatchRunner(config, resources, settings, logger).run()

    names = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert names == ["thumbnail_ep_001.png", "thumbnail_ep_002.png", "thumbnail_ep_003.png"]
    assert result.ok
    assert len(result.written) == 3


def test_corrupt_background_fails_before_any_frame(tmp_path: Path, make_config, settings):
    (tmp_path / "bg.png").write_bytes(b"definitely not a png")
    config = make_config()
    with pytest.raises(ResourceLoadFailure) as exc:
        load_resources(config, settings)
    assert exc.value.path == tmp_path / "bg.png"
    assert not (tmp_path / "out").exists()


def test_missing_font_is_a_load_failure(tmp_path: Path, make_config, settings):
    write_png(tmp_path / "bg.png", solid(300, 200))
    config = make_config(font_path=tmp_path / "nope.ttf")
    with pytest.raises(ResourceLoadFailure):
        load_resources(config, settings)


def test_static_run_stops_at_first_failure(tmp_path: Path, make_config, settings, logger, monkeypatch):
    write_png(tmp_path / "bg.png", solid(300, 200))
    config = make_config()
    resources = load_resources(config, settings)
    real_save = sequence.save_png

    def flaky_save(raster, path):
        if path.name.endswith("_02.png"):
            raise EncodeFailure("disk full", path=path, stage="write")
        real_save(raster, path)

    monkeypatch.setattr(sequence, "save_png", flaky_save)
    with pytest.raises(EncodeFailure) as exc:
        BatchRunner(config, resources, settings, logger).run()

    assert exc.value.number == 2
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["thumbnail_ep_01.png"]


def test_dynamic_run_skips_missing_frames(tmp_path: Path, make_config, settings, logger):
    src = tmp_path / "frames"
    src.mkdir()
    for n in (1, 2, 4, 5):
        write_png(src / f"frame_{n:02d}.png", solid(300, 200))
    config = make_config(
        seq_end=5,
        source={"kind": "dynamic", "source_dir": src, "file_prefix": "frame_", "file_extension": ".png"},
    )
    resources = load_resources(config, settings)

    result = BatchRunner(config, resources, settings, logger).run()

    assert len(result.written) == 4
    assert len(result.skipped) == 1
    failure = result.skipped[0]
    assert failure.number == 3
    assert failure.stage == "load"
    assert failure.path == src / "frame_03.png"
    assert not (tmp_path / "out" / "thumbnail_ep_03.png").exists()
    assert result.completed and not result.ok


def test_missing_title_overlay_is_fatal(tmp_path: Path, make_config, settings):
    src = tmp_path / "frames"
    src.mkdir()
    config = make_config(source={"kind": "dynamic", "source_dir": src, "title_path": tmp_path / "title.png"})
    with pytest.raises(ResourceLoadFailure):
        load_resources(config, settings)


def test_cancelled_run_stops_before_next_frame(tmp_path: Path, make_config, settings, logger):
    write_png(tmp_path / "bg.png", solid(300, 200))
    config = make_config()
    resources = load_resources(config, settings)
    stop = threading.Event()
    stop.set()

    result = BatchRunner(config, resources, settings, logger).run(stop)

    assert result.cancelled
    assert not result.completed
    assert result.written == []


def test_debug_text_layer_is_written(tmp_path: Path, make_config, settings, logger):
    write_png(tmp_path / "bg.png", solid(300, 200))
    config = make_config(seq_end=1, debug_text_layer=True)
    resources = load_resources(config, settings)

    BatchRunner(config, resources, settings, logger).run()

    assert (tmp_path / "out" / "thumbnail_ep_01_debug_textlayer.png").is_file()
    assert (tmp_path / "out" / "thumbnail_ep_01.png").is_file()


def test_dynamic_run_isolates_decoder_errors(tmp_path: Path, make_config, settings, logger, monkeypatch):
    src = tmp_path / "frames"
    src.mkdir()
    for n in range(1, 4):
        write_png(src / f"{n:02d}.png", solid(300, 200))
    config = make_config(source={"kind": "dynamic", "source_dir": src})
    resources = load_resources(config, settings)
    real_imread = cv2.imread

    def broken_imread(path, flags=cv2.IMREAD_UNCHANGED):
        if path.endswith("02.png"):
            raise cv2.error("corrupt chunk")
        return real_imread(path, flags)

    monkeypatch.setattr(cv2, "imread", broken_imread)
    result = BatchRunner(config, resources, settings, logger).run()

    assert len(result.written) == 2
    assert [(f.number, f.stage) for f in result.skipped] == [(2, "load")]
    assert "corrupt chunk" in result.skipped[0].message
