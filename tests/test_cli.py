from pathlib import Path

import pytest

from conftest import solid, write_png
from thumbnailer.cli import main as cli


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    monkeypatch.setattr(cli, "install_signal_handlers", lambda *args: None)


def test_version(capsys):
    assert cli.main(["version"]) == 0
    assert "thumbnailer" in capsys.readouterr().out


def test_inverted_sequence_exits_with_error(tmp_path: Path, font_file: Path):
    code = cli.main([
        "generatepng",
        "--bg-image", str(tmp_path / "bg.png"),
        "--base-name", "ep",
        "--output-dest", str(tmp_path / "out"),
        "--font-file", str(font_file),
        "--seq-start", "5",
        "--seq-end", "2",
    ])
    assert code == 1
    assert not (tmp_path / "out").exists()


def test_bad_hex_color_is_a_usage_error(tmp_path: Path):
    with pytest.raises(SystemExit) as exc:
        cli.main([
            "generatepng",
            "--bg-image", str(tmp_path / "bg.png"),
            "--base-name", "ep",
            "--output-dest", str(tmp_path / "out"),
            "--font-color", "zzz",
        ])
    assert exc.value.code == 2


def test_generatepng(tmp_path: Path, font_file: Path):
    write_png(tmp_path / "bg.png", solid(400, 300))
    code = cli.main([
        "--log-level", "debug",
        "generatepng",
        "--bg-image", str(tmp_path / "bg.png"),
        "--base-name", "ep",
        "--output-dest", str(tmp_path / "out"),
        "--font-file", str(font_file),
        "--font-size", "6",
        "--seq-start", "8",
        "--seq-end", "10",
        "--text-layer-width", "200",
        "--text-layer-height", "80",
        "--placement", "upper-right",
    ])
    assert code == 0
    names = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert names == ["thumbnail_ep_08.png", "thumbnail_ep_09.png", "thumbnail_ep_10.png"]


def test_generatedynamic_skips_and_succeeds(tmp_path: Path, font_file: Path):
    src = tmp_path / "frames"
    src.mkdir()
    write_png(src / "shot_2.png", solid(400, 300))
    code = cli.main([
        "generatedynamic",
        "--source-dir", str(src),
        "--source-prefix", "shot_",
        "--base-name", "ep",
        "--output-dest", str(tmp_path / "out"),
        "--font-file", str(font_file),
        "--font-size", "6",
        "--seq-num-digits", "1",
        "--seq-start", "1",
        "--seq-end", "2",
        "--text-layer-width", "200",
        "--text-layer-height", "80",
    ])
    assert code == 0
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["thumbnail_ep_2.png"]


def test_missing_background_exits_with_error(tmp_path: Path, font_file: Path):
    code = cli.main([
        "generatepng",
        "--bg-image", str(tmp_path / "missing.png"),
        "--base-name", "ep",
        "--output-dest", str(tmp_path / "out"),
        "--font-file", str(font_file),
    ])
    assert code == 1


def test_uppercase_log_level_from_env(tmp_path: Path, font_file: Path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    write_png(tmp_path / "bg.png", solid(400, 300))
    code = cli.main([
        "--log-format", "TEXT",
        "generatepng",
        "--bg-image", str(tmp_path / "bg.png"),
        "--base-name", "ep",
        "--output-dest", str(tmp_path / "out"),
        "--font-file", str(font_file),
        "--font-size", "6",
        "--seq-end", "1",
        "--text-layer-width", "200",
        "--text-layer-height", "80",
    ])
    assert code == 0
    assert (tmp_path / "out" / "thumbnail_ep_01.png").is_file()
