"""Command-line smoke tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from lowreslove.cli import app

runner = CliRunner()


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    rng = np.random.default_rng(11)
    p = tmp_path / "photo.png"
    Image.fromarray(rng.integers(0, 256, size=(30, 40, 3), dtype=np.uint8)).save(p)
    return p


def test_single_writes_outputs(tmp_path: Path, photo: Path) -> None:
    out = tmp_path / "out" / "art.png"
    result = runner.invoke(
        app,
        ["single", str(photo), "-o", str(out), "--palette", "Gameboy",
         "--width", "32", "--height", "32", "--upscale", "4", "--dithering", "5"],
    )
    assert result.exit_code == 0, result.output
    assert Image.open(out).size == (32 * 4, 24 * 4)
    assert Image.open(out.with_name("art_lowres.png")).size == (32, 24)


def test_single_auto_palette(tmp_path: Path, photo: Path) -> None:
    out = tmp_path / "auto.png"
    result = runner.invoke(
        app, ["single", str(photo), "-o", str(out), "--palette", "auto", "--seed", "1",
              "--no-low-res"],
    )
    assert result.exit_code == 0, result.output
    assert out.exists()
    assert not out.with_name("auto_lowres.png").exists()


def test_single_rejects_bad_adjustment(tmp_path: Path, photo: Path) -> None:
    out = tmp_path / "never.png"
    result = runner.invoke(app, ["single", str(photo), "-o", str(out), "--exposure", "11"])
    assert result.exit_code == 1
    assert not out.exists()


def test_single_rejects_unknown_palette(tmp_path: Path, photo: Path) -> None:
    out = tmp_path / "never.png"
    result = runner.invoke(app, ["single", str(photo), "-o", str(out), "--palette", "EGA"])
    assert result.exit_code == 1
    assert not out.exists()


def test_batch(tmp_path: Path, photo: Path) -> None:
    out_dir = tmp_path / "results"
    result = runner.invoke(
        app,
        ["batch", "-i", str(photo.parent), "-o", str(out_dir), "--comparison",
         "--width", "16", "--height", "16"],
    )
    assert result.exit_code == 0, result.output
    assert (out_dir / "photo.png").exists()
    assert (out_dir / "photo_lowres.png").exists()
    assert (out_dir / "photo_comparison.png").exists()


def test_batch_empty_folder(tmp_path: Path) -> None:
    result = runner.invoke(app, ["batch", "-i", str(tmp_path / "none"), "-o", str(tmp_path / "o")])
    assert result.exit_code == 0


def test_palettes() -> None:
    result = runner.invoke(app, ["palettes"])
    assert result.exit_code == 0


def test_extract(photo: Path) -> None:
    result = runner.invoke(app, ["extract", str(photo), "-k", "4", "--seed", "2"])
    assert result.exit_code == 0, result.output
    assert result.output.count("#") == 4
