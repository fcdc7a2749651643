"""
Tests for SSIM / DSSIM image comparison.
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from fastchaos.compare import (
    compare_directory,
    dssim,
    load_image,
    ssim,
    write_comparison,
)


def _save(path, array):
    Image.fromarray(array.astype(np.uint8)).save(path)
    return path


@pytest.fixture
def noise():
    """Factory for reproducible random grayscale images."""
    def _noise(size=32, seed=0):
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=(size, size)).astype(np.float64)
    return _noise


class TestSsim:
    """Tests for ssim and dssim."""

    def test_identical(self, noise):
        img = noise()
        assert ssim(img, img) == pytest.approx(1.0)
        assert dssim(img, img) == pytest.approx(0.0)

    def test_symmetric(self, noise):
        a, b = noise(seed=1), noise(seed=2)
        assert dssim(a, b) == pytest.approx(dssim(b, a))

    def test_different_images_score_higher(self, noise):
        a = noise(seed=1)
        slightly = np.clip(a + 5, 0, 255)
        other = noise(seed=2)
        assert 0 < dssim(a, slightly) < dssim(a, other)

    def test_range(self, noise):
        score = dssim(noise(seed=3), noise(seed=4))
        assert 0.0 <= score <= 1.0

    def test_shape_mismatch(self, noise):
        with pytest.raises(ValueError):
            dssim(noise(32), noise(16))

    def test_too_small(self):
        with pytest.raises(ValueError):
            ssim(np.zeros((5, 5)), np.zeros((5, 5)))


class TestCompareDirectory:
    """Tests for compare_directory and write_comparison."""

    def test_all_pairs(self, temp_dir, noise):
        _save(temp_dir / "b.png", noise(seed=1))
        _save(temp_dir / "a.png", noise(seed=2))
        (temp_dir / "notes.txt").write_text("ignored")

        df = compare_directory(temp_dir, threads=2)
        assert list(df.columns) == ["image_a", "image_b", "dssim"]
        pairs = list(zip(df["image_a"], df["image_b"]))
        assert pairs == [("a.png", "a.png"), ("a.png", "b.png"), ("b.png", "b.png")]
        assert df["dssim"].iloc[0] == pytest.approx(0.0)
        assert df["dssim"].iloc[1] > 0

    def test_size_mismatch_is_nan(self, temp_dir, noise):
        _save(temp_dir / "big.png", noise(32))
        _save(temp_dir / "small.png", noise(16))
        df = compare_directory(temp_dir)
        assert len(df) == 3
        assert math.isnan(df["dssim"].iloc[1])

    def test_not_a_directory(self, temp_dir):
        with pytest.raises(NotADirectoryError):
            compare_directory(temp_dir / "missing")

    def test_load_image_grayscale(self, temp_dir):
        path = temp_dir / "rgb.png"
        Image.new("RGB", (10, 8), (255, 255, 255)).save(path)
        img = load_image(path)
        assert img.shape == (8, 10)
        assert img.dtype == np.float64

    def test_tsv_format(self, temp_dir, noise):
        _save(temp_dir / "x.png", noise(seed=5))
        text = write_comparison(compare_directory(temp_dir))
        assert text == "x.png\tx.png\t0.00000000\n"
