"""
Structural dissimilarity of CGR images

Compares every pair of CGR images in a directory with DSSIM:

    SSIM(a, b) = mean over 7x7 windows of
                 (2 mu_a mu_b + C1)(2 s_ab + C2) /
                 ((mu_a^2 + mu_b^2 + C1)(s_a^2 + s_b^2 + C2))

    DSSIM(a, b) = (1 - SSIM(a, b)) / 2

with C1 = (0.01 * 255)^2 and C2 = (0.03 * 255)^2. Identical images score
0.0; the score is symmetric in its arguments.
"""

import logging
from itertools import combinations_with_replacement
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd
from PIL import Image
from scipy.ndimage import uniform_filter

from .executor import run_ordered

logger = logging.getLogger(__name__)

WINDOW_SIZE = 7
K1 = 0.01
K2 = 0.03
DATA_RANGE = 255.0

RESULT_COLUMNS = ["image_a", "image_b", "dssim"]


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Load an image as a float64 grayscale array."""
    with Image.open(path) as img:
        return np.asarray(img.convert("L"), dtype=np.float64)


def ssim(a: np.ndarray, b: np.ndarray) -> float:
    """
    Mean structural similarity of two equally sized grayscale images.

    Args:
        a, b: 2-D arrays with values in [0, 255]

    Returns:
        Mean SSIM over all full windows, 1.0 for identical images

    Raises:
        ValueError: If shapes differ or an image is smaller than the window
    """
    if a.shape != b.shape:
        raise ValueError(f"Image shapes differ: {a.shape} vs {b.shape}")
    if min(a.shape) < WINDOW_SIZE:
        raise ValueError(f"Images must be at least {WINDOW_SIZE}x{WINDOW_SIZE}, got {a.shape}")

    a = a.astype(np.float64)
    b = b.astype(np.float64)

    # Sample (co)variance over each window
    n_px = WINDOW_SIZE ** 2
    cov_norm = n_px / (n_px - 1)

    mu_a = uniform_filter(a, size=WINDOW_SIZE)
    mu_b = uniform_filter(b, size=WINDOW_SIZE)
    var_a = cov_norm * (uniform_filter(a * a, size=WINDOW_SIZE) - mu_a * mu_a)
    var_b = cov_norm * (uniform_filter(b * b, size=WINDOW_SIZE) - mu_b * mu_b)
    cov_ab = cov_norm * (uniform_filter(a * b, size=WINDOW_SIZE) - mu_a * mu_b)

    c1 = (K1 * DATA_RANGE) ** 2
    c2 = (K2 * DATA_RANGE) ** 2

    numerator = (2 * mu_a * mu_b + c1) * (2 * cov_ab + c2)
    denominator = (mu_a ** 2 + mu_b ** 2 + c1) * (var_a + var_b + c2)
    ssim_map = numerator / denominator

    # Drop windows that reach past the image border
    pad = (WINDOW_SIZE - 1) // 2
    return float(ssim_map[pad:-pad, pad:-pad].mean())


def dssim(a: np.ndarray, b: np.ndarray) -> float:
    """
    Structural dissimilarity, (1 - SSIM) / 2.

    Examples:
        >>> img = np.zeros((16, 16))
        >>> dssim(img, img)
        0.0
    """
    return (1.0 - ssim(a, b)) / 2.0


def compare_directory(directory: Union[str, Path], threads: int = 1) -> pd.DataFrame:
    """
    Compute DSSIM for every unordered pair of PNG images in a directory.

    Pairs include each image with itself. Images are processed in sorted
    file-name order; pairs whose sizes differ are logged and scored NaN.

    Args:
        directory: Directory holding *.png files
        threads: Worker threads for the pairwise scores

    Returns:
        DataFrame with columns image_a, image_b, dssim

    Raises:
        NotADirectoryError: If directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    paths = sorted(directory.glob("*.png"))
    logger.info(f"Comparing {len(paths)} images in {directory}")
    images = {p.name: load_image(p) for p in paths}
    pairs = list(combinations_with_replacement(sorted(images), 2))

    def score(pair):
        return dssim(images[pair[0]], images[pair[1]])

    results = run_ordered(score, pairs, threads=threads, label="pairs compared")

    rows = []
    for (name_a, name_b), result in zip(pairs, results):
        if result.ok:
            value = result.value
        elif isinstance(result.error, ValueError):
            logger.warning(f"Skipping {name_a} vs {name_b}: {result.error}")
            value = np.nan
        else:
            raise result.error
        rows.append((name_a, name_b, value))

    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def write_comparison(df: pd.DataFrame, path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """
    Write a comparison table as headerless TSV.

    Args:
        df: Output of compare_directory
        path: Output file; when None the TSV text is returned instead
    """
    return df.to_csv(path, sep="\t", header=False, index=False, float_format="%.8f", na_rep="nan")
