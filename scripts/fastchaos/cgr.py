"""
Chaos Game Representation images

Renders the classic (floating-point) CGR point cloud of a sequence as a
grayscale PNG. Corners follow the iCGR bit-planes, bx on the horizontal
axis and by on the vertical one:

    C (0,1) ---- T (1,1)
      |            |
    A (0,0) ---- G (1,0)

After i bases the CGR point is exactly (X_i / 2^i, Y_i / 2^i), where
(X_i, Y_i) are the iCGR coordinates of the first i bases, so the picture is
the fractional view of the same integers the codec stores.
"""

import logging
import re
from functools import partial
from pathlib import Path
from typing import List, Sequence

import numpy as np
from PIL import Image
from scipy.signal import lfilter

from .alphabet import BASE_TO_BITS, normalize_sequence
from .executor import ItemResult, run_ordered
from .icgr import CoordinateTriple
from .records import Record, SequenceRecord

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_SIZE: int = 512

# ASCII code -> bit-plane value, only A/C/G/T are ever looked up
_BX = np.zeros(256, dtype=np.float64)
_BY = np.zeros(256, dtype=np.float64)
for _base, (_bx, _by) in BASE_TO_BITS.items():
    _BX[ord(_base)] = _bx
    _BY[ord(_base)] = _by


def chaos_points(bases: str) -> np.ndarray:
    """
    Compute the CGR point cloud of a sequence.

    Each point moves half-way from the previous one towards the corner of
    the current base, starting from the origin:

        p_i = (p_{i-1} + (bx_i, by_i)) / 2

    Args:
        bases: Nucleotide string (case-insensitive, A/C/G/T only)

    Returns:
        Array of shape (len(bases), 2) with coordinates in [0, 1)

    Raises:
        InvalidBaseError: If a character is not A, C, G or T
    """
    normalized = normalize_sequence(bases)
    if not normalized:
        return np.empty((0, 2), dtype=np.float64)

    codes = np.frombuffer(normalized.encode("ascii"), dtype=np.uint8)
    bits = np.column_stack((_BX[codes], _BY[codes]))
    # y[i] = 0.5 * x[i] + 0.5 * y[i-1]
    return lfilter([0.5], [1.0, -0.5], bits, axis=0)


def triple_point(triple: CoordinateTriple) -> tuple:
    """
    Map a coordinate triple to its CGR point in the unit square.

    Examples:
        >>> triple_point(CoordinateTriple(3, 5, 4))
        (0.1875, 0.3125)
    """
    scale = 1 << triple.n
    return (triple.x / scale, triple.y / scale)


def block_points(record: Record) -> np.ndarray:
    """One CGR point per block of a record, in block order."""
    return np.array([triple_point(b) for b in record.blocks], dtype=np.float64).reshape(-1, 2)


def rasterize(points: np.ndarray, size: int = DEFAULT_IMAGE_SIZE) -> np.ndarray:
    """
    Draw points as black pixels on a white square image.

    Args:
        points: Array of shape (N, 2) with coordinates in [0, 1]
        size: Image width and height in pixels

    Returns:
        uint8 array of shape (size, size); row 0 is the top (y = 1) edge
    """
    if size < 1:
        raise ValueError(f"Image size must be >= 1, got {size}")

    image = np.full((size, size), 255, dtype=np.uint8)
    if len(points) == 0:
        return image

    cols = np.clip((points[:, 0] * size).astype(np.int64), 0, size - 1)
    rows = size - 1 - np.clip((points[:, 1] * size).astype(np.int64), 0, size - 1)
    image[rows, cols] = 0
    return image


def image_filename(sequence_id: str) -> str:
    """
    File name used for a sequence's CGR image.

    Examples:
        >>> image_filename("chr1|sample/2")
        'chr1_sample_2_cgr.png'
    """
    safe = re.sub(r"[^\w.-]", "_", sequence_id) or "sequence"
    return f"{safe}_cgr.png"


def save_image(image: np.ndarray, path: Path) -> Path:
    """Write a grayscale array as PNG."""
    Image.fromarray(image).save(path, format="PNG")
    return path


def draw_sequence(sequence: SequenceRecord, outdir: Path, size: int = DEFAULT_IMAGE_SIZE) -> Path:
    """Render one sequence's CGR to <outdir>/<id>_cgr.png."""
    path = Path(outdir) / image_filename(sequence.id)
    save_image(rasterize(chaos_points(sequence.bases), size), path)
    logger.debug(f"{sequence.id}: {len(sequence.bases)} points -> {path}")
    return path


def draw_record_blocks(record: Record, outdir: Path, size: int = DEFAULT_IMAGE_SIZE) -> Path:
    """Render one point per block of an encoded record."""
    path = Path(outdir) / image_filename(record.id)
    save_image(rasterize(block_points(record), size), path)
    return path


def draw_sequences(
    sequences: Sequence[SequenceRecord],
    outdir: Path,
    size: int = DEFAULT_IMAGE_SIZE,
    threads: int = 1
) -> List[ItemResult[Path]]:
    """
    Render CGR images for many sequences.

    Returns:
        One ItemResult per sequence holding the written path
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    draw = partial(draw_sequence, outdir=outdir, size=size)
    return run_ordered(draw, sequences, threads=threads, label="images drawn",
                       log_progress=len(sequences) > 1)


def draw_records(
    records: Sequence[Record],
    outdir: Path,
    size: int = DEFAULT_IMAGE_SIZE,
    threads: int = 1
) -> List[ItemResult[Path]]:
    """Render one-point-per-block images for encoded records."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    draw = partial(draw_record_blocks, outdir=outdir, size=size)
    return run_ordered(draw, records, threads=threads, label="images drawn",
                       log_progress=len(records) > 1)
