"""
Integer Chaos Game Representation (iCGR) - Scalar Transform

Encodes a window of at most W bases into one coordinate triple (x, y, n) and
back, exactly.

Mathematical Background:
------------------------
The classic CGR walks a point towards the corner of the unit square assigned
to each base, halving the distance every step. After n steps the point is

    p_n = sum_i b_i / 2^(n - i + 1)

which is just the n-bit binary fraction formed by the per-base bits. iCGR
keeps the numerator instead of the fraction, one integer per axis:

    X_0 = 0,  X_i = 2 * X_{i-1} + bx_i
    Y_0 = 0,  Y_i = 2 * Y_{i-1} + by_i

so the first base ends up in the most significant of the n bits and the last
base in the least significant one. No rounding ever happens, so decoding is
the exact inverse for any n. The cost is that x and y need n bits each,
which is why long sequences are split into blocks (see fastchaos.segmenter).

n has to travel with (x, y): leading zero bits (runs of A, C, or G on one
axis) are otherwise invisible.
"""

from dataclasses import dataclass
from typing import Optional

from .alphabet import BASE_TO_BITS, BITS_TO_BASE
from .errors import (
    InvalidBaseError,
    SegmentationError,
    TripleOutOfRangeError,
    WindowTooLongError,
)

# Default maximum window length (bases per block)
DEFAULT_BLOCK_WIDTH: int = 100


@dataclass(frozen=True)
class CoordinateTriple:
    """iCGR encoding of one window."""
    x: int
    y: int
    n: int

    def is_valid(self) -> bool:
        """True if n >= 1 and both coordinates fit in n bits (x, y < 2^n)."""
        return (
            self.n >= 1
            and 0 <= self.x and self.x.bit_length() <= self.n
            and 0 <= self.y and self.y.bit_length() <= self.n
        )

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.n})"


def encode_window(bases: str, max_width: int = DEFAULT_BLOCK_WIDTH) -> CoordinateTriple:
    """
    Encode up to max_width bases into a single coordinate triple.

    Args:
        bases: Nucleotide string, case-insensitive
        max_width: Maximum number of bases allowed in one window

    Returns:
        CoordinateTriple with n == len(bases)

    Raises:
        InvalidBaseError: If a character is not A, C, G or T
        SegmentationError: If the window is empty
        WindowTooLongError: If the window is longer than max_width

    Examples:
        >>> encode_window("ACGT")
        CoordinateTriple(x=3, y=5, n=4)
    """
    n = len(bases)
    if n == 0:
        raise SegmentationError("Cannot encode an empty window")
    if n > max_width:
        raise WindowTooLongError(n, max_width)

    x = 0
    y = 0
    for position, base in enumerate(bases):
        bits = BASE_TO_BITS.get(base.upper())
        if bits is None:
            raise InvalidBaseError(base, position)
        x = (x << 1) | bits[0]
        y = (y << 1) | bits[1]

    return CoordinateTriple(x, y, n)


def check_triple(triple: CoordinateTriple, max_width: Optional[int] = None) -> None:
    """
    Validate that a triple could have been produced by encode_window.

    Raises:
        TripleOutOfRangeError: If n < 1 or x / y do not fit in n bits
        WindowTooLongError: If max_width is given and n exceeds it
    """
    if triple.n < 1:
        raise TripleOutOfRangeError(f"Triple {triple} has n < 1")
    if max_width is not None and triple.n > max_width:
        raise WindowTooLongError(triple.n, max_width)
    if triple.x < 0 or triple.x.bit_length() > triple.n:
        raise TripleOutOfRangeError(f"x of {triple} is outside [0, 2^{triple.n})")
    if triple.y < 0 or triple.y.bit_length() > triple.n:
        raise TripleOutOfRangeError(f"y of {triple} is outside [0, 2^{triple.n})")


def decode_triple(triple: CoordinateTriple, max_width: Optional[int] = None) -> str:
    """
    Decode a coordinate triple back into its bases.

    Bits are read least significant first, which yields the window from its
    3' end; each recovered base is therefore prepended.

    Args:
        triple: Coordinate triple to decode
        max_width: Optional upper limit on n

    Returns:
        Uppercase nucleotide string of length triple.n

    Raises:
        TripleOutOfRangeError: If the triple is out of range for its n

    Examples:
        >>> decode_triple(CoordinateTriple(3, 5, 4))
        'ACGT'
    """
    check_triple(triple, max_width)

    x, y = triple.x, triple.y
    bases = []
    for _ in range(triple.n):
        bases.append(BITS_TO_BASE[(x & 1, y & 1)])
        x >>= 1
        y >>= 1
    bases.reverse()
    return "".join(bases)
