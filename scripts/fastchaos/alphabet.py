"""
Nucleotide Alphabet Map

Fixed bijection between the four DNA bases and a 2-bit quadrant code. The
code is split into two independent bit-planes, one per CGR axis:

    Base   bx  by   code
    A      0   0    0
    C      0   1    1
    G      1   0    2
    T      1   1    3

This table is part of the .bicgr contract: files written with one table can
only be read back with the same table, so it must never change.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from .errors import InvalidBaseError

BASES: str = "ACGT"

BASE_TO_BITS: Mapping[str, Tuple[int, int]] = MappingProxyType({
    "A": (0, 0),
    "C": (0, 1),
    "G": (1, 0),
    "T": (1, 1),
})

BITS_TO_BASE: Mapping[Tuple[int, int], str] = MappingProxyType(
    {bits: base for base, bits in BASE_TO_BITS.items()}
)


def base_to_bits(base: str) -> Tuple[int, int]:
    """
    Look up the (bx, by) bit pair for a single base.

    Args:
        base: One nucleotide character, case-insensitive

    Returns:
        Tuple of (bx, by), each 0 or 1

    Raises:
        InvalidBaseError: If the character is not A, C, G or T

    Examples:
        >>> base_to_bits("G")
        (1, 0)
        >>> base_to_bits("t")
        (1, 1)
    """
    try:
        return BASE_TO_BITS[base.upper()]
    except KeyError:
        raise InvalidBaseError(base) from None


def bits_to_base(bx: int, by: int) -> str:
    """
    Inverse of base_to_bits.

    Examples:
        >>> bits_to_base(0, 1)
        'C'
    """
    return BITS_TO_BASE[(bx, by)]


def base_code(base: str) -> int:
    """Return the 2-bit quadrant code (0-3) of a base."""
    bx, by = base_to_bits(base)
    return (bx << 1) | by


def normalize_sequence(sequence: str) -> str:
    """
    Uppercase a sequence and check every character is A, C, G or T.

    Args:
        sequence: Raw nucleotide string

    Returns:
        The uppercased sequence

    Raises:
        InvalidBaseError: For the first offending character, with its
            0-based position

    Examples:
        >>> normalize_sequence("acgT")
        'ACGT'
    """
    upper = sequence.upper()
    for position, base in enumerate(upper):
        if base not in BASE_TO_BITS:
            raise InvalidBaseError(sequence[position], position)
    return upper
