"""
Error types for fastchaos.

Every failure the core can produce is a subclass of FastchaosError, which is
itself a ValueError so callers that only care about "bad input" can catch
that. Batch helpers in fastchaos.batch turn these into per-item results
instead of letting one bad sequence abort a whole run.

Hierarchy:
    FastchaosError
    ├── InvalidBaseError          character outside A/C/G/T
    ├── SegmentationError         bad block width / empty sequence
    │   ├── WindowTooLongError    window longer than the block width
    │   └── InvalidOverlapError   overlap not in [0, block_width)
    ├── TripleOutOfRangeError     x or y does not fit in n bits
    ├── OverlapMismatchError      adjacent blocks disagree on shared bases
    └── MalformedRecordError      .bicgr / legacy structure violation
"""

from typing import Optional


class FastchaosError(ValueError):
    """Base class for all fastchaos core errors."""


class InvalidBaseError(FastchaosError):
    """Raised when a sequence contains a character outside A/C/G/T."""

    def __init__(self, base: str, position: Optional[int] = None):
        self.base = base
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Invalid nucleotide {base!r}{where} (expected A, C, G or T)")


class SegmentationError(FastchaosError):
    """Raised when segmentation parameters are unusable."""


class WindowTooLongError(SegmentationError):
    """Raised when a window has more bases than the block width allows."""

    def __init__(self, length: int, max_width: int):
        self.length = length
        self.max_width = max_width
        super().__init__(f"Window of {length} bases exceeds block width {max_width}")


class InvalidOverlapError(SegmentationError):
    """Raised when the overlap does not satisfy 0 <= overlap < block_width."""

    def __init__(self, overlap: int, block_width: int):
        self.overlap = overlap
        self.block_width = block_width
        super().__init__(
            f"Overlap {overlap} is invalid for block width {block_width} "
            f"(must satisfy 0 <= overlap < {block_width})"
        )


class TripleOutOfRangeError(FastchaosError):
    """Raised when a coordinate triple cannot have come from n bases."""


class OverlapMismatchError(FastchaosError):
    """Raised when a block's leading bases disagree with the previous block."""

    def __init__(self, block_index: int, expected: str, actual: str):
        self.block_index = block_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Overlap mismatch at block {block_index}: "
            f"expected {expected!r}, got {actual!r}"
        )


class MalformedRecordError(FastchaosError):
    """Raised on any structural violation of a persisted record."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
