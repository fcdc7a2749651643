"""
Block Segmenter

Splits a sequence of length L into ordered, fixed-size windows that overlap
by O bases, so that each window can be iCGR-encoded with at most W bits per
axis.

Layout for L > W (step S = W - O):

    [0, W)
          [S, S + W)
                [2S, 2S + W)
                      ...
                            [kS, L)      <- last window clipped to end at L

Generation stops at the first window whose end reaches L. The window before
it ended at (k-1)S + W = kS + O < L, so the clipped tail always holds at
least O + 1 bases and never needs to be folded into its neighbour.

For L <= W the whole sequence is one window and the overlap is recorded as 0,
whatever the caller asked for.
"""

from dataclasses import dataclass
from typing import List

from .errors import InvalidOverlapError, SegmentationError
from .icgr import DEFAULT_BLOCK_WIDTH

# Default number of bases shared by consecutive windows
DEFAULT_OVERLAP: int = 10


@dataclass(frozen=True)
class Window:
    """Half-open sub-range [start, end) of a sequence."""
    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of bases in the window."""
        return self.end - self.start

    def slice(self, sequence: str) -> str:
        """Return the bases covered by this window."""
        return sequence[self.start:self.end]


def check_parameters(block_width: int, overlap: int) -> None:
    """
    Validate a (block_width, overlap) pair for multi-window segmentation.

    Raises:
        SegmentationError: If block_width < 1
        InvalidOverlapError: If overlap is not in [0, block_width)
    """
    if block_width < 1:
        raise SegmentationError(f"Block width must be >= 1, got {block_width}")
    if overlap < 0 or overlap >= block_width:
        raise InvalidOverlapError(overlap, block_width)


def effective_overlap(
    length: int,
    block_width: int = DEFAULT_BLOCK_WIDTH,
    overlap: int = DEFAULT_OVERLAP
) -> int:
    """
    Overlap value that gets recorded for a sequence of the given length.

    Examples:
        >>> effective_overlap(80, 100, 20)
        0
        >>> effective_overlap(250, 100, 20)
        20
    """
    return 0 if length <= block_width else overlap


def segment(
    length: int,
    block_width: int = DEFAULT_BLOCK_WIDTH,
    overlap: int = DEFAULT_OVERLAP
) -> List[Window]:
    """
    Partition [0, length) into overlapping windows.

    Args:
        length: Sequence length (must be >= 1)
        block_width: Maximum window length W
        overlap: Bases shared by consecutive windows O (ignored when
            length <= block_width)

    Returns:
        Ordered list of Window objects covering [0, length)

    Raises:
        SegmentationError: If length < 1 or block_width < 1
        InvalidOverlapError: If overlap is not in [0, block_width) and more
            than one window is needed

    Examples:
        >>> segment(250, 100, 20)
        [Window(start=0, end=100), Window(start=80, end=180), Window(start=160, end=250)]
        >>> segment(40, 100, 20)
        [Window(start=0, end=40)]
    """
    if block_width < 1:
        raise SegmentationError(f"Block width must be >= 1, got {block_width}")
    if length < 1:
        raise SegmentationError("Cannot segment an empty sequence")

    if length <= block_width:
        return [Window(0, length)]

    check_parameters(block_width, overlap)
    step = block_width - overlap

    windows = []
    start = 0
    while True:
        end = min(start + block_width, length)
        windows.append(Window(start, end))
        if end == length:
            break
        start += step

    return windows

