"""
Block Codec

Encodes a whole sequence into a Record by running the scalar iCGR transform
over every window from the segmenter, and decodes a Record back into its
sequence by stitching the decoded windows together.

Reassembly and integrity:
-------------------------
Consecutive windows share O bases. On decode the first window is taken in
full; every later window must begin with the same O bases the output
currently ends with, and only its remaining n - O bases are appended. A
disagreement raises OverlapMismatchError. This is the format's only error
detection: there is no checksum, so a corrupted base outside every overlap
goes unnoticed, while one inside an overlap is always caught at the next
block boundary.
"""

import logging
from functools import partial
from typing import List, Optional

from .alphabet import normalize_sequence
from .errors import MalformedRecordError, OverlapMismatchError
from .executor import run_ordered
from .icgr import DEFAULT_BLOCK_WIDTH, CoordinateTriple, check_triple, decode_triple, encode_window
from .records import Record, SequenceRecord
from .segmenter import DEFAULT_OVERLAP, effective_overlap, segment

logger = logging.getLogger(__name__)


def encode_bases(
    bases: str,
    block_width: int = DEFAULT_BLOCK_WIDTH,
    overlap: int = DEFAULT_OVERLAP,
    threads: int = 1
) -> List[CoordinateTriple]:
    """
    Encode a nucleotide string into its ordered list of triples.

    Args:
        bases: Nucleotide string (case-insensitive)
        block_width: Maximum window length W
        overlap: Bases shared by consecutive windows
        threads: Encode windows on this many worker threads

    Returns:
        One CoordinateTriple per window, 5' to 3'

    Raises:
        InvalidBaseError: If the sequence contains a non-ACGT character
        SegmentationError: If the parameters are invalid or bases is empty
    """
    # Segment first so bad parameters are rejected before any encoding work
    windows = segment(len(bases), block_width, overlap)
    normalized = normalize_sequence(bases)
    chunks = [w.slice(normalized) for w in windows]

    encode = partial(encode_window, max_width=block_width)
    if threads <= 1 or len(chunks) == 1:
        return [encode(chunk) for chunk in chunks]

    return [r.unwrap() for r in run_ordered(encode, chunks, threads=threads, label="blocks")]


def encode_sequence(
    sequence: SequenceRecord,
    block_width: int = DEFAULT_BLOCK_WIDTH,
    overlap: int = DEFAULT_OVERLAP,
    threads: int = 1
) -> Record:
    """
    Encode a sequence into a Record.

    Args:
        sequence: Sequence to encode
        block_width: Maximum window length W (default 100)
        overlap: Bases shared by consecutive windows (default 10)
        threads: Worker threads used for the windows of this sequence

    Returns:
        Record whose overlap is 0 when the sequence fits in one block

    Examples:
        >>> rec = encode_sequence(SequenceRecord("s1", None, "ACGT"))
        >>> rec.blocks
        [CoordinateTriple(x=3, y=5, n=4)]
    """
    blocks = encode_bases(sequence.bases, block_width, overlap, threads)
    record = Record(
        id=sequence.id,
        description=sequence.description,
        overlap=effective_overlap(len(sequence.bases), block_width, overlap),
        blocks=blocks,
    )
    logger.debug(f"{sequence.id}: {len(sequence.bases)} bases -> {len(blocks)} blocks")
    return record


def decode_blocks(
    blocks: List[CoordinateTriple],
    overlap: int,
    max_width: Optional[int] = None
) -> str:
    """
    Decode and reassemble an ordered list of triples.

    Args:
        blocks: Triples in block order
        overlap: Bases shared by consecutive blocks
        max_width: Largest n accepted; checked for every block before any
            decoding starts

    Raises:
        MalformedRecordError: If there are no blocks, or a later block is
            not longer than the overlap
        OverlapMismatchError: If a block disagrees with the previous one
            on the shared bases
        TripleOutOfRangeError: If a triple is out of range
        WindowTooLongError: If a block has more than max_width bases
    """
    if not blocks:
        raise MalformedRecordError("Record has no blocks")
    if overlap < 0:
        raise MalformedRecordError(f"Negative overlap {overlap}")

    for triple in blocks:
        check_triple(triple, max_width)

    first = decode_triple(blocks[0])
    if len(blocks) == 1:
        return first

    for index, triple in enumerate(blocks):
        if triple.n <= overlap:
            raise MalformedRecordError(
                f"Block {index} has {triple.n} bases, not more than overlap {overlap}"
            )

    parts = [first]
    tail = first
    for index, triple in enumerate(blocks[1:], start=1):
        window = decode_triple(triple)
        if overlap:
            expected = tail[-overlap:]
            actual = window[:overlap]
            if actual != expected:
                raise OverlapMismatchError(index, expected, actual)
        tail = window
        parts.append(window[overlap:])

    return "".join(parts)


def decode_record(record: Record, max_width: Optional[int] = None) -> SequenceRecord:
    """
    Decode a Record back into its sequence.

    Args:
        record: Record to decode
        max_width: Largest block length accepted (None for no limit)

    Returns:
        SequenceRecord with uppercase bases

    Raises:
        MalformedRecordError, OverlapMismatchError, TripleOutOfRangeError,
        WindowTooLongError
    """
    bases = decode_blocks(record.blocks, record.overlap, max_width)
    logger.debug(f"{record.id}: {len(record.blocks)} blocks -> {len(bases)} bases")
    return SequenceRecord(id=record.id, description=record.description, bases=bases)
