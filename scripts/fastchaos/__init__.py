"""
fastchaos - Lossless DNA encoding with integer Chaos Game Representation

Reusable pieces of the fastchaos tool:
- Scalar iCGR transform between nucleotide windows and (x, y, n) triples
- Overlapping block segmentation and reassembly with integrity checks
- .bicgr text records and the legacy gzip JSON container
- Order-preserving parallel batch encode / decode
- CGR images and pairwise DSSIM comparison
"""

__version__ = "1.0.0"
__author__ = "fastchaos contributors"

from .errors import (
    FastchaosError,
    InvalidBaseError,
    SegmentationError,
    WindowTooLongError,
    InvalidOverlapError,
    TripleOutOfRangeError,
    OverlapMismatchError,
    MalformedRecordError,
)

from .icgr import (
    CoordinateTriple,
    encode_window,
    decode_triple,
    DEFAULT_BLOCK_WIDTH,
)

from .segmenter import (
    Window,
    segment,
    DEFAULT_OVERLAP,
)

from .records import (
    Record,
    SequenceRecord,
)

from .blocks import (
    encode_sequence,
    decode_blocks,
    decode_record,
)

from .bicgr import (
    format_record,
    parse_record,
    read_records,
    write_records,
)

from .executor import (
    ItemResult,
    run_ordered,
)

from .batch import (
    encode_batch,
    decode_batch,
)

__all__ = [
    # Errors
    "FastchaosError",
    "InvalidBaseError",
    "SegmentationError",
    "WindowTooLongError",
    "InvalidOverlapError",
    "TripleOutOfRangeError",
    "OverlapMismatchError",
    "MalformedRecordError",
    # Scalar transform
    "CoordinateTriple",
    "encode_window",
    "decode_triple",
    "DEFAULT_BLOCK_WIDTH",
    # Segmentation
    "Window",
    "segment",
    "DEFAULT_OVERLAP",
    # Records
    "Record",
    "SequenceRecord",
    "encode_sequence",
    "decode_blocks",
    "decode_record",
    # .bicgr
    "format_record",
    "parse_record",
    "read_records",
    "write_records",
    # Batch
    "ItemResult",
    "run_ordered",
    "encode_batch",
    "decode_batch",
]
