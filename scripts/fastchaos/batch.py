"""
Batch encode / decode with per-item error isolation.

Each sequence (or record) is one work item. Parsing of raw .bicgr chunks and
legacy documents happens inside the item too, so a malformed record fails on
its own while its neighbours are still decoded and emitted in order.
"""

import logging
from functools import partial
from typing import List, Optional, Sequence, Union

from .bicgr import RecordChunk, parse_chunk
from .blocks import decode_record, encode_sequence
from .executor import ItemResult, count_failures, run_ordered
from .icgr import DEFAULT_BLOCK_WIDTH, check_triple
from .legacy import LegacyDocument, parse_document
from .records import Record, SequenceRecord
from .segmenter import DEFAULT_OVERLAP

logger = logging.getLogger(__name__)

DecodeItem = Union[Record, RecordChunk, LegacyDocument]


def encode_batch(
    sequences: Sequence[SequenceRecord],
    block_width: int = DEFAULT_BLOCK_WIDTH,
    overlap: int = DEFAULT_OVERLAP,
    threads: int = 1
) -> List[ItemResult[Record]]:
    """
    Encode many sequences, one work item per sequence.

    Args:
        sequences: Sequences to encode
        block_width: Maximum window length W
        overlap: Bases shared by consecutive windows
        threads: Worker threads

    Returns:
        One ItemResult per input sequence, in input order
    """
    encode = partial(encode_sequence, block_width=block_width, overlap=overlap)
    results = run_ordered(encode, sequences, threads=threads, label="sequences encoded",
                          log_progress=len(sequences) > 1)

    failed = count_failures(results)
    logger.info(f"Encoded {len(results) - failed}/{len(results)} sequences")
    return results


def _parse_item(item: DecodeItem, max_width: Optional[int] = None) -> Record:
    if isinstance(item, RecordChunk):
        item = parse_chunk(item)
    elif isinstance(item, LegacyDocument):
        item = parse_document(item)
    if max_width is not None:
        for triple in item.blocks:
            check_triple(triple, max_width)
    return item


def _decode_item(item: DecodeItem, max_width: Optional[int] = None) -> SequenceRecord:
    return decode_record(_parse_item(item), max_width)


def parse_batch(
    items: Sequence[DecodeItem],
    threads: int = 1,
    max_width: Optional[int] = None
) -> List[ItemResult[Record]]:
    """Parse and validate raw chunks or documents without decoding them."""
    parse = partial(_parse_item, max_width=max_width)
    return run_ordered(parse, items, threads=threads, label="records parsed")


def decode_batch(
    items: Sequence[DecodeItem],
    threads: int = 1,
    max_width: Optional[int] = None
) -> List[ItemResult[SequenceRecord]]:
    """
    Decode many records, one work item per record.

    Args:
        items: Parsed Records, raw .bicgr RecordChunks, or LegacyDocuments
        threads: Worker threads
        max_width: Largest block length accepted (None for no limit)

    Returns:
        One ItemResult per item, in input order
    """
    decode = partial(_decode_item, max_width=max_width)
    results = run_ordered(decode, items, threads=threads, label="records decoded",
                          log_progress=len(items) > 1)

    failed = count_failures(results)
    logger.info(f"Decoded {len(results) - failed}/{len(results)} records")
    return results
