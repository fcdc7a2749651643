"""
Legacy compressed iCGR container

Older fastchaos releases stored records as gzip-compressed JSON, one
document per line:

    {"id": "seq1", "desc": "sample", "overlap": 0,
     "icgrs": [{"x": "5", "y": "9", "n": 8}]}

x and y are decimal strings because JSON numbers lose precision past 2^53.
Documents are validated with the same rules as the .bicgr text form, so a
legacy file and its .bicgr conversion always load to identical Records.
Compression is only a transport detail here.
"""

import gzip
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator

from .bicgr import FIELD_SEP, GZIP_MAGIC, parse_uint
from .errors import MalformedRecordError
from .icgr import CoordinateTriple
from .records import Record

logger = logging.getLogger(__name__)


@dataclass
class LegacyDocument:
    """One undecoded JSON document and its line in the decompressed stream."""
    line_number: int
    text: str


def is_legacy_file(path: str) -> bool:
    """Check if file has gzip magic number."""
    try:
        with open(path, "rb") as f:
            magic = f.read(2)
        return magic == GZIP_MAGIC
    except OSError:
        return False


def is_legacy_container(path: str) -> bool:
    """
    Check if a file is a legacy container: gzip whose first document is JSON.

    Gzipped FASTA/FASTQ or .bicgr files share the magic number, so the first
    non-blank decompressed line must open a JSON object.
    """
    if not is_legacy_file(path):
        return False
    try:
        with gzip.open(path, "rt", encoding="utf-8") as f:
            for line in f:
                stripped = line.lstrip()
                if stripped:
                    return stripped.startswith("{")
    except (OSError, EOFError, UnicodeDecodeError):
        return False
    return True


def record_to_document(record: Record) -> Dict[str, Any]:
    """Convert a Record to its legacy JSON document."""
    return {
        "id": record.id,
        "desc": record.description,
        "overlap": record.overlap,
        "icgrs": [{"x": str(b.x), "y": str(b.y), "n": b.n} for b in record.blocks],
    }


def _require_str(value: Any, what: str, line_number: int) -> str:
    if not isinstance(value, str):
        raise MalformedRecordError(f"{what} must be a string, got {type(value).__name__}", line_number)
    return value


def _require_uint(value: Any, what: str, line_number: int) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedRecordError(f"{what} must be a non-negative integer, got {value!r}", line_number)
    return value


def document_to_record(doc: Any, line_number: int = 1) -> Record:
    """
    Validate a legacy JSON document and convert it to a Record.

    Raises:
        MalformedRecordError: On any violation of the record contract
    """
    if not isinstance(doc, dict):
        raise MalformedRecordError("Legacy document must be a JSON object", line_number)

    missing = [key for key in ("id", "overlap", "icgrs") if key not in doc]
    if missing:
        raise MalformedRecordError(f"Legacy document is missing {', '.join(missing)}", line_number)

    record_id = _require_str(doc["id"], "id", line_number)
    if not record_id or FIELD_SEP in record_id or "\n" in record_id:
        raise MalformedRecordError(f"Invalid id {record_id!r}", line_number)

    description = doc.get("desc")
    if description is not None:
        description = _require_str(description, "desc", line_number)
        if FIELD_SEP in description or "\n" in description:
            raise MalformedRecordError("Description contains a tab or newline", line_number)

    overlap = _require_uint(doc["overlap"], "overlap", line_number)

    icgrs = doc["icgrs"]
    if not isinstance(icgrs, list) or not icgrs:
        raise MalformedRecordError("icgrs must be a non-empty list", line_number)

    blocks = []
    for index, item in enumerate(icgrs):
        if not isinstance(item, dict):
            raise MalformedRecordError(f"icgrs[{index}] must be an object", line_number)
        x = parse_uint(_require_str(item.get("x"), f"icgrs[{index}].x", line_number), "x", line_number)
        y = parse_uint(_require_str(item.get("y"), f"icgrs[{index}].y", line_number), "y", line_number)
        n = _require_uint(item.get("n"), f"icgrs[{index}].n", line_number)
        triple = CoordinateTriple(x, y, n)
        if not triple.is_valid():
            raise MalformedRecordError(f"icgrs[{index}] {triple} does not fit in n bits", line_number)
        blocks.append(triple)

    return Record(id=record_id, description=description, overlap=overlap, blocks=blocks)


def parse_document(document: LegacyDocument) -> Record:
    """Decode the JSON text of a document and validate it."""
    try:
        doc = json.loads(document.text)
    except json.JSONDecodeError as e:
        raise MalformedRecordError(f"Invalid JSON: {e}", document.line_number) from e
    return document_to_record(doc, document.line_number)


def iter_documents(path: str) -> Iterator[LegacyDocument]:
    """Yield the raw JSON documents of a legacy file, skipping blank lines."""
    with gzip.open(path, "rt", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            yield LegacyDocument(line_number, line)


def load_legacy(path: str) -> Iterator[Record]:
    """
    Stream Records from a legacy file.

    Examples:
        >>> for record in load_legacy("genome.icgr.gz"):
        ...     print(record.id)
    """
    for document in iter_documents(path):
        yield parse_document(document)


def dump_legacy(records: Iterable[Record], path: str) -> int:
    """
    Write records to a legacy gzip-compressed JSON file.

    Returns:
        Number of records written
    """
    count = 0
    with gzip.open(path, "wt", encoding="utf-8") as f:
        for record in records:
            doc = record_to_document(record)
            # Refuse to write what load_legacy would reject
            document_to_record(doc, count + 1)
            f.write(json.dumps(doc, ensure_ascii=False))
            f.write("\n")
            count += 1
    logger.debug(f"Wrote {count} legacy records to {path}")
    return count
