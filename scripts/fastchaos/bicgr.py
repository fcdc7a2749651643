r"""
BICGR Record Format (.bicgr)

Block-based iCGR container, one record per encoded sequence, line-oriented
and tab-separated:

    ><id>[\t<description>]\toverlap=<O>
    <x>\t<y>\t<n>
    <x>\t<y>\t<n>
    ...
    ><next id>...

Format rules:
    - id: non-empty, no tab
    - description: optional, no tab; ">id\t\toverlap=0" carries an empty
      description, which is different from ">id\toverlap=0" (none)
    - overlap, x, y, n: unsigned decimal, no sign, no leading zeros
    - n >= 1, x < 2^n, y < 2^n
    - every record has at least one block line
    - every line ends with a newline

Writing is the exact textual inverse of parsing, so read -> write
reproduces any well-formed file byte for byte.

Example:
    >seq1\tsample\toverlap=0
    5\t9\t8
"""

import gzip
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from .errors import MalformedRecordError
from .icgr import CoordinateTriple
from .records import Record

logger = logging.getLogger(__name__)

HEADER_PREFIX = ">"
OVERLAP_PREFIX = "overlap="
FIELD_SEP = "\t"
GZIP_MAGIC = b"\x1f\x8b"

# Unsigned decimal without sign or leading zeros
_UINT = re.compile(r"0|[1-9][0-9]*")


@dataclass
class RecordChunk:
    """Raw lines of one record and the file line number of the first one."""
    first_line: int
    lines: List[str] = field(default_factory=list)

    @property
    def record_id(self) -> Optional[str]:
        """Best-effort id from the header, for error reporting."""
        if self.lines and self.lines[0].startswith(HEADER_PREFIX):
            return self.lines[0][1:].split(FIELD_SEP, 1)[0] or None
        return None


# ============================================================================
# Writing
# ============================================================================

def format_header(record: Record) -> str:
    """
    Format the header line of a record (without newline).

    Raises:
        MalformedRecordError: If id or description cannot be represented

    Examples:
        >>> format_header(Record("seq1", "sample", 0))
        '>seq1\\tsample\\toverlap=0'
    """
    if not record.id:
        raise MalformedRecordError("Record id is empty")
    if FIELD_SEP in record.id or "\n" in record.id:
        raise MalformedRecordError(f"Record id {record.id!r} contains a tab or newline")
    if record.overlap < 0:
        raise MalformedRecordError(f"Record {record.id}: negative overlap {record.overlap}")

    fields = [HEADER_PREFIX + record.id]
    if record.description is not None:
        if FIELD_SEP in record.description or "\n" in record.description:
            raise MalformedRecordError(
                f"Record {record.id}: description contains a tab or newline"
            )
        fields.append(record.description)
    fields.append(f"{OVERLAP_PREFIX}{record.overlap}")
    return FIELD_SEP.join(fields)


def format_block(triple: CoordinateTriple) -> str:
    """Format one block line (without newline)."""
    return f"{triple.x}{FIELD_SEP}{triple.y}{FIELD_SEP}{triple.n}"


def format_record(record: Record) -> str:
    """
    Serialize a record to .bicgr text.

    Args:
        record: Record to write

    Returns:
        Header line plus one line per block, each newline-terminated

    Raises:
        MalformedRecordError: If the record has no blocks, an invalid
            triple, or an unrepresentable id/description
    """
    if not record.blocks:
        raise MalformedRecordError(f"Record {record.id}: no blocks")
    lines = [format_header(record)]
    for index, triple in enumerate(record.blocks):
        if not triple.is_valid():
            raise MalformedRecordError(f"Record {record.id}: block {index} {triple} is out of range")
        lines.append(format_block(triple))
    return "\n".join(lines) + "\n"


def write_records(records: Iterable[Record], handle: TextIO) -> int:
    """
    Write records to an open text handle.

    Returns:
        Number of records written
    """
    count = 0
    for record in records:
        handle.write(format_record(record))
        count += 1
    return count


# ============================================================================
# Reading
# ============================================================================

def parse_uint(text: str, what: str, line_number: Optional[int] = None) -> int:
    """Parse a canonical unsigned decimal field (no sign, no leading zeros)."""
    if not _UINT.fullmatch(text):
        raise MalformedRecordError(
            f"{what} must be an unsigned decimal integer without leading zeros, got {text!r}",
            line_number,
        )
    try:
        return int(text)
    except ValueError as e:
        # Beyond the interpreter's int-from-string digit limit
        raise MalformedRecordError(f"{what} is too large: {e}", line_number) from e


def parse_header(line: str, line_number: int = 1) -> Tuple[str, Optional[str], int]:
    """
    Parse a header line into (id, description, overlap).

    Examples:
        >>> parse_header(">seq1\\toverlap=20")
        ('seq1', None, 20)
        >>> parse_header(">seq1\\t\\toverlap=0")
        ('seq1', '', 0)
    """
    if not line.startswith(HEADER_PREFIX):
        raise MalformedRecordError(f"Expected a header line starting with '>', got {line!r}", line_number)

    fields = line[1:].split(FIELD_SEP)
    if len(fields) < 2:
        raise MalformedRecordError("Header must end with a tab and overlap=<O>", line_number)
    if len(fields) > 3:
        raise MalformedRecordError(
            f"Header has {len(fields)} tab-separated fields, expected at most 3 "
            f"(tab inside id or description?)",
            line_number,
        )

    record_id = fields[0]
    if not record_id:
        raise MalformedRecordError("Header has an empty id", line_number)

    overlap_field = fields[-1]
    if not overlap_field.startswith(OVERLAP_PREFIX):
        raise MalformedRecordError(
            f"Last header field must be overlap=<O>, got {overlap_field!r}", line_number
        )
    overlap = parse_uint(overlap_field[len(OVERLAP_PREFIX):], "overlap", line_number)

    description = fields[1] if len(fields) == 3 else None
    return record_id, description, overlap


def parse_block(line: str, line_number: int = 1) -> CoordinateTriple:
    """
    Parse a block line "x<TAB>y<TAB>n".

    Raises:
        MalformedRecordError: On wrong field count, non-integer fields,
            n < 1, or x / y not below 2^n
    """
    fields = line.split(FIELD_SEP)
    if len(fields) != 3:
        raise MalformedRecordError(
            f"Block line must have 3 tab-separated fields, got {len(fields)}", line_number
        )
    x = parse_uint(fields[0], "x", line_number)
    y = parse_uint(fields[1], "y", line_number)
    n = parse_uint(fields[2], "n", line_number)
    if n < 1:
        raise MalformedRecordError("Block length n must be >= 1", line_number)

    triple = CoordinateTriple(x, y, n)
    if not triple.is_valid():
        raise MalformedRecordError(f"Block {triple} does not fit in {n} bits", line_number)
    return triple


def parse_lines(lines: List[str], first_line: int = 1) -> Record:
    """
    Parse the lines of exactly one record (newlines already stripped).

    Args:
        lines: Header line followed by block lines
        first_line: File line number of lines[0], used in error messages

    Returns:
        Parsed Record
    """
    if not lines:
        raise MalformedRecordError("Empty record", first_line)

    record_id, description, overlap = parse_header(lines[0], first_line)

    blocks = []
    for offset, line in enumerate(lines[1:], start=1):
        line_number = first_line + offset
        if line.startswith(HEADER_PREFIX):
            raise MalformedRecordError("Unexpected header inside a record", line_number)
        blocks.append(parse_block(line, line_number))

    if not blocks:
        raise MalformedRecordError(f"Record {record_id} has no blocks", first_line)

    return Record(id=record_id, description=description, overlap=overlap, blocks=blocks)


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def parse_record(text: str, first_line: int = 1) -> Record:
    """
    Parse the text of a single record.

    Examples:
        >>> parse_record(">seq1\\tsample\\toverlap=0\\n5\\t9\\t8\\n")
        Record(id='seq1', description='sample', overlap=0, blocks=[CoordinateTriple(x=5, y=9, n=8)])
    """
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return parse_lines(lines, first_line)


def parse_chunk(chunk: RecordChunk) -> Record:
    """Parse a chunk produced by split_records."""
    return parse_lines(chunk.lines, chunk.first_line)


def split_records(lines: Iterable[str]) -> Iterator[RecordChunk]:
    """
    Group raw lines into per-record chunks without parsing them.

    Splitting first lets a batch decoder fail one malformed record without
    losing the others. Lines before the first header form their own chunk,
    which fails to parse with the proper line number.

    Args:
        lines: Lines as read from a file (with or without trailing newline)

    Yields:
        RecordChunk for every record in order
    """
    chunk: Optional[RecordChunk] = None
    for line_number, raw in enumerate(lines, start=1):
        line = _strip_newline(raw)
        if chunk is None or line.startswith(HEADER_PREFIX):
            if chunk is not None:
                yield chunk
            chunk = RecordChunk(first_line=line_number)
        chunk.lines.append(line)
    if chunk is not None:
        yield chunk


def iter_records(handle: Iterable[str]) -> Iterator[Record]:
    """
    Stream records from an open text handle, stopping at the first error.

    Examples:
        >>> with open("genome.bicgr") as f:
        ...     for record in iter_records(f):
        ...         print(record.id, len(record.blocks))
    """
    for chunk in split_records(handle):
        yield parse_chunk(chunk)


def open_bicgr(path: str) -> TextIO:
    """Open a .bicgr file for reading, gzip-compressed or plain."""
    with open(path, "rb") as f:
        compressed = f.read(2) == GZIP_MAGIC
    if compressed:
        return gzip.open(path, "rt", encoding="utf-8", newline="\n")
    return open(path, "r", encoding="utf-8", newline="\n")


def read_records(path: str) -> List[Record]:
    """Read every record of a .bicgr file (optionally gzipped)."""
    with open_bicgr(path) as f:
        records = list(iter_records(f))
    logger.debug(f"Read {len(records)} records from {path}")
    return records
