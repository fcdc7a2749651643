"""
Sequence file I/O

Thin wrapper around Biopython's SeqIO that turns FASTA/FASTQ records into
SequenceRecord objects (id, description, bases) and writes decoded
sequences back out as FASTA.

Supported inputs:
    - FASTA: .fa .fasta .fna .fas .ffn
    - FASTQ: .fq .fastq
    - any of the above gzip-compressed (.gz)
    - "-" for standard input (format sniffed from the first character)
"""

import gzip
import io
import logging
import sys
from contextlib import nullcontext
from typing import Iterable, Iterator, Optional, TextIO

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .records import SequenceRecord

logger = logging.getLogger(__name__)

FASTA_EXTENSIONS = (".fa", ".fasta", ".fna", ".fas", ".ffn")
FASTQ_EXTENSIONS = (".fq", ".fastq")


def format_from_extension(path: str) -> Optional[str]:
    """
    Guess the SeqIO format name from a file name.

    Examples:
        >>> format_from_extension("reads.fq.gz")
        'fastq'
        >>> format_from_extension("genome.fna")
        'fasta'
        >>> format_from_extension("data.txt") is None
        True
    """
    name = path.lower()
    if name.endswith(".gz"):
        name = name[:-3]
    if name.endswith(FASTQ_EXTENSIONS):
        return "fastq"
    if name.endswith(FASTA_EXTENSIONS):
        return "fasta"
    return None


def sniff_format(text: str) -> str:
    """Decide between FASTA and FASTQ from the first non-blank character."""
    for ch in text:
        if ch.isspace():
            continue
        return "fastq" if ch == "@" else "fasta"
    return "fasta"


def open_text(path: str):
    """Open a (possibly gzipped) text file, or stdin for "-"."""
    if path == "-":
        return nullcontext(sys.stdin)
    opener = gzip.open if path.endswith(".gz") else open
    return opener(path, "rt")


def detect_format(path: str) -> str:
    """
    SeqIO format of a sequence file: by extension, else by its first record.

    Examples:
        >>> detect_format("reads.fq.gz")
        'fastq'
    """
    fmt = format_from_extension(path)
    if fmt is not None:
        return fmt
    with open_text(path) as handle:
        return sniff_format(handle.read(4096))


def _description(record: SeqRecord) -> Optional[str]:
    # SeqIO keeps the whole title line in .description; drop the id word
    parts = record.description.split(None, 1)
    if len(parts) == 2 and parts[0] == record.id:
        return parts[1]
    return None


def read_sequences(path: str, fmt: Optional[str] = None) -> Iterator[SequenceRecord]:
    """
    Read sequences from a FASTA or FASTQ file.

    Args:
        path: Input path (supports .gz, "-" for stdin)
        fmt: "fasta" or "fastq"; guessed when omitted

    Yields:
        SequenceRecord per input record, bases exactly as in the file
    """
    if fmt is None and path != "-":
        fmt = detect_format(path)
    with open_text(path) as handle:
        if fmt is None:
            text = handle.read()
            fmt = sniff_format(text)
            handle = io.StringIO(text)
        logger.debug(f"Reading {path} as {fmt}")
        for record in SeqIO.parse(handle, fmt):
            yield SequenceRecord(
                id=record.id,
                description=_description(record),
                bases=str(record.seq),
            )


def to_seqrecord(sequence: SequenceRecord) -> SeqRecord:
    """Convert to a Biopython SeqRecord with the FASTA title preserved."""
    if sequence.description:
        title = f"{sequence.id} {sequence.description}"
    else:
        title = sequence.id
    return SeqRecord(Seq(sequence.bases), id=sequence.id, description=title)


def write_fasta(sequences: Iterable[SequenceRecord], handle: TextIO) -> int:
    """
    Write sequences as FASTA.

    Returns:
        Number of records written
    """
    return SeqIO.write((to_seqrecord(s) for s in sequences), handle, "fasta")
