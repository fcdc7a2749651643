"""
Tests for FASTA/FASTQ reading and FASTA writing.
"""

import io
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from fastchaos.records import SequenceRecord
from fastchaos.seqio import (
    detect_format,
    format_from_extension,
    read_sequences,
    sniff_format,
    to_seqrecord,
    write_fasta,
)


class TestFormatDetection:
    """Tests for format_from_extension, sniff_format and detect_format."""

    @pytest.mark.parametrize("path,expected", [
        ("genome.fa", "fasta"),
        ("genome.FASTA", "fasta"),
        ("genome.fna.gz", "fasta"),
        ("reads.fq", "fastq"),
        ("reads.fastq.gz", "fastq"),
        ("notes.txt", None),
        ("-", None),
    ])
    def test_extension(self, path, expected):
        assert format_from_extension(path) == expected

    def test_sniff(self):
        assert sniff_format("\n@r1\nACGT\n+\nIIII\n") == "fastq"
        assert sniff_format(">s\nACGT\n") == "fasta"
        assert sniff_format("") == "fasta"

    def test_detect_by_extension(self, sample_fastq_file):
        assert detect_format(str(sample_fastq_file)) == "fastq"

    def test_detect_by_content(self, temp_dir, sample_fastq_content):
        """Unknown extensions fall back to sniffing the first bytes."""
        path = temp_dir / "reads.txt"
        path.write_text(sample_fastq_content)
        assert detect_format(str(path)) == "fastq"


class TestReadSequences:
    """Tests for read_sequences."""

    def test_fasta(self, sample_fasta_file):
        sequences = list(read_sequences(str(sample_fasta_file)))
        assert [s.id for s in sequences] == ["seq1", "seq2", "seq3"]
        assert sequences[0].description == "first sample"
        assert sequences[1].description is None
        assert len(sequences[0]) == 156

    def test_bases_kept_as_is(self, sample_fasta_file):
        """Case is preserved; the encoder normalizes later."""
        sequences = list(read_sequences(str(sample_fasta_file)))
        assert sequences[1].bases == "ggatccaaattt"

    def test_gzipped_fastq(self, sample_fastq_file):
        sequences = list(read_sequences(str(sample_fastq_file)))
        assert [s.id for s in sequences] == ["read_001", "read_002"]
        assert sequences[0].description == "runid=test"

    def test_unknown_extension_is_sniffed(self, temp_dir, sample_fastq_content):
        path = temp_dir / "reads.txt"
        path.write_text(sample_fastq_content)
        assert len(list(read_sequences(str(path)))) == 2

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO(">s1 d\nACGT\n"))
        assert list(read_sequences("-")) == [SequenceRecord("s1", "d", "ACGT")]


class TestWriteFasta:
    """Tests for write_fasta and to_seqrecord."""

    def test_title(self):
        assert to_seqrecord(SequenceRecord("s", "desc here", "ACGT")).description == "s desc here"
        assert to_seqrecord(SequenceRecord("s", None, "ACGT")).description == "s"

    def test_write_and_read_back(self, temp_dir):
        sequences = [
            SequenceRecord("s1", "first", "ACGT" * 30),
            SequenceRecord("s2", None, "GGCC"),
        ]
        path = temp_dir / "out.fa"
        with open(path, "w") as f:
            assert write_fasta(sequences, f) == 2
        assert list(read_sequences(str(path))) == sequences
