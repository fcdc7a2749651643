"""
Tests for the legacy gzip JSON container.
"""

import gzip
import json
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from fastchaos.blocks import encode_sequence
from fastchaos.errors import MalformedRecordError
from fastchaos.icgr import CoordinateTriple
from fastchaos.legacy import (
    LegacyDocument,
    document_to_record,
    dump_legacy,
    is_legacy_container,
    is_legacy_file,
    iter_documents,
    load_legacy,
    parse_document,
    record_to_document,
)
from fastchaos.records import Record, SequenceRecord


def _write_gzip_lines(path, lines):
    with gzip.open(path, "wt", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


# ============================================================================
# Tests: Document Conversion
# ============================================================================

class TestDocumentConversion:
    """Tests for record_to_document and document_to_record."""

    def test_coordinates_are_strings(self):
        """x and y are stored as decimal strings."""
        doc = record_to_document(Record("s", None, 0, [CoordinateTriple(2 ** 80, 5, 81)]))
        assert doc["icgrs"][0] == {"x": str(2 ** 80), "y": "5", "n": 81}
        assert doc["desc"] is None

    def test_round_trip(self, sequence_250):
        record = encode_sequence(SequenceRecord("s", "d", sequence_250), 100, 20)
        assert document_to_record(record_to_document(record)) == record

    def test_missing_desc_is_none(self):
        doc = {"id": "s", "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]}
        assert document_to_record(doc).description is None

    @pytest.mark.parametrize("doc", [
        [],
        {"overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": "", "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": 7, "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": "s", "desc": "a\tb", "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": "s", "overlap": True, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": "s", "overlap": -1, "icgrs": [{"x": "3", "y": "5", "n": 4}]},
        {"id": "s", "overlap": 0, "icgrs": []},
        {"id": "s", "overlap": 0, "icgrs": [{"x": 3, "y": "5", "n": 4}]},
        {"id": "s", "overlap": 0, "icgrs": [{"x": "03", "y": "5", "n": 4}]},
        {"id": "s", "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": "4"}]},
        {"id": "s", "overlap": 0, "icgrs": [{"x": "16", "y": "5", "n": 4}]},
        {"id": "s", "overlap": 0, "icgrs": [{"x": "0", "y": "0", "n": 0}]},
    ])
    def test_invalid_documents(self, doc):
        with pytest.raises(MalformedRecordError):
            document_to_record(doc, 3)

    def test_invalid_json(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_document(LegacyDocument(4, "{not json"))
        assert exc_info.value.line_number == 4


# ============================================================================
# Tests: Files
# ============================================================================

class TestLegacyFiles:
    """Tests for dump_legacy, load_legacy and legacy detection."""

    def test_dump_and_load(self, temp_dir, sequence_250):
        records = [
            encode_sequence(SequenceRecord("a", None, sequence_250), 100, 20),
            encode_sequence(SequenceRecord("b", "", "ACGT")),
        ]
        path = temp_dir / "out.icgr.gz"
        assert dump_legacy(records, str(path)) == 2
        assert is_legacy_file(str(path))
        assert list(load_legacy(str(path))) == records

    def test_one_document_per_line(self, temp_dir):
        path = temp_dir / "out.gz"
        dump_legacy([Record("s", None, 0, [CoordinateTriple(3, 5, 4)])], str(path))
        with gzip.open(path, "rt") as f:
            lines = f.read().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["id"] == "s"

    def test_dump_rejects_invalid_record(self, temp_dir):
        with pytest.raises(MalformedRecordError):
            dump_legacy([Record("a\tb", None, 0, [CoordinateTriple(0, 0, 1)])], str(temp_dir / "x.gz"))

    def test_plain_text_is_not_legacy(self, sample_bicgr_file):
        assert not is_legacy_file(str(sample_bicgr_file))

    def test_missing_file_is_not_legacy(self, temp_dir):
        assert not is_legacy_file(str(temp_dir / "missing.gz"))

    def test_container_detection(self, temp_dir):
        legacy = temp_dir / "out.icgr.gz"
        dump_legacy([Record("s", None, 0, [CoordinateTriple(3, 5, 4)])], str(legacy))
        assert is_legacy_container(str(legacy))

    def test_gzipped_fasta_is_not_container(self, temp_dir):
        """Gzip magic alone does not make a legacy container."""
        path = temp_dir / "genome.fa.gz"
        _write_gzip_lines(path, [">s1", "ACGTACGTAC"])
        assert is_legacy_file(str(path))
        assert not is_legacy_container(str(path))

    def test_documents_keep_line_numbers(self, temp_dir):
        """Blank lines are skipped but still counted."""
        path = temp_dir / "docs.gz"
        doc = json.dumps({"id": "s", "overlap": 0, "icgrs": [{"x": "3", "y": "5", "n": 4}]})
        _write_gzip_lines(path, [doc, "", doc])
        assert [d.line_number for d in iter_documents(str(path))] == [1, 3]
