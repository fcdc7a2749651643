"""
Pytest configuration and fixtures for fastchaos tests.
"""

import gzip
import random
import tempfile
from pathlib import Path

import pytest


# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scripts_dir(project_root):
    """Return the scripts directory."""
    return project_root / "scripts"


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Sequence Fixtures
# ============================================================================

@pytest.fixture
def random_bases():
    """Factory for reproducible random ACGT strings."""
    def _random_bases(length, seed=0):
        rng = random.Random(seed)
        return "".join(rng.choice("ACGT") for _ in range(length))
    return _random_bases


@pytest.fixture
def sequence_250(random_bases):
    """A 250 nt sequence (three blocks at W=100, O=20)."""
    return random_bases(250, seed=250)


@pytest.fixture
def sample_fasta_content():
    """Provide sample FASTA content for testing."""
    return """\
>seq1 first sample
ACGTACGTACGTTTGACCAGTAGGACCATTAGCAAGGCTTACGATCGATCGGGATCCAATTGGCCAATTACGTACGTA
CGTACGGGTTTAAACCCGGGTTTAAACCCGTACGTAGCTAGCTAGCTAGGATCGATCGATCGTTTTAAAACCCCGGGG
>seq2
ggatccaaattt
>seq3 third
AAAACGAT
"""


@pytest.fixture
def sample_fasta_file(temp_dir, sample_fasta_content):
    """Create a temporary FASTA file."""
    fasta_path = temp_dir / "sample.fa"
    fasta_path.write_text(sample_fasta_content)
    return fasta_path


@pytest.fixture
def sample_fastq_content():
    """Provide sample FASTQ content for testing."""
    return """\
@read_001 runid=test
ATCGATCGATCGATCGATCGATCGATCGATCGATCGATCGATCGATCGATCGATCG
+
IIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIII
@read_002 runid=test
GCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTAGCTA
+
IIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIIII
"""


@pytest.fixture
def sample_fastq_file(temp_dir, sample_fastq_content):
    """Create a temporary gzipped FASTQ file."""
    fastq_path = temp_dir / "reads.fastq.gz"
    with gzip.open(fastq_path, "wt") as f:
        f.write(sample_fastq_content)
    return fastq_path


@pytest.fixture
def invalid_fasta_file(temp_dir):
    """FASTA with one sequence containing N between two good ones."""
    fasta_path = temp_dir / "with_n.fa"
    fasta_path.write_text(">good1\nACGTACGT\n>bad\nACGTNACGT\n>good2\nTTTTGGGG\n")
    return fasta_path


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def sample_bicgr_text():
    """Two well-formed .bicgr records."""
    return (
        ">seq1\tsample\toverlap=0\n"
        "5\t9\t8\n"
        ">seq2\t\toverlap=2\n"
        "3\t5\t4\n"
        "12\t5\t4\n"
    )


@pytest.fixture
def sample_bicgr_file(temp_dir, sample_bicgr_text):
    """Create a temporary .bicgr file."""
    path = temp_dir / "sample.bicgr"
    path.write_text(sample_bicgr_text)
    return path


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Provide a sample configuration dictionary."""
    return {
        "encode": {
            "block_width": 50,
            "overlap": 5
        },
        "resources": {
            "threads": 4
        },
        "draw": {
            "image_size": 64
        }
    }


@pytest.fixture
def config_file(temp_dir):
    """Factory fixture to write a YAML config file."""
    def _config_file(text, name="config.yaml"):
        path = temp_dir / name
        path.write_text(text)
        return path
    return _config_file
