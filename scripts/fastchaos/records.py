"""
Sequence and record types shared by the codecs.

SequenceRecord is what the sequence reader hands to the encoder (and what
the decoder gives back); Record is the persisted unit, one per sequence.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .icgr import CoordinateTriple


@dataclass
class SequenceRecord:
    """A nucleotide sequence with its FASTA-style identity."""
    id: str
    description: Optional[str]
    bases: str

    def __len__(self) -> int:
        return len(self.bases)


@dataclass
class Record:
    """One sequence's metadata plus its ordered coordinate triples."""
    id: str
    description: Optional[str] = None
    overlap: int = 0
    blocks: List[CoordinateTriple] = field(default_factory=list)

    @property
    def length(self) -> int:
        """Length of the sequence this record decodes to."""
        if not self.blocks:
            return 0
        return sum(b.n for b in self.blocks) - self.overlap * (len(self.blocks) - 1)
