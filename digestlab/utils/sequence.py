"""
Sequence manipulation utilities.

Provides plain-text helpers shared by the loaders, the digestion engine and
the writers.
"""

import re
from typing import List


_NON_SEQUENCE = re.compile(r'[\s\d/]+')


def clean_sequence(text: str) -> str:
    """Strip whitespace, digits and slashes from pasted sequence text.

    Handles GenBank ORIGIN blocks and numbered FASTA dumps:

        >>> clean_sequence("1 gaattc aagctt\\n13 ggatcc //")
        'GAATTCAAGCTTGGATCC'
    """
    return _NON_SEQUENCE.sub('', text).upper()


def circular_slice(seq: str, start: int, end: int) -> str:
    """Slice ``seq`` from ``start`` to ``end``, wrapping through the origin.

    When ``end <= start`` the slice runs to the end of the sequence and
    continues from position 0, so ``circular_slice(s, p, p)`` is the whole
    molecule rotated to begin at ``p``.
    """
    if end > start:
        return seq[start:end]
    return seq[start:] + seq[:end]


def gc_content(seq: str) -> float:
    """Calculate GC content of a sequence (0.0 to 1.0).

    Only concrete bases are counted; ambiguity codes are ignored.
    """
    seq = seq.upper()
    gc = sum(1 for base in seq if base in 'GC')
    total = sum(1 for base in seq if base in 'ACGT')
    return gc / total if total > 0 else 0.0


def wrap_lines(seq: str, width: int = 80) -> List[str]:
    """Split a sequence into fixed-width lines for FASTA output."""
    if width <= 0:
        raise ValueError(f"Line width must be positive: {width}")
    return [seq[i:i + width] for i in range(0, len(seq), width)]
