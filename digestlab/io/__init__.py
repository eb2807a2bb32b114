"""
I/O modules for DigestLab.
"""

from .output import (
    write_candidates_tsv,
    write_construct_fasta,
    write_cut_sites_tsv,
    write_features_tsv,
    write_fragments_fasta,
)

__all__ = [
    'write_cut_sites_tsv',
    'write_fragments_fasta',
    'write_construct_fasta',
    'write_candidates_tsv',
    'write_features_tsv',
]
