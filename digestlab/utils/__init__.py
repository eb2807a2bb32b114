"""
Utility modules for DigestLab.
"""

from .sequence import (
    circular_slice,
    clean_sequence,
    gc_content,
    wrap_lines,
)

__all__ = [
    'clean_sequence',
    'circular_slice',
    'gc_content',
    'wrap_lines',
]
