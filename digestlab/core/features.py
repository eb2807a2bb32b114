"""
Feature coordinate remapping for structural edits.

Every function returns new Feature objects and leaves its input untouched.
Wrapping features (``start > end``, circular molecules only) are handled
with modular arithmetic over the molecule length.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from .alphabet import reverse_complement
from .models import DnaConstruct, Feature

logger = logging.getLogger(__name__)


def remap_after_cut(
    features: Iterable[Feature],
    fragment_start: int,
    fragment_end: int,
    circumference: Optional[int] = None,
) -> List[Feature]:
    """
    Keep the features lying entirely inside a fragment, in fragment coordinates.

    Args:
        features: Features of the parent molecule
        fragment_start: Parent coordinate of the fragment's first base
        fragment_end: Parent coordinate after the fragment's last base
        circumference: Parent length when the parent is circular. The
            fragment may then wrap (``fragment_end <= fragment_start``;
            equal values mean the whole molecule opened at one cut).

    Returns:
        Surviving features translated by ``-fragment_start``
    """
    if circumference is None:
        return [
            replace(f, start=f.start - fragment_start, end=f.end - fragment_start)
            for f in features
            if not f.wraps and f.start >= fragment_start and f.end <= fragment_end
        ]

    size = (fragment_end - fragment_start) % circumference or circumference
    remapped = []
    for f in features:
        offset = (f.start - fragment_start) % circumference
        length = f.length(circumference)
        if offset + length <= size:
            remapped.append(replace(f, start=offset, end=offset + length))
    return remapped


def remap_after_insert(
    features: Iterable[Feature],
    insertion_point: int,
    inserted_length: int,
) -> List[Feature]:
    """
    Shift features for an insertion made just before ``insertion_point``.

    A feature starting at or after the insertion point moves by
    ``inserted_length``. A feature straddling the insertion point keeps its
    coordinates. For a wrapping feature the start moves when it is at or
    after the insertion point and the end moves when it is after it.
    """
    remapped = []
    for f in features:
        if f.wraps:
            start = f.start + inserted_length if f.start >= insertion_point else f.start
            end = f.end + inserted_length if f.end > insertion_point else f.end
            remapped.append(replace(f, start=start, end=end))
        elif f.start >= insertion_point:
            remapped.append(replace(f, start=f.start + inserted_length, end=f.end + inserted_length))
        else:
            remapped.append(replace(f))
    return remapped


def remap_after_reverse_complement(features: Iterable[Feature], length: int) -> List[Feature]:
    """
    Mirror features onto the reverse complement of a molecule of ``length`` bp.

    ``[start, end)`` becomes ``[length - end, length - start)`` on the
    opposite strand; wrapping features stay wrapping.
    """
    remapped = [
        replace(
            f,
            # a wrapping feature ending at the origin mirrors to one starting there
            start=(length - f.end) % length if f.wraps else length - f.end,
            end=length - f.start,
            strand='-' if f.strand == '+' else '+',
        )
        for f in features
    ]
    return sorted(remapped, key=lambda f: (f.start, f.end))


def reverse_complement_construct(construct: DnaConstruct) -> DnaConstruct:
    """Flip a construct: new sequence, mirrored features, swapped ends."""
    flipped = DnaConstruct(
        name=f"{construct.name} (rev)",
        sequence=reverse_complement(construct.sequence),
        is_circular=construct.is_circular,
        features=remap_after_reverse_complement(construct.features, construct.length),
        end5=construct.end3.reverse_complement() if construct.end3 else None,
        end3=construct.end5.reverse_complement() if construct.end5 else None,
        source_name=construct.name,
    )
    logger.debug(f"Reverse-complemented {construct.name} ({construct.length} bp)")
    return flipped
