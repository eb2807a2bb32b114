"""
Restriction digestion.

Cut positions are sorted ascending. A linear molecule with k sites gives
k + 1 fragments ``[0, p1), [p1, p2), ..., [pk, len)``. A circular molecule
with k >= 1 sites gives k fragments, the last one running from ``pk``
through the origin to ``p1``. Without any site the input comes back as a
single fragment.
"""

import logging
from typing import Dict, Iterable, List, Union

from .alphabet import validate_sequence
from .cutsites import find_cut_sites_multi
from .features import remap_after_cut
from .models import CutSite, DnaConstruct, EnzymeDefinition, Fragment
from ..utils.sequence import circular_slice

logger = logging.getLogger(__name__)

EnzymeInput = Union[EnzymeDefinition, Iterable[EnzymeDefinition]]


def _as_enzyme_list(enzymes: EnzymeInput) -> List[EnzymeDefinition]:
    if isinstance(enzymes, EnzymeDefinition):
        return [enzymes]
    return list(enzymes)


def _digest_linear(sequence: str, positions: List[int], sites: Dict[int, CutSite]) -> List[Fragment]:
    bounds = [0] + positions + [len(sequence)]
    fragments = []
    for i in range(len(bounds) - 1):
        start, end = bounds[i], bounds[i + 1]
        fragments.append(Fragment(
            sequence=sequence[start:end],
            start_position=start,
            end_position=end,
            end5=sites[positions[i - 1]].overhang if i > 0 else None,
            end3=sites[positions[i]].overhang if i < len(positions) else None,
        ))
    return fragments


def _digest_circular(sequence: str, positions: List[int], sites: Dict[int, CutSite]) -> List[Fragment]:
    fragments = []
    for i, start in enumerate(positions):
        end = positions[(i + 1) % len(positions)]
        fragments.append(Fragment(
            sequence=circular_slice(sequence, start, end),
            start_position=start,
            end_position=end,
            end5=sites[start].overhang,
            end3=sites[end].overhang,
        ))
    return fragments


def digest(
    sequence: str,
    enzymes: EnzymeInput,
    circular: bool = False,
) -> List[Fragment]:
    """
    Digest a sequence with one or more enzymes.

    Args:
        sequence: DNA sequence (IUPAC, any case)
        enzymes: A single enzyme or several for a multi-enzyme digest
        circular: Treat the sequence as a circular molecule

    Returns:
        Fragments in coordinate order. Each fragment carries the ends
        produced by the cuts bounding it. An empty sequence gives no
        fragments.

    Raises:
        InvalidSequence: If the sequence contains non-IUPAC characters
    """
    seq = validate_sequence(sequence)
    if not seq:
        return []

    enzyme_list = _as_enzyme_list(enzymes)
    sites: Dict[int, CutSite] = {}
    for site in find_cut_sites_multi(seq, enzyme_list, circular):
        sites.setdefault(site.position, site)
    positions = sorted(sites)

    if not positions:
        logger.debug(f"No cut sites for {[e.name for e in enzyme_list]}; sequence left intact")
        return [Fragment(sequence=seq, start_position=0, end_position=len(seq))]

    if circular:
        fragments = _digest_circular(seq, positions, sites)
    else:
        fragments = _digest_linear(seq, positions, sites)

    logger.debug(
        f"Digested {len(seq)} bp ({'circular' if circular else 'linear'}) "
        f"at {len(positions)} sites into {len(fragments)} fragments"
    )
    return fragments


def digest_construct(construct: DnaConstruct, enzymes: EnzymeInput) -> List[DnaConstruct]:
    """
    Digest a construct into new linear constructs.

    Fragment features are carried over with ``remap_after_cut``; features
    interrupted by a cut are dropped. Native ends of a linear parent are
    kept on the outermost fragments. If no enzyme cuts, a copy of the
    construct is returned unchanged.

    Returns:
        Fragment constructs named ``<name>_<enzymes>_f<i>``, coordinate order
    """
    enzyme_list = _as_enzyme_list(enzymes)
    fragments = digest(construct.sequence, enzyme_list, construct.is_circular)
    if not fragments:
        return []
    if len(fragments) == 1 and fragments[0].end5 is None and fragments[0].end3 is None:
        return [construct.copy()]

    circumference = construct.length if construct.is_circular else None
    label = '-'.join(e.name for e in enzyme_list)
    products = []
    for idx, fragment in enumerate(fragments, start=1):
        features = remap_after_cut(
            construct.features,
            fragment.start_position,
            fragment.end_position,
            circumference=circumference,
        )
        products.append(DnaConstruct(
            name=f"{construct.name}_{label}_f{idx}",
            sequence=fragment.sequence,
            is_circular=False,
            features=features,
            end5=fragment.end5 if fragment.end5 is not None else construct.end5,
            end3=fragment.end3 if fragment.end3 is not None else construct.end3,
            source_name=construct.name,
        ))

    logger.info(
        f"{construct.name} digested with {label}: {len(products)} fragment(s) "
        f"({', '.join(f'{p.length} bp' for p in products)})"
    )
    return products
