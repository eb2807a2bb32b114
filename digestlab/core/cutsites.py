"""
Cut-site location.

Converts strand matches into absolute top-strand cleavage positions:

- forward match at ``s``: ``s + cut_offset_5``
- reverse-complement match at ``s``: ``s + len(site) - cut_offset_3``

On circular molecules positions are reduced modulo the length. On linear
molecules a cut is dropped unless both strand nicks fall inside the
molecule: positions outside ``[0, len)`` and Type IIS overhangs running
past either end never yield a site.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .alphabet import validate_sequence
from .models import CutSite, DnaEnd, EnzymeAnalysis, EnzymeDefinition
from .scanner import scan

logger = logging.getLogger(__name__)


def _locate(start: int, offset: int, length: int, circular: bool) -> Optional[int]:
    position = start + offset
    if circular:
        return position % length
    if 0 <= position < length:
        return position
    return None


def _read_top_strand(sequence: str, lo: int, hi: int, circular: bool) -> str:
    n = len(sequence)
    if circular:
        return ''.join(sequence[i % n] for i in range(lo, hi))
    return sequence[lo:hi]


def _nick_span(enzyme: EnzymeDefinition, recognition_start: int, strand: str) -> Tuple[int, int]:
    """Top-strand interval between the two nicks of one cut."""
    lo = min(enzyme.cut_offset_5, enzyme.cut_offset_3)
    hi = max(enzyme.cut_offset_5, enzyme.cut_offset_3)
    if strand == '+':
        return recognition_start + lo, recognition_start + hi
    return recognition_start + enzyme.length - hi, recognition_start + enzyme.length - lo


def _overhang_at(
    sequence: str,
    enzyme: EnzymeDefinition,
    recognition_start: int,
    strand: str,
    circular: bool,
) -> DnaEnd:
    """End produced by one cut, with the tail taken from the cut sequence."""
    if enzyme.cut_offset_5 == enzyme.cut_offset_3:
        return DnaEnd(enzyme_name=enzyme.name)

    top_lo, top_hi = _nick_span(enzyme, recognition_start, strand)
    return DnaEnd(
        direction=enzyme.overhang_direction,
        overhang_sequence=_read_top_strand(sequence, top_lo, top_hi, circular),
        enzyme_name=enzyme.name,
    )


def _strand_sites(
    sequence: str,
    enzyme: EnzymeDefinition,
    strand: str,
    circular: bool,
) -> List[CutSite]:
    forward, reverse = enzyme.matchers()
    if strand == '+':
        matcher, offset = forward, enzyme.cut_offset_5
    else:
        matcher, offset = reverse, enzyme.length - enzyme.cut_offset_3

    sites = []
    for start in scan(sequence, matcher, circular):
        position = _locate(start, offset, len(sequence), circular)
        if position is None:
            continue
        if not circular:
            top_lo, top_hi = _nick_span(enzyme, start, strand)
            if top_lo < 0 or top_hi > len(sequence):
                logger.debug(f"{enzyme.name} cut at {position} leaves the molecule; dropped")
                continue
        sites.append(CutSite(
            position=position,
            enzyme_name=enzyme.name,
            strand=strand,
            recognition_start=start,
            overhang=_overhang_at(sequence, enzyme, start, strand, circular),
        ))
    return sites


def strand_cut_positions(
    sequence: str,
    enzyme: EnzymeDefinition,
    strand: str = '+',
    circular: bool = False,
) -> List[int]:
    """
    Cut positions found through one matcher path only.

    Args:
        sequence: DNA sequence
        enzyme: Restriction enzyme
        strand: '+' for the forward matcher, '-' for the reverse complement
        circular: Topology

    Returns:
        Sorted, de-duplicated positions
    """
    if strand not in ('+', '-'):
        raise ValueError(f"strand must be '+' or '-', got {strand!r}")
    seq = validate_sequence(sequence)
    return sorted({site.position for site in _strand_sites(seq, enzyme, strand, circular)})


def find_cut_sites(
    sequence: str,
    enzyme: EnzymeDefinition,
    circular: bool = False,
) -> List[CutSite]:
    """
    Find every position where ``enzyme`` cleaves ``sequence``.

    Palindromic enzymes are scanned on the forward path only; all others are
    also scanned with the reverse-complement matcher. Hits from both paths
    at the same position are merged into one CutSite (forward kept).

    Args:
        sequence: DNA sequence (IUPAC, any case)
        enzyme: Restriction enzyme
        circular: Treat the sequence as a circular molecule

    Returns:
        Cut sites ordered by position; empty if the enzyme does not cut

    Raises:
        InvalidSequence: If the sequence contains non-IUPAC characters
    """
    seq = validate_sequence(sequence)
    if not seq:
        return []

    by_position: Dict[int, CutSite] = {}
    for site in _strand_sites(seq, enzyme, '+', circular):
        by_position.setdefault(site.position, site)

    if not enzyme.is_palindromic:
        for site in _strand_sites(seq, enzyme, '-', circular):
            by_position.setdefault(site.position, site)

    return [by_position[p] for p in sorted(by_position)]


def find_cut_sites_multi(
    sequence: str,
    enzymes: Iterable[EnzymeDefinition],
    circular: bool = False,
) -> List[CutSite]:
    """Cut sites of several enzymes, ordered by (position, enzyme name)."""
    seq = validate_sequence(sequence)
    sites = []
    for enzyme in enzymes:
        sites.extend(find_cut_sites(seq, enzyme, circular))
    return sorted(sites, key=lambda s: (s.position, s.enzyme_name))


CUT_COUNT_CLASSES = ('none', 'single', 'multiple')


def _cut_count_class(count: int) -> str:
    if count == 0:
        return 'none'
    return 'single' if count == 1 else 'multiple'


def select_by_cut_count(analyses: Iterable[EnzymeAnalysis], classes: Iterable[str]) -> List[EnzymeAnalysis]:
    """
    Keep analyses whose cut count falls in the given classes.

    Args:
        analyses: Per-enzyme reports
        classes: Any of 'none' (0 cuts), 'single' (1) and 'multiple' (2+)

    Raises:
        ValueError: On an unknown class name
    """
    wanted = set(classes)
    unknown = wanted - set(CUT_COUNT_CLASSES)
    if unknown:
        raise ValueError(f"Unknown cut-count class(es): {', '.join(sorted(unknown))}")
    return [a for a in analyses if _cut_count_class(a.cut_count) in wanted]


def analyze_enzymes(
    sequence: str,
    enzymes: Iterable[EnzymeDefinition],
    circular: bool = False,
) -> List[EnzymeAnalysis]:
    """
    Cut-site report for each enzyme of a panel.

    Returns:
        One EnzymeAnalysis per enzyme, sorted by enzyme name
    """
    seq = validate_sequence(sequence)
    results = [
        EnzymeAnalysis(enzyme=enzyme, cut_sites=find_cut_sites(seq, enzyme, circular))
        for enzyme in enzymes
    ]
    results.sort(key=lambda r: r.enzyme.name)

    cutters = sum(1 for r in results if r.cut_count > 0)
    logger.info(f"Analyzed {len(results)} enzymes on {len(seq)} bp: {cutters} cut at least once")
    return results
