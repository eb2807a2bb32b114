"""
Cloning-site selection and recombinant assembly.

A good cloning enzyme cuts the vector exactly once and leaves the insert
intact. Candidates inside the vector's multiple cloning site are ranked
first. Scanning a large enzyme panel can be spread over worker processes;
results are merged after every batch completes and re-sorted, so the
ranking never depends on scheduling.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Iterable, List, Optional, Sequence, Tuple

from .alphabet import reverse_complement, validate_sequence
from .cutsites import find_cut_sites
from .enzymes import DEFAULT_ENZYMES
from .features import remap_after_cut, remap_after_insert, remap_after_reverse_complement
from .models import (
    CloningCandidate,
    CutSite,
    DnaConstruct,
    EnzymeDefinition,
    Feature,
    FeatureType,
    SingleCutter,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_RECOGNITION_LENGTH = 6


def _scan_batch_worker(batch_data) -> List[Tuple[EnzymeDefinition, List[CutSite]]]:
    """
    Worker function for parallel cut-site scanning.

    Module-level so it pickles cleanly for ProcessPoolExecutor.

    Args:
        batch_data: Tuple of (sequence, circular, enzymes, batch_idx)

    Returns:
        List of (enzyme, cut sites) pairs
    """
    sequence, circular, enzymes, _ = batch_data
    return [(enzyme, find_cut_sites(sequence, enzyme, circular)) for enzyme in enzymes]


def scan_panel(
    sequence: str,
    enzymes: Sequence[EnzymeDefinition],
    circular: bool = False,
    workers: Optional[int] = None,
) -> List[Tuple[EnzymeDefinition, List[CutSite]]]:
    """
    Find cut sites for every enzyme of a panel.

    Args:
        sequence: Validated sequence
        enzymes: Enzymes to scan
        circular: Topology
        workers: Worker processes; None or 1 scans inline

    Returns:
        (enzyme, cut sites) pairs in panel order
    """
    enzymes = list(enzymes)
    if not workers or workers <= 1 or len(enzymes) < 2:
        return _scan_batch_worker((sequence, circular, enzymes, 0))

    batch_size = max(1, len(enzymes) // (workers * 4))  # ~4 batches per worker
    batches = [
        (sequence, circular, enzymes[i:i + batch_size], batch_idx)
        for batch_idx, i in enumerate(range(0, len(enzymes), batch_size))
    ]
    logger.debug(f"Scanning {len(enzymes)} enzymes in {len(batches)} batches on {workers} workers")

    results = {}
    with ProcessPoolExecutor(max_workers=workers) as executor:
        future_to_batch = {
            executor.submit(_scan_batch_worker, batch): batch[3]
            for batch in batches
        }
        for future in as_completed(future_to_batch):
            batch_idx = future_to_batch[future]
            try:
                results[batch_idx] = future.result()
            except Exception as e:
                logger.error(f"Enzyme batch {batch_idx} failed: {e}")
                raise

    return [pair for batch_idx in sorted(results) for pair in results[batch_idx]]


def _eligible(enzyme: EnzymeDefinition, min_recognition_length: int, allow_ambiguous: bool) -> bool:
    return enzyme.length >= min_recognition_length and (allow_ambiguous or not enzyme.is_ambiguous)


def find_unique_single_cutters(
    sequence: str,
    enzymes: Optional[Iterable[EnzymeDefinition]] = None,
    circular: bool = False,
    min_recognition_length: int = DEFAULT_MIN_RECOGNITION_LENGTH,
    allow_ambiguous: bool = False,
    workers: Optional[int] = None,
) -> List[SingleCutter]:
    """
    Enzymes that cut a sequence at exactly one position.

    Only non-degenerate sites of at least ``min_recognition_length`` bp are
    considered, so short or degenerate sites do not dominate the result.

    Returns:
        Single cutters ordered by (position, enzyme name)
    """
    seq = validate_sequence(sequence)
    panel = [
        e for e in (DEFAULT_ENZYMES if enzymes is None else enzymes)
        if _eligible(e, min_recognition_length, allow_ambiguous)
    ]

    singles = [
        SingleCutter(
            enzyme_name=enzyme.name,
            position=sites[0].position,
            overhang_length=enzyme.overhang_length,
            recognition_length=enzyme.length,
        )
        for enzyme, sites in scan_panel(seq, panel, circular, workers)
        if len(sites) == 1
    ]
    singles.sort(key=lambda s: (s.position, s.enzyme_name))
    logger.debug(f"{len(singles)} of {len(panel)} eligible enzymes cut {len(seq)} bp exactly once")
    return singles


def select_cloning_sites(
    vector: DnaConstruct,
    insert: DnaConstruct,
    enzymes: Optional[Iterable[EnzymeDefinition]] = None,
    mcs: Optional[Feature] = None,
    min_recognition_length: int = DEFAULT_MIN_RECOGNITION_LENGTH,
    allow_ambiguous: bool = False,
    workers: Optional[int] = None,
) -> List[CloningCandidate]:
    """
    Rank enzymes that cut the vector once and do not cut the insert.

    Args:
        vector: Recipient construct
        insert: Construct to be cloned
        enzymes: Enzyme panel (built-in panel if None)
        mcs: Multiple cloning site; defaults to the vector's MCS feature
        min_recognition_length: Minimum site length considered
        allow_ambiguous: Also consider degenerate recognition sites
        workers: Worker processes for scanning

    Returns:
        Candidates inside the MCS first, then the rest, each group by
        position. Empty when the pair has no usable enzyme.
    """
    panel = list(DEFAULT_ENZYMES if enzymes is None else enzymes)
    singles = find_unique_single_cutters(
        vector.sequence, panel, vector.is_circular,
        min_recognition_length=min_recognition_length,
        allow_ambiguous=allow_ambiguous,
        workers=workers,
    )
    if not singles:
        logger.info(f"No unique single cutters in {vector.name}")
        return []

    single_names = {s.enzyme_name for s in singles}
    insert_panel = [
        e for e in panel
        if e.name in single_names and _eligible(e, min_recognition_length, allow_ambiguous)
    ]
    insert_cutters = {
        enzyme.name
        for enzyme, sites in scan_panel(insert.sequence, insert_panel, insert.is_circular, workers)
        if sites
    }

    region = mcs if mcs is not None else vector.mcs_feature
    candidates = [
        CloningCandidate(
            enzyme_name=s.enzyme_name,
            position=s.position,
            overhang_length=s.overhang_length,
            in_mcs=region is not None and region.contains(s.position),
        )
        for s in singles
        if s.enzyme_name not in insert_cutters
    ]
    candidates.sort(key=lambda c: (not c.in_mcs, c.position, c.enzyme_name))

    in_mcs = sum(1 for c in candidates if c.in_mcs)
    logger.info(
        f"{len(candidates)} enzyme(s) cut {vector.name} once and spare {insert.name} "
        f"({in_mcs} in MCS)"
    )
    return candidates


def clone_into_vector(
    vector: DnaConstruct,
    insert: DnaConstruct,
    enzyme: EnzymeDefinition,
    reverse: bool = False,
    name: Optional[str] = None,
) -> DnaConstruct:
    """
    Build a recombinant by splicing an insert into the vector's single site.

    Vector features are shifted with ``remap_after_insert``; insert features
    (mirrored first when ``reverse``) are translated to the insertion point,
    and the insert itself is recorded as a gene feature.

    Raises:
        ValueError: If the enzyme does not cut the vector exactly once
    """
    sites = find_cut_sites(vector.sequence, enzyme, vector.is_circular)
    if len(sites) != 1:
        raise ValueError(
            f"{enzyme.name} cuts {vector.name} {len(sites)} time(s); exactly one site is required"
        )
    cut = sites[0].position

    insert_seq = reverse_complement(insert.sequence) if reverse else insert.sequence
    insert_features = (
        remap_after_reverse_complement(insert.features, insert.length) if reverse
        else list(insert.features)
    )
    # origin-spanning features of a circular insert do not survive linear splicing
    insert_features = remap_after_cut(insert_features, 0, len(insert_seq))
    placed = [
        Feature(f.name, f.start + cut, f.end + cut, f.feature_type, f.strand)
        for f in insert_features
    ]

    orientation = 'reverse' if reverse else 'forward'
    insert_feature = Feature(
        name=f"{insert.name} insert{' (rev)' if reverse else ''}",
        start=cut,
        end=cut + len(insert_seq),
        feature_type=FeatureType.GENE,
        strand='-' if reverse else '+',
    )

    recombinant = DnaConstruct(
        name=name or f"{vector.name}+{insert.name}",
        sequence=vector.sequence[:cut] + insert_seq + vector.sequence[cut:],
        is_circular=vector.is_circular,
        features=remap_after_insert(vector.features, cut, len(insert_seq)) + placed + [insert_feature],
        end5=vector.end5,
        end3=vector.end3,
        source_name=f"{vector.name} + {insert.name} ({enzyme.name}, {orientation})",
    )
    logger.info(
        f"Cloned {insert.name} into {vector.name} at {enzyme.name} ({cut}) {orientation} "
        f"-> {recombinant.length} bp"
    )
    return recombinant


def detect_mcs(
    sequence: str,
    enzymes: Optional[Iterable[EnzymeDefinition]] = None,
    circular: bool = False,
    window: int = 200,
    min_sites: int = 4,
    padding: int = 5,
    min_recognition_length: int = DEFAULT_MIN_RECOGNITION_LENGTH,
    allow_ambiguous: bool = False,
    workers: Optional[int] = None,
) -> Optional[Feature]:
    """
    Locate a multiple cloning site.

    The MCS is the window of at most ``window`` bp holding the largest
    number (at least ``min_sites``) of unique single-cutter sites, using
    the same enzyme filters as ``find_unique_single_cutters``.

    Returns:
        An MCS feature padded by ``padding`` bp, or None
    """
    seq = validate_sequence(sequence)
    singles = find_unique_single_cutters(
        seq, enzymes, circular,
        min_recognition_length=min_recognition_length,
        allow_ambiguous=allow_ambiguous,
        workers=workers,
    )
    if len(singles) < min_sites:
        return None

    best_count, best_start, best_end, best_names = 0, -1, -1, []
    for i, first in enumerate(singles):
        names = []
        for last in singles[i:]:
            span = last.position + last.recognition_length - first.position
            if span > window:
                break
            names.append(last.enzyme_name)
            if len(names) >= min_sites and len(names) > best_count:
                best_count = len(names)
                best_start = first.position
                best_end = last.position + last.recognition_length
                best_names = list(names)

    if best_count < min_sites:
        return None

    return Feature(
        name=f"MCS ({', '.join(best_names[:6])})",
        start=max(0, best_start - padding),
        end=min(len(seq), best_end + padding),
        feature_type=FeatureType.MCS,
    )


def annotate_mcs(construct: DnaConstruct, enzymes: Optional[Iterable[EnzymeDefinition]] = None, **kwargs) -> DnaConstruct:
    """Copy of ``construct`` with a detected MCS feature, unless it already has one."""
    if construct.mcs_feature is not None:
        return construct.copy()
    mcs = detect_mcs(construct.sequence, enzymes, construct.is_circular, **kwargs)
    if mcs is None:
        logger.debug(f"No MCS detected in {construct.name}")
        return construct.copy()
    logger.info(f"Detected {mcs.name} at {mcs.start}-{mcs.end} in {construct.name}")
    annotated = construct.copy()
    annotated.features.append(mcs)
    return annotated
