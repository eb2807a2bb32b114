"""
Automatic feature annotation.

Constructs are searched on both strands for a small library of common
promoters, reporters and tags. A signature is located by exact 8-mer seeds and
scored by base identity over the full signature; a hit must reach 0.92 identity
for short features (under 30 bp) and 0.83 otherwise. The annotated extent is
the typical feature length centred on the signature hit.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .alphabet import reverse_complement, validate_sequence
from .cloning import annotate_mcs
from .models import DnaConstruct, EnzymeDefinition, Feature, FeatureType

logger = logging.getLogger(__name__)

SEED_LENGTH = 8
MIN_ANNOTATION_LENGTH = 50


@dataclass(frozen=True)
class FeatureSignature:
    """
    Known sequence element used for annotation.

    Attributes:
        name: Feature name given to hits
        feature_type: Category of the element
        length: Typical full length of the element in bp
        sequences: Signature sequences, any of which may match
    """
    name: str
    feature_type: FeatureType
    length: int
    sequences: Tuple[str, ...]

    @property
    def min_similarity(self) -> float:
        return 0.92 if self.length < 30 else 0.83


def _p(name: str, feature_type: FeatureType, length: int, *sequences: str) -> FeatureSignature:
    return FeatureSignature(name, feature_type, length, tuple(sequences))


FEATURE_SIGNATURES: Tuple[FeatureSignature, ...] = (
    # Promoters
    _p("CMV promoter", FeatureType.PROMOTER, 580,
       "GACATTGATTATTGACTAGTTATTAATAGTAATCAATTACGGGGTCATTAGTTCATAGCCC",
       "CATTGACGTCAATAATGACGTATGTTCCCATAGTAACGCCAATAGGGACTTTCCATTGACG",
       "CATCAAGTGTATCATATGCCAAGTACGCCCCCTATTGACGTCAATGACGG"),
    _p("SV40 promoter", FeatureType.PROMOTER, 340,
       "ATCTCTATCACTGATAGGGAGTGGTAAACTCGACTTTAAAAGT",
       "GCCCAGTCTCTCATCTACTTTCATCCACAGTTGGCACC"),
    _p("T7 promoter", FeatureType.PROMOTER, 25, "TAATACGACTCACTATAGGG"),
    _p("T3 promoter", FeatureType.PROMOTER, 25, "AATTAACCCTCACTAAAGGG"),
    _p("SP6 promoter", FeatureType.PROMOTER, 25, "ATTTAGGTGACACTATAGAA"),
    _p("lac promoter", FeatureType.PROMOTER, 80,
       "TTTACACTTTATGCTTCCGGCTCGTATGTTGTGTGG",
       "AATTGTGAGCGGATAACAATTTCACACAGG"),
    _p("CAG promoter", FeatureType.PROMOTER, 400,
       "CTCTAGAGCCTCTGCTAACCATGTTCATGCCTTCTTCTTTTTCCTACAG"),
    _p("EF-1a promoter", FeatureType.PROMOTER, 250,
       "AACTTCTTTGGCTATGCGGGTGATGCTTTTTCCCTGT"),

    # Reporters
    _p("EGFP", FeatureType.REPORTER, 720,
       "ATGGTGAGCAAGGGCGAGGAGCTGTTCACCGGGGTGGTGCCCATCCTGGTCGAGCTGGAC",
       "GGCAAGCTGCCCGTGCCCTGGCCCACCCTCGTGACCACCCTGACCTACGGCGTGCAGTGC"),
    _p("mCherry", FeatureType.REPORTER, 711,
       "ATGGTGAGCAAGGGCGAGGAGGATAACATGGCCATCATCAAGGAGTTCATGCGCTTCAAG"),
    _p("tdTomato", FeatureType.REPORTER, 1431,
       "ATGGTGAGCAAGGGCGAGGAGGTCATCAAAGAGTTCATGCGCTTCAAGGTGCGCATGGAG"),
    _p("Firefly luciferase", FeatureType.REPORTER, 1650,
       "ATGGAAGACGCCAAAAACATAAAGAAAGGCCCGGCGCCATTCTATCCTCTAGAGGATGGAA",
       "GAAGACATTCTTGGACAAATAGCTTACTACATCCTCGATATGCTGTCCCTTCTATGCCCGG"),
    _p("Renilla luciferase", FeatureType.REPORTER, 936,
       "ATGACTTCGAAAGTTTATGATCCAGAACAAAGGAAACGGATGATAACTGGTCCGCAGTGG"),
    _p("NanoLuc", FeatureType.REPORTER, 513,
       "ATGGTCTTCACACTCGAAGATTTCGTTGGGGACTGGCGACAGACAGCCG"),
    _p("lacZ-alpha", FeatureType.REPORTER, 400,
       "ATGACCATGATTACGCCAAGCTTGCATGCCTGCAGGTCGACTCTAGAGGATCCC"),

    # Tags and fusion partners
    _p("His-tag", FeatureType.TAG, 24,
       "CACCATCACCATCACCAC", "CATCATCATCATCATCAT", "CATCACCATCACCATCAC"),
    _p("FLAG-tag", FeatureType.TAG, 30,
       "GACTACAAAGACGATGACGATAAA", "GATTACAAGGATGACGACGATAAG"),
    _p("Myc-tag", FeatureType.TAG, 36,
       "GAACAAAAACTCATCTCAGAAGAGGATCTG", "GAGCAGAAACTCATCTCTGAAGAGGATCTG"),
    _p("HA-tag", FeatureType.TAG, 30,
       "TACCCATACGATGTTCCAGATTACGCT", "TACCCCTACGACGTGCCCGACTACGCC"),
    _p("V5-tag", FeatureType.TAG, 45,
       "GGTAAGCCTATCCCTAACCCTCTCCTCGGTCTCGATTCTACG"),
    _p("GST", FeatureType.TAG, 660,
       "ATGTCCCCTATACTAGGTTATTGGAAAATTAAGGGCCTTGTGCAACCCACTCGAC"),
    _p("MBP", FeatureType.TAG, 1100,
       "ATGAAAATCGAAGAAGGTAAACTGGTAATCTGGATTAACGGCGATAAAGGCTATAACGGT"),
    _p("Strep-tag II", FeatureType.TAG, 27, "TGGAGCCACCCGCAGTTCGAAAAA"),
    _p("SUMO", FeatureType.TAG, 300,
       "ATGTCGGACTCAGAAGTCAATCAAGAAGCTAAGCCAGAGGTCAAGCCAG"),
)


def _similarity(sequence: str, start: int, signature: str) -> float:
    """Fraction of signature bases matched at ``start``; N in the sequence matches anything."""
    window = sequence[start:start + len(signature)]
    if len(window) < len(signature):
        return 0.0
    matches = sum(1 for a, b in zip(window, signature) if a == b or a == 'N')
    return matches / len(signature)


def _search_strand(sequence: str, signature: FeatureSignature) -> Optional[Tuple[int, int, float]]:
    """
    Best hit of a signature on one strand.

    Returns:
        (start, end, similarity) of the estimated feature extent, or None
    """
    best_sim, best_pos, best_len = 0.0, -1, 0
    for signature_seq in signature.sequences:
        m = len(signature_seq)
        if m > len(sequence):
            continue
        k = min(SEED_LENGTH, m)
        for offset in sorted({0, (m - k) // 2, m - k}):
            seed = signature_seq[offset:offset + k]
            idx = sequence.find(seed)
            while idx >= 0:
                start = idx - offset
                if 0 <= start <= len(sequence) - m:
                    sim = _similarity(sequence, start, signature_seq)
                    if sim > best_sim:
                        best_sim, best_pos, best_len = sim, start, m
                idx = sequence.find(seed, idx + 1)

    if best_pos < 0 or best_sim < signature.min_similarity:
        return None

    center = best_pos + best_len // 2
    half = signature.length // 2
    return max(0, center - half), min(len(sequence), center + half), best_sim


def _already_annotated(existing: Sequence[Feature], signature_name: str) -> bool:
    wanted = signature_name.lower()
    key = wanted.split(' ')[0]
    for feature in existing:
        name = feature.name.lower()
        if name and (key in name or name in wanted):
            return True
    return False


def detect_features(
    sequence: str,
    existing: Iterable[Feature] = (),
    signatures: Optional[Iterable[FeatureSignature]] = None,
) -> List[Feature]:
    """
    Find known elements on both strands of a sequence.

    Signatures whose name matches an existing feature are skipped. When a signature
    hits both strands the stronger hit wins, forward on ties.

    Args:
        sequence: DNA sequence
        existing: Features already present on the construct
        signatures: Signature library (built-in library if None)

    Returns:
        New features in signature-library order
    """
    seq = validate_sequence(sequence)
    existing = list(existing)
    rc = reverse_complement(seq)
    n = len(seq)

    found = []
    for signature in (FEATURE_SIGNATURES if signatures is None else signatures):
        if _already_annotated(existing, signature.name):
            continue
        fwd = _search_strand(seq, signature)
        rev = _search_strand(rc, signature)
        if fwd is None and rev is None:
            continue
        if rev is None or (fwd is not None and fwd[2] >= rev[2]):
            found.append(Feature(signature.name, fwd[0], fwd[1], signature.feature_type, '+'))
        else:
            found.append(Feature(signature.name, n - rev[1], n - rev[0], signature.feature_type, '-'))
        logger.debug(f"Found {signature.name} at {found[-1].start}-{found[-1].end} ({found[-1].strand})")
    return found


def auto_annotate(
    construct: DnaConstruct,
    enzymes: Optional[Iterable[EnzymeDefinition]] = None,
    find_mcs: bool = True,
    signatures: Optional[Iterable[FeatureSignature]] = None,
    **mcs_options,
) -> DnaConstruct:
    """
    Copy of ``construct`` with detected elements and MCS added.

    Constructs shorter than 50 bp are returned unannotated. ``mcs_options``
    are passed to ``detect_mcs`` (window, min_sites, padding, enzyme
    filters, workers).
    """
    annotated = construct.copy()
    if construct.length < MIN_ANNOTATION_LENGTH:
        return annotated

    found = detect_features(construct.sequence, construct.features, signatures)
    annotated.features.extend(found)
    if found:
        logger.info(f"Annotated {len(found)} feature(s) in {construct.name}: "
                    f"{', '.join(f.name for f in found)}")

    if find_mcs:
        annotated = annotate_mcs(annotated, enzymes, **mcs_options)
    return annotated
