"""
Data models for restriction digestion and construct editing.

Enzymes, cut sites and fragments are immutable values. A DnaConstruct is a
mutable aggregate, but every engine operation returns new constructs and
never edits its inputs, so a predecessor stays valid after a digest or a
cloning step.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from .alphabet import (
    CONCRETE_BASES,
    InvalidEnzymeDefinition,
    PatternMatcher,
    compile_strand_pair,
    reverse_complement,
    validate_sequence,
)
from ..utils.sequence import circular_slice


class OverhangType(Enum):
    """End geometry produced by an enzyme."""
    BLUNT = 'blunt'
    FIVE_PRIME = "5'"
    THREE_PRIME = "3'"


class OverhangDirection(Enum):
    """Direction of the single-stranded tail on a construct end."""
    NONE = 'none'
    FIVE_PRIME = "5'"
    THREE_PRIME = "3'"


class FeatureType(Enum):
    """Annotation categories for sequence features."""
    PROMOTER = 'promoter'
    TERMINATOR = 'terminator'
    RESISTANCE = 'resistance'
    ORIGIN = 'origin'
    MCS = 'mcs'
    GENE = 'gene'
    REPORTER = 'reporter'
    TAG = 'tag'
    ENHANCER = 'enhancer'
    POLYA = 'polya'
    MISC = 'misc'


@dataclass(frozen=True)
class DnaEnd:
    """
    Description of one end of a linear DNA molecule.

    Attributes:
        direction: Overhang direction (NONE for blunt ends)
        overhang_sequence: Top-strand bases of the single-stranded tail
        enzyme_name: Enzyme that produced the end, None for native ends
    """
    direction: OverhangDirection = OverhangDirection.NONE
    overhang_sequence: str = ''
    enzyme_name: Optional[str] = None

    @property
    def is_blunt(self) -> bool:
        return self.direction == OverhangDirection.NONE or not self.overhang_sequence

    def is_compatible_with(self, other: Optional['DnaEnd']) -> bool:
        """Check whether two ends can be ligated.

        Blunt ends ligate with blunt ends. Sticky ends need the same
        overhang direction and tails that anneal (reverse complements).
        """
        if other is None:
            return False
        if self.is_blunt and other.is_blunt:
            return True
        if self.is_blunt or other.is_blunt:
            return False
        if self.direction != other.direction:
            return False
        if len(self.overhang_sequence) != len(other.overhang_sequence):
            return False
        return self.overhang_sequence.upper() == reverse_complement(other.overhang_sequence.upper())

    def reverse_complement(self) -> 'DnaEnd':
        """The same end read from the opposite strand."""
        return replace(self, overhang_sequence=reverse_complement(self.overhang_sequence))

    def __str__(self) -> str:
        if self.is_blunt:
            return "Blunt"
        enzyme = f" ({self.enzyme_name})" if self.enzyme_name else ""
        return f"{self.direction.value} {self.overhang_sequence}{enzyme}"


@dataclass(frozen=True)
class EnzymeDefinition:
    """
    A restriction enzyme.

    Attributes:
        name: Enzyme name (e.g. "EcoRI")
        recognition_sequence: IUPAC recognition site, 5'->3'
        cut_offset_5: Top-strand nick, offset from the recognition start
        cut_offset_3: Bottom-strand nick, same coordinate frame
        type_iis: Allow cuts outside the recognition site (BsaI, SapI, ...)

    Example: EcoRI G^AATTC has cut_offset_5=1 and cut_offset_3=5, leaving
    a 4-nt 5' overhang AATT.
    """
    name: str
    recognition_sequence: str
    cut_offset_5: int
    cut_offset_3: int
    type_iis: bool = False

    def __post_init__(self):
        if not self.recognition_sequence:
            raise InvalidEnzymeDefinition(f"{self.name}: empty recognition sequence")
        object.__setattr__(
            self, 'recognition_sequence', validate_sequence(self.recognition_sequence)
        )
        length = len(self.recognition_sequence)
        for label, offset in (('cut_offset_5', self.cut_offset_5),
                              ('cut_offset_3', self.cut_offset_3)):
            if offset < 0 or (not self.type_iis and offset > length):
                raise InvalidEnzymeDefinition(
                    f"{self.name}: {label}={offset} outside [0, {length}]"
                )

    @property
    def length(self) -> int:
        return len(self.recognition_sequence)

    @property
    def overhang_type(self) -> OverhangType:
        if self.cut_offset_5 == self.cut_offset_3:
            return OverhangType.BLUNT
        if self.cut_offset_5 < self.cut_offset_3:
            return OverhangType.FIVE_PRIME
        return OverhangType.THREE_PRIME

    @property
    def overhang_direction(self) -> OverhangDirection:
        return {
            OverhangType.BLUNT: OverhangDirection.NONE,
            OverhangType.FIVE_PRIME: OverhangDirection.FIVE_PRIME,
            OverhangType.THREE_PRIME: OverhangDirection.THREE_PRIME,
        }[self.overhang_type]

    @property
    def overhang_length(self) -> int:
        return abs(self.cut_offset_5 - self.cut_offset_3)

    @property
    def overhang_sequence(self) -> str:
        """Overhang read from the recognition site.

        Empty for blunt cutters and for Type IIS enzymes whose tail lies
        outside the site (it depends on the flanking sequence there).
        """
        lo = min(self.cut_offset_5, self.cut_offset_3)
        hi = max(self.cut_offset_5, self.cut_offset_3)
        if lo == hi or hi > self.length:
            return ''
        return self.recognition_sequence[lo:hi]

    @property
    def is_ambiguous(self) -> bool:
        return any(base not in CONCRETE_BASES for base in self.recognition_sequence)

    @property
    def is_palindromic(self) -> bool:
        """Recognition site equals its own reverse complement (by base sets)."""
        forward, reverse = self.matchers()
        return forward.is_equivalent(reverse)

    def matchers(self) -> Tuple[PatternMatcher, PatternMatcher]:
        """Forward and reverse-complement matchers for this enzyme."""
        return compile_strand_pair(self.recognition_sequence)

    def __str__(self) -> str:
        return f"{self.name}: {self.recognition_sequence} ({self.overhang_type.name})"


@dataclass(frozen=True)
class Feature:
    """
    An annotated region of a construct.

    Coordinates are 0-based and half-open. On circular constructs a feature
    with ``start > end`` wraps through the origin: it covers
    ``[start, len)`` followed by ``[0, end)``.
    """
    name: str
    start: int
    end: int
    feature_type: FeatureType = FeatureType.MISC
    strand: str = '+'

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError(f"Feature {self.name}: negative coordinates ({self.start}, {self.end})")
        if self.strand not in ('+', '-'):
            raise ValueError(f"Feature {self.name}: strand must be '+' or '-', got {self.strand!r}")

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def length(self, circumference: Optional[int] = None) -> int:
        """Length in bp; wrapping features need the molecule length."""
        if not self.wraps:
            return self.end - self.start
        if circumference is None:
            raise ValueError(f"Feature {self.name} wraps the origin; circumference required")
        return (self.end - self.start) % circumference

    def contains(self, position: int) -> bool:
        """True if ``position`` lies within the feature (both ends inclusive)."""
        if self.wraps:
            return position >= self.start or position <= self.end
        return self.start <= position <= self.end


@dataclass
class DnaConstruct:
    """
    A DNA molecule (vector, insert or fragment) with its annotations.

    Attributes:
        name: Display name
        sequence: IUPAC sequence, upper-cased on construction
        is_circular: Topology
        features: Annotations owned by this construct
        end5: 5' end descriptor (linear molecules only)
        end3: 3' end descriptor (linear molecules only)
        source_name: Provenance, e.g. the parent construct name
    """
    name: str
    sequence: str
    is_circular: bool = False
    features: List[Feature] = field(default_factory=list)
    end5: Optional[DnaEnd] = None
    end3: Optional[DnaEnd] = None
    source_name: Optional[str] = None

    def __post_init__(self):
        self.sequence = validate_sequence(self.sequence)
        self.features = list(self.features)
        if self.is_circular and (self.end5 is not None or self.end3 is not None):
            raise ValueError(f"{self.name}: circular constructs have no free ends")
        for feature in self.features:
            self._check_feature(feature)

    def _check_feature(self, feature: Feature):
        n = len(self.sequence)
        if feature.wraps:
            if not self.is_circular:
                raise ValueError(
                    f"{self.name}: feature {feature.name} wraps the origin of a linear construct"
                )
            if feature.start >= n or feature.end > n:
                raise ValueError(
                    f"{self.name}: feature {feature.name} ({feature.start}, {feature.end}) "
                    f"outside sequence of {n} bp"
                )
        elif not 0 <= feature.start < feature.end <= n:
            raise ValueError(
                f"{self.name}: feature {feature.name} [{feature.start}, {feature.end}) "
                f"outside sequence of {n} bp"
            )

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def mcs_feature(self) -> Optional[Feature]:
        """First multiple-cloning-site annotation, if any."""
        return next((f for f in self.features if f.feature_type == FeatureType.MCS), None)

    def subsequence(self, start: int, end: int) -> str:
        """Sequence between two coordinates, wrapping on circular molecules."""
        if end > start:
            return self.sequence[start:end]
        if self.is_circular:
            return circular_slice(self.sequence, start, end)
        return ''

    def copy(self, **changes) -> 'DnaConstruct':
        """New construct with its own feature list; ``changes`` override fields."""
        values = {
            'name': self.name,
            'sequence': self.sequence,
            'is_circular': self.is_circular,
            'features': [replace(f) for f in self.features],
            'end5': self.end5,
            'end3': self.end3,
            'source_name': self.source_name,
        }
        values.update(changes)
        return DnaConstruct(**values)

    def __repr__(self) -> str:
        topology = 'circular' if self.is_circular else 'linear'
        return f"DnaConstruct(name={self.name}, {self.length} bp, {topology}, features={len(self.features)})"


@dataclass(frozen=True)
class CutSite:
    """
    A cleavage point on a sequence.

    Attributes:
        position: Top-strand nick, 0-based index of the first base after the cut
        enzyme_name: Enzyme responsible for the cut
        strand: '+' if the site was matched in forward orientation, '-' otherwise
        recognition_start: Start of the matched recognition window
        overhang: End produced by the cut, tail read from the actual sequence
    """
    position: int
    enzyme_name: str
    strand: str
    recognition_start: int
    overhang: DnaEnd = field(default_factory=DnaEnd)

    @property
    def overhang_length(self) -> int:
        return 0 if self.overhang.is_blunt else len(self.overhang.overhang_sequence)

    def __str__(self) -> str:
        return f"{self.enzyme_name} @ {self.position} ({self.overhang})"


@dataclass(frozen=True)
class Fragment:
    """
    A digestion product.

    Attributes:
        sequence: Fragment bases, contiguous (rotated for circular parents)
        start_position: Original coordinate of the first base
        end_position: Original coordinate after the last base (modular on circles)
        end5: End left by the cut at the fragment's 5' side, None for native ends
        end3: End left by the cut at the fragment's 3' side, None for native ends
    """
    sequence: str
    start_position: int
    end_position: int
    end5: Optional[DnaEnd] = None
    end3: Optional[DnaEnd] = None

    @property
    def size(self) -> int:
        return len(self.sequence)

    @property
    def enzyme5(self) -> Optional[str]:
        return self.end5.enzyme_name if self.end5 else None

    @property
    def enzyme3(self) -> Optional[str]:
        return self.end3.enzyme_name if self.end3 else None

    def __str__(self) -> str:
        return f"{self.size} bp ({self.start_position}-{self.end_position})"


@dataclass
class EnzymeAnalysis:
    """Cut-site report for one enzyme on one sequence."""
    enzyme: EnzymeDefinition
    cut_sites: List[CutSite] = field(default_factory=list)

    @property
    def cut_count(self) -> int:
        return len(self.cut_sites)

    @property
    def positions(self) -> List[int]:
        return [site.position for site in self.cut_sites]


@dataclass(frozen=True)
class SingleCutter:
    """An enzyme that cuts a sequence exactly once."""
    enzyme_name: str
    position: int
    overhang_length: int
    recognition_length: int


@dataclass(frozen=True)
class CloningCandidate:
    """An enzyme usable for inserting into a vector."""
    enzyme_name: str
    position: int
    overhang_length: int
    in_mcs: bool = False
