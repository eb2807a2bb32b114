"""
IUPAC nucleotide alphabet and recognition-pattern compilation.

Each recognition symbol is expanded to the set of concrete bases it stands
for, and a pattern is matched position by position with a set-membership
test. The reverse-complement pattern is built by complementing every base
set and reversing the order, so a single top-strand scan can detect sites
in both orientations.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple


IUPAC_BASES = {
    'A': frozenset('A'),
    'C': frozenset('C'),
    'G': frozenset('G'),
    'T': frozenset('T'),
    'R': frozenset('AG'),    # puRine
    'Y': frozenset('CT'),    # pYrimidine
    'M': frozenset('AC'),    # aMino
    'K': frozenset('GT'),    # Keto
    'S': frozenset('CG'),    # Strong
    'W': frozenset('AT'),    # Weak
    'H': frozenset('ACT'),   # not G
    'B': frozenset('CGT'),   # not A
    'V': frozenset('ACG'),   # not T
    'D': frozenset('AGT'),   # not C
    'N': frozenset('ACGT'),  # aNy
}

COMPLEMENT = {
    'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G',
    'R': 'Y', 'Y': 'R', 'M': 'K', 'K': 'M',
    'S': 'S', 'W': 'W', 'H': 'D', 'D': 'H',
    'B': 'V', 'V': 'B', 'N': 'N',
}

VALID_SYMBOLS = frozenset(IUPAC_BASES)
CONCRETE_BASES = frozenset('ACGT')


class InvalidSequence(ValueError):
    """Raised when a sequence contains characters outside the IUPAC DNA alphabet."""


class InvalidEnzymeDefinition(ValueError):
    """Raised when an enzyme's cut offsets or recognition sequence are malformed."""


def validate_sequence(seq: str) -> str:
    """Upper-case a sequence and reject anything outside the IUPAC alphabet.

    Raises:
        InvalidSequence: If a character is not an IUPAC DNA code
    """
    upper = seq.upper()
    invalid = sorted(set(upper) - VALID_SYMBOLS)
    if invalid:
        shown = ', '.join(repr(c) for c in invalid[:10])
        raise InvalidSequence(f"Sequence contains non-IUPAC characters: {shown}")
    return upper


def reverse_complement(seq: str) -> str:
    """Return the reverse complement of an IUPAC DNA sequence.

    Case is preserved, ambiguity codes map to their complementary code
    (R <-> Y, B <-> V, N -> N, ...).
    """
    out = []
    for base in reversed(seq):
        comp = COMPLEMENT.get(base.upper())
        if comp is None:
            raise InvalidSequence(f"Cannot complement non-IUPAC character: {base!r}")
        out.append(comp if base.isupper() else comp.lower())
    return ''.join(out)


def complement_set(bases: FrozenSet[str]) -> FrozenSet[str]:
    """Complement every base of a concrete base set."""
    return frozenset(COMPLEMENT[b] for b in bases)


@dataclass(frozen=True)
class PatternMatcher:
    """Compiled recognition pattern: one allowed-base set per position."""
    symbols: str
    base_sets: Tuple[FrozenSet[str], ...]

    def __len__(self) -> int:
        return len(self.base_sets)

    def matches_at(self, text: str, start: int) -> bool:
        """Test the window of ``text`` beginning at ``start``.

        The caller guarantees the window lies inside ``text``.
        """
        for offset, allowed in enumerate(self.base_sets):
            if text[start + offset] not in allowed:
                return False
        return True

    def reverse_complement(self) -> 'PatternMatcher':
        """Matcher for the opposite strand's reading of this pattern."""
        return PatternMatcher(
            symbols=reverse_complement(self.symbols),
            base_sets=tuple(complement_set(s) for s in reversed(self.base_sets)),
        )

    def is_equivalent(self, other: 'PatternMatcher') -> bool:
        """True if both matchers accept exactly the same windows."""
        return self.base_sets == other.base_sets

    @property
    def is_ambiguous(self) -> bool:
        return any(len(s) > 1 for s in self.base_sets)


def compile_pattern(recognition_sequence: str) -> PatternMatcher:
    """Compile an IUPAC recognition sequence into a position-wise matcher.

    Raises:
        InvalidSequence: If the pattern is empty or not IUPAC
    """
    symbols = validate_sequence(recognition_sequence)
    if not symbols:
        raise InvalidSequence("Recognition sequence must not be empty")
    return PatternMatcher(
        symbols=symbols,
        base_sets=tuple(IUPAC_BASES[s] for s in symbols),
    )


def compile_strand_pair(recognition_sequence: str) -> Tuple[PatternMatcher, PatternMatcher]:
    """Return (forward, reverse-complement) matchers for a recognition sequence."""
    forward = compile_pattern(recognition_sequence)
    return forward, forward.reverse_complement()
