"""
Top-strand scanning of compiled recognition patterns.

Circular molecules are scanned as if the first ``len(pattern) - 1`` bases
were appended to the end, so a site spanning the origin is found once with
its start reported in ``[0, len(sequence))``.
"""

from typing import Iterator

from .alphabet import PatternMatcher


class MatchScan:
    """
    Ascending match starts of a pattern on a sequence.

    The scan is lazy and restartable: every iteration rescans from the
    beginning, so the same object can be consumed several times.
    """

    def __init__(self, sequence: str, matcher: PatternMatcher, circular: bool = False):
        self.sequence = sequence
        self.matcher = matcher
        self.circular = circular

    def __iter__(self) -> Iterator[int]:
        return _iter_match_starts(self.sequence, self.matcher, self.circular)

    def __repr__(self) -> str:
        topology = 'circular' if self.circular else 'linear'
        return f"MatchScan({self.matcher.symbols}, {len(self.sequence)} bp, {topology})"


def scan(sequence: str, matcher: PatternMatcher, circular: bool = False) -> MatchScan:
    """
    Find all windows of ``sequence`` matched by ``matcher``.

    Args:
        sequence: Validated, upper-case sequence
        matcher: Compiled pattern (forward or reverse-complement)
        circular: Also test windows that cross the origin

    Returns:
        Restartable iterable of 0-based match starts, ascending
    """
    return MatchScan(sequence, matcher, circular)


def _iter_match_starts(sequence: str, matcher: PatternMatcher, circular: bool) -> Iterator[int]:
    n = len(sequence)
    m = len(matcher)
    # A circular molecule can hold a site at most one circumference long.
    if n == 0 or m == 0 or m > n:
        return

    text = sequence + sequence[:m - 1] if circular else sequence
    first = matcher.base_sets[0]
    seen = set()

    for start in range(len(text) - m + 1):
        if text[start] not in first or not matcher.matches_at(text, start):
            continue
        normalized = start - n if start >= n else start
        if normalized in seen:
            continue
        seen.add(normalized)
        yield normalized
