"""
Occurrence numbering for the matches of one verse
"""
from collections import Counter
from typing import List

from .base import MatchRecord, ResolvedMatch


def resolve_occurrences(matches: List[MatchRecord]) -> List[ResolvedMatch]:
    """
    Number repeated surface texts within a verse.

    The n-th match (left to right) whose surface text equals an earlier
    one, ignoring case, gets occurrence n. Input must be ordered by start
    offset, as find_matches returns it.

    The number counts match records, not appearances of the surface text
    in the verse. Words consumed by a longer phrase are not counted, so
    this can differ from the translation-words convention of the n-th
    occurrence of OrigWords in the verse text. In "Son of God and God"
    the standalone "God" is occurrence 1, while a reader counting raw
    text would call it occurrence 2.
    """
    seen = Counter()
    resolved = []
    for match in matches:
        surface_key = match.surface.casefold()
        seen[surface_key] += 1
        resolved.append(ResolvedMatch(match, seen[surface_key]))
    return resolved
