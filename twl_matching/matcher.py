"""
Term matcher for finding dictionary terms in verse text.
"""

import re
from typing import List, Optional

from .base import MatchRecord, Token, is_joined, tokenize
from .term_index import TermIndex
from config import settings

_WHITESPACE_RE = re.compile(r"\s+")


def _phrase_ends(text: str, tokens: List[Token]) -> List[int]:
    """
    For each token, the index one past the last token a phrase starting
    there may reach without crossing phrase-breaking punctuation.
    """
    count = len(tokens)
    ends = [count] * count
    for i in range(count - 2, -1, -1):
        if is_joined(text, tokens[i], tokens[i + 1]):
            ends[i] = ends[i + 1]
        else:
            ends[i] = i + 1
    return ends


def build_context(text: str, start: int, end: int, window: int) -> str:
    """Text around a match, with the match itself in brackets"""
    before = _WHITESPACE_RE.sub(" ", text[max(0, start - window):start])
    after = _WHITESPACE_RE.sub(" ", text[end:end + window])
    return f"{before}[{text[start:end]}]{after}".strip()


def find_matches(
    text: str,
    index: TermIndex,
    context_window: Optional[int] = None
) -> List[MatchRecord]:
    """
    Find all dictionary terms in a text.

    Scans token positions left to right. At each position the longest
    term starting there wins and the scan resumes after it, so matches
    never overlap. Matching is case-insensitive; records keep the
    text's own casing.

    Args:
        text: Plain verse text
        index: Term index to match against
        context_window: Characters of context on each side of a match

    Returns:
        Match records ordered by start offset
    """
    if context_window is None:
        context_window = settings.context_window

    tokens = tokenize(text or "")
    if not tokens or not len(index):
        return []

    normalized = [token.normalized for token in tokens]
    ends = _phrase_ends(text, tokens)

    matches = []
    i = 0
    while i < len(tokens):
        entry = index.lookup(normalized, i, ends[i])
        if entry is None:
            i += 1
            continue

        start = tokens[i].start
        end = tokens[i + len(entry) - 1].end
        matches.append(MatchRecord(
            surface=text[start:end],
            term=entry.term,
            key=entry.key,
            start=start,
            end=end,
            context=build_context(text, start, end, context_window),
            articles=entry.articles
        ))
        i += len(entry)

    return matches
