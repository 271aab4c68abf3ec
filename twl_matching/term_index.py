"""
Term Index

A word-level trie over the normalized tokens of every dictionary term.
Built once per batch and shared read-only by every verse scan.

Example:
    index = build_term_index({"son of god": ["bible/kt/sonofgod"]})
    entry = index.lookup(["son", "of", "god", "and"])
    # entry.term == "son of god", len(entry) == 3
"""
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .base import TermEntry, normalize_term
from .exceptions import TermIssue, TermValidationError
from config import settings
from logger import get_logger

logger = get_logger(__name__)


class _TrieNode:
    __slots__ = ("children", "entry")

    def __init__(self):
        self.children: Dict[str, "_TrieNode"] = {}
        self.entry: Optional[TermEntry] = None


def _check_entry(term: Any, articles: Any) -> Tuple[Optional[str], Tuple[str, ...]]:
    """Return (reason, tokens); reason is None for a valid entry"""
    if not isinstance(term, str):
        return f"term must be a string, got {type(term).__name__}", ()
    if not term.strip():
        return "term is empty", ()

    tokens = normalize_term(term)
    if not tokens:
        return "term contains no words", ()

    if not isinstance(articles, (list, tuple)):
        return f"articles must be a list, got {type(articles).__name__}", tokens
    if not articles:
        return "term has no articles", tokens
    for article in articles:
        if not isinstance(article, str) or not article.strip():
            return f"invalid article reference {article!r}", tokens

    return None, tokens


def validate_dictionary(dictionary: Mapping[Any, Any]) -> List[TermIssue]:
    """
    Check a term dictionary without building an index

    Args:
        dictionary: Mapping of term -> list of article references

    Returns:
        List of issues, empty when every entry is valid
    """
    issues = []
    for term, articles in dictionary.items():
        reason, _ = _check_entry(term, articles)
        if reason:
            issues.append(TermIssue(term, reason))
    return issues


class TermIndex:
    """
    Longest-match lookup structure for dictionary terms

    Each trie path of normalized tokens ends in at most one TermEntry.
    Terms whose keys normalize to the same tokens share that entry and
    their article lists are merged.
    """

    def __init__(self):
        self._root = _TrieNode()
        self._entries: Dict[Tuple[str, ...], TermEntry] = {}
        self._max_length = 0

    @classmethod
    def build(
        cls,
        dictionary: Mapping[str, Sequence[str]],
        skip_invalid: bool = False
    ) -> "TermIndex":
        """
        Build an index from a term -> articles mapping

        Args:
            dictionary: Mapping of term -> non-empty list of article references
            skip_invalid: Drop invalid entries instead of raising

        Returns:
            A populated TermIndex

        Raises:
            TermValidationError: If any entry is invalid and skip_invalid is False
        """
        index = cls()
        issues = []
        merged = 0

        for term, articles in dictionary.items():
            reason, tokens = _check_entry(term, articles)
            if reason:
                issues.append(TermIssue(term, reason))
                continue
            if index._insert(term.strip(), tokens, articles):
                merged += 1

        if issues:
            if not skip_invalid:
                raise TermValidationError(issues)
            logger.warning(f"Skipped {len(issues)} invalid dictionary entries")
            for issue in issues:
                logger.debug(f"Skipped term {issue}")

        logger.info(
            f"Built term index with {len(index)} terms "
            f"(merged {merged}, longest {index.max_term_length} words)"
        )
        return index

    def _insert(self, term: str, tokens: Tuple[str, ...], articles: Sequence[str]) -> bool:
        """Add a term; returns True if it merged into an existing entry"""
        node = self._root
        for token in tokens:
            child = node.children.get(token)
            if child is None:
                child = _TrieNode()
                node.children[token] = child
            node = child

        if node.entry is None:
            node.entry = TermEntry(term, tokens, tuple(dict.fromkeys(articles)))
            self._entries[tokens] = node.entry
            self._max_length = max(self._max_length, len(tokens))
            return False

        existing = node.entry
        node.entry = TermEntry(
            existing.term,
            tokens,
            tuple(dict.fromkeys(existing.articles + tuple(articles)))
        )
        self._entries[tokens] = node.entry
        logger.debug(f"Merged term '{term}' into '{existing.term}'")
        return True

    def lookup(
        self,
        tokens: Sequence[str],
        start: int = 0,
        end: Optional[int] = None
    ) -> Optional[TermEntry]:
        """
        Find the longest term matching the token sequence at a position

        Args:
            tokens: Normalized tokens
            start: Position in tokens where the match must begin
            end: Position the match may not extend past (default: len(tokens))

        Returns:
            Longest matching TermEntry, or None
        """
        if end is None:
            end = len(tokens)

        node = self._root
        best = None
        for i in range(start, end):
            node = node.children.get(tokens[i])
            if node is None:
                break
            if node.entry is not None:
                best = node.entry
        return best

    def get(self, term: str) -> Optional[TermEntry]:
        """Get the entry for a term, matched case-insensitively"""
        return self._entries.get(normalize_term(term))

    @property
    def max_term_length(self) -> int:
        """Number of words in the longest term"""
        return self._max_length

    def __contains__(self, term: str) -> bool:
        return self.get(term) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TermEntry]:
        return iter(self._entries.values())


def build_term_index(
    dictionary: Mapping[str, Sequence[str]],
    skip_invalid: Optional[bool] = None
) -> TermIndex:
    """Build a TermIndex, taking the invalid-entry policy from settings by default"""
    if skip_invalid is None:
        skip_invalid = settings.skip_invalid_terms
    return TermIndex.build(dictionary, skip_invalid=skip_invalid)
