"""
Core data types for term matching
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union, Any
import re
import unicodedata

# Characters allowed between two tokens of one multi-word match
JOINER_RE = re.compile(r"[\s\-\u2010\u2011\u05be'\u2019\u02bc]*")


@dataclass(frozen=True)
class Token:
    """A word token with its character span in the source text"""
    text: str
    normalized: str
    start: int
    end: int


def is_word_char(ch: str) -> bool:
    """Letters, digits, underscore, and combining marks of any script"""
    return ch.isalnum() or ch == "_" or unicodedata.category(ch).startswith("M")


def normalize_token(word: str) -> str:
    return unicodedata.normalize("NFC", word.casefold())


def _make_token(text: str, start: int, end: int) -> Token:
    word = text[start:end]
    return Token(word, normalize_token(word), start, end)


def tokenize(text: str) -> List[Token]:
    """
    Split text into word tokens, keeping original offsets.

    A word is a run of word characters. Vowel points, cantillation,
    vowel signs and viramas stay inside the word they belong to.
    """
    if not text:
        return []

    tokens = []
    start = None
    for i, ch in enumerate(text):
        if is_word_char(ch):
            if start is None:
                start = i
        elif start is not None:
            tokens.append(_make_token(text, start, i))
            start = None
    if start is not None:
        tokens.append(_make_token(text, start, len(text)))
    return tokens


def normalize_term(term: str) -> Tuple[str, ...]:
    """Case-folded word tokens of a dictionary term"""
    return tuple(token.normalized for token in tokenize(term))


def is_joined(text: str, left: Token, right: Token) -> bool:
    """Whether two adjacent tokens may belong to the same phrase"""
    return JOINER_RE.fullmatch(text, left.end, right.start) is not None


@dataclass(frozen=True)
class TermEntry:
    """A dictionary term as stored in the index"""
    term: str                      # original dictionary key, first seen casing
    tokens: Tuple[str, ...]        # normalized word tokens
    articles: Tuple[str, ...]      # article references, never empty

    @property
    def key(self) -> str:
        return " ".join(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True)
class MatchRecord:
    """
    A dictionary term found in a verse

    Attributes:
        surface: Exact text of the verse spanned by the match
        term: Dictionary term that matched (display form)
        key: Normalized term key
        start: Character offset of the match in the verse text
        end: Character offset just past the match
        context: Surrounding text with the match in brackets
        articles: Article references of the term
    """
    surface: str
    term: str
    key: str
    start: int
    end: int
    context: str = ""
    articles: Tuple[str, ...] = ()

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            'surface': self.surface,
            'term': self.term,
            'key': self.key,
            'start': self.start,
            'end': self.end,
            'context': self.context,
            'articles': list(self.articles)
        }


@dataclass(frozen=True)
class ResolvedMatch:
    """A match annotated with its occurrence number within the verse"""
    record: MatchRecord
    occurrence: int

    @property
    def surface(self) -> str:
        return self.record.surface

    @property
    def term(self) -> str:
        return self.record.term

    @property
    def start(self) -> int:
        return self.record.start

    @property
    def end(self) -> int:
        return self.record.end

    @property
    def context(self) -> str:
        return self.record.context

    @property
    def articles(self) -> Tuple[str, ...]:
        return self.record.articles

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data['occurrence'] = self.occurrence
        return data


@dataclass(frozen=True)
class Verse:
    """One verse of plain text"""
    chapter: str
    verse: str
    text: str = ""

    @property
    def reference(self) -> str:
        return f"{self.chapter}:{self.verse}"


VerseInput = Union["VerseCorpus", Mapping[Any, Mapping[Any, str]], Iterable[Tuple[Any, Any, str]]]


@dataclass
class VerseCorpus:
    """
    Verses of a book in document order

    Iteration order is the order the verses were added, which is the
    order every assembled output follows.
    """
    verses: List[Verse] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, chapters: Mapping[Any, Mapping[Any, str]]) -> "VerseCorpus":
        """Build from a {chapter: {verse: text}} mapping, keeping its order"""
        verses = []
        for chapter, chapter_verses in chapters.items():
            for verse, text in chapter_verses.items():
                verses.append(Verse(str(chapter), str(verse), text or ""))
        return cls(verses)

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[Any, Any, str]]) -> "VerseCorpus":
        """Build from (chapter, verse, text) triples"""
        return cls([Verse(str(c), str(v), t or "") for c, v, t in triples])

    @classmethod
    def coerce(cls, verses: VerseInput) -> "VerseCorpus":
        if isinstance(verses, VerseCorpus):
            return verses
        if isinstance(verses, Mapping):
            return cls.from_mapping(verses)
        return cls.from_triples(verses)

    def add(self, chapter: Any, verse: Any, text: str) -> None:
        self.verses.append(Verse(str(chapter), str(verse), text or ""))

    def chapters(self) -> List[str]:
        """Chapter keys in document order"""
        seen = {}
        for verse in self.verses:
            seen.setdefault(verse.chapter, None)
        return list(seen)

    def __iter__(self) -> Iterator[Verse]:
        return iter(self.verses)

    def __len__(self) -> int:
        return len(self.verses)
