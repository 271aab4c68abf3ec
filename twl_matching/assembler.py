"""
Output Assembler

Turns a term dictionary and a book's verses into TWL output:

- TSV mode: one row per match, every occurrence reported
- Keyword mode: per-verse list of distinct surface texts with their lemma

Both outputs follow verse document order, and matches within a verse
follow their position in the text.
"""
import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .base import ResolvedMatch, Verse, VerseCorpus, VerseInput
from .cache import TermIndexCache
from .formats import TSVFormat, article_link, article_tags, clean_cell, load_tsv_format, short_article_name
from .matcher import find_matches
from .resolver import resolve_occurrences
from .term_index import TermIndex, build_term_index
from config import settings
from logger import get_logger

logger = get_logger(__name__)

TermsInput = Union[TermIndex, Mapping[str, Sequence[str]]]

ID_FIRST_CHARS = "abcdefghijklmnopqrstuvwxyz"
ID_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


@dataclass
class TWLRow:
    """One TSV row of a translation words list"""
    book: str
    chapter: str
    verse: str
    row_id: str
    tags: str
    orig_words: str
    occurrence: int
    gl_quote: str
    note: str
    link: str

    def to_cells(self) -> List[str]:
        return [
            clean_cell(value) for value in (
                self.book, self.chapter, self.verse, self.row_id, self.tags,
                self.orig_words, self.occurrence, self.gl_quote, self.note, self.link
            )
        ]

    def to_line(self) -> str:
        return "\t".join(self.to_cells())


def resolve_index(terms: TermsInput, cache: Optional[TermIndexCache] = None) -> TermIndex:
    """Accept a built index or a raw dictionary"""
    if isinstance(terms, TermIndex):
        return terms
    if cache is not None:
        return cache.get_or_build(terms)
    return build_term_index(terms)


def iter_resolved_verses(
    index: TermIndex,
    verses: VerseInput,
    context_window: Optional[int] = None
) -> Iterator[Tuple[Verse, List[ResolvedMatch]]]:
    """Match and resolve each verse in document order"""
    for verse in VerseCorpus.coerce(verses):
        matches = find_matches(verse.text, index, context_window)
        yield verse, resolve_occurrences(matches)


def generate_row_id(
    book: str,
    chapter: str,
    verse: str,
    surface: str,
    occurrence: int,
    taken: Set[str]
) -> str:
    """
    Four-character row ID, derived from the row's location.

    Starts with a letter and is unique among the IDs in taken, which is
    updated with the new ID.
    """
    salt = 0
    while True:
        seed = f"{book}|{chapter}|{verse}|{surface}|{occurrence}|{salt}"
        digest = hashlib.sha1(seed.encode("utf-8")).digest()
        row_id = ID_FIRST_CHARS[digest[0] % len(ID_FIRST_CHARS)] + "".join(
            ID_CHARS[b % len(ID_CHARS)] for b in digest[1:4]
        )
        if row_id not in taken:
            taken.add(row_id)
            return row_id
        salt += 1


def generate_twl_rows(
    terms: TermsInput,
    verses: VerseInput,
    book: str = "",
    cache: Optional[TermIndexCache] = None,
    fmt: Optional[TSVFormat] = None,
    context_window: Optional[int] = None
) -> List[TWLRow]:
    """
    Build one TWLRow for every match in a book

    Args:
        terms: Term dictionary or a prebuilt TermIndex
        verses: {chapter: {verse: text}} mapping, triples or a VerseCorpus
        book: Book code written into every row
        cache: Optional index cache shared across books
        fmt: TSV formatting rules (default: settings.tsv_format_file)
        context_window: Characters of context around each match

    Returns:
        Rows ordered by verse, then by match position
    """
    index = resolve_index(terms, cache)
    if fmt is None:
        fmt = load_tsv_format(settings.tsv_format_file)
    book = (book or "").upper()

    rows = []
    taken: Set[str] = set()
    for verse, resolved in iter_resolved_verses(index, verses, context_window):
        for match in resolved:
            primary = match.articles[0]
            note = ""
            if len(match.articles) > 1:
                note = "Disambiguation: " + ", ".join(short_article_name(a) for a in match.articles)

            rows.append(TWLRow(
                book=book,
                chapter=verse.chapter,
                verse=verse.verse,
                row_id=generate_row_id(book, verse.chapter, verse.verse, match.surface, match.occurrence, taken),
                tags=article_tags(primary, fmt),
                orig_words=match.surface,
                occurrence=match.occurrence,
                gl_quote=match.context,
                note=note,
                link=article_link(primary, fmt)
            ))

    return rows


def render_tsv(rows: List[TWLRow], fmt: Optional[TSVFormat] = None, include_header: bool = True) -> str:
    """Join rows into a TSV document without a trailing newline"""
    fmt = fmt or TSVFormat()
    lines = [fmt.header] if include_header else []
    lines.extend(row.to_line() for row in rows)
    return "\n".join(lines)


def generate_twl_matches(
    terms: TermsInput,
    verses: VerseInput,
    book: str = "",
    cache: Optional[TermIndexCache] = None,
    fmt: Optional[TSVFormat] = None,
    include_header: Optional[bool] = None,
    context_window: Optional[int] = None
) -> str:
    """
    Generate the TSV translation words list for a book

    Returns:
        TSV document with one line per match, after an optional header
    """
    if fmt is None:
        fmt = load_tsv_format(settings.tsv_format_file)
    if include_header is None:
        include_header = settings.tsv_include_header

    rows = generate_twl_rows(terms, verses, book=book, cache=cache, fmt=fmt, context_window=context_window)
    logger.info(f"Found {len(rows)} matches" + (f" in {book.upper()}" if book else ""))
    return render_tsv(rows, fmt, include_header)


def generate_keywords_for_verses(
    terms: TermsInput,
    verses: VerseInput,
    cache: Optional[TermIndexCache] = None,
    context_window: Optional[int] = None
) -> Dict[str, List[Dict[str, str]]]:
    """
    Per-verse keywords with lemmas

    Every verse gets an entry keyed "chapter:verse". Each distinct surface
    text is listed once, at its first position in the verse.

    Returns:
        {"C:V": [{"surface": ..., "lemma": ...}, ...], ...}
    """
    index = resolve_index(terms, cache)
    result: Dict[str, List[Dict[str, str]]] = {}
    total = 0

    for verse in VerseCorpus.coerce(verses):
        matches = sorted(find_matches(verse.text, index, context_window), key=lambda m: m.start)

        seen = set()
        entries = []
        for match in matches:
            if match.surface in seen:
                continue
            seen.add(match.surface)
            entries.append({"surface": match.surface, "lemma": match.term})

        result[verse.reference] = entries
        total += len(entries)

    logger.info(f"Generated {total} keywords for {len(result)} verses")
    return result


def keywords_to_json(dataset: Dict[str, Any]) -> str:
    """Render a keyword dataset as JSON"""
    return json.dumps(dataset, indent=2, ensure_ascii=False)
