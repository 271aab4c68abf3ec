"""
TWL Matching Module

This module finds translation-word terms in Bible verse text and
assembles Translation Words List (TWL) output:
- A word-level trie over the term dictionary (longest match wins)
- Left-to-right, non-overlapping scanning of verse text
- Occurrence numbering of repeated words within a verse
- TSV rows per match, or a per-verse keyword map

Quick Start:
    from twl_matching import build_term_index, generate_twl_matches

    index = build_term_index(terms)
    tsv = generate_twl_matches(index, verses, book="rut")

    # Compact per-verse vocabulary
    keywords = generate_keywords_for_verses(index, verses)
"""

# Data types
from .base import (
    Token,
    TermEntry,
    MatchRecord,
    ResolvedMatch,
    Verse,
    VerseCorpus,
    tokenize,
    normalize_term,
)

# Errors
from .exceptions import (
    TWLError,
    TermIssue,
    TermValidationError,
)

# Index, matching and resolution
from .term_index import TermIndex, build_term_index, validate_dictionary
from .cache import TermIndexCache, dictionary_fingerprint
from .matcher import find_matches
from .resolver import resolve_occurrences

# Output
from .formats import TSVFormat, load_tsv_format
from .assembler import (
    TWLRow,
    generate_twl_rows,
    generate_twl_matches,
    generate_keywords_for_verses,
    keywords_to_json,
    render_tsv,
)

__all__ = [
    # Data types
    "Token",
    "TermEntry",
    "MatchRecord",
    "ResolvedMatch",
    "Verse",
    "VerseCorpus",
    "tokenize",
    "normalize_term",

    # Errors
    "TWLError",
    "TermIssue",
    "TermValidationError",

    # Core entry points
    "TermIndex",
    "build_term_index",
    "validate_dictionary",
    "TermIndexCache",
    "dictionary_fingerprint",
    "find_matches",
    "resolve_occurrences",

    # Output
    "TSVFormat",
    "load_tsv_format",
    "TWLRow",
    "generate_twl_rows",
    "generate_twl_matches",
    "generate_keywords_for_verses",
    "keywords_to_json",
    "render_tsv",
]
