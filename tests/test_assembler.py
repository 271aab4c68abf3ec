"""
Tests for TSV and keyword output assembly
"""
import json

import pytest

from twl_matching.assembler import (
    generate_keywords_for_verses,
    generate_row_id,
    generate_twl_matches,
    generate_twl_rows,
    iter_resolved_verses,
    keywords_to_json,
    render_tsv,
)
from twl_matching.base import VerseCorpus
from twl_matching.cache import TermIndexCache
from twl_matching.formats import DEFAULT_COLUMNS, TSVFormat
from twl_matching.term_index import TermIndex


@pytest.fixture
def terms():
    return {
        "son of god": ["articles/kt/sonofgod"],
        "god": ["articles/kt/god"],
        "Boaz": ["bible/names/boaz"],
        "field": ["bible/other/field", "bible/other/open"],
    }


@pytest.fixture
def verses():
    return {
        "1": {
            "1": "He is the Son of God and God is good.",
            "2": "Boaz went to the field.",
            "3": "",
        },
        "2": {
            "1": "God and God and the Son of God",
        },
    }


class TestTSVMode:
    """One row per match"""

    def test_header_and_row_count(self, terms, verses):
        tsv = generate_twl_matches(terms, verses, book="rut", include_header=True)
        lines = tsv.split("\n")

        assert lines[0] == "\t".join(DEFAULT_COLUMNS)
        # 2 + 2 + 0 + 3 matches
        assert len(lines) - 1 == 7
        assert not tsv.endswith("\n")

    def test_row_columns(self, terms, verses):
        tsv = generate_twl_matches(terms, verses, book="rut", include_header=False)
        first = tsv.split("\n")[0].split("\t")

        assert len(first) == 10
        book, chapter, verse, row_id, tags, words, occurrence, quote, note, link = first
        assert (book, chapter, verse) == ("RUT", "1", "1")
        assert len(row_id) == 4 and row_id[0].isalpha() and row_id.islower()
        assert tags == "keyterm"
        assert words == "Son of God"
        assert occurrence == "1"
        assert "[Son of God]" in quote
        assert note == ""
        assert link == "rc://*/tw/dict/bible/kt/sonofgod"

    def test_rows_in_document_order(self, terms, verses):
        rows = generate_twl_rows(terms, verses, book="rut")
        assert [(r.chapter, r.verse, r.orig_words, r.occurrence) for r in rows] == [
            ("1", "1", "Son of God", 1),
            ("1", "1", "God", 1),
            ("1", "2", "Boaz", 1),
            ("1", "2", "field", 1),
            ("2", "1", "God", 1),
            ("2", "1", "God", 2),
            ("2", "1", "Son of God", 1),
        ]

    def test_mapping_order_is_kept(self, terms):
        verses = {"10": {"1": "God"}, "2": {"1": "God"}}
        rows = generate_twl_rows(terms, verses)
        assert [r.chapter for r in rows] == ["10", "2"]

    def test_tags_and_disambiguation(self, terms, verses):
        rows = generate_twl_rows(terms, verses, book="rut")
        boaz, field = rows[2], rows[3]

        assert boaz.tags == "name"
        assert boaz.link == "rc://*/tw/dict/bible/names/boaz"
        assert field.tags == ""
        assert field.note == "Disambiguation: other/field, other/open"
        assert field.link == "rc://*/tw/dict/bible/other/field"

    def test_row_ids_unique_and_deterministic(self, terms, verses):
        first = generate_twl_rows(terms, verses, book="rut")
        second = generate_twl_rows(terms, verses, book="rut")
        ids = [r.row_id for r in first]

        assert len(set(ids)) == len(ids)
        assert ids == [r.row_id for r in second]

    def test_deterministic_document(self, terms, verses):
        assert generate_twl_matches(terms, verses, book="rut") == generate_twl_matches(terms, verses, book="rut")

    def test_empty_corpus(self, terms):
        assert generate_twl_matches(terms, {}, include_header=True) == "\t".join(DEFAULT_COLUMNS)
        assert generate_twl_matches(terms, {}, include_header=False) == ""

    def test_verse_without_matches(self, terms):
        assert generate_twl_rows(terms, {"1": {"1": "", "2": "nothing here"}}) == []

    def test_accepts_triples_and_corpus(self, terms):
        triples = [("1", "1", "God"), ("1", "2", "Boaz")]
        from_triples = generate_twl_rows(terms, triples)
        from_corpus = generate_twl_rows(terms, VerseCorpus.from_triples(triples))
        assert [r.orig_words for r in from_triples] == ["God", "Boaz"]
        assert from_triples == from_corpus

    def test_custom_format(self, terms):
        fmt = TSVFormat(
            link_template="https://example.org/tw/{path}.md",
            columns=[c.lower() for c in DEFAULT_COLUMNS]
        )
        tsv = generate_twl_matches(terms, {"1": {"1": "God"}}, fmt=fmt, include_header=True)
        header, row = tsv.split("\n")
        assert header.startswith("book\tchapter")
        assert row.endswith("https://example.org/tw/kt/god.md")


class TestRowIds:
    """Row ID generation"""

    def test_collision_is_avoided(self):
        taken = set()
        first = generate_row_id("RUT", "1", "1", "God", 1, taken)
        again = generate_row_id("RUT", "1", "1", "God", 1, taken)
        assert first != again
        assert taken == {first, again}

    def test_render_tsv_without_rows(self):
        assert render_tsv([], include_header=False) == ""


class TestKeywordMode:
    """Per-verse distinct keywords"""

    def test_example_verse(self, terms):
        result = generate_keywords_for_verses(terms, {"1": {"1": "He is the Son of God and God is good."}})
        assert result == {
            "1:1": [
                {"surface": "Son of God", "lemma": "son of god"},
                {"surface": "God", "lemma": "god"},
            ]
        }

    def test_every_verse_has_a_key(self, terms, verses):
        result = generate_keywords_for_verses(terms, verses)
        assert list(result) == ["1:1", "1:2", "1:3", "2:1"]
        assert result["1:3"] == []

    def test_dedup_keeps_first_position(self, terms, verses):
        result = generate_keywords_for_verses(terms, verses)
        assert result["2:1"] == [
            {"surface": "God", "lemma": "god"},
            {"surface": "Son of God", "lemma": "son of god"},
        ]

    def test_dedup_law_against_tsv_mode(self, terms, verses):
        keywords = generate_keywords_for_verses(terms, verses)
        index = TermIndex.build(terms)

        for verse, resolved in iter_resolved_verses(index, verses):
            entries = keywords[verse.reference]
            surfaces = [e["surface"] for e in entries]
            assert len(surfaces) == len(set(surfaces))

            for entry in entries:
                first = next(m for m in resolved if m.surface == entry["surface"])
                assert entry["lemma"] == first.term

    def test_surface_dedup_is_case_sensitive(self, terms):
        result = generate_keywords_for_verses(terms, {"1": {"1": "God and god"}})
        assert [e["surface"] for e in result["1:1"]] == ["God", "god"]

    def test_empty_corpus(self, terms):
        assert generate_keywords_for_verses(terms, {}) == {}

    def test_json_rendering(self, terms):
        result = generate_keywords_for_verses({"Élohim": ["bible/kt/god"]}, {"1": {"1": "Élohim"}})
        text = keywords_to_json(result)
        assert "Élohim" in text
        assert json.loads(text) == {"1:1": [{"surface": "Élohim", "lemma": "Élohim"}]}


class TestIndexReuse:
    """Index built once and shared across books"""

    def test_prebuilt_index(self, terms, verses):
        index = TermIndex.build(terms)
        assert generate_twl_matches(index, verses) == generate_twl_matches(terms, verses)

    def test_cache_shared_across_books(self, terms):
        cache = TermIndexCache(maxsize=2)
        generate_twl_matches(terms, {"1": {"1": "God"}}, book="gen", cache=cache)
        generate_keywords_for_verses(terms, {"1": {"1": "Boaz"}}, cache=cache)

        stats = cache.get_stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 1
        assert len(cache) == 1
