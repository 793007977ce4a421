"""Unit tests for exact and whitespace-tolerant span matching."""

from hemingway.models.edit import Span
from hemingway.services.text_matcher import (
    entity_variants,
    find_all_spans,
    find_spans,
    normalize_whitespace,
)


class TestNormalizeWhitespace:
    """Test whitespace normalization."""

    def test_collapses_and_trims(self):
        assert normalize_whitespace("  Hello \n\t  world  ") == "Hello world"

    def test_non_breaking_space_is_whitespace(self):
        assert normalize_whitespace("Hello\u00a0world") == "Hello world"


class TestEntityVariants:
    """Test entity/quote variant generation."""

    def test_plain_text_has_single_variant(self):
        assert entity_variants("Get Started") == ["Get Started"]

    def test_apostrophe_variants(self):
        assert entity_variants("don't") == ["don't", "don&apos;t", "don’t"]

    def test_full_encoding_encodes_ampersand_first(self):
        variants = entity_variants("Tom & Jerry's <show>")
        assert "Tom &amp; Jerry&apos;s &lt;show&gt;" in variants

    def test_quotes_encoded(self):
        variants = entity_variants('Say "hi"')
        assert variants == ['Say "hi"', "Say &quot;hi&quot;"]

    def test_variants_are_unique(self):
        variants = entity_variants("It's")
        assert len(variants) == len(set(variants))


class TestFindSpansExact:
    """Test the exact phase."""

    def test_finds_every_occurrence_left_to_right(self):
        source = "<a>Learn more</a><b>Learn more</b>"
        assert find_spans(source, "Learn more") == [Span(3, 10), Span(20, 10)]

    def test_occurrences_do_not_overlap(self):
        assert find_spans("aaaa", "aa") == [Span(0, 2), Span(2, 2)]

    def test_exact_match_suppresses_normalized_phase(self):
        source = "Hello world and Hello\n    world"
        assert find_spans(source, "Hello world") == [Span(0, 11)]

    def test_empty_target_matches_nothing(self):
        assert find_spans("anything", "") == []


class TestFindSpansNormalized:
    """Test the whitespace-tolerant phase."""

    def test_reflowed_source_matches(self):
        source = "<h1>Hello\n    world</h1>"
        spans = find_spans(source, "Hello world")

        assert spans == [Span(4, 15)]
        assert source[4:19] == "Hello\n    world"

    def test_target_whitespace_is_collapsed(self):
        source = "<p>Ship it today</p>"
        assert find_spans(source, "  Ship\n it   today ") == [Span(3, 13)]

    def test_missing_space_does_not_join_words(self):
        assert find_spans("<h1>Hello\n    world</h1>", "Helloworld") == []

    def test_extra_whitespace_before_punctuation_is_skipped(self):
        source = "<button>Sign up\n  !</button>"
        spans = find_spans(source, "Sign up!")

        assert spans == [Span(8, 11)]

    def test_mismatch_aborts(self):
        assert find_spans("Hello\n there", "Hello world") == []

    def test_multiple_normalized_matches(self):
        source = "<li>Free\n trial</li><li>Free  trial</li>"
        spans = find_spans(source, "Free trial")

        assert [s.offset for s in spans] == [4, 24]

    def test_deterministic(self):
        source = "One\ntwo three\n One two\tthree"
        assert find_spans(source, "One two three") == find_spans(source, "One two three")


class TestFindAllSpans:
    """Test matching across entity variants."""

    def test_entity_encoded_source(self):
        source = "<p>don&apos;t stop</p>"
        spans = find_all_spans(source, "don't stop")

        assert spans == [Span(3, 15)]

    def test_curly_apostrophe_source(self):
        source = "<p>It’s here</p>"
        assert find_all_spans(source, "It's here") == [Span(3, 9)]

    def test_raw_and_encoded_spans_are_unioned(self):
        source = "<p>Tom & Jerry</p><p>Tom &amp; Jerry</p>"
        spans = find_all_spans(source, "Tom & Jerry")

        assert [s.offset for s in spans] == [3, 21]

    def test_no_match(self):
        assert find_all_spans("<p>Hello</p>", "Goodbye") == []
