"""Tests for the default feature extractor and category normalization."""

from __future__ import annotations

import pytest

from text_bayes.errors import InvalidInputError
from text_bayes.features import (
    STOP_WORDS,
    FeatureExtractor,
    filter_vocabulary,
    normalize_category,
    word_hash,
)


class TestWordHash:
    """Tests for word_hash()."""

    def test_counts_repeated_words(self):
        assert word_hash("Hello, hello WORLD!") == {"hello": 2, "world": 1}

    def test_strips_punctuation_inside_words(self):
        assert word_hash("don't") == {"dont": 1}

    def test_drops_stop_words(self):
        counts = word_hash("the cat and the hat")
        assert "the" not in counts
        assert "and" not in counts
        assert counts == {"cat": 1, "hat": 1}

    def test_drops_short_words(self):
        assert word_hash("go ox bee") == {"bee": 1}

    def test_min_length_is_configurable(self):
        assert word_hash("go ox", min_length=2) == {"go": 1, "ox": 1}

    def test_custom_stop_words(self):
        assert word_hash("buy now", stop_words={"now"}) == {"buy": 1}

    def test_include_symbols(self):
        counts = word_hash("buy now!!! $$", include_symbols=True)
        assert counts["buy"] == 1
        assert counts["!"] == 3
        assert counts["$"] == 2

    def test_empty_text(self):
        assert word_hash("") == {}
        assert word_hash("   \n\t ") == {}

    def test_unicode_words(self):
        assert word_hash("Café résumé") == {"café": 1, "résumé": 1}

    def test_none_raises(self):
        with pytest.raises(InvalidInputError):
            word_hash(None)  # type: ignore[arg-type]

    def test_non_string_raises(self):
        with pytest.raises(InvalidInputError, match="int"):
            word_hash(42)  # type: ignore[arg-type]

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            word_hash(None)  # type: ignore[arg-type]


class TestFeatureExtractor:
    """Tests for the configurable extractor."""

    def test_defaults_match_word_hash(self):
        text = "Buy cheap pills now, the best offer!"
        assert FeatureExtractor()(text) == word_hash(text)

    def test_without_stopwords(self):
        extractor = FeatureExtractor(use_stopwords=False, min_length=1)
        assert extractor("the a") == {"the": 1, "a": 1}

    def test_with_symbols(self):
        assert FeatureExtractor(include_symbols=True)("win!") == {"win": 1, "!": 1}

    def test_stop_words_are_lowercase(self):
        assert all(w == w.lower() for w in STOP_WORDS)


class TestFilterVocabulary:
    def test_keeps_only_allowed(self):
        assert filter_vocabulary({"buy": 2, "now": 1}, {"buy"}) == {"buy": 2}

    def test_empty_vocabulary(self):
        assert filter_vocabulary({"buy": 2}, set()) == {}


class TestNormalizeCategory:
    """Tests for normalize_category()."""

    @pytest.mark.parametrize(
        "raw",
        ["not spam", "Not_Spam", "  NOT   spam ", "not_spam", "Not Spam"],
    )
    def test_variants_collapse(self, raw):
        assert normalize_category(raw) == "not spam"

    def test_idempotent(self):
        once = normalize_category("Very_Interesting  Stuff")
        assert normalize_category(once) == once

    def test_non_string_names(self):
        assert normalize_category(42) == "42"

    @pytest.mark.parametrize("raw", [None, "", "   ", "___"])
    def test_empty_names_raise(self, raw):
        with pytest.raises(InvalidInputError):
            normalize_category(raw)
