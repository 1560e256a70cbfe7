"""Tests for model serialization (dict, bytes and JSON files)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from text_bayes import BayesClassifier, FeatureExtractor
from text_bayes.errors import InvalidInputError


class TestSerialization:
    """Tests for to_dict/from_dict and dumps/loads."""

    def test_to_dict_contents(self, spam_ham):
        data = spam_ham.to_dict()
        assert data["version"] == "1.0"
        assert data["categories"] == {
            "spam": {"buy": 1, "now": 1},
            "ham": {"hello": 1, "friend": 1},
        }
        assert data["documents"] == {"spam": 1, "ham": 1}
        assert data["total_documents"] == 2
        assert data["total_words"] == 4
        assert data["vocabulary"] is None

    def test_to_dict_is_json_compatible(self, trained_mail):
        assert json.loads(json.dumps(trained_mail.to_dict())) == trained_mail.to_dict()

    def test_bytes_restore_identical_scores(self, trained_mail):
        restored = BayesClassifier.loads(trained_mail.dumps())
        text = "claim your cheap prize before lunch"
        assert restored.categories() == trained_mail.categories()
        assert restored.classification_scores(text) == trained_mail.classification_scores(text)
        assert restored.probabilities(text) == trained_mail.probabilities(text)
        assert restored.fisher_probabilities(text) == trained_mail.fisher_probabilities(text)

    def test_dumps_returns_bytes(self, spam_ham):
        assert isinstance(spam_ham.dumps(), bytes)

    def test_restored_model_keeps_training(self, spam_ham):
        restored = BayesClassifier.loads(spam_ham.dumps())
        restored.train("spam", "cheap pills")
        spam_ham.train("spam", "cheap pills")
        assert restored.to_dict() == spam_ham.to_dict()

    def test_settings_survive(self):
        b = BayesClassifier(
            "spam",
            vocabulary={"buy", "now"},
            symmetric_untrain=True,
            extractor=FeatureExtractor(min_length=2, include_symbols=True),
        )
        restored = BayesClassifier.loads(b.dumps())
        assert restored.vocabulary == frozenset({"buy", "now"})
        assert restored.symmetric_untrain is True
        assert restored.extract_features("buy now go!") == {"buy": 1, "now": 1}

    def test_custom_extractor_is_not_stored(self):
        b = BayesClassifier("upper", extractor=lambda text: {text: 1})
        b.train("upper", "ABC")
        data = b.to_dict()
        assert data["extractor"] is None

        restored = BayesClassifier.from_dict(data, extractor=lambda text: {text: 1})
        assert restored.extract_features("XYZ") == {"XYZ": 1}

    def test_undecodable_bytes(self):
        with pytest.raises(InvalidInputError, match="decode"):
            BayesClassifier.loads(b"not json at all")

    def test_wrong_version(self, spam_ham):
        data = spam_ham.to_dict()
        data["version"] = "9.9"
        with pytest.raises(InvalidInputError, match="version"):
            BayesClassifier.from_dict(data)

    def test_missing_field(self, spam_ham):
        data = spam_ham.to_dict()
        del data["total_words"]
        with pytest.raises(InvalidInputError, match="Malformed"):
            BayesClassifier.from_dict(data)

    def test_not_an_object(self):
        with pytest.raises(InvalidInputError):
            BayesClassifier.loads(b"[1, 2, 3]")


class TestFiles:
    """Tests for save() and load()."""

    def test_save_and_load(self, trained_mail, tmp_path: Path):
        path = tmp_path / "models" / "mail.json"
        trained_mail.save(path)
        assert path.exists()

        loaded = BayesClassifier.load(path)
        assert loaded.to_dict() == trained_mail.to_dict()
        assert loaded.classify("free cash prize") == "spam"

    def test_load_corrupt_file(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{ nope", encoding="utf-8")
        with pytest.raises(InvalidInputError):
            BayesClassifier.load(path)

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            BayesClassifier.load(tmp_path / "missing.json")

    def test_load_invalid_utf8_file(self, tmp_path: Path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe garbage")
        with pytest.raises(InvalidInputError, match="decode"):
            BayesClassifier.load(path)


class TestConsistencyChecks:
    """from_dict() rejects state that breaks the frequency store invariants."""

    def test_category_names_are_normalized(self, spam_ham):
        data = spam_ham.to_dict()
        data["categories"] = {"Spam": data["categories"]["spam"], "HAM": data["categories"]["ham"]}
        data["documents"] = {"SPAM": 1, "Ham": 1}
        restored = BayesClassifier.from_dict(data)
        assert restored.categories() == ["spam", "ham"]
        restored.train("Spam", "cheap pills")
        assert restored.document_count("spam") == 2

    def test_duplicate_after_normalizing(self, spam_ham):
        data = spam_ham.to_dict()
        data["categories"]["SPAM"] = {"pills": 1}
        data["total_words"] += 1
        with pytest.raises(InvalidInputError, match="duplicate category"):
            BayesClassifier.from_dict(data)

    def test_total_words_must_match_rows(self, spam_ham):
        data = spam_ham.to_dict()
        data["total_words"] = 999
        with pytest.raises(InvalidInputError, match="Malformed.*total_words"):
            BayesClassifier.from_dict(data)

    def test_total_documents_must_match_counts(self, spam_ham):
        data = spam_ham.to_dict()
        data["total_documents"] = 5
        with pytest.raises(InvalidInputError, match="total_documents"):
            BayesClassifier.from_dict(data)

    @pytest.mark.parametrize("count", [0, -2])
    def test_non_positive_counts(self, spam_ham, count):
        data = spam_ham.to_dict()
        data["categories"]["spam"]["buy"] = count
        data["total_words"] += count - 1
        with pytest.raises(InvalidInputError, match="non-positive"):
            BayesClassifier.from_dict(data)

    def test_documents_for_unknown_category(self, spam_ham):
        data = spam_ham.to_dict()
        data["documents"]["eggs"] = 1
        data["total_documents"] += 1
        with pytest.raises(InvalidInputError, match="unknown categories"):
            BayesClassifier.from_dict(data)

    def test_negative_document_count(self, spam_ham):
        data = spam_ham.to_dict()
        data["documents"] = {"spam": 3, "ham": -1}
        with pytest.raises(InvalidInputError, match="negative document count"):
            BayesClassifier.from_dict(data)

    def test_empty_category_name(self, spam_ham):
        data = spam_ham.to_dict()
        data["categories"]["  "] = {}
        with pytest.raises(InvalidInputError, match="Malformed"):
            BayesClassifier.from_dict(data)
