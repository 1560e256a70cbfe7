"""Incrementally trainable Bayesian text classifier.

Keeps per-category word-frequency tables learned from labeled documents
and scores new documents against every category with two methods:

- Naive log-probability sums (``classify`` / ``classification_scores``)
- Fisher's method, combining per-feature probabilities through an
  inverse chi-square test (``fisher_probability`` / ``fisher_probabilities``)

A third, posterior-style score (``probability`` / ``probabilities``)
multiplies a smoothed document likelihood by the category prior.

Everything is in memory and pure Python. Models persist as JSON.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Collection, Iterable
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import Callable, Optional

import structlog

from .errors import ClassifierError, DomainError, InvalidInputError, UnknownCategoryError
from .features import Extractor, FeatureExtractor, filter_vocabulary, normalize_category
from .models import Ranking, ScoringMethod

logger = structlog.wrap_logger(logging.getLogger(__name__))

MODEL_VERSION = "1.0"

# Count used for a word never seen in a category by the naive scorer,
# and the probability returned for a category that does not exist.
MISSING_WORD_COUNT = 0.1
UNKNOWN_CATEGORY_PROB = 0.1


# ---------------------------------------------------------------------------
# Inverse chi-square
# ---------------------------------------------------------------------------

def inverse_chi_square(chi: float, df: int) -> float:
    """Upper-tail probability of the chi-square distribution.

    Uses the closed-form series for even degrees of freedom; the loop
    runs ``df // 2`` times. The result is capped at 1.0.

    Args:
        chi: Chi-square statistic (non-negative).
        df: Degrees of freedom.

    Returns:
        Probability in ``[0, 1]``.
    """
    m = chi / 2.0
    term = total = math.exp(-m)
    for i in range(1, int(df // 2) + 1):
        term *= m / i
        total += term
    return min(total, 1.0)


# ---------------------------------------------------------------------------
# Bayes Classifier
# ---------------------------------------------------------------------------

class BayesClassifier:
    """Bayesian text classifier with naive and Fisher scoring.

    Example::

        b = BayesClassifier("spam", "ham")
        b.train("spam", "buy cheap pills now")
        b.train("ham", "lunch with a friend tomorrow")

        b.classify("cheap pills")           # "spam"
        b.fisher_probabilities("cheap pills")

        b.save("model.json")
        restored = BayesClassifier.load("model.json")

    Categories must exist before they are trained; create them here or
    with :meth:`add_category`. Category names are normalized with
    :func:`~text_bayes.features.normalize_category`.

    Args:
        *categories: Initial category names.
        extractor: Callable turning text into ``{feature: count}``.
            Defaults to :class:`~text_bayes.features.FeatureExtractor`.
        vocabulary: Optional allow-list of features. Extracted features
            outside it are ignored for training and scoring.
        symmetric_untrain: When true, :meth:`untrain` also decrements the
            document counters that :meth:`train` incremented.
    """

    def __init__(
        self,
        *categories: str,
        extractor: Optional[Extractor] = None,
        vocabulary: Optional[Collection[str]] = None,
        symmetric_untrain: bool = False,
    ) -> None:
        self._categories: dict[str, dict[str, int]] = {}
        self._documents: dict[str, int] = {}
        self._total_documents = 0
        self._total_words = 0
        self._extractor: Extractor = extractor or FeatureExtractor()
        self._vocabulary: Optional[frozenset[str]] = None
        self.symmetric_untrain = symmetric_untrain

        if vocabulary is not None:
            self.vocabulary = vocabulary
        for category in categories:
            self._categories[normalize_category(category)] = {}

    def __repr__(self) -> str:
        return (
            f"BayesClassifier(categories={self.categories()!r}, "
            f"documents={self._total_documents}, words={self._total_words})"
        )

    # -- Frequency store --------------------------------------------------

    @property
    def total_documents(self) -> int:
        """Number of documents trained across all categories."""
        return self._total_documents

    @property
    def total_words(self) -> int:
        """Sum of every feature count in every category."""
        return self._total_words

    @property
    def vocabulary(self) -> Optional[frozenset[str]]:
        """Feature allow-list, or None when every feature is used."""
        return self._vocabulary

    @vocabulary.setter
    def vocabulary(self, words: Optional[Collection[str]]) -> None:
        self._vocabulary = frozenset(words) if words is not None else None

    def categories(self) -> list[str]:
        """Normalized names of all known categories, in insertion order."""
        return list(self._categories)

    def category_counts(self, category: str) -> dict[str, int]:
        """Copy of the ``{feature: count}`` row for a category."""
        return dict(self._categories[self._require_category(category)])

    def document_count(self, category: str) -> int:
        """Number of documents trained into a category."""
        return self._documents.get(self._require_category(category), 0)

    def add_category(self, category: str) -> str:
        """Add an empty category and return its normalized name.

        WARNING: re-adding an existing category discards everything it
        has learned. A category added to an already trained classifier
        starts out undertrained and will score unreliably until it has
        seen a comparable amount of data.
        """
        name = normalize_category(category)
        old_row = self._categories.get(name)
        if old_row:
            self._total_words -= sum(old_row.values())
            logger.warning("category_reset", category=name, features=len(old_row))
        self._total_documents -= self._documents.pop(name, 0)
        self._categories[name] = {}
        logger.debug("category_added", category=name)
        return name

    append_category = add_category

    def category_prior(self, category: str) -> float:
        """Fraction of trained documents that belong to ``category``.

        Returns 0.0 before any document has been trained.
        """
        if self._total_documents == 0:
            return 0.0
        return self._documents.get(normalize_category(category), 0) / self._total_documents

    # -- Feature extraction -----------------------------------------------

    def extract_features(self, text: str) -> dict[str, int]:
        """Run the extractor on ``text`` and apply the vocabulary filter."""
        counts = self._extractor(text)
        if self._vocabulary is not None:
            counts = filter_vocabulary(counts, self._vocabulary)
        return dict(counts)

    # -- Train / untrain --------------------------------------------------

    def train(self, category: str, text: str) -> None:
        """Add one document's features to ``category``.

        Raises:
            UnknownCategoryError: If the category was never added.
            InvalidInputError: If the text cannot be processed.
        """
        name = self._require_category(category)
        features = self.extract_features(text)

        self._documents[name] = self._documents.get(name, 0) + 1
        self._total_documents += 1

        row = self._categories[name]
        for word, count in features.items():
            row[word] = row.get(word, 0) + count
            self._total_words += count

        logger.debug("trained", category=name, features=len(features))

    def untrain(self, category: str, text: str) -> None:
        """Remove one document's features from ``category``.

        A feature whose count would drop to zero or below is deleted, and
        the word total only loses what was actually stored. Document
        counters are left untouched unless ``symmetric_untrain`` is set.

        Be careful: untraining text that was never trained silently
        erodes the counts of whatever features it shares with the
        category.
        """
        name = self._require_category(category)
        features = self.extract_features(text)

        row = self._categories[name]
        for word, count in features.items():
            stored = row.get(word, 0)
            remaining = stored - count
            if remaining <= 0:
                row.pop(word, None)
                self._total_words -= stored
            else:
                row[word] = remaining
                self._total_words -= count

        if self.symmetric_untrain and self._documents.get(name, 0) > 0:
            self._documents[name] -= 1
            self._total_documents -= 1

        logger.debug("untrained", category=name, features=len(features))

    def trainers(self) -> dict[str, Callable[[str], None]]:
        """One-argument ``train`` callables keyed by category name."""
        return {name: partial(self.train, name) for name in self._categories}

    def untrainers(self) -> dict[str, Callable[[str], None]]:
        """One-argument ``untrain`` callables keyed by category name."""
        return {name: partial(self.untrain, name) for name in self._categories}

    # -- Naive scoring ----------------------------------------------------

    def classification_scores(self, text: str) -> dict[str, float]:
        """Sum of log word probabilities for every category.

        Scores are negative; the one closest to 0 is the best match.
        Every distinct feature contributes once, whatever its count.

        Raises:
            DomainError: If a category has no trained words and the text
                has at least one feature.
        """
        features = self.extract_features(text)
        scores: dict[str, float] = {}
        for category, row in self._categories.items():
            score = 0.0
            if features:
                total = sum(row.values())
                if total == 0:
                    raise DomainError(
                        f"Category {category!r} has no trained words to score against"
                    )
                for word in features:
                    score += math.log(row.get(word, MISSING_WORD_COUNT) / total)
            scores[category] = score
        return scores

    classifications = classification_scores

    def classify(self, text: str) -> str:
        """Return the category with the highest naive score.

        Exact ties go to the category that was added first.
        """
        scores = self.classification_scores(text)
        if not scores:
            raise ClassifierError("Classifier has no categories")
        return max(scores, key=scores.get)  # type: ignore[arg-type]

    # -- Probabilistic scoring --------------------------------------------

    def feature_probability(self, feature: str, category: str) -> float:
        """Smoothed probability of ``feature`` in ``category``.

        ``(count + 1) / distinct features in the category``. Unknown
        categories get 0.1.
        """
        row = self._categories.get(normalize_category(category))
        if row is None:
            return UNKNOWN_CATEGORY_PROB
        if not row:
            raise DomainError(
                f"Category {normalize_category(category)!r} has no trained features"
            )
        return (row.get(feature, 0.0) + 1.0) / len(row)

    def weighted_feature_probability(
        self,
        feature: str,
        category: str,
        weight: float = 1.0,
        assumed_prob: float = 0.5,
    ) -> float:
        """Feature probability pulled toward ``assumed_prob`` for rare words.

        The more often ``feature`` has been seen across all categories,
        the closer the result is to :meth:`feature_probability`.
        """
        basic = self.feature_probability(feature, category)
        seen = sum(row.get(feature, 0.0) for row in self._categories.values())
        if weight + seen == 0:
            raise DomainError(f"No evidence and zero weight for feature {feature!r}")
        return (weight * assumed_prob + seen * basic) / (weight + seen)

    def document_probability(self, text: str, category: str) -> float:
        """Product of weighted feature probabilities over the document."""
        name = self._require_category(category)
        return math.exp(self._document_log_probability(self.extract_features(text), name))

    def probability(self, text: str, category: str) -> float:
        """Document probability times the category prior."""
        name = self._require_category(category)
        features = self.extract_features(text)
        return math.exp(self._document_log_probability(features, name)) * self.category_prior(name)

    def probabilities(self, text: str) -> dict[str, float]:
        """:meth:`probability` for every category."""
        features = self.extract_features(text)
        return {
            name: math.exp(self._document_log_probability(features, name))
            * self.category_prior(name)
            for name in self._categories
        }

    def _document_log_probability(self, features: Iterable[str], category: str) -> float:
        log_p = 0.0
        for feature in features:
            log_p += math.log(self.weighted_feature_probability(feature, category))
        return log_p

    # -- Fisher scoring ---------------------------------------------------

    def chi_feature_probability(self, feature: str, category: str) -> float:
        """Share of the feature's probability mass that belongs to ``category``."""
        clf = self.feature_probability(feature, category)
        if clf == 0:
            return 0.0
        freqsum = sum(self.feature_probability(feature, c) for c in self._categories)
        if freqsum == 0:
            raise DomainError(f"Feature {feature!r} has no probability mass in any category")
        return clf / freqsum

    def fisher_probability(self, text: str, category: str) -> float:
        """Fisher's method score for ``category``, in ``[0, 1]``.

        Combines :meth:`chi_feature_probability` over the document's
        features as ``-2 * sum(log p)`` and maps the result through
        :func:`inverse_chi_square` with ``2 * len(features)`` degrees of
        freedom.
        """
        name = self._require_category(category)
        return self._fisher(self.extract_features(text), name)

    def fisher_probabilities(self, text: str) -> dict[str, float]:
        """:meth:`fisher_probability` for every category."""
        features = self.extract_features(text)
        return {name: self._fisher(features, name) for name in self._categories}

    def _fisher(self, features: dict[str, int], category: str) -> float:
        log_p = 0.0
        for feature in features:
            log_p += math.log(self.chi_feature_probability(feature, category))
        return inverse_chi_square(-2.0 * log_p, 2 * len(features))

    def rank(self, text: str, method: ScoringMethod | str = ScoringMethod.NAIVE) -> Ranking:
        """Score ``text`` with the chosen method and wrap the result."""
        method = ScoringMethod(method)
        if method is ScoringMethod.NAIVE:
            scores = self.classification_scores(text)
        elif method is ScoringMethod.PROBABILITY:
            scores = self.probabilities(text)
        else:
            scores = self.fisher_probabilities(text)
        return Ranking(method=method, scores=scores)

    # -- Persistence ------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize the full model state."""
        extractor = (
            asdict(self._extractor) if isinstance(self._extractor, FeatureExtractor) else None
        )
        return {
            "version": MODEL_VERSION,
            "categories": {name: dict(row) for name, row in self._categories.items()},
            "documents": dict(self._documents),
            "total_documents": self._total_documents,
            "total_words": self._total_words,
            "vocabulary": sorted(self._vocabulary) if self._vocabulary is not None else None,
            "symmetric_untrain": self.symmetric_untrain,
            "extractor": extractor,
        }

    @classmethod
    def from_dict(cls, data: dict, extractor: Optional[Extractor] = None) -> "BayesClassifier":
        """Rebuild a classifier from :meth:`to_dict` output.

        Args:
            data: Serialized model.
            extractor: Extractor to use instead of the stored one. Needed
                when the model was trained with a custom extractor.

        The stored state must be consistent: category names already
        normalized and unique, every count positive, document counters
        only for known categories, and both totals equal to the sums
        they summarize.

        Raises:
            InvalidInputError: If the data is malformed, inconsistent or
                from an unsupported version.
        """
        if not isinstance(data, dict):
            raise InvalidInputError("Serialized model must be a JSON object")
        version = data.get("version")
        if version != MODEL_VERSION:
            raise InvalidInputError(f"Unsupported model version: {version!r}")

        try:
            if extractor is None and data.get("extractor") is not None:
                extractor = FeatureExtractor(**data["extractor"])
            bayes = cls(
                extractor=extractor,
                vocabulary=data.get("vocabulary"),
                symmetric_untrain=bool(data.get("symmetric_untrain", False)),
            )
            for raw_name, row in data["categories"].items():
                name = normalize_category(raw_name)
                if name in bayes._categories:
                    raise ValueError(f"duplicate category {name!r}")
                counts = {str(k): int(v) for k, v in row.items()}
                if any(v <= 0 for v in counts.values()):
                    raise ValueError(f"non-positive feature count in {name!r}")
                bayes._categories[name] = counts

            documents = {normalize_category(k): int(v) for k, v in data["documents"].items()}
            strays = [k for k in documents if k not in bayes._categories]
            if strays:
                raise ValueError(f"document counts for unknown categories {strays}")
            if any(v < 0 for v in documents.values()):
                raise ValueError("negative document count")
            bayes._documents = documents

            bayes._total_documents = int(data["total_documents"])
            if bayes._total_documents != sum(documents.values()):
                raise ValueError("total_documents does not match the document counts")
            bayes._total_words = int(data["total_words"])
            if bayes._total_words != sum(sum(r.values()) for r in bayes._categories.values()):
                raise ValueError("total_words does not match the category rows")
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise InvalidInputError(f"Malformed model data: {exc}") from exc
        return bayes

    def dumps(self) -> bytes:
        """Serialize the model to UTF-8 encoded JSON."""
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def loads(cls, data: bytes, extractor: Optional[Extractor] = None) -> "BayesClassifier":
        """Restore a model produced by :meth:`dumps`."""
        try:
            payload = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidInputError(f"Cannot decode model: {exc}") from exc
        return cls.from_dict(payload, extractor=extractor)

    def save(self, path: str | Path) -> None:
        """Save the model to a JSON file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug("model_saved", path=str(path), categories=len(self._categories))

    @classmethod
    def load(cls, path: str | Path, extractor: Optional[Extractor] = None) -> "BayesClassifier":
        """Load a model saved with :meth:`save`."""
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise InvalidInputError(f"Cannot decode model file {path}: {exc}") from exc
        bayes = cls.from_dict(data, extractor=extractor)
        logger.debug("model_loaded", path=str(path), categories=len(bayes._categories))
        return bayes

    # -- Helpers ----------------------------------------------------------

    def _require_category(self, category: str) -> str:
        name = normalize_category(category)
        if name not in self._categories:
            raise UnknownCategoryError(name, self.categories())
        return name
