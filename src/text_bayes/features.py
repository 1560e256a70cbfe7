"""Default feature extraction and category-name normalization.

The classifier only needs a callable that turns text into a mapping of
``feature -> count``. This module provides the default one: a
bag-of-words counter with punctuation stripping, stop-word removal and a
minimum token length, optionally restricted to a fixed vocabulary.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Callable

from .errors import InvalidInputError

FeatureCounts = Mapping[str, int]
Extractor = Callable[[str], FeatureCounts]

_SYMBOL_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")

STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "not", "no", "nor", "so", "if", "then", "than", "that", "this",
    "these", "those", "it", "its", "he", "she", "they", "them", "their",
    "his", "her", "our", "your", "we", "you", "who", "whom", "which",
    "what", "where", "when", "how", "all", "each", "every", "both",
    "few", "more", "most", "other", "some", "such", "any", "only",
    "own", "same", "too", "very", "just", "about", "above", "after",
    "again", "also", "because", "before", "between", "during", "into",
    "through", "under", "until", "up", "out", "over", "here", "there",
})


def _require_text(text: object) -> str:
    if text is None:
        raise InvalidInputError("text must not be None")
    if not isinstance(text, str):
        raise InvalidInputError(f"text must be a str, got {type(text).__name__}")
    return text


def word_hash(
    text: str,
    *,
    min_length: int = 3,
    stop_words: Collection[str] = STOP_WORDS,
    include_symbols: bool = False,
) -> Counter[str]:
    """Count the words of ``text``.

    Words are lower-cased and stripped of punctuation. Stop words and
    words shorter than ``min_length`` are skipped.

    Args:
        text: Raw document text.
        min_length: Shortest word (in characters) that is kept.
        stop_words: Words to ignore.
        include_symbols: Also count each punctuation/symbol character
            as a feature of its own.

    Returns:
        Counter of ``word -> occurrences``.

    Raises:
        InvalidInputError: If ``text`` is None or not a string.
    """
    text = _require_text(text)
    counts: Counter[str] = Counter()
    for word in _SYMBOL_RE.sub("", text).lower().split():
        if len(word) < min_length or word in stop_words:
            continue
        counts[word] += 1
    if include_symbols:
        counts.update(_SYMBOL_RE.findall(text))
    return counts


@dataclass
class FeatureExtractor:
    """Configurable bag-of-words extractor.

    Args:
        min_length: Shortest word kept.
        use_stopwords: Whether to drop English stop words.
        include_symbols: Count punctuation/symbol characters as features.
    """

    min_length: int = 3
    use_stopwords: bool = True
    include_symbols: bool = False

    def __call__(self, text: str) -> Counter[str]:
        return word_hash(
            text,
            min_length=self.min_length,
            stop_words=STOP_WORDS if self.use_stopwords else frozenset(),
            include_symbols=self.include_symbols,
        )


def filter_vocabulary(
    counts: FeatureCounts, vocabulary: Collection[str]
) -> Counter[str]:
    """Keep only the features present in ``vocabulary``."""
    return Counter({k: v for k, v in counts.items() if k in vocabulary})


def normalize_category(name: object) -> str:
    """Canonical form of a category name.

    ``"Not_Spam"``, ``" not  spam "`` and ``"not spam"`` all map to
    ``"not spam"``. Applying it twice gives the same result as once.

    Raises:
        InvalidInputError: If the name is None or normalizes to nothing.
    """
    if name is None:
        raise InvalidInputError("category name must not be None")
    normalized = _SPACE_RE.sub(" ", str(name).replace("_", " ")).strip().lower()
    if not normalized:
        raise InvalidInputError(f"category name {name!r} is empty")
    return normalized
