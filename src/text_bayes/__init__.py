"""Text Bayes -- incrementally trainable naive Bayes and Fisher text classifier."""

__version__ = "0.1.0"

from .classifier import BayesClassifier, inverse_chi_square
from .errors import (
    ClassifierError,
    DomainError,
    InvalidInputError,
    UnknownCategoryError,
)
from .features import (
    STOP_WORDS,
    FeatureExtractor,
    filter_vocabulary,
    normalize_category,
    word_hash,
)
from .models import Ranking, ScoringMethod

__all__ = [
    # Core
    "BayesClassifier",
    "inverse_chi_square",
    "Ranking",
    "ScoringMethod",
    # Features
    "FeatureExtractor",
    "STOP_WORDS",
    "filter_vocabulary",
    "normalize_category",
    "word_hash",
    # Errors
    "ClassifierError",
    "DomainError",
    "InvalidInputError",
    "UnknownCategoryError",
]
