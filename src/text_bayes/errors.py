"""Exception types raised by the classifier."""

from __future__ import annotations


class ClassifierError(Exception):
    """Base class for all classifier errors."""


class UnknownCategoryError(ClassifierError, KeyError):
    """A category name was used that the classifier has never added."""

    def __init__(self, category: str, known: list[str] | None = None) -> None:
        self.category = category
        self.known = list(known or [])
        super().__init__(category)

    def __str__(self) -> str:
        return f"Unknown category: {self.category!r}. Known: {self.known}"


class DomainError(ClassifierError, ArithmeticError):
    """A probability computation would divide by zero."""


class InvalidInputError(ClassifierError, ValueError):
    """Input to feature extraction or deserialization is malformed."""
