"""Result types shared by the classifier and the command line."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ScoringMethod(str, Enum):
    """Ways a document can be scored against the categories."""

    NAIVE = "naive"
    PROBABILITY = "probability"
    FISHER = "fisher"


@dataclass
class Ranking:
    """Scores for one document under one scoring method.

    Attributes:
        method: How the scores were computed.
        scores: Category name to score. Naive scores are log values
            (closer to 0 is better); the others are probabilities.
    """

    method: ScoringMethod
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def best(self) -> str | None:
        """Highest scoring category; ties go to the earliest category."""
        if not self.scores:
            return None
        return max(self.scores, key=self.scores.get)  # type: ignore[arg-type]

    def ordered(self) -> list[tuple[str, float]]:
        """(category, score) pairs, best first."""
        return sorted(self.scores.items(), key=lambda x: x[1], reverse=True)

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "best": self.best,
            "scores": dict(self.ordered()),
        }
