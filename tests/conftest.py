"""Shared test fixtures for text-bayes tests."""

from __future__ import annotations

import pytest

from text_bayes import BayesClassifier


@pytest.fixture
def spam_ham() -> BayesClassifier:
    """Two categories, one short document each.

    spam row: {buy: 1, now: 1}; ham row: {hello: 1, friend: 1}.
    """
    b = BayesClassifier("spam", "ham")
    b.train("spam", "buy now")
    b.train("ham", "hello friend")
    return b


@pytest.fixture
def untrained() -> BayesClassifier:
    """Categories declared but never trained."""
    return BayesClassifier("spam", "ham")


@pytest.fixture
def mail_corpus() -> dict[str, list[str]]:
    """Small labeled corpus of spam and ham messages."""
    return {
        "spam": [
            "Buy cheap pills now, limited offer, click here",
            "You won a free prize! Claim your cash reward today",
            "Cheap watches and pills, exclusive discount offer",
            "Free money waiting, click the link to claim your prize",
        ],
        "ham": [
            "Hello friend, are we still meeting for lunch tomorrow?",
            "The quarterly report is attached, please review before Monday",
            "Thanks for dinner last night, my family loved it",
            "Can you send me the meeting notes from the project review?",
        ],
    }


@pytest.fixture
def trained_mail(mail_corpus: dict[str, list[str]]) -> BayesClassifier:
    """Classifier trained on the full mail corpus."""
    b = BayesClassifier(*mail_corpus)
    for category, docs in mail_corpus.items():
        for doc in docs:
            b.train(category, doc)
    return b
