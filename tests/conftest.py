"""Shared test fixtures for bayes-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_classifier.classifier import Classifier
from bayes_classifier.tokenizer import StreamTokenizer

# Short Russian documents per category. "на" and "и" are stopwords.
ANIMAL_DOCS = [
    "кот сидит на окне",
    "собака лает во дворе",
    "кот ловит мышь",
]

FINANCE_DOCS = [
    "акция выросла на бирже",
    "банк снизил ставку",
    "инвестор купил акция",
]


@pytest.fixture
def tokenizer() -> StreamTokenizer:
    """Tokenizer with default filters and transforms."""
    return StreamTokenizer()


@pytest.fixture
def classifier() -> Classifier:
    """Untrained classifier with default settings."""
    return Classifier()


@pytest.fixture
def trained_classifier() -> Classifier:
    """Classifier trained on the animals/finance mini-corpus."""
    clf = Classifier()
    for doc in ANIMAL_DOCS:
        clf.train(doc, "animals")
    for doc in FINANCE_DOCS:
        clf.train(doc, "finance")
    return clf


@pytest.fixture
def tsv_corpus(tmp_path: Path) -> Path:
    """Tab-separated training corpus file."""
    lines = [f"animals\t{doc}" for doc in ANIMAL_DOCS]
    lines += [f"finance\t{doc}" for doc in FINANCE_DOCS]
    path = tmp_path / "corpus.tsv"
    path.write_text("# category<TAB>text\n" + "\n".join(lines) + "\n", encoding="utf-8")
    return path
