"""Incremental naive-Bayes text classifier.

Assigns a category label to short documents from accumulated word
frequency statistics. Training is incremental (one document at a time)
and the model lives in memory for the lifetime of the ``Classifier``.

Features:
- Streaming tokenizer with stopword filtering and lower-casing
- Weighted per-token probabilities that stay non-zero for unseen words
- Uniform category prior
- Thread-safe: concurrent ``classify``/``get_prob`` calls share a read lock,
  ``train`` takes the write lock
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .config import ClassifierConfig
from .errors import EmptyInputError, NoMatchError
from .estimator import ProbabilityEstimator
from .model import FrequencyModel
from .tokenizer import StreamTokenizer, Tokenizer, collect_tokens

logger = logging.getLogger(__name__)


class TextClassifier(Protocol):
    """Minimal train/classify surface."""

    def train(self, document: str, category: str) -> None: ...

    def classify(self, document: str) -> "ClassificationResult": ...


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying a single document.

    Attributes:
        category: Winning category label.
        confidence: The winning category's raw score. Not a calibrated
            probability; only comparable between categories of one call.
    """

    category: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "confidence": self.confidence,
        }


class Classifier:
    """High-level train/classify interface over a frequency model.

    Example::

        classifier = Classifier()
        classifier.train("кот сидит на окне", "animals")
        classifier.train("акция выросла на бирже", "finance")

        result = classifier.classify("кот и акция")
        print(result.category, result.confidence)

        scores, best = classifier.get_prob("кот и акция")

    Args:
        tokenizer: Tokenizer for both training and classification. Defaults
            to a ``StreamTokenizer`` built from ``config``.
        model: Frequency model to train into (a fresh one if None).
        config: Settings for the default tokenizer and model.
    """

    def __init__(
        self,
        tokenizer: Optional[Tokenizer] = None,
        model: Optional[FrequencyModel] = None,
        config: Optional[ClassifierConfig] = None,
    ) -> None:
        self.config = config or ClassifierConfig()
        self.tokenizer: Tokenizer = tokenizer or StreamTokenizer.from_config(
            self.config.tokenizer
        )
        self.model = model or FrequencyModel(weight_floor=self.config.weight_floor)
        self._estimator = ProbabilityEstimator(self.model, self.tokenizer)

    @property
    def estimator(self) -> ProbabilityEstimator:
        return self._estimator

    @property
    def categories(self) -> list[str]:
        """Known categories in label order."""
        with self.model.reading():
            return sorted(self.model.categories())

    def training_count(self, category: str) -> int:
        with self.model.reading():
            return self.model.training_count(category)

    def count_in_category(self, token: str, category: str) -> int:
        with self.model.reading():
            return self.model.count_in_category(token, category)

    def train(self, document: str, category: str) -> None:
        """Learn that ``document`` belongs to ``category``.

        Every token is recorded and the category's training count bumped by
        one, atomically with respect to concurrent readers. Empty documents
        and empty category names are accepted.
        """
        with self.model.writing():
            tokens = collect_tokens(self.tokenizer, document)
            for token in tokens:
                self.model.record(token, category)
            self.model.record_category(category)
        logger.debug("Trained category %r with %d tokens", category, len(tokens))

    def classify(self, document: str) -> ClassificationResult:
        """Return the best-scoring category for ``document``.

        Args:
            document: Raw document text.

        Returns:
            ClassificationResult with the winning category and its score.

        Raises:
            EmptyInputError: If ``document`` is an empty string.
            NoMatchError: If no category scores above zero (untrained model,
                or no known category has seen any of the document's tokens).
        """
        if document == "":
            raise EmptyInputError()

        with self.model.reading():
            scores = self._estimator.scores(document)
        category, confidence = ProbabilityEstimator.best(scores)
        if confidence <= 0:
            raise NoMatchError()

        logger.debug("Classified document as %r (score %.6g)", category, confidence)
        return ClassificationResult(category=category, confidence=confidence)

    def get_prob(self, document: str) -> tuple[dict[str, float], str]:
        """Score ``document`` against every category.

        Returns:
            Tuple of ({category: score} for scores above zero, best category).
            The best category is ``""`` when nothing scored above zero.
        """
        with self.model.reading():
            scores = self._estimator.scores(document)
        best, _ = ProbabilityEstimator.best(scores)
        return {cat: score for cat, score in scores.items() if score > 0}, best
