"""Bayes Classifier -- incremental naive-Bayes text categorization."""

__version__ = "0.1.0"

from .classifier import ClassificationResult, Classifier, TextClassifier
from .config import ClassifierConfig, TokenizerConfig
from .errors import ClassifierError, EmptyInputError, NoMatchError, PipelineError
from .estimator import ProbabilityEstimator
from .model import FrequencyModel, ReadWriteLock
from .pipeline import Mapper, Predicate, TokenStream
from .stopwords import (
    STOP_WORDS,
    StopwordTable,
    default_stopwords,
    is_not_stop_word,
    is_stop_word,
)
from .tokenizer import StreamTokenizer, Tokenizer, collect_tokens, word_counts

__all__ = [
    # Core
    "Classifier",
    "ClassificationResult",
    "TextClassifier",
    # Model and scoring
    "FrequencyModel",
    "ReadWriteLock",
    "ProbabilityEstimator",
    # Tokenization
    "StreamTokenizer",
    "Tokenizer",
    "TokenStream",
    "Predicate",
    "Mapper",
    "collect_tokens",
    "word_counts",
    # Stopwords
    "STOP_WORDS",
    "StopwordTable",
    "default_stopwords",
    "is_stop_word",
    "is_not_stop_word",
    # Configuration
    "ClassifierConfig",
    "TokenizerConfig",
    # Errors
    "ClassifierError",
    "EmptyInputError",
    "NoMatchError",
    "PipelineError",
]
