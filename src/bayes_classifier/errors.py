"""Exception types raised by the classifier."""

from __future__ import annotations


class ClassifierError(Exception):
    """Base class for classifier failures.

    Attributes:
        code: Stable machine-readable identifier for the failure.
    """

    code = "classifier_error"
    default_message = "Classification failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class EmptyInputError(ClassifierError, ValueError):
    """The document passed to ``classify`` was an empty string."""

    code = "empty_input"
    default_message = "Cannot classify an empty document"


class NoMatchError(ClassifierError, LookupError):
    """No category scored above zero for the document."""

    code = "no_match"
    default_message = "Could not determine a category for the document"


class PipelineError(ClassifierError, RuntimeError):
    """A tokenizer stage failed while processing the stream."""

    code = "pipeline_failed"
    default_message = "Tokenizer pipeline stage failed"
