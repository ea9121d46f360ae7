"""Tokenizers that turn raw text into normalized token streams."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Optional, Protocol, runtime_checkable

from .config import TokenizerConfig
from .pipeline import (
    DEFAULT_RELAY_BUFFER,
    DEFAULT_SOURCE_BUFFER,
    Mapper,
    Predicate,
    TokenStream,
    build_pipeline,
)
from .stopwords import is_not_stop_word


@runtime_checkable
class Tokenizer(Protocol):
    """Anything that can split a document into tokens."""

    def tokenize(self, text: str) -> Iterable[str]: ...


class StreamTokenizer:
    """Whitespace tokenizer running filter and transform stages concurrently.

    Words are split on whitespace only; punctuation stays attached. Each
    word must pass every filter (default: not a stopword) and is then
    passed through every transform in order (default: lower-case).

    Example::

        tokenizer = StreamTokenizer()
        list(tokenizer.tokenize("Кот и Собака"))   # ["кот", "собака"]

        shouting = StreamTokenizer(transforms=[str.upper], filters=[])

    Args:
        buffer_size: Capacity of the scanner's output queue.
        relay_buffer_size: Capacity of the filter and transform output queues.
        filters: Ordered predicates; ``None`` means the default stopword filter.
        transforms: Ordered mappers; ``None`` means lower-casing.

    Raises:
        ValueError: If a buffer size is not a positive integer.
    """

    def __init__(
        self,
        buffer_size: int = DEFAULT_SOURCE_BUFFER,
        relay_buffer_size: int = DEFAULT_RELAY_BUFFER,
        filters: Optional[Sequence[Predicate]] = None,
        transforms: Optional[Sequence[Mapper]] = None,
    ) -> None:
        # TokenizerConfig performs the buffer-size validation
        config = TokenizerConfig(buffer_size=buffer_size, relay_buffer_size=relay_buffer_size)
        self.buffer_size = config.buffer_size
        self.relay_buffer_size = config.relay_buffer_size
        self.filters: tuple[Predicate, ...] = (
            (is_not_stop_word,) if filters is None else tuple(filters)
        )
        self.transforms: tuple[Mapper, ...] = (
            (str.lower,) if transforms is None else tuple(transforms)
        )

    @classmethod
    def from_config(
        cls,
        config: TokenizerConfig,
        filters: Optional[Sequence[Predicate]] = None,
        transforms: Optional[Sequence[Mapper]] = None,
    ) -> "StreamTokenizer":
        return cls(
            buffer_size=config.buffer_size,
            relay_buffer_size=config.relay_buffer_size,
            filters=filters,
            transforms=transforms,
        )

    def tokenize(self, text: str) -> TokenStream:
        """Start tokenizing ``text`` and return the live token stream.

        The stream is single-pass; call ``tokenize`` again to re-read the
        same text. Close it (or use ``with``) if you stop before the end.
        """
        return build_pipeline(
            text,
            self.filters,
            self.transforms,
            buffer_size=self.buffer_size,
            relay_buffer_size=self.relay_buffer_size,
        )

    def __repr__(self) -> str:
        return (
            f"StreamTokenizer(buffer_size={self.buffer_size}, "
            f"relay_buffer_size={self.relay_buffer_size}, "
            f"filters={len(self.filters)}, transforms={len(self.transforms)})"
        )


def collect_tokens(tokenizer: Tokenizer, text: str) -> list[str]:
    """Drain a tokenizer's output for ``text`` into a list.

    Streams that support ``close()`` are closed even if a stage fails.
    """
    stream = tokenizer.tokenize(text)
    try:
        return list(stream)
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()


def word_counts(text: str, tokenizer: Optional[Tokenizer] = None) -> Counter[str]:
    """Count how often each token occurs in ``text``.

    Args:
        text: Raw document text.
        tokenizer: Tokenizer to use (a default ``StreamTokenizer`` if None).

    Returns:
        Counter of {token: occurrences}.
    """
    return Counter(collect_tokens(tokenizer or StreamTokenizer(), text))
