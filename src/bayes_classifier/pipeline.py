"""Concurrent token stream built from bounded, cancellable stages.

A document flows through three stages, each running in its own daemon
thread and connected to the next by a bounded ``queue.Queue``:

    scan (whitespace split) -> filter (predicates) -> map (transforms)

A full queue blocks the stage writing to it, so a slow consumer applies
backpressure all the way up to the scanner. Every blocking put and get
polls a shared ``threading.Event``; setting it (``TokenStream.close()``)
makes every stage return promptly, so an abandoned stream never leaves
workers parked on a full queue.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator, Sequence
from typing import Optional

from .errors import PipelineError

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
Mapper = Callable[[str], str]

DEFAULT_SOURCE_BUFFER = 100
DEFAULT_RELAY_BUFFER = 50

# Seconds a blocked stage waits before re-checking the cancel signal
_POLL_INTERVAL = 0.05


class _EndOfStream:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<end of stream>"


END_OF_STREAM = _EndOfStream()


class StageFailure:
    """Marker forwarded downstream when a stage callable raises."""

    __slots__ = ("stage", "error")

    def __init__(self, stage: str, error: BaseException) -> None:
        self.stage = stage
        self.error = error


# ---------------------------------------------------------------------------
# Cancellable queue access
# ---------------------------------------------------------------------------


def _put(out: queue.Queue, item: object, cancel: threading.Event) -> bool:
    """Block until ``item`` is queued. Returns False if cancelled first."""
    while not cancel.is_set():
        try:
            out.put(item, timeout=_POLL_INTERVAL)
            return True
        except queue.Full:
            continue
    return False


def _get(inp: queue.Queue, cancel: threading.Event) -> object:
    """Block until an item arrives. Returns END_OF_STREAM if cancelled."""
    while not cancel.is_set():
        try:
            return inp.get(timeout=_POLL_INTERVAL)
        except queue.Empty:
            continue
    return END_OF_STREAM


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def scan_words(text: str, out: queue.Queue, cancel: threading.Event) -> None:
    """Source stage: write each whitespace-delimited word of ``text``."""
    for word in text.split():
        if not _put(out, word, cancel):
            return
    _put(out, END_OF_STREAM, cancel)


def _relay(
    name: str,
    inp: queue.Queue,
    out: queue.Queue,
    cancel: threading.Event,
    process: Callable[[str], Optional[str]],
) -> None:
    while True:
        item = _get(inp, cancel)
        if item is END_OF_STREAM or isinstance(item, StageFailure):
            _put(out, item, cancel)
            return
        try:
            result = process(item)  # type: ignore[arg-type]
        except Exception as exc:
            logger.warning("Tokenizer %s stage failed on %r: %s", name, item, exc)
            _put(out, StageFailure(name, exc), cancel)
            return
        if result is not None and not _put(out, result, cancel):
            return


def filter_stage(
    inp: queue.Queue,
    out: queue.Queue,
    cancel: threading.Event,
    filters: Sequence[Predicate],
) -> None:
    """Forward only the words accepted by every predicate, in order."""

    def accept(word: str) -> Optional[str]:
        for predicate in filters:
            if not predicate(word):
                return None
        return word

    _relay("filter", inp, out, cancel, accept)


def map_stage(
    inp: queue.Queue,
    out: queue.Queue,
    cancel: threading.Event,
    transforms: Sequence[Mapper],
) -> None:
    """Apply every transform, in order, to each word."""

    def apply(word: str) -> str:
        for transform in transforms:
            word = transform(word)
        return word

    _relay("map", inp, out, cancel, apply)


# ---------------------------------------------------------------------------
# Token Stream
# ---------------------------------------------------------------------------


class TokenStream:
    """Lazy, finite, single-pass sequence of tokens.

    Iterating yields tokens as soon as the last stage produces them. The
    stream closes itself when exhausted; call ``close()`` (or use it as a
    context manager) to stop early and release the stage threads.

    Example::

        with StreamTokenizer().tokenize(text) as tokens:
            first = next(tokens)

    Raises:
        PipelineError: From ``__next__`` if a filter or transform raised.
    """

    def __init__(
        self,
        source: Optional[queue.Queue],
        cancel: threading.Event,
        workers: Sequence[threading.Thread] = (),
    ) -> None:
        self._source = source
        self._cancel = cancel
        self._workers = tuple(workers)
        self._closed = source is None

    @classmethod
    def empty(cls) -> "TokenStream":
        """An already-closed stream with no workers."""
        return cls(None, threading.Event())

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def workers(self) -> tuple[threading.Thread, ...]:
        """The stage threads feeding this stream."""
        return self._workers

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._closed or self._source is None:
            raise StopIteration
        item = _get(self._source, self._cancel)
        if item is END_OF_STREAM:
            self.close()
            raise StopIteration
        if isinstance(item, StageFailure):
            self.close()
            raise PipelineError(
                f"Tokenizer {item.stage} stage failed: {item.error}"
            ) from item.error
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Cancel every stage and wait for their threads to exit."""
        if self._closed:
            return
        self._closed = True
        self._cancel.set()
        for worker in self._workers:
            if worker is not threading.current_thread():
                worker.join()
        logger.debug("Token stream closed (%d workers joined)", len(self._workers))

    def __enter__(self) -> "TokenStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        # Dropped without close(): stop the stages, don't block the collector
        if not getattr(self, "_closed", True):
            self._cancel.set()


def _start(name: str, target: Callable[..., None], *args: object) -> threading.Thread:
    worker = threading.Thread(target=target, args=args, name=name, daemon=True)
    worker.start()
    return worker


def build_pipeline(
    text: str,
    filters: Sequence[Predicate],
    transforms: Sequence[Mapper],
    buffer_size: int = DEFAULT_SOURCE_BUFFER,
    relay_buffer_size: int = DEFAULT_RELAY_BUFFER,
) -> TokenStream:
    """Start the scan -> filter -> map stages for ``text``.

    Args:
        text: Raw document text.
        filters: Predicates a word must all satisfy to be kept.
        transforms: Mappers applied, in order, to each kept word.
        buffer_size: Capacity of the scanner's output queue.
        relay_buffer_size: Capacity of the filter and map output queues.

    Returns:
        A running TokenStream; an already-closed one if ``text`` holds no words.
    """
    if not text or text.isspace():
        return TokenStream.empty()

    cancel = threading.Event()
    scanned: queue.Queue = queue.Queue(maxsize=buffer_size)
    filtered: queue.Queue = queue.Queue(maxsize=relay_buffer_size)
    mapped: queue.Queue = queue.Queue(maxsize=relay_buffer_size)

    workers = [
        _start("tokenizer-scan", scan_words, text, scanned, cancel),
        _start("tokenizer-filter", filter_stage, scanned, filtered, cancel, tuple(filters)),
        _start("tokenizer-map", map_stage, filtered, mapped, cancel, tuple(transforms)),
    ]
    logger.debug("Started tokenizer pipeline for %d characters", len(text))
    return TokenStream(mapped, cancel, workers)
