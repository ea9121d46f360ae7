"""Tests for the streaming tokenizer and its pipeline stages."""

from __future__ import annotations

import gc
import queue
import threading
from collections import Counter

import pytest

from bayes_classifier.config import TokenizerConfig
from bayes_classifier.errors import PipelineError
from bayes_classifier.pipeline import (
    END_OF_STREAM,
    StageFailure,
    TokenStream,
    filter_stage,
    map_stage,
    scan_words,
)
from bayes_classifier.tokenizer import (
    StreamTokenizer,
    Tokenizer,
    collect_tokens,
    word_counts,
)


def _drain(q: queue.Queue) -> list:
    items = []
    while True:
        item = q.get(timeout=1)
        items.append(item)
        if item is END_OF_STREAM or isinstance(item, StageFailure):
            return items


# ---------------------------------------------------------------------------
# Stage primitives
# ---------------------------------------------------------------------------


class TestStages:
    """Tests for the individual stage functions run inline."""

    def test_scan_splits_on_whitespace(self):
        out: queue.Queue = queue.Queue()
        scan_words("кот  сидит\tна\nокне", out, threading.Event())
        assert _drain(out) == ["кот", "сидит", "на", "окне", END_OF_STREAM]

    def test_scan_keeps_punctuation(self):
        out: queue.Queue = queue.Queue()
        scan_words("кот, собака!", out, threading.Event())
        assert _drain(out)[:-1] == ["кот,", "собака!"]

    def test_scan_stops_when_cancelled(self):
        out: queue.Queue = queue.Queue(maxsize=1)
        cancel = threading.Event()
        cancel.set()
        scan_words("a b c", out, cancel)
        assert out.empty()

    def test_filter_applies_all_predicates(self):
        inp: queue.Queue = queue.Queue()
        out: queue.Queue = queue.Queue()
        for item in ["ab", "b", "abc", "x", END_OF_STREAM]:
            inp.put(item)
        filter_stage(inp, out, threading.Event(), [lambda w: "a" in w, lambda w: len(w) > 2])
        assert _drain(out) == ["abc", END_OF_STREAM]

    def test_filter_with_no_predicates_passes_everything(self):
        inp: queue.Queue = queue.Queue()
        out: queue.Queue = queue.Queue()
        for item in ["a", "b", END_OF_STREAM]:
            inp.put(item)
        filter_stage(inp, out, threading.Event(), [])
        assert _drain(out) == ["a", "b", END_OF_STREAM]

    def test_map_applies_transforms_in_order(self):
        inp: queue.Queue = queue.Queue()
        out: queue.Queue = queue.Queue()
        for item in ["ab", END_OF_STREAM]:
            inp.put(item)
        map_stage(inp, out, threading.Event(), [str.upper, lambda w: w + "!"])
        assert _drain(out) == ["AB!", END_OF_STREAM]

    def test_failure_is_forwarded(self):
        inp: queue.Queue = queue.Queue()
        out: queue.Queue = queue.Queue()
        inp.put("boom")

        def explode(word: str) -> str:
            raise KeyError(word)

        map_stage(inp, out, threading.Event(), [explode])
        (failure,) = _drain(out)
        assert isinstance(failure, StageFailure)
        assert failure.stage == "map"
        assert isinstance(failure.error, KeyError)

    def test_upstream_failure_is_relayed(self):
        inp: queue.Queue = queue.Queue()
        out: queue.Queue = queue.Queue()
        failure = StageFailure("filter", ValueError("bad"))
        inp.put(failure)
        map_stage(inp, out, threading.Event(), [str.lower])
        assert _drain(out) == [failure]


# ---------------------------------------------------------------------------
# StreamTokenizer
# ---------------------------------------------------------------------------


class TestStreamTokenizer:
    """Tests for end-to-end tokenization with default and custom stages."""

    def test_default_lowercases_and_counts(self, tokenizer: StreamTokenizer):
        assert Counter(tokenizer.tokenize("A b A")) == Counter({"a": 2, "b": 1})

    def test_preserves_word_order(self, tokenizer: StreamTokenizer):
        assert list(tokenizer.tokenize("Кот ловит мышь")) == ["кот", "ловит", "мышь"]

    def test_drops_stopwords(self, tokenizer: StreamTokenizer):
        assert list(tokenizer.tokenize("the и cat")) == ["the", "cat"]

    def test_drops_uppercase_stopword(self, tokenizer: StreamTokenizer):
        assert list(tokenizer.tokenize("И собака")) == ["собака"]

    def test_empty_input_is_closed_immediately(self, tokenizer: StreamTokenizer):
        stream = tokenizer.tokenize("")
        assert stream.closed
        assert stream.workers == ()
        assert list(stream) == []

    def test_whitespace_only_input(self, tokenizer: StreamTokenizer):
        stream = tokenizer.tokenize("  \n\t ")
        assert stream.closed
        assert list(stream) == []

    def test_only_stopwords_yields_nothing(self, tokenizer: StreamTokenizer):
        assert list(tokenizer.tokenize("и на в")) == []

    def test_punctuation_is_not_stripped(self, tokenizer: StreamTokenizer):
        assert list(tokenizer.tokenize("Кот, собака!")) == ["кот,", "собака!"]

    def test_custom_transforms_replace_default(self):
        tok = StreamTokenizer(transforms=[str.upper])
        assert list(tok.tokenize("кот")) == ["КОТ"]

    def test_empty_transforms_keep_case(self):
        tok = StreamTokenizer(transforms=[])
        assert list(tok.tokenize("Кот")) == ["Кот"]

    def test_empty_filters_keep_stopwords(self):
        tok = StreamTokenizer(filters=[])
        assert list(tok.tokenize("кот и мышь")) == ["кот", "и", "мышь"]

    def test_filters_run_before_transforms(self):
        tok = StreamTokenizer(filters=[lambda w: not w.startswith("X")])
        assert list(tok.tokenize("Xa xb")) == ["xb"]

    def test_multiple_filters_all_apply(self):
        tok = StreamTokenizer(filters=[lambda w: len(w) > 1, lambda w: not w.isdigit()])
        assert list(tok.tokenize("a bb 12 cc")) == ["bb", "cc"]

    def test_tiny_buffers_handle_long_text(self):
        tok = StreamTokenizer(buffer_size=1, relay_buffer_size=1)
        words = [f"слово{i}" for i in range(500)]
        assert list(tok.tokenize(" ".join(words))) == words

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_buffer_size_raises(self, size: int):
        with pytest.raises(ValueError, match="buffer_size"):
            StreamTokenizer(buffer_size=size)
        with pytest.raises(ValueError, match="relay_buffer_size"):
            StreamTokenizer(relay_buffer_size=size)

    def test_from_config(self):
        tok = StreamTokenizer.from_config(TokenizerConfig(buffer_size=7, relay_buffer_size=3))
        assert tok.buffer_size == 7
        assert tok.relay_buffer_size == 3
        assert list(tok.tokenize("Кот")) == ["кот"]

    def test_satisfies_tokenizer_protocol(self, tokenizer: StreamTokenizer):
        assert isinstance(tokenizer, Tokenizer)

    def test_failing_transform_raises_pipeline_error(self):
        def explode(word: str) -> str:
            raise ValueError(f"cannot map {word}")

        tok = StreamTokenizer(transforms=[explode])
        with pytest.raises(PipelineError) as exc_info:
            list(tok.tokenize("кот мышь"))
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.code == "pipeline_failed"

    def test_failing_filter_raises_pipeline_error(self):
        def explode(word: str) -> bool:
            raise RuntimeError("filter broke")

        tok = StreamTokenizer(filters=[explode])
        with pytest.raises(PipelineError, match="filter"):
            collect_tokens(tok, "кот")


# ---------------------------------------------------------------------------
# TokenStream lifecycle
# ---------------------------------------------------------------------------


class TestTokenStream:
    """Tests for streaming, exhaustion and cancellation."""

    @pytest.fixture
    def long_text(self) -> str:
        return " ".join(f"слово{i}" for i in range(2000))

    def test_stream_is_single_pass(self, tokenizer: StreamTokenizer):
        stream = tokenizer.tokenize("кот мышь")
        assert list(stream) == ["кот", "мышь"]
        assert list(stream) == []
        assert stream.closed

    def test_exhaustion_stops_workers(self, tokenizer: StreamTokenizer):
        stream = tokenizer.tokenize("кот мышь")
        list(stream)
        assert all(not w.is_alive() for w in stream.workers)

    def test_backpressure_holds_upstream(self, long_text: str):
        tok = StreamTokenizer(buffer_size=1, relay_buffer_size=1)
        stream = tok.tokenize(long_text)
        try:
            assert next(stream) == "слово0"
            # The scanner cannot finish 2000 words through size-1 queues
            assert stream.workers[0].is_alive()
        finally:
            stream.close()

    def test_close_releases_blocked_workers(self, long_text: str):
        tok = StreamTokenizer(buffer_size=1, relay_buffer_size=1)
        stream = tok.tokenize(long_text)
        next(stream)
        stream.close()
        assert stream.closed
        assert all(not w.is_alive() for w in stream.workers)
        with pytest.raises(StopIteration):
            next(stream)

    def test_close_is_idempotent(self, tokenizer: StreamTokenizer):
        stream = tokenizer.tokenize("кот")
        stream.close()
        stream.close()
        assert stream.closed

    def test_context_manager_closes(self, long_text: str):
        tok = StreamTokenizer(buffer_size=1, relay_buffer_size=1)
        with tok.tokenize(long_text) as stream:
            next(stream)
        assert all(not w.is_alive() for w in stream.workers)

    def test_dropped_stream_cancels_workers(self, long_text: str):
        tok = StreamTokenizer(buffer_size=1, relay_buffer_size=1)
        stream = tok.tokenize(long_text)
        next(stream)
        workers = stream.workers
        del stream
        gc.collect()
        for worker in workers:
            worker.join(timeout=5)
        assert all(not w.is_alive() for w in workers)

    def test_empty_classmethod(self):
        stream = TokenStream.empty()
        assert stream.closed
        assert list(stream) == []


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestWordCounts:
    """Tests for collect_tokens and word_counts."""

    def test_word_counts_default_tokenizer(self):
        assert word_counts("Кот кот и МЫШЬ") == Counter({"кот": 2, "мышь": 1})

    def test_word_counts_empty(self):
        assert word_counts("") == Counter()

    def test_word_counts_custom_tokenizer(self):
        tok = StreamTokenizer(filters=[])
        assert word_counts("и и кот", tok) == Counter({"и": 2, "кот": 1})

    def test_collect_tokens_accepts_plain_tokenizer(self):
        class SplitTokenizer:
            def tokenize(self, text: str) -> list[str]:
                return text.split()

        assert collect_tokens(SplitTokenizer(), "a b") == ["a", "b"]
