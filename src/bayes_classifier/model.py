"""Token/category frequency statistics shared between trainers and readers.

``FrequencyModel`` holds two maps that only ever grow:

- ``token_counts``: token -> {category -> times recorded}
- ``training_counts``: category -> number of training events

Both maps are guarded by a single reader/writer lock and must always be
read and written together under one acquisition, so no computation ever
sees tokens recorded for a training event whose category count has not
been bumped yet. Keep the one-lock design if this class is refactored.

The accessors below do not lock; callers wrap a whole computation in
``reading()`` or ``writing()``.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager

from .config import DEFAULT_WEIGHT_FLOOR


# ---------------------------------------------------------------------------
# Reader/Writer Lock
# ---------------------------------------------------------------------------


class ReadWriteLock:
    """Reader-preferring reader/writer lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. There is no timeout and no fairness policy, so a continuous
    stream of readers can starve a writer. Read acquisition may nest in
    the same thread; write acquisition may not.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    def acquire_read(self) -> None:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            while self._writing or self._readers > 0:
                self._cond.wait()
            self._writing = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writing:
                raise RuntimeError("release_write() called without a matching acquire")
            self._writing = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


# ---------------------------------------------------------------------------
# Frequency Model
# ---------------------------------------------------------------------------


class FrequencyModel:
    """Accumulated token/category counts for a naive-Bayes classifier.

    Example::

        model = FrequencyModel()
        with model.writing():
            model.record("кот", "animals")
            model.record_category("animals")
        with model.reading():
            model.count_in_category("кот", "animals")   # 1

    Args:
        weight_floor: Weight reported by ``total_weight`` for a token that
            no known category has recorded.
    """

    def __init__(self, weight_floor: float = DEFAULT_WEIGHT_FLOOR) -> None:
        if not weight_floor > 0:
            raise ValueError(f"weight_floor must be positive, got {weight_floor!r}")
        self.weight_floor = weight_floor
        self.token_counts: defaultdict[str, defaultdict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self.training_counts: defaultdict[str, int] = defaultdict(int)
        self.lock = ReadWriteLock()

    @contextmanager
    def reading(self) -> Iterator["FrequencyModel"]:
        """Hold the shared lock for the duration of a read computation."""
        with self.lock.read_locked():
            yield self

    @contextmanager
    def writing(self) -> Iterator["FrequencyModel"]:
        """Hold the exclusive lock for the duration of an update."""
        with self.lock.write_locked():
            yield self

    # -- write path ---------------------------------------------------------

    def record(self, token: str, category: str) -> None:
        """Count one occurrence of ``token`` in a ``category`` document."""
        self.token_counts[token][category] += 1

    def record_category(self, category: str) -> None:
        """Count one training event for ``category``."""
        self.training_counts[category] += 1

    # -- read path ----------------------------------------------------------

    def count_in_category(self, token: str, category: str) -> int:
        per_category = self.token_counts.get(token)
        if per_category is None:
            return 0
        return per_category.get(category, 0)

    def total_seen(self, token: str) -> int:
        """Occurrences of ``token`` summed over all known categories."""
        per_category = self.token_counts.get(token)
        if per_category is None:
            return 0
        return sum(per_category.get(cat, 0) for cat in self.training_counts)

    def total_weight(self, token: str) -> float:
        """Like ``total_seen`` but never zero: unseen tokens get ``weight_floor``."""
        seen = self.total_seen(token)
        return float(seen) if seen > 0 else self.weight_floor

    def categories(self) -> set[str]:
        return set(self.training_counts)

    def training_count(self, category: str) -> int:
        """Number of training events (not tokens) recorded for ``category``."""
        return self.training_counts.get(category, 0)

    def total_training_events(self) -> int:
        return sum(self.training_counts.values())

    def vocabulary_size(self) -> int:
        return len(self.token_counts)

    def to_dict(self) -> dict:
        """Plain-dict copy of both maps (take it under ``reading()``)."""
        return {
            "training_counts": dict(sorted(self.training_counts.items())),
            "token_counts": {
                token: dict(sorted(per_category.items()))
                for token, per_category in sorted(self.token_counts.items())
            },
        }

    def __repr__(self) -> str:
        return (
            f"FrequencyModel(categories={len(self.training_counts)}, "
            f"vocabulary={len(self.token_counts)})"
        )
