"""Configuration for the tokenizer and classifier.

Values come from dataclass defaults, optionally overridden by environment
variables (a ``.env`` file is loaded first with python-dotenv and never
overrides variables already set in the process):

    BAYES_BUFFER_SIZE        scanner queue capacity (default 100)
    BAYES_RELAY_BUFFER_SIZE  filter/map queue capacity (default 50)
    BAYES_WEIGHT_FLOOR       token weight used when a token was never seen
    BAYES_LOG_LEVEL          logging level name used by the CLI
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_WEIGHT_FLOOR = 0.001

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class TokenizerConfig:
    """Queue capacities for the tokenizer pipeline.

    Attributes:
        buffer_size: Capacity of the source (scan) stage output queue.
        relay_buffer_size: Capacity of each filter/map stage output queue.
    """

    buffer_size: int = 100
    relay_buffer_size: int = 50

    def __post_init__(self) -> None:
        for name in ("buffer_size", "relay_buffer_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class ClassifierConfig:
    """Settings for a :class:`~bayes_classifier.classifier.Classifier`.

    Attributes:
        tokenizer: Pipeline queue capacities.
        weight_floor: Weight assigned to a token no category has seen.
        log_level: Logging level name applied by the CLI.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    weight_floor: float = DEFAULT_WEIGHT_FLOOR
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not self.weight_floor > 0:
            raise ValueError(f"weight_floor must be positive, got {self.weight_floor!r}")
        level = self.log_level.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}"
            )
        object.__setattr__(self, "log_level", level)

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClassifierConfig":
        """Build configuration from defaults, ``.env`` and the environment.

        Args:
            env_file: Path of a dotenv file to load. When omitted, python-dotenv
                searches for ``.env`` from the working directory upwards.
            environ: Mapping to read instead of ``os.environ`` (dotenv loading
                is skipped when given).

        Raises:
            ValueError: If a variable is present but not a valid value.
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True), override=False)
            environ = os.environ

        defaults = cls()
        tokenizer = TokenizerConfig(
            buffer_size=_read_int(environ, "BAYES_BUFFER_SIZE", defaults.tokenizer.buffer_size),
            relay_buffer_size=_read_int(
                environ, "BAYES_RELAY_BUFFER_SIZE", defaults.tokenizer.relay_buffer_size
            ),
        )
        return cls(
            tokenizer=tokenizer,
            weight_floor=_read_float(environ, "BAYES_WEIGHT_FLOOR", defaults.weight_floor),
            log_level=environ.get("BAYES_LOG_LEVEL", defaults.log_level),
        )


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
