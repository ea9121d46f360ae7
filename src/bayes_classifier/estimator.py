"""Weighted naive-Bayes scoring over a frequency model.

Scores are plain products of per-token probabilities (no log space), so
long documents shrink towards zero; only their relative order matters.

For a token ``t`` and category ``c`` with ``n`` known categories:

    token_prob(t, c)    = count(t, c) / training_events(c)      (0 if none)
    weighted_prob(t, c) = (weight(t) / n + seen(t) * token_prob(t, c))
                          / (1 + seen(t))
    text_prob(d, c)     = product of weighted_prob(t, c) over tokens of d
    score(d, c)         = text_prob(d, c) / n

``seen(t)`` is the raw count of ``t`` across all categories and
``weight(t)`` the same count floored to a small positive value, so an
unseen token still contributes a tiny uniform term instead of zeroing the
product. The denominator of ``token_prob`` counts training events, not
recorded tokens.

Every method reads the model without locking; run a whole computation
inside ``model.reading()``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .model import FrequencyModel
from .tokenizer import Tokenizer, collect_tokens


class ProbabilityEstimator:
    """Compute per-token, per-document and per-category scores.

    Args:
        model: Frequency statistics to read.
        tokenizer: Tokenizer used to split documents for ``text_prob``.
    """

    def __init__(self, model: FrequencyModel, tokenizer: Tokenizer) -> None:
        self.model = model
        self.tokenizer = tokenizer

    def token_prob(self, token: str, category: str) -> float:
        training = self.model.training_count(category)
        if training == 0:
            return 0.0
        return self.model.count_in_category(token, category) / training

    def weighted_prob(self, token: str, category: str) -> float:
        """Blend the token's overall weight with its rate in ``category``.

        The category-specific rate dominates as the token is seen more
        often; an unknown token falls back to ``weight / n``.
        """
        num_categories = len(self.model.training_counts)
        if num_categories == 0:
            return 0.0
        total_seen = self.model.total_seen(token)
        assumed_prob = 1.0 / num_categories
        prior = self.model.total_weight(token) * 1.0 * assumed_prob
        return (prior + total_seen * self.token_prob(token, category)) / (1.0 + total_seen)

    def tokens_prob(self, tokens: Iterable[str], category: str) -> float:
        """Product of ``weighted_prob`` over ``tokens`` (1.0 when empty)."""
        prob = 1.0
        for token in tokens:
            prob *= self.weighted_prob(token, category)
        return prob

    def text_prob(self, document: str, category: str) -> float:
        """Likelihood of ``document`` under ``category``."""
        return self.tokens_prob(collect_tokens(self.tokenizer, document), category)

    def category_prior(self) -> float:
        """Uniform prior ``1 / n`` over the known categories (0 if none)."""
        num_categories = len(self.model.training_counts)
        return 1.0 / num_categories if num_categories else 0.0

    def score(self, document: str, category: str) -> float:
        return self.text_prob(document, category) * self.category_prior()

    def scores(self, document: str) -> dict[str, float]:
        """Score ``document`` against every known category.

        Tokenizes once and reuses the tokens for each category, giving the
        same values as calling ``score`` per category.

        Returns:
            Dict of {category: score} in label order.
        """
        categories = sorted(self.model.training_counts)
        if not categories:
            return {}
        tokens = collect_tokens(self.tokenizer, document)
        prior = self.category_prior()
        return {cat: self.tokens_prob(tokens, cat) * prior for cat in categories}

    @staticmethod
    def best(scores: Mapping[str, float]) -> tuple[str, float]:
        """Pick the category with the strictly greatest positive score.

        Ties go to the lexicographically smallest label. Returns ``("", 0.0)``
        when no score is above zero.
        """
        best_category = ""
        best_score = 0.0
        for category in sorted(scores):
            score = scores[category]
            if score > best_score:
                best_category = category
                best_score = score
        return best_category, best_score
