"""Strategies for combining consideration scores into one utility value.

Every factory returns a callable taking the ordered list of scores. All of
them return MIN_SCORE for an empty list. The final MIN_SCORE floor on an
action's utility is applied by UtilityAction.calculate_utility.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeAlias

from vanguard.config import MIN_SCORE

logger = logging.getLogger(__name__)

Aggregator: TypeAlias = Callable[[Sequence[float]], float]


def average_aggregate() -> Aggregator:
    def aggregate(scores: Sequence[float]) -> float:
        if not scores:
            return MIN_SCORE
        return sum(scores) / len(scores)

    return aggregate


def weighted_average_aggregate(weights: Sequence[float]) -> Aggregator:
    """Weighted mean. Falls back to the plain mean on a length mismatch."""
    weights = tuple(weights)
    fallback = average_aggregate()

    def aggregate(scores: Sequence[float]) -> float:
        if not scores:
            return MIN_SCORE
        if len(weights) != len(scores):
            logger.warning(
                "Weighted aggregator has %d weights for %d scores; "
                "using plain average",
                len(weights),
                len(scores),
            )
            return fallback(scores)

        total_weight = sum(weights)
        if total_weight == 0:
            return MIN_SCORE
        weighted = sum(s * w for s, w in zip(scores, weights, strict=True))
        return weighted / total_weight

    return aggregate


def product_aggregate() -> Aggregator:
    """Multiply scores. Any score at or below MIN_SCORE vetoes the action."""

    def aggregate(scores: Sequence[float]) -> float:
        if not scores:
            return MIN_SCORE
        product = 1.0
        for score in scores:
            product *= score
            if product <= MIN_SCORE:
                return MIN_SCORE
        return product

    return aggregate


def min_aggregate() -> Aggregator:
    def aggregate(scores: Sequence[float]) -> float:
        if not scores:
            return MIN_SCORE
        return max(MIN_SCORE, min(scores))

    return aggregate


def max_aggregate() -> Aggregator:
    def aggregate(scores: Sequence[float]) -> float:
        if not scores:
            return MIN_SCORE
        return max(scores)

    return aggregate
