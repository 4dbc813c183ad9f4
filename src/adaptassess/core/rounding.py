"""Rounding helpers matching the portal's half-up percentage semantics."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage_of(score: float, max_score: float) -> int:
    """Return ``score / max_score`` as a percentage in ``[0, 100]``.

    A zero (or negative) ``max_score`` yields 0 rather than NaN.
    """
    if max_score <= 0:
        return 0
    return max(0, min(100, round_half_up(score / max_score * 100)))
