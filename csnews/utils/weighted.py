"""Weighted random selection shared by profile, pattern and delay pickers."""

from __future__ import annotations

import random
from typing import Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")


def weighted_choice(
    pairs: Iterable[tuple[T, Optional[float]]],
    rng: random.Random | None = None,
) -> T:
    """Pick one item from ``(item, weight)`` pairs.

    A weight of None counts as 1. Draws ``r`` uniformly in [0, total) and
    returns the first item whose cumulative weight reaches ``r``.

    Raises:
        ValueError: if ``pairs`` is empty or every weight is zero.
    """
    items: Sequence[tuple[T, float]] = [
        (item, 1.0 if weight is None else float(weight)) for item, weight in pairs
    ]
    if not items:
        raise ValueError("weighted_choice() needs at least one item")

    total = sum(weight for _, weight in items)
    if total <= 0:
        raise ValueError("weighted_choice() needs a positive total weight")

    r = (rng or random).random() * total
    cumulative = 0.0
    for item, weight in items:
        if weight <= 0:
            continue
        cumulative += weight
        if cumulative >= r:
            return item

    # Float rounding can leave r a hair above the final cumulative sum
    return next(item for item, weight in reversed(items) if weight > 0)
