"""
Random draw helpers shared by the generators

Every generator takes a ``random.Random`` so runs can be seeded.
"""

import random
from typing import Sequence, Tuple, TypeVar

T = TypeVar("T")


def weighted_choice(rng: random.Random, options: Sequence[Tuple[T, float]], default: T) -> T:
    """
    Cumulative-weight draw: the first option whose running weight reaches the
    draw wins. Falls back to ``default`` if the weights sum below the draw.
    """
    draw = rng.random()
    cumulative = 0.0
    for value, weight in options:
        cumulative += weight
        if draw <= cumulative:
            return value
    return default


def jitter(rng: random.Random, span: float) -> float:
    """Uniform offset in [-span/2, span/2)"""
    return (rng.random() - 0.5) * span


def chance(rng: random.Random, threshold: float) -> bool:
    """True when a uniform draw exceeds ``threshold``"""
    return rng.random() > threshold


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
