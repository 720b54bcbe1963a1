"""
Randomness source.

A seeded generator gives reproducible games; without a seed the
generator is seeded from OS entropy.
"""

from __future__ import annotations
import random


def make_rng(seed: int | None = None) -> random.Random:
    """Create a generator producing uniform floats in [0, 1) via .random()."""
    if seed is None:
        return random.Random()
    return random.Random(seed)
