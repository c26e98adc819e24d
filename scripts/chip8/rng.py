"""byte sources for the RND instruction

The CPU accepts any zero-argument callable returning an int in 0..255.
"""
import itertools
import random


class RandomSource:
    def __init__(self, seed=None):
        self._random = random.Random(seed)

    def __call__(self) -> int:
        return self._random.randint(0, 255)


class FixedSequence:
    """replays the given bytes over and over, handy to make RND predictable"""

    def __init__(self, values):
        values = list(values)
        if not values:
            raise ValueError("FixedSequence needs at least one value")
        if any(not 0 <= v <= 0xFF for v in values):
            raise ValueError("FixedSequence values must be bytes (0..255)")
        self._values = itertools.cycle(values)

    def __call__(self) -> int:
        return next(self._values)
