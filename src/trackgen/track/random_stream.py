"""
Random stream - Seedable, reproducible pseudo-random sequence.

A small linear congruential generator. The constants are fixed, so a
seed always yields the same sequence of values.
"""

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280


class RandomStream:
    """Deterministic random stream producing floats in [0, 1).

    The stream is a pure function of its integer state: two streams with
    the same seed yield the same values forever.

    Usage:
        rand = RandomStream(42)
        value = rand.next()
    """

    def __init__(self, seed: int = 0):
        """Initialize stream.

        Args:
            seed: Integer seed
        """
        self._state: int = int(seed)

    @classmethod
    def from_state(cls, state: int) -> "RandomStream":
        """Resume a stream from a previously captured state."""
        return cls(state)

    @property
    def state(self) -> int:
        """Current internal state."""
        return self._state

    def set_seed(self, seed: int) -> None:
        """Reset the stream to a seed."""
        self._state = int(seed)

    def next(self) -> float:
        """Advance the stream and return the next value in [0, 1)."""
        self._state = (self._state * MULTIPLIER + INCREMENT) % MODULUS
        return self._state / MODULUS

    def uniform(self, low: float, high: float) -> float:
        """Draw one value in [low, high)."""
        return low + self.next() * (high - low)

    def chance(self, threshold: float) -> bool:
        """Draw one value and test whether it exceeds threshold."""
        return self.next() > threshold

    def __call__(self) -> float:
        return self.next()
