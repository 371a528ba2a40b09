"""Time-based identifier generation."""

import time
from typing import Callable


class IdGenerator:
    """
    Issues strictly increasing integer ids based on the wall clock.

    Ids are milliseconds since the epoch; when the clock has not moved (or
    moved backwards) the previous id plus one is used instead.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def observe(self, *ids) -> None:
        """Make sure future ids are greater than any integer id seen here."""
        for value in ids:
            if isinstance(value, int) and not isinstance(value, bool) and value > self._last:
                self._last = value
