"""Anonymous display names for learners who have not set one."""

from __future__ import annotations

from collections import deque
import random
from threading import Lock

_DEFAULT_NAMES = [
    "Curious Curie",
    "Nimble Newton",
    "Daring Darwin",
    "Bold Bohr",
    "Fearless Faraday",
    "Lively Lovelace",
    "Eager Euler",
    "Gentle Galileo",
    "Keen Kepler",
    "Patient Pascal",
    "Mighty Meitner",
    "Rapid Ramanujan",
    "Tenacious Turing",
    "Witty Wu",
    "Noble Noether",
    "Hopeful Hopper",
]


class NameAssigner:
    """Hands out randomized display names, cycling before any repeat."""

    def __init__(self, names: list[str] | None = None, rng: random.Random | None = None):
        cleaned = [name.strip() for name in (names or _DEFAULT_NAMES) if name.strip()]
        if not cleaned:
            raise ValueError("Name list cannot be empty.")
        self._names = cleaned
        self._pool: deque[str] = deque()
        self._lock = Lock()
        self._rng = rng or random.Random()
        self._refill_pool()

    def next_name(self) -> str:
        with self._lock:
            if not self._pool:
                self._refill_pool()
            return self._pool.popleft()

    def _refill_pool(self) -> None:
        shuffled = list(self._names)
        self._rng.shuffle(shuffled)
        self._pool.extend(shuffled)
