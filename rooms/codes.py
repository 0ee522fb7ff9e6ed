"""
Short numeric access codes.

A code is the only credential a receiver needs, so candidates come from the
system CSPRNG. Uniqueness is enforced by retrying against the set of live codes;
the caller holds the registry lock while generating so check-and-reserve is atomic.
"""

from __future__ import annotations

import secrets
from typing import Container, Optional

from .exceptions import CodeSpaceExhausted

DEFAULT_CODE_DIGITS = 4

# Random draws before falling back to picking from the free codes directly.
MAX_RANDOM_ATTEMPTS = 64


class CodeGenerator:
    """Produces fixed-width numeric codes with a non-zero leading digit."""

    def __init__(self, digits: int = DEFAULT_CODE_DIGITS, rng: Optional[secrets.SystemRandom] = None):
        if digits < 1:
            raise ValueError("digits must be >= 1")
        self.digits = digits
        self.low = 10 ** (digits - 1)
        self.high = 10**digits - 1
        self._rng = rng or secrets.SystemRandom()

    @property
    def capacity(self) -> int:
        return self.high - self.low + 1

    def generate(self, taken: Container[str]) -> str:
        for _ in range(MAX_RANDOM_ATTEMPTS):
            code = str(self._rng.randint(self.low, self.high))
            if code not in taken:
                return code

        # Nearly full: sample from what is left instead of retrying blindly.
        free = [str(n) for n in range(self.low, self.high + 1) if str(n) not in taken]
        if not free:
            raise CodeSpaceExhausted(f"all {self.capacity} codes of width {self.digits} are in use")
        return self._rng.choice(free)
