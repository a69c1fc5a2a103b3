"""Labelled handles over the operating system CSPRNG.

Each signer gets its own handle so no random state is shared between threads.
"""

from __future__ import annotations

import secrets


class SecureRandom:
    """Cryptographically secure random source with a diagnostic label."""

    def __init__(self, label: str = "default") -> None:
        self.label = label
        self._system = secrets.SystemRandom()

    def __repr__(self) -> str:
        return f"SecureRandom({self.label!r})"

    def derive_child(self, label: str) -> "SecureRandom":
        """Independent handle for a sub-component, labelled under this one."""
        return SecureRandom(f"{self.label}/{label}")

    def token_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return self._system.randint(low, high)

    def randbits(self, bits: int) -> int:
        return self._system.getrandbits(bits)

    def odd_randbits(self, bits: int) -> int:
        """Random odd integer below 2^bits."""
        return self.randbits(bits) | 1
