"""Exception types raised by the number theory, generation and signing layers."""


class InvalidParameter(ValueError):
    """Caller broke an input contract (bit length, participant set, modulus, bound)."""


class NotInvertible(ArithmeticError):
    """No modular inverse exists because gcd(a, m) != 1."""

    def __init__(self, value: int, modulus: int) -> None:
        super().__init__(f"{value} has no inverse modulo {modulus}")
        self.value = value
        self.modulus = modulus


class MalformedRecord(ValueError):
    """Persisted signature or verification record text could not be parsed."""


class OperationCancelled(RuntimeError):
    """A long-running search observed its cancellation event."""
