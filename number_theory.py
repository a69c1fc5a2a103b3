"""Number theory primitives: smallest prime of a bit length, modular inverse, bounded sampling."""

from __future__ import annotations

import math
import threading
from typing import Tuple

from constants import MIN_PRIME_BITS
from errors import InvalidParameter, NotInvertible, OperationCancelled
from secure_rng import SecureRandom

_default_rng = SecureRandom("number-theory")


def check_cancelled(cancel_event: threading.Event | None, where: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelled(f"{where} cancelled")


def _is_square(value: int) -> bool:
    if value <= 0:
        return False
    root = math.isqrt(value)
    return root * root == value


def _is_square_free(n: int) -> bool:
    # Candidates are already coprime to 2, 3 and 5.
    d = 7
    while d * d <= n:
        if n % (d * d) == 0:
            return False
        d += 2
    return True


def _atkin_representations(n: int) -> int:
    """Number of positive (x, y) solutions of the quadratic form Atkin assigns to n."""
    count = 0
    if n % 4 == 1:
        # 4x^2 + y^2 = n
        x = 1
        while 4 * x * x < n:
            if _is_square(n - 4 * x * x):
                count += 1
            x += 1
    elif n % 12 == 7:
        # 3x^2 + y^2 = n
        x = 1
        while 3 * x * x < n:
            if _is_square(n - 3 * x * x):
                count += 1
            x += 1
    elif n % 12 == 11:
        # 3x^2 - y^2 = n with x > y >= 1, so n/3 < x^2 < n/2
        x = math.isqrt(n // 3)
        while 2 * x * x < n:
            rest = 3 * x * x - n
            if rest > 0 and _is_square(rest):
                count += 1
            x += 1
    return count


def atkin_is_prime(n: int) -> bool:
    """Sieve-of-Atkin candidate test for n coprime to 2, 3 and 5.

    n is prime exactly when it is square-free and its quadratic form has an
    odd number of positive representations.
    """
    return _atkin_representations(n) % 2 == 1 and _is_square_free(n)


def lowest_prime(bits: int, cancel_event: threading.Event | None = None) -> int:
    """Smallest prime p with 2^(bits-1) <= p < 2^bits."""
    if bits < MIN_PRIME_BITS:
        raise InvalidParameter(f"bit length must be at least {MIN_PRIME_BITS}, got {bits}")

    upper = 1 << bits
    candidate = (1 << (bits - 1)) + 1
    while candidate < upper:
        check_cancelled(cancel_event, "lowest prime search")
        if candidate in (3, 5):
            return candidate
        if candidate % 2 and candidate % 3 and candidate % 5 and atkin_is_prime(candidate):
            return candidate
        candidate += 1
    # Unreachable for bits >= 3 (Bertrand's postulate).
    return candidate


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """Return (g, x, y) with a*x + b*y == g == gcd(a, b)."""
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_x, x = x, old_x - quotient * x
        old_y, y = y, old_y - quotient * y
    if old_r < 0:
        old_r, old_x, old_y = -old_r, -old_x, -old_y
    return old_r, old_x, old_y


def mod_inverse(a: int, m: int) -> int:
    """Inverse of a modulo m in [0, m)."""
    if m < 2:
        raise InvalidParameter(f"modulus must be at least 2, got {m}")
    g, x, _ = extended_gcd(a, m)
    if g != 1:
        raise NotInvertible(a, m)
    return ((x % m) + m) % m


def random_in_range(upper_bound: int, rng: SecureRandom | None = None) -> int:
    """CSPRNG integer in [1, upper_bound).

    The byte length is drawn first, so values are in range but not exactly
    uniform across the interval. Good enough for nonces and blinding factors.
    """
    if upper_bound < 2:
        raise InvalidParameter(f"upper bound must be at least 2, got {upper_bound}")
    rng = rng or _default_rng

    max_len = max(1, ((upper_bound - 1).bit_length() + 7) // 8)
    size = rng.randint(1, max_len)
    while True:
        value = int.from_bytes(rng.token_bytes(size), "big")
        if 0 < value < upper_bound:
            return value
