"""GOST R 34.10-94 domain parameter generation (procedure A).

A chain of primes p_s < ... < p_1 < p_0 is built from a small seed prime.
Each p_i = p_{i+1} * N + 1 is accepted with two modular exponentiations that
certify it, given that p_{i+1} is already prime. Then p = p_0, q = p_1 and
a is any element of order q modulo p.
"""

from __future__ import annotations

import threading
import time
from typing import List, Tuple

from constants import (
    CHAIN_CUTOFF_BITS,
    LCG_BLOCK_BITS,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    MIN_DOMAIN_BITS,
)
from data_models import DomainParameters
from errors import InvalidParameter
from number_theory import check_cancelled, lowest_prime, random_in_range
from secure_rng import SecureRandom


def build_bit_chain(bits: int) -> List[int]:
    """Target bit lengths t_0 = bits, t_{i+1} = t_i // 2 until t_s <= 16."""
    chain = [bits]
    while chain[-1] > CHAIN_CUTOFF_BITS:
        chain.append(chain[-1] >> 1)
    return chain


def lcg_sequence(y0: int, c: int, count: int) -> List[int]:
    """y_{j+1} = (19381 * y_j + c) mod 2^16, returns y_1 .. y_count."""
    values: List[int] = []
    current = y0 % LCG_MODULUS
    for _ in range(count):
        current = (LCG_MULTIPLIER * current + c) % LCG_MODULUS
        values.append(current)
    return values


def pocklington_accepts(candidate: int, smaller_prime: int, multiplier: int) -> bool:
    """Certificate for candidate = smaller_prime * multiplier + 1."""
    return (
        pow(2, smaller_prime * multiplier, candidate) == 1
        and pow(2, multiplier, candidate) != 1
    )


class DomainParameterGenerator:
    """Builds (p, q, a) for a requested bit length of p."""

    def __init__(self, rng: SecureRandom | None = None, verbose: bool = True) -> None:
        self.rng = rng or SecureRandom("gost-params")
        self.verbose = verbose
        self.chain: List[int] = []
        self.primes: List[int] = []

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[GOST] {message}")

    def _seed(self, blocks: int) -> int:
        """Y = sum y_{j+1} * 2^(16 j) from a fresh LCG start and odd increment."""
        c = self.rng.odd_randbits(LCG_BLOCK_BITS)
        y0 = self.rng.randbits(LCG_BLOCK_BITS)
        total = 0
        for j, value in enumerate(lcg_sequence(y0, c, blocks)):
            total += value << (LCG_BLOCK_BITS * j)
        return total

    def extend_prime(
        self,
        target_bits: int,
        smaller_prime: int,
        cancel_event: threading.Event | None = None,
    ) -> Tuple[int, int]:
        """Find a prime of target_bits bits of the form smaller_prime * N + 1.

        Returns (prime, N). The k search and the reseeding are unbounded;
        they terminate with overwhelming probability for realistic sizes.
        """
        blocks = -(-target_bits // LCG_BLOCK_BITS)
        half = 1 << (target_bits - 1)
        limit = 1 << target_bits

        while True:
            check_cancelled(cancel_event, "prime chain level")
            seed = self._seed(blocks)
            n = -(-half // smaller_prime) + (half * seed) // (smaller_prime << (LCG_BLOCK_BITS * blocks))
            if n % 2:
                n += 1

            k = 0
            while True:
                multiplier = n + k
                candidate = smaller_prime * multiplier + 1
                if candidate > limit:
                    # Overshot 2^t: draw a new seed for this level.
                    break
                if pocklington_accepts(candidate, smaller_prime, multiplier):
                    return candidate, multiplier
                k += 2
                if k % 1024 == 0:
                    check_cancelled(cancel_event, "prime certificate search")

    def find_generator(self, p: int, q: int, cancel_event: threading.Event | None = None) -> int:
        """a = f^((p-1)/q) mod p for random f, retried while a == 1."""
        exponent = (p - 1) // q
        while True:
            check_cancelled(cancel_event, "generator search")
            a = pow(random_in_range(p, self.rng), exponent, p)
            if a != 1:
                return a

    def generate(self, bits: int, cancel_event: threading.Event | None = None) -> DomainParameters:
        if bits < MIN_DOMAIN_BITS:
            raise InvalidParameter(
                f"p must have at least {MIN_DOMAIN_BITS} bits to be cryptographically sound, got {bits}"
            )

        start_time = time.time()
        self.chain = build_bit_chain(bits)
        self.primes = [0] * len(self.chain)
        self.primes[-1] = lowest_prime(self.chain[-1], cancel_event)
        self._log(f"Bit chain {self.chain}, seed prime {self.primes[-1]}")

        for level in range(len(self.chain) - 2, -1, -1):
            prime, multiplier = self.extend_prime(self.chain[level], self.primes[level + 1], cancel_event)
            self.primes[level] = prime
            self._log(f"Level {level}: {prime.bit_length()}-bit prime (N = {multiplier})")

        p, q = self.primes[0], self.primes[1]
        a = self.find_generator(p, q, cancel_event)
        self._log(f"Domain parameters ready in {(time.time() - start_time)*1000:.2f} ms")
        return DomainParameters(p=p, q=q, a=a)


def generate_domain_parameters(
    bits: int,
    rng: SecureRandom | None = None,
    cancel_event: threading.Event | None = None,
    verbose: bool = True,
) -> DomainParameters:
    return DomainParameterGenerator(rng, verbose=verbose).generate(bits, cancel_event)
