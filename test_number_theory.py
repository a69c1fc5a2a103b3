import threading

import pytest
from sympy import isprime, nextprime

from errors import InvalidParameter, NotInvertible, OperationCancelled
from number_theory import atkin_is_prime, extended_gcd, lowest_prime, mod_inverse, random_in_range
from secure_rng import SecureRandom


@pytest.mark.parametrize("bits", range(3, 21))
def test_lowest_prime_is_smallest_prime_of_bit_length(bits):
    prime = lowest_prime(bits)
    assert prime == nextprime(2 ** (bits - 1))
    assert prime.bit_length() == bits


def test_lowest_prime_rejects_small_bit_lengths():
    with pytest.raises(InvalidParameter):
        lowest_prime(2)


def test_lowest_prime_observes_cancellation():
    event = threading.Event()
    event.set()
    with pytest.raises(OperationCancelled):
        lowest_prime(16, cancel_event=event)


def test_atkin_test_agrees_with_sympy():
    for n in range(7, 20000, 2):
        if n % 3 and n % 5:
            assert atkin_is_prime(n) == isprime(n), n


def test_atkin_rejects_squares_of_primes():
    for prime in (7, 11, 13, 101, 113):
        assert not atkin_is_prime(prime * prime)


@pytest.mark.parametrize(
    "a, b",
    [(240, 46), (46, 240), (0, 5), (5, 0), (17, 3120), (2 ** 127 - 1, 2 ** 89 - 1), (12, 18)],
)
def test_extended_gcd_bezout_identity(a, b):
    g, x, y = extended_gcd(a, b)
    assert a * x + b * y == g
    assert g >= 0
    if a or b:
        assert a % g == 0 and b % g == 0


@pytest.mark.parametrize("a, m", [(3, 7), (17, 3120), (12345, 2 ** 31 - 1), (-3, 7), (10, 7)])
def test_mod_inverse_round_trips(a, m):
    inverse = mod_inverse(a, m)
    assert 0 <= inverse < m
    assert (a * inverse) % m == 1


def test_mod_inverse_not_invertible():
    with pytest.raises(NotInvertible):
        mod_inverse(2, 4)
    with pytest.raises(NotInvertible):
        mod_inverse(0, 11)


def test_mod_inverse_rejects_bad_modulus():
    with pytest.raises(InvalidParameter):
        mod_inverse(3, 1)


def test_mod_inverse_deep_inputs_do_not_recurse():
    # Consecutive Fibonacci numbers are the worst case for Euclid.
    a, b = 1, 1
    for _ in range(3000):
        a, b = b, a + b
    assert (a * mod_inverse(a, b)) % b == 1


@pytest.mark.parametrize("bound", [2, 3, 255, 256, 257, 65537, 2 ** 64 + 1])
def test_random_in_range_stays_in_bounds(bound):
    rng = SecureRandom("test")
    for _ in range(300):
        value = random_in_range(bound, rng)
        assert 1 <= value < bound


def test_random_in_range_rejects_small_bound():
    with pytest.raises(InvalidParameter):
        random_in_range(1)


def test_random_in_range_is_not_constant():
    values = {random_in_range(2 ** 32) for _ in range(50)}
    assert len(values) > 1
