"""Shared constants for GOST R 34.10-94 parameters and the collective blind signature.

Values follow the GOST R 34.10-94 procedure A description where one exists.
"""

MIN_PRIME_BITS: int = 3  # lowest_prime needs room for candidates above 2^(bits-1)
MIN_DOMAIN_BITS: int = 64  # smaller p is not cryptographically sound
CHAIN_CUTOFF_BITS: int = 16  # bit-length chain stops at the first value <= 16

LCG_MULTIPLIER: int = 19381
LCG_MODULUS: int = 1 << 16
LCG_BLOCK_BITS: int = 16

PRIVATE_KEY_BYTES: int = 128  # private keys live in (0, 2^1024)

HASH_ALGORITHM: str = "SHA256"
HASH_CHUNK_SIZE: int = 64 * 1024

SIGNATURE_SUFFIX: str = ".sgn"
RECORD_SUFFIX: str = ".dat"
RECORD_LABELS = ("y", "a", "p", "q")

DEFAULT_ROUND_TIMEOUT: float = 5.0
