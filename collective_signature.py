"""Collective blind signature over GOST R 34.10-94 domain parameters.

N signers produce one (r, s) pair that verifies against y = prod(y_i) mod p.
The coordinator blinds the aggregate commitment with a fresh pair (u, eps):

    rho'   = prod(rho_i) * y^u * a^eps mod p
    r      = rho' mod q
    r_link = r * H^-1 + u mod q
    s_i    = k_i + x_i * r_link mod q
    s      = H * (sum(s_i) + eps) mod q

Verification recomputes rho' as (y^-1)^(r/H) * a^(s/H) mod p and compares it
with r modulo q.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from constants import PRIVATE_KEY_BYTES
from data_models import DomainParameters, KeyPair, Signature, VerificationRecord
from errors import InvalidParameter, NotInvertible
from gost_params import generate_domain_parameters
from number_theory import mod_inverse, random_in_range
from participant import CollectiveSigner
from secure_rng import SecureRandom

Participant = Union[KeyPair, CollectiveSigner]


class CollectiveBlindSignature:
    """Coordinator for key issuance, collective signing and verification."""

    def __init__(self, params: DomainParameters, rng: SecureRandom | None = None) -> None:
        self.params = params
        self.rng = rng or SecureRandom("coordinator")

    @classmethod
    def from_bits(cls, bits: int, rng: SecureRandom | None = None) -> "CollectiveBlindSignature":
        return cls(generate_domain_parameters(bits, rng=rng), rng=rng)

    def issue_key_pair(self) -> KeyPair:
        """Private key from 128 random bytes (resampled while zero), public key a^x mod p."""
        private_key = 0
        while private_key <= 0:
            private_key = int.from_bytes(self.rng.token_bytes(PRIVATE_KEY_BYTES), "big")
        return KeyPair(private_key=private_key, public_key=pow(self.params.a, private_key, self.params.p))

    def make_signers(self, participants: Sequence[Participant]) -> List[CollectiveSigner]:
        """Wrap bare key pairs in signer objects; existing signers pass through."""
        return [
            item
            if isinstance(item, CollectiveSigner)
            else CollectiveSigner(index, item, self.params, rng=self.rng.derive_child(f"signer-{index}"))
            for index, item in enumerate(participants, 1)
        ]

    # —— Coordinator steps, shared with the distributed round ——

    def aggregate_public_key(self, public_keys: Sequence[int]) -> int:
        p = self.params.p
        y = 1
        for public_key in public_keys:
            y = (y * public_key) % p
        return y

    def aggregate_commitments(self, rhos: Sequence[int]) -> int:
        p = self.params.p
        rho = 1
        for value in rhos:
            rho = (rho * value) % p
        return rho

    def blind(self, rho: int, y: int) -> Tuple[int, int, int]:
        """Return (first_part, u, eps) for a fresh blinding pair."""
        p, q, a = self.params.as_tuple()
        u = random_in_range(q, self.rng)
        eps = random_in_range(q, self.rng)
        blinded = (rho * pow(y, u, p)) % p * pow(a, eps, p) % p
        return blinded % q, u, eps

    def linking_value(self, first_part: int, document_hash: int, u: int) -> int:
        q = self.params.q
        return (first_part * mod_inverse(document_hash, q) + u) % q

    def aggregate_shares(self, shares: Sequence[int]) -> int:
        q = self.params.q
        total = 0
        for share in shares:
            total = (total + share) % q
        return total

    def second_part(self, document_hash: int, share_sum: int, eps: int) -> int:
        q = self.params.q
        return (document_hash % q) * ((share_sum + eps) % q) % q

    def make_record(self, y: int, public_keys: Sequence[int]) -> VerificationRecord:
        return VerificationRecord(
            y=y,
            a=self.params.a,
            p=self.params.p,
            q=self.params.q,
            public_keys=tuple(public_keys),
        )

    def check_document_hash(self, document_hash: int) -> None:
        if document_hash < 0:
            raise InvalidParameter("document hash must be non-negative")
        if document_hash % self.params.q == 0:
            raise NotInvertible(document_hash, self.params.q)

    def sign(
        self,
        participants: Sequence[Participant],
        document_hash: int,
    ) -> Tuple[Signature, VerificationRecord]:
        if not participants:
            raise InvalidParameter("at least one participant is required to sign")
        self.check_document_hash(document_hash)

        signers = self.make_signers(participants)
        public_keys = [signer.public_key for signer in signers]
        y = self.aggregate_public_key(public_keys)

        contributions = [signer.contribute() for signer in signers]
        rho = self.aggregate_commitments([contribution.rho for contribution in contributions])

        first_part, u, eps = self.blind(rho, y)
        r_link = self.linking_value(first_part, document_hash, u)

        share_sum = self.aggregate_shares([signer.finalize_share(r_link) for signer in signers])
        signature = Signature(first_part, self.second_part(document_hash, share_sum, eps))
        return signature, self.make_record(y, public_keys)

    @staticmethod
    def verify(document_hash: int, signature: Signature, record: VerificationRecord) -> bool:
        """Predicate: never raises for malformed or non-invertible input."""
        p, q, a, y = record.p, record.q, record.a, record.y
        r, s = signature.first_part, signature.second_part
        if q < 2 or p < 2 or document_hash < 0:
            return False
        if r < 0 or s < 0 or r >= q or s >= q:
            return False

        try:
            h_inv = mod_inverse(document_hash, q)
            y_inv = mod_inverse(y, p)
        except (NotInvertible, InvalidParameter):
            return False

        blinded = pow(y_inv, r * h_inv, p) * pow(a, s * h_inv, p) % p
        return blinded % q == r
