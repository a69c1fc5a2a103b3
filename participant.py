"""Signer role for the collective blind signature, synchronous and threaded."""

from __future__ import annotations

import threading
import time
from typing import Dict

from crypto_manager import CryptoManager
from data_models import DomainParameters, KeyPair, SignedMessage, SignerContribution
from errors import InvalidParameter
from network_simulator import SigningNetwork
from number_theory import random_in_range
from secure_rng import SecureRandom


class CollectiveSigner:
    """签名者角色 / Holds one private key and the per-round ephemeral k_i.

    Only rho_i and s_i leave this object; k_i and the private key do not.
    """

    def __init__(
        self,
        signer_id: int,
        key_pair: KeyPair,
        params: DomainParameters,
        rng: SecureRandom | None = None,
    ) -> None:
        self.signer_id = signer_id
        self.key_pair = key_pair
        self.params = params
        self.rng = rng or SecureRandom(f"signer-{signer_id}")
        self._k: int | None = None

    @property
    def public_key(self) -> int:
        return self.key_pair.public_key

    @property
    def has_pending_round(self) -> bool:
        return self._k is not None

    def contribute(self) -> SignerContribution:
        """生成新的临时值 / Sample a fresh k_i in [1, q) and publish rho_i = a^k_i mod p."""
        self._k = random_in_range(self.params.q, self.rng)
        rho = pow(self.params.a, self._k, self.params.p)
        return SignerContribution(signer_id=self.signer_id, rho=rho)

    def finalize_share(self, r_link: int) -> int:
        """s_i = (k_i + x_i * r_link) mod q. k_i is destroyed afterwards."""
        if self._k is None:
            raise InvalidParameter(f"signer {self.signer_id} has no pending contribution for this round")
        q = self.params.q
        k, self._k = self._k, None
        return (k + (self.key_pair.private_key * r_link) % q) % q


class DistributedSigner(threading.Thread):
    """分布式签名者 / Signer thread exchanging authenticated messages with the coordinator."""

    def __init__(
        self,
        signer_id: int,
        key_pair: KeyPair,
        params: DomainParameters,
        network: SigningNetwork,
        timeout: float = 5.0,
    ) -> None:
        super().__init__(name=f"signer-{signer_id}", daemon=True)
        self.signer_id = signer_id
        self.network = network
        self.timeout = timeout

        self.rng = SecureRandom(f"participant-{signer_id}")
        self.signer = CollectiveSigner(signer_id, key_pair, params, rng=self.rng.derive_child("nonce"))

        self.contribute_time: float = 0
        self.share_time: float = 0
        self.error: Exception | None = None

        self.signing_private_key, self.signing_public_key = CryptoManager.generate_signature_keypair()
        self.network.register_signer(signer_id, self.signing_public_key)

    def _send(self, kind: str, payload: Dict[str, int]) -> None:
        message = SignedMessage(sender_id=self.signer_id, kind=kind, payload=payload)
        CryptoManager.sign_message(message, self.signing_private_key)
        self.network.send_to_coordinator(message)

    def run(self) -> None:
        """签名者主流程 / Commitment, then wait for r_link, then the share."""
        try:
            self.publish_commitment()
            self.publish_share()
        except Exception as exc:
            self.error = exc
            print(f"[Signer {self.signer_id}] Error: {exc}")

    def publish_commitment(self) -> None:
        start_time = time.time()
        contribution = self.signer.contribute()
        self.contribute_time = time.time() - start_time
        self._send("commitment", {"rho": contribution.rho, "public_key": self.signer.public_key})
        print(f"[Signer {self.signer_id}] Commitment sent ({self.contribute_time*1000:.2f} ms)")

    def publish_share(self) -> None:
        r_link = self.network.receive_r_link(self.signer_id, timeout=self.timeout)
        if r_link is None:
            raise TimeoutError(f"signer {self.signer_id} did not receive the linking value")

        start_time = time.time()
        share = self.signer.finalize_share(r_link)
        self.share_time = time.time() - start_time
        self._send("share", {"s": share})
        print(f"[Signer {self.signer_id}] Share sent ({self.share_time*1000:.2f} ms)")
