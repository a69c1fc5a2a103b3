"""Hashing and message authentication utilities for the collective signature."""

import json
from pathlib import Path
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from constants import HASH_ALGORITHM, HASH_CHUNK_SIZE
from data_models import SignedMessage


class CryptoManager:
    """加密管理器 / Document digests and Ed25519 authentication of protocol messages."""

    @staticmethod
    def _new_digest() -> hashes.Hash:
        return hashes.Hash(getattr(hashes, HASH_ALGORITHM)())

    @staticmethod
    def digest_to_int(digest: bytes) -> int:
        """Big-endian, always non-negative."""
        return int.from_bytes(digest, "big")

    @staticmethod
    def hash_document(data: bytes | str) -> int:
        """计算文档哈希 / SHA-256 of the document bytes as a non-negative integer."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        digest = CryptoManager._new_digest()
        digest.update(data)
        return CryptoManager.digest_to_int(digest.finalize())

    @staticmethod
    def hash_file(path: str | Path) -> int:
        digest = CryptoManager._new_digest()
        with open(path, "rb") as stream:
            for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
        return CryptoManager.digest_to_int(digest.finalize())

    # —— Protocol message authentication ——

    @staticmethod
    def generate_signature_keypair() -> Tuple[ed25519.Ed25519PrivateKey, bytes]:
        """生成Ed25519签名密钥对 / Ed25519 key pair; the public half is returned as raw bytes."""
        private_key = ed25519.Ed25519PrivateKey.generate()
        public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return private_key, public_key

    @staticmethod
    def serialize_message(message: SignedMessage) -> bytes:
        """序列化消息用于签名 / Deterministic encoding of everything except the signature."""
        payload = {
            "sender_id": message.sender_id,
            "kind": message.kind,
            "payload": {key: str(value) for key, value in message.payload.items()},
        }
        return json.dumps(payload, sort_keys=True).encode()

    @staticmethod
    def sign_message(message: SignedMessage, signing_private: ed25519.Ed25519PrivateKey) -> SignedMessage:
        message.signature = signing_private.sign(CryptoManager.serialize_message(message))
        return message

    @staticmethod
    def verify_message(message: SignedMessage, signing_public_bytes: bytes) -> bool:
        try:
            public_key = ed25519.Ed25519PublicKey.from_public_bytes(signing_public_bytes)
            public_key.verify(message.signature, CryptoManager.serialize_message(message))
            return True
        except InvalidSignature:
            return False
