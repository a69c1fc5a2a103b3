"""Dataclasses shared across the collective blind signature implementation.

参数生成器、签名者与协调者共用的数据类。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class DomainParameters:
    """域参数 / GOST R 34.10-94 domain parameters: prime p, subgroup order q, generator a."""

    p: int
    q: int
    a: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.p, self.q, self.a


@dataclass(frozen=True)
class KeyPair:
    """签名者密钥对 / Signer key pair, public_key = a^private_key mod p."""

    private_key: int = field(repr=False)
    public_key: int


@dataclass(frozen=True)
class SignerContribution:
    """公开承诺 / Commitment rho_i = a^k_i mod p published by one signer for one round."""

    signer_id: int
    rho: int


@dataclass(frozen=True)
class Signature:
    first_part: int
    second_part: int


@dataclass(frozen=True)
class VerificationRecord:
    """验证记录 / Aggregate key and domain parameters a signature was produced under."""

    y: int
    a: int
    p: int
    q: int
    public_keys: Tuple[int, ...] = ()

    @property
    def domain(self) -> DomainParameters:
        return DomainParameters(self.p, self.q, self.a)


@dataclass
class SignedMessage:
    """认证消息 / Authenticated message between a signer and the coordinator."""

    sender_id: int
    kind: str
    payload: Dict[str, int]
    signature: bytes = b""


@dataclass
class PerformanceStats:
    """性能统计数据类 / Timing and operation counts for one signing phase."""

    phase_name: str
    duration: float
    operations: Dict[str, int] | None = None
    per_signer: List[float] | None = None

    def __post_init__(self) -> None:
        if self.operations is None:
            self.operations = {}
        if self.per_signer is None:
            self.per_signer = []
