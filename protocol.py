"""High-level orchestration of a threaded collective blind signing round."""

from __future__ import annotations

import time
from typing import Dict, List, Sequence, Tuple

import numpy as np

from collective_signature import CollectiveBlindSignature
from constants import DEFAULT_ROUND_TIMEOUT
from crypto_manager import CryptoManager
from data_models import DomainParameters, KeyPair, PerformanceStats, Signature, SignedMessage, VerificationRecord
from errors import InvalidParameter
from gost_params import DomainParameterGenerator
from network_simulator import SigningNetwork
from participant import DistributedSigner


def _authenticated(network: SigningNetwork, messages: List[SignedMessage], expected: int, kind: str) -> Dict[int, SignedMessage]:
    """校验签名消息 / Keep one verified message per signer; fail the round on anything else."""
    accepted: Dict[int, SignedMessage] = {}
    for message in messages:
        public_key = network.get_signing_public_key(message.sender_id)
        if not CryptoManager.verify_message(message, public_key):
            raise RuntimeError(f"invalid {kind} signature from signer {message.sender_id}")
        if message.sender_id in accepted:
            raise RuntimeError(f"duplicate {kind} from signer {message.sender_id}")
        accepted[message.sender_id] = message
    if len(accepted) != expected:
        missing = sorted(set(network.signer_ids()) - set(accepted))
        raise RuntimeError(f"missing {kind} from signers {missing}")
    return accepted


def run_distributed_signing(
    params: DomainParameters,
    key_pairs: Sequence[KeyPair],
    document_hash: int,
    timeout: float = DEFAULT_ROUND_TIMEOUT,
) -> Tuple[Signature, VerificationRecord, List[PerformanceStats]]:
    """Run one signing round with a thread per signer.

    The coordinator only sees rho_i and s_i; each k_i stays in its thread.
    """
    coordinator = CollectiveBlindSignature(params)
    if not key_pairs:
        raise InvalidParameter("at least one participant is required to sign")
    coordinator.check_document_hash(document_hash)

    network = SigningNetwork()
    signers = [
        DistributedSigner(index, key_pair, params, network, timeout=timeout)
        for index, key_pair in enumerate(key_pairs, 1)
    ]
    count = len(signers)
    stats: List[PerformanceStats] = []

    print(f"[Coordinator] Starting signing round with {count} signer(s)")
    start_time = time.time()
    for signer in signers:
        signer.start()

    try:
        # —— Phase 1: commitments and aggregate key ——
        commitments = _authenticated(
            network,
            network.receive_coordinator_messages("commitment", count, timeout),
            count,
            "commitment",
        )
        ordered = [commitments[signer.signer_id] for signer in signers]
        public_keys = [message.payload["public_key"] for message in ordered]
        y = coordinator.aggregate_public_key(public_keys)
        rho = coordinator.aggregate_commitments([message.payload["rho"] for message in ordered])
        stats.append(
            PerformanceStats(
                "Commitments",
                time.time() - start_time,
                {"signed commitments received": count, "modular multiplications (y, rho)": 2 * count},
                [signer.contribute_time for signer in signers],
            )
        )
        print(f"[Coordinator] Received {count} commitment(s)")

        # —— Phase 2: blinding and linking value ——
        phase_start = time.time()
        first_part, u, eps = coordinator.blind(rho, y)
        r_link = coordinator.linking_value(first_part, document_hash, u)
        network.broadcast_r_link(r_link)
        stats.append(
            PerformanceStats(
                "Blinding",
                time.time() - phase_start,
                {"modular exponentiations (y^u, a^eps)": 2, "modular inverses (H^-1 mod q)": 1, "r_link broadcasts": count},
            )
        )

        # —— Phase 3: shares and signature ——
        phase_start = time.time()
        shares = _authenticated(
            network,
            network.receive_coordinator_messages("share", count, timeout),
            count,
            "share",
        )
        share_sum = coordinator.aggregate_shares([shares[signer.signer_id].payload["s"] for signer in signers])
        signature = Signature(first_part, coordinator.second_part(document_hash, share_sum, eps))
        stats.append(
            PerformanceStats(
                "Shares",
                time.time() - phase_start,
                {"signed shares received": count, "modular additions (S)": count},
                [signer.share_time for signer in signers],
            )
        )
    finally:
        for signer in signers:
            signer.join(timeout)

    failed = [signer.signer_id for signer in signers if signer.error is not None]
    if failed:
        raise RuntimeError(f"signers {failed} failed during the round")

    print(f"[Coordinator] Signature assembled in {(time.time() - start_time)*1000:.2f} ms")
    return signature, coordinator.make_record(y, public_keys), stats


def print_performance_report(stats: List[PerformanceStats]) -> None:
    """打印性能报告 / Pretty-print collected per-phase statistics."""
    print("\n" + "=" * 80)
    print("***  SIGNING ROUND PERFORMANCE REPORT  ***".center(80))
    print("=" * 80 + "\n")

    total_time = sum(stat.duration for stat in stats)

    for idx, stat in enumerate(stats, 1):
        percentage = (stat.duration / total_time * 100) if total_time > 0 else 0

        print(f"┌─ Phase {idx}: {stat.phase_name}")
        print(f"│  ⏱  Duration:    {stat.duration*1000:.4f} ms  ({percentage:.1f}% of total)")
        if stat.per_signer:
            timings = np.array(stat.per_signer) * 1000
            print(f"│  👥 Per signer:  mean {np.mean(timings):.4f} ms, max {np.max(timings):.4f} ms")

        if stat.operations:
            print("│  📊 Operations:")
            for op_name, count in stat.operations.items():
                print(f"│     • {op_name}: {count:,}")
        print(f"└{'─'*78}\n")

    print("=" * 80)
    print(f"🕐 TOTAL EXECUTION TIME: {total_time*1000:.4f} ms ({total_time:.6f} seconds)")
    print("=" * 80 + "\n")


def run_demo(bits: int = 256, num_signers: int = 3, document: bytes = b"collective blind signature demo") -> bool:
    """运行演示 / Generate parameters, issue keys, sign in threads, verify and report."""
    print("\n" + "=" * 80)
    print("***  COLLECTIVE BLIND SIGNATURE (GOST R 34.10-94)  ***".center(80))
    print("=" * 80 + "\n")

    params = DomainParameterGenerator().generate(bits)
    print("*** Domain Parameters ***")
    print(f"  • p: {params.p.bit_length()} bits")
    print(f"  • q: {params.q.bit_length()} bits")
    print(f"  • a: {str(params.a)[:32]}...")
    print(f"  • Signers (N): {num_signers}")
    print("-" * 80 + "\n")

    coordinator = CollectiveBlindSignature(params)
    key_pairs = [coordinator.issue_key_pair() for _ in range(num_signers)]
    document_hash = CryptoManager.hash_document(document)

    signature, record, stats = run_distributed_signing(params, key_pairs, document_hash)
    valid = CollectiveBlindSignature.verify(document_hash, signature, record)

    print(f"\n  Signature r: {signature.first_part}")
    print(f"  Signature s: {signature.second_part}")
    print(f"  {'✓ Signature VERIFIED' if valid else '✗ Signature REJECTED'}")

    print_performance_report(stats)
    return valid


if __name__ == "__main__":
    run_demo()
