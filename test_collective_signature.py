import hashlib

import pytest

from collective_signature import CollectiveBlindSignature
from crypto_manager import CryptoManager
from data_models import Signature, VerificationRecord
from errors import InvalidParameter, NotInvertible
from participant import CollectiveSigner

DOCUMENT_HASH = 12345


def test_issue_key_pair(scheme, params64):
    key_pair = scheme.issue_key_pair()
    assert 0 < key_pair.private_key < 2 ** 1024
    assert key_pair.public_key == pow(params64.a, key_pair.private_key, params64.p)
    assert str(key_pair.private_key) not in repr(key_pair)


def test_three_signers_end_to_end(scheme, key_pairs, params64):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    assert 0 <= signature.first_part < params64.q
    assert 0 <= signature.second_part < params64.q
    assert (record.a, record.p, record.q) == (params64.a, params64.p, params64.q)
    assert record.public_keys == tuple(kp.public_key for kp in key_pairs)
    assert CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, record)


def test_aggregate_public_key_is_product(scheme, key_pairs, params64):
    _, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    expected = 1
    for key_pair in key_pairs:
        expected = expected * key_pair.public_key % params64.p
    assert record.y == expected


def test_single_signer(scheme):
    signature, record = scheme.sign([scheme.issue_key_pair()], DOCUMENT_HASH)
    assert CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, record)


def test_tampered_second_part_is_rejected(scheme, key_pairs):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    tampered = Signature(signature.first_part, signature.second_part ^ 1)
    assert not CollectiveBlindSignature.verify(DOCUMENT_HASH, tampered, record)


def test_tampered_first_part_is_rejected(scheme, key_pairs):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    tampered = Signature(signature.first_part ^ 1, signature.second_part)
    assert not CollectiveBlindSignature.verify(DOCUMENT_HASH, tampered, record)


def test_other_document_is_rejected(scheme, key_pairs):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    assert not CollectiveBlindSignature.verify(DOCUMENT_HASH + 1, signature, record)


def test_other_aggregate_key_is_rejected(scheme, key_pairs):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    _, other_record = scheme.sign(key_pairs[:2], DOCUMENT_HASH)
    assert not CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, other_record)


def test_out_of_range_parts_are_rejected(scheme, key_pairs, params64):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    assert not CollectiveBlindSignature.verify(
        DOCUMENT_HASH, Signature(signature.first_part + params64.q, signature.second_part), record
    )
    assert not CollectiveBlindSignature.verify(
        DOCUMENT_HASH, Signature(signature.first_part, params64.q), record
    )


def test_verify_is_false_for_non_invertible_hash(scheme, key_pairs, params64):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    assert not CollectiveBlindSignature.verify(params64.q * 3, signature, record)


def test_verify_is_false_for_degenerate_record():
    record = VerificationRecord(y=0, a=2, p=23, q=11)
    assert not CollectiveBlindSignature.verify(5, Signature(1, 1), record)
    assert not CollectiveBlindSignature.verify(5, Signature(1, 1), VerificationRecord(y=3, a=2, p=23, q=1))


def test_verify_is_repeatable(scheme, key_pairs):
    signature, record = scheme.sign(key_pairs, DOCUMENT_HASH)
    first = CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, record)
    second = CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, record)
    assert first is second is True


def test_sign_requires_participants(scheme):
    with pytest.raises(InvalidParameter):
        scheme.sign([], DOCUMENT_HASH)


def test_sign_rejects_bad_hashes(scheme, key_pairs, params64):
    with pytest.raises(InvalidParameter):
        scheme.sign(key_pairs, -1)
    with pytest.raises(NotInvertible):
        scheme.sign(key_pairs, params64.q)


def test_each_round_uses_fresh_nonces(scheme, key_pairs):
    first, _ = scheme.sign(key_pairs, DOCUMENT_HASH)
    second, _ = scheme.sign(key_pairs, DOCUMENT_HASH)
    assert first != second


def test_sign_with_signer_objects(scheme, key_pairs, params64):
    signers = [CollectiveSigner(index, key_pair, params64) for index, key_pair in enumerate(key_pairs, 1)]
    signature, record = scheme.sign(signers, DOCUMENT_HASH)
    assert CollectiveBlindSignature.verify(DOCUMENT_HASH, signature, record)
    assert not any(signer.has_pending_round for signer in signers)


def test_signer_refuses_share_without_contribution(scheme, params64):
    signer = CollectiveSigner(1, scheme.issue_key_pair(), params64)
    with pytest.raises(InvalidParameter):
        signer.finalize_share(7)
    signer.contribute()
    signer.finalize_share(7)
    with pytest.raises(InvalidParameter):
        signer.finalize_share(7)


def test_signer_commitment_matches_share(params64, scheme):
    key_pair = scheme.issue_key_pair()
    signer = CollectiveSigner(1, key_pair, params64)
    contribution = signer.contribute()
    r_link = 99
    share = signer.finalize_share(r_link)
    p, q, a = params64.as_tuple()
    # a^s = rho * y^r_link (mod p)
    assert pow(a, share, p) == contribution.rho * pow(key_pair.public_key, r_link, p) % p
    assert 0 <= share < q


def test_sign_real_document(scheme, key_pairs):
    document = b"Collective blind signature test document"
    document_hash = CryptoManager.hash_document(document)
    assert document_hash == int.from_bytes(hashlib.sha256(document).digest(), "big")
    signature, record = scheme.sign(key_pairs, document_hash)
    assert CollectiveBlindSignature.verify(document_hash, signature, record)


def test_hash_document_accepts_text():
    assert CryptoManager.hash_document("abc") == CryptoManager.hash_document(b"abc")
    assert CryptoManager.hash_document(b"") >= 0
