"""Text forms of signatures (.sgn) and verification records (.dat).

Signature: two decimal lines, first_part then second_part.
Record: "y <v>", "a <v>", "p <v>", "q <v>", then "<i> <public_key_i>" per signer.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from collective_signature import CollectiveBlindSignature
from constants import RECORD_LABELS, RECORD_SUFFIX, SIGNATURE_SUFFIX
from crypto_manager import CryptoManager
from data_models import Signature, VerificationRecord
from errors import MalformedRecord


def _parse_int(text: str, what: str) -> int:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        raise MalformedRecord(f"{what} is not a non-negative decimal integer: {text[:32]!r}")
    try:
        return int(text)
    except ValueError as exc:
        # Digit strings past the interpreter's int conversion limit.
        raise MalformedRecord(f"{what} is too long: {len(text)} digits") from exc


def _content_lines(text: str) -> List[str]:
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def format_signature(signature: Signature) -> str:
    return f"{signature.first_part}\n{signature.second_part}\n"


def parse_signature(text: str) -> Signature:
    lines = _content_lines(text)
    if len(lines) != 2:
        raise MalformedRecord(f"signature needs exactly 2 lines, found {len(lines)}")
    return Signature(
        first_part=_parse_int(lines[0], "signature first part"),
        second_part=_parse_int(lines[1], "signature second part"),
    )


def format_record(record: VerificationRecord) -> str:
    values = (record.y, record.a, record.p, record.q)
    lines = [f"{label} {value}" for label, value in zip(RECORD_LABELS, values)]
    lines.extend(f"{index} {public_key}" for index, public_key in enumerate(record.public_keys, 1))
    return "\n".join(lines) + "\n"


def parse_record(text: str) -> VerificationRecord:
    lines = _content_lines(text)
    if len(lines) < len(RECORD_LABELS):
        raise MalformedRecord(f"record needs {len(RECORD_LABELS)} labelled lines, found {len(lines)}")

    values = []
    for label, line in zip(RECORD_LABELS, lines):
        if not line.startswith(f"{label} "):
            raise MalformedRecord(f"expected line labelled {label!r}, got {line!r}")
        values.append(_parse_int(line[len(label) + 1:], f"record value {label}"))

    public_keys = []
    for position, line in enumerate(lines[len(RECORD_LABELS):], 1):
        ordinal, _, value = line.partition(" ")
        if _parse_int(ordinal, "public key ordinal") != position:
            raise MalformedRecord(f"public key ordinal {ordinal!r} out of order, expected {position}")
        public_keys.append(_parse_int(value, f"public key {position}"))

    y, a, p, q = values
    return VerificationRecord(y=y, a=a, p=p, q=q, public_keys=tuple(public_keys))


def _with_suffix(path: str | Path, suffix: str) -> Path:
    path = Path(path)
    return path if path.suffix == suffix else path.with_name(path.name + suffix)


def _write_new(path: Path, text: str) -> Path:
    # "x" refuses to overwrite an existing signature or record.
    with open(path, "x", encoding="utf-8") as stream:
        stream.write(text)
    return path


def save_signature(path: str | Path, signature: Signature) -> Path:
    return _write_new(_with_suffix(path, SIGNATURE_SUFFIX), format_signature(signature))


def save_record(path: str | Path, record: VerificationRecord) -> Path:
    return _write_new(_with_suffix(path, RECORD_SUFFIX), format_record(record))


def load_signature(path: str | Path) -> Signature:
    return parse_signature(Path(path).read_text(encoding="utf-8"))


def load_record(path: str | Path) -> VerificationRecord:
    return parse_record(Path(path).read_text(encoding="utf-8"))


def verify_files(document_path: str | Path, signature_path: str | Path, record_path: str | Path) -> bool:
    """Hash the document and verify against persisted data; bad files give False."""
    try:
        record = load_record(record_path)
        signature = load_signature(signature_path)
        document_hash = CryptoManager.hash_file(document_path)
    except (MalformedRecord, OSError, UnicodeDecodeError):
        return False
    return CollectiveBlindSignature.verify(document_hash, signature, record)
