"""
Byte-level builders for test inputs.

CRLSet files and delivery containers are assembled here field by field so
each test states exactly which bytes it feeds the decoders.
"""

from __future__ import annotations

import io
import json
import zipfile
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from crlset.codec.container import CONTAINER_MAGIC, CRLSET_ENTRY_NAME

ZERO_SPKI = b"\x00" * 32
ONES_SPKI = b"\xff" * 32


def encode_block(fingerprint: bytes, serials: Iterable[bytes], count: int | None = None) -> bytes:
    """One body block; `count` overrides the declared serial count."""
    serials = list(serials)
    declared = len(serials) if count is None else count
    out = bytearray(fingerprint)
    out += declared.to_bytes(4, "little")
    for serial in serials:
        out.append(len(serial))
        out += serial
    return bytes(out)


def encode_header(header: dict | bytes | None) -> bytes:
    """Length-prefixed (u16 LE) header; None gives a zero-length header."""
    if header is None:
        raw = b""
    elif isinstance(header, bytes):
        raw = header
    else:
        raw = json.dumps(header).encode("utf-8")
    return len(raw).to_bytes(2, "little") + raw


def encode_crlset(
    header: dict | bytes | None = None,
    blocks: Iterable[tuple[bytes, Iterable[bytes]]] = (),
) -> bytes:
    return encode_header(header) + b"".join(encode_block(fp, serials) for fp, serials in blocks)


def scenario_crlset() -> bytes:
    """Zero-length header, one block under 00×32 with serials AB and 0102."""
    return encode_crlset(None, [(ZERO_SPKI, [b"\xab", b"\x01\x02"])])


def encode_zip(entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buf.getvalue()


def encode_container(
    archive: bytes,
    version: int = 3,
    signed_header: bytes = b"\x12\x0aopaque-signed-header",
    magic: bytes = CONTAINER_MAGIC,
) -> bytes:
    return (
        magic
        + version.to_bytes(4, "little")
        + len(signed_header).to_bytes(4, "little")
        + signed_header
        + archive
    )


def container_with_crlset(crlset: bytes, **kwargs: object) -> bytes:
    return encode_container(encode_zip({CRLSET_ENTRY_NAME: crlset}), **kwargs)  # type: ignore[arg-type]


def make_certificate(common_name: str = "Test Issuing CA") -> tuple[bytes, bytes]:
    """Self-signed P-256 certificate; returns (certificate DER, SPKI DER)."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(UTC)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    spki = key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return cert.public_bytes(serialization.Encoding.DER), spki


def der_to_pem(der: bytes) -> bytes:
    return x509.load_der_x509_certificate(der).public_bytes(serialization.Encoding.PEM)
