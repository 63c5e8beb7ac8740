"""
Certificate adapter: SubjectPublicKeyInfo extraction for fingerprint filters.

Implements the SpkiExtractor port using:
  - cryptography (PyCA): strict X.509 parse, so garbage input is rejected
  - asn1crypto: the SPKI exactly as encoded in the certificate

The raw encoding matters: CRLSet fingerprints are SHA-256 over the SPKI bytes
as they appear in the issuer's certificate, and a re-encoded key could differ.
"""

from __future__ import annotations

import structlog
from asn1crypto import pem
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes

from crlset.railway import ErrorCode, Result

log = structlog.get_logger()


def load_certificate_der(raw: bytes) -> bytes:
    """
    Return DER bytes for a certificate file's contents.

    PEM armor is removed (first block only); anything else is assumed to be
    DER already and returned unchanged.
    """
    if not pem.detect(raw):
        return raw
    try:
        _, _, der_bytes = pem.unarmor(raw)
    except ValueError as e:
        log.debug("certificate.pem_unarmor_failed", error=str(e))
        return raw
    return der_bytes


def sha256_digest(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data)
    return digest.finalize()


class X509SpkiExtractor:
    """
    Pull the DER SubjectPublicKeyInfo out of a DER certificate.

    Implements the SpkiExtractor port.
    """

    def extract_spki(self, der: bytes) -> Result[bytes]:
        return Result.from_computation(
            lambda: self._do_extract(der),
            ErrorCode.CERTIFICATE_UNPARSABLE,
            "Failed to parse certificate",
        )

    def _do_extract(self, der: bytes) -> bytes:
        cert = x509.load_der_x509_certificate(der)
        spki = asn1_x509.Certificate.load(der)["tbs_certificate"]["subject_public_key_info"]
        log.debug(
            "certificate.spki_extracted",
            subject=cert.subject.rfc4514_string(),
            spki_length=len(spki.dump()),
        )
        return spki.dump()
