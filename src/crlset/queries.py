"""
Query layer: read-only views over a decoded CRLSet.

  dump_serials()                 every revoked serial, or those of one issuer key
  dump_policy_spkis()            the decoded header policy fingerprints
  fingerprint_from_certificate() certificate → SPKI SHA-256, usable as a filter

All three are lazy or pure and never write anywhere; presentation lives in
crlset.commands.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator

from crlset.adapters.certificate import X509SpkiExtractor, sha256_digest
from crlset.codec.crlset_file import CrlSet
from crlset.domain.models import (
    SPKI_HASH_LENGTH,
    CrlSetHeader,
    PolicyList,
    PolicySpki,
    SerialRecord,
)
from crlset.domain.ports import SpkiExtractor
from crlset.railway import ErrorCode, Result


def dump_serials(
    crlset: CrlSet,
    spki_filter: bytes | None = None,
) -> Iterator[Result[SerialRecord]]:
    """
    Yield a SerialRecord per revoked serial, in body order.

    With `spki_filter` set, only serials of blocks whose fingerprint equals
    it are yielded. The whole body is walked either way, so a truncated file
    still ends in a Failure. A filter matching nothing yields nothing.
    """
    if spki_filter is not None and len(spki_filter) != SPKI_HASH_LENGTH:
        yield Result.failure(
            ErrorCode.VALIDATION_ERROR,
            f"SPKI filter must be {SPKI_HASH_LENGTH} bytes, got {len(spki_filter)}",
        )
        return

    for block_result in crlset.blocks():
        if block_result.is_failure():
            yield Result.failure_from(block_result.error())
            return
        block = block_result.value()
        if spki_filter is not None and block.fingerprint != spki_filter:
            continue
        for serial in block.serials:
            yield Result.success(SerialRecord(fingerprint=block.fingerprint, serial=serial))


def _decode_policy_entry(policy_list: PolicyList, entry: str) -> Result[PolicySpki]:
    try:
        # Line breaks inside an entry are ignored, anything else must be base64.
        digest = base64.b64decode(entry.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as e:
        return Result.failure(
            ErrorCode.INVALID_LIST_ENTRY,
            f"{entry} is not a valid SPKI",
            e,
            stage=policy_list.value,
        )
    return Result.success(PolicySpki(policy_list=policy_list, digest=digest))


def dump_policy_spkis(header: CrlSetHeader) -> Iterator[Result[PolicySpki]]:
    """
    Yield each decoded fingerprint of the header's policy lists.

    Lists are visited in PolicyList order. An entry that is not valid base64
    yields Failure(INVALID_LIST_ENTRY) and the walk carries on.
    """
    for policy_list in PolicyList:
        for entry in policy_list.entries(header):
            yield _decode_policy_entry(policy_list, entry)


def fingerprint_from_certificate(
    der: bytes,
    extractor: SpkiExtractor | None = None,
) -> Result[bytes]:
    """SHA-256 of the certificate's SubjectPublicKeyInfo, the CRLSet issuer key id."""
    return (extractor or X509SpkiExtractor()).extract_spki(der).map(sha256_digest)
