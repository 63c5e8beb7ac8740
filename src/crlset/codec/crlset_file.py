"""
CRLSet codec: decodes the header and walks the body of a CRLSet file.

Layout (integers little-endian):

    header_len:u16 | header_json[header_len]
    body: { fingerprint[32] | count:u32 | { len:u8 | serial[len] } × count } *

The header length is two bytes, unlike every other length in the format.
The body has no terminator: it ends exactly at end of buffer, and any
leftover bytes too short for a complete block are a truncation.

Read patterns:
  - parse_crlset() decodes the header once and returns a CrlSet
  - CrlSet.blocks() walks the body lazily with a fresh cursor on every call
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from crlset.codec.cursor import ByteCursor, TruncatedError
from crlset.domain.models import SPKI_HASH_LENGTH, CrlSetHeader, SpkiBlock
from crlset.railway import ErrorCode, RailwayError, Result

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class CrlSet:
    """
    A decoded header plus the position of the body in the caller's buffer.

    The buffer is shared, never copied; any number of blocks() iterations
    may run over the same CrlSet since each one owns its own cursor.
    """

    header: CrlSetHeader
    data: bytes
    body_offset: int

    @property
    def body_length(self) -> int:
        return len(self.data) - self.body_offset

    def blocks(self) -> Iterator[Result[SpkiBlock]]:
        return iter_spki_blocks(ByteCursor(self.data, self.body_offset))


def _read_block(cursor: ByteCursor) -> SpkiBlock:
    start = cursor.position
    fingerprint = cursor.take(SPKI_HASH_LENGTH, "SPKI hash")
    count = cursor.read_u32_le("serial count")

    serials: list[bytes] = []
    for _ in range(count):
        length = cursor.read_u8("serial length")
        serials.append(cursor.take(length, "serial"))

    return SpkiBlock(
        fingerprint=fingerprint,
        serials=tuple(serials),
        size=cursor.position - start,
    )


def iter_spki_blocks(cursor: ByteCursor) -> Iterator[Result[SpkiBlock]]:
    """
    Yield Success(SpkiBlock) for each complete block until the cursor is empty.

    The first truncation yields a single Failure(TRUNCATED) carrying the
    stage name, then iteration stops. Blocks yielded before it stay valid;
    callers wanting all-or-nothing should collect with Result.all_of().
    """
    while cursor.remaining() > 0:
        try:
            block = _read_block(cursor)
        except TruncatedError as e:
            yield Result.failure_from(e.describe())
            return
        yield Result.success(block)


def _decode_header(header_bytes: bytes) -> CrlSetHeader:
    if not header_bytes:
        return CrlSetHeader()
    try:
        return CrlSetHeader.model_validate_json(header_bytes)
    except ValidationError as e:
        raise RailwayError(
            ErrorCode.HEADER_MALFORMED,
            f"Failed to parse header: {e.error_count()} error(s), first: {e.errors()[0]['msg']}",
        ) from e


def _do_parse(data: bytes) -> CrlSet:
    cursor = ByteCursor(data)
    header_length = cursor.read_u16_le("header length")
    header = _decode_header(cursor.take(header_length, "header"))

    log.debug(
        "crlset.header_decoded",
        sequence=header.sequence,
        num_parents=header.num_parents,
        blocked_spkis=len(header.blocked_spkis),
        known_interception_spkis=len(header.known_interception_spkis),
        blocked_interception_spkis=len(header.blocked_interception_spkis),
        body_length=cursor.remaining(),
    )
    return CrlSet(header=header, data=data, body_offset=cursor.position)


def parse_crlset(data: bytes) -> Result[CrlSet]:
    """
    Decode the header of a CRLSet file.

    Failures: TRUNCATED at "header length" or "header", HEADER_MALFORMED
    when the header bytes are not the expected JSON object.
    """
    return Result.from_computation(
        lambda: _do_parse(data),
        ErrorCode.HEADER_MALFORMED,
        "Failed to parse header",
    )
