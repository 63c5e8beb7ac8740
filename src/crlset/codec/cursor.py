"""
Byte cursor: forward-only reader over an immutable byte buffer.

Every read checks the remaining length first. A short read raises
TruncatedError naming the field being read, which the decoders turn into
Result.failure(TRUNCATED, "CRLSet truncated at <stage>", stage=<stage>).
"""

from __future__ import annotations

from struct import Struct

from crlset.railway import ErrorCode, RailwayError

_U16_LE = Struct("<H")
_U32_LE = Struct("<I")


class TruncatedError(RailwayError):
    """Input ended before the field named by `stage` was complete."""

    def __init__(self, stage: str, subject: str = "CRLSet") -> None:
        super().__init__(ErrorCode.TRUNCATED, f"{subject} truncated at {stage}", stage=stage)


class ByteCursor:
    """
    Read position over `data`, starting at `offset`.

    The buffer is never copied or mutated; one cursor belongs to one reader.
    `subject` only prefixes truncation messages ("CRLSet", "Container").
    """

    __slots__ = ("_data", "_pos", "_subject")

    def __init__(self, data: bytes, offset: int = 0, subject: str = "CRLSet") -> None:
        if offset < 0 or offset > len(data):
            raise ValueError(f"offset {offset} outside buffer of {len(data)} bytes")
        self._data = data
        self._pos = offset
        self._subject = subject

    @property
    def position(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, n: int, stage: str) -> bytes:
        if self.remaining() < n:
            raise TruncatedError(stage, self._subject)
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def peek_u8(self, stage: str) -> int:
        if self.remaining() < 1:
            raise TruncatedError(stage, self._subject)
        return self._data[self._pos]

    def read_u8(self, stage: str) -> int:
        value = self.peek_u8(stage)
        self._pos += 1
        return value

    def read_u16_le(self, stage: str) -> int:
        return _U16_LE.unpack(self.take(_U16_LE.size, stage))[0]

    def read_u32_le(self, stage: str) -> int:
        return _U32_LE.unpack(self.take(_U32_LE.size, stage))[0]
