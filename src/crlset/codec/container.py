"""
Container decoder: unwraps the signed delivery container around a CRLSet.

Layout (integers little-endian):

    magic[4] = "Cr24" | version:u32 | signed_header_len:u32
    | signed_header[signed_header_len]   (opaque, not verified)
    | zip archive                         (holds the "crl-set" entry)

The archive is read with zipfile over ArchiveSource, a random-access view of
the bytes after the signed header. Nothing here touches the network or disk.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass

import structlog

from crlset.codec.cursor import ByteCursor
from crlset.railway import ErrorCode, RailwayError, Result

log = structlog.get_logger()

CONTAINER_MAGIC = b"Cr24"
CRLSET_ENTRY_NAME = "crl-set"


@dataclass(frozen=True, slots=True)
class ContainerHeader:
    """Fixed-size container header. The version is carried, never validated."""

    magic: bytes
    version: int
    signed_header_length: int


class ArchiveSource(io.RawIOBase):
    """
    Read-only, seekable binary stream over `data[start:]`.

    read_at() is the random-access primitive zipfile ends up calling through
    seek()/read(). A negative offset reads zero bytes instead of raising; the
    zip reader searches backwards from the end for the end-of-central-directory
    record and must see "no data" rather than an error on tiny inputs.
    """

    def __init__(self, data: bytes, start: int = 0) -> None:
        super().__init__()
        self._data = data
        self._start = start
        self._pos = 0

    @property
    def size(self) -> int:
        return len(self._data) - self._start

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0 or size <= 0:
            return b""
        begin = self._start + offset
        return self._data[begin : begin + size]

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            self._pos = offset
        elif whence == io.SEEK_CUR:
            self._pos += offset
        elif whence == io.SEEK_END:
            self._pos = self.size + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        return self._pos

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        chunk = self.read_at(self._pos, len(buffer))
        n = len(chunk)
        buffer[:n] = chunk
        self._pos += n
        return n


def read_container_header(cursor: ByteCursor) -> ContainerHeader:
    """
    Decode the fixed header and skip the signed header blob.

    Raises RailwayError(NOT_A_CONTAINER) if the magic is missing, or
    TruncatedError if the length fields or the signed header run short.
    """
    if cursor.remaining() < len(CONTAINER_MAGIC):
        raise RailwayError(ErrorCode.NOT_A_CONTAINER, "Data doesn't look like a CRX container")
    magic = cursor.take(len(CONTAINER_MAGIC), "magic")
    if magic != CONTAINER_MAGIC:
        raise RailwayError(ErrorCode.NOT_A_CONTAINER, "Data doesn't look like a CRX container")

    version = cursor.read_u32_le("container version")
    signed_header_length = cursor.read_u32_le("signed header length")
    cursor.take(signed_header_length, "signed header")

    return ContainerHeader(
        magic=magic,
        version=version,
        signed_header_length=signed_header_length,
    )


def _find_entry(archive: zipfile.ZipFile, name: str) -> zipfile.ZipInfo:
    for info in archive.infolist():
        if info.filename == name:
            return info
    raise RailwayError(ErrorCode.ENTRY_NOT_FOUND, f"Container has no {name!r} entry")


def _do_extract(data: bytes, name: str) -> bytes:
    cursor = ByteCursor(data, subject="Container")
    header = read_container_header(cursor)

    source = ArchiveSource(data, start=cursor.position)
    with zipfile.ZipFile(source) as archive:
        info = _find_entry(archive, name)
        payload = archive.read(info)

    log.info(
        "container.extracted",
        version=header.version,
        signed_header_length=header.signed_header_length,
        archive_size=source.size,
        entry=name,
        entry_size=len(payload),
    )
    return payload


def extract_entry(data: bytes, name: str = CRLSET_ENTRY_NAME) -> Result[bytes]:
    """
    Return the decompressed bytes of entry `name` from a delivery container.

    Failures: NOT_A_CONTAINER, TRUNCATED (stage "container version",
    "signed header length" or "signed header"), ENTRY_NOT_FOUND, and
    ARCHIVE_CORRUPT for anything the zip reader rejects.
    """
    return Result.from_computation(
        lambda: _do_extract(data, name),
        ErrorCode.ARCHIVE_CORRUPT,
        "Failed to read archive",
    )
