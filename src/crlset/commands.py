r"""
Command surface: runs one operation against explicit inputs and sinks.

Nothing here reads sys.argv or touches the process streams: main.py builds a
CommandConfig and an OutputSinks pair and hands them over. Data goes to
`sinks.data` (bytes), diagnostics to `sinks.diagnostics` (text), so output
can be redirected cleanly.

Output formats (tab-separated, bytea-style escapes ready for COPY):
  dump          \\x<spki hex> TAB \\x<serial hex> TAB   one line per serial
  dump + cert   <serial hex>
  dumpSPKIs     TAB TAB \\x<digest hex>
  fetch         raw CRLSet bytes (or to `output_path`)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, TextIO

from crlset.adapters.certificate import load_certificate_der
from crlset.codec.crlset_file import CrlSet, parse_crlset
from crlset.domain.models import CrlSetHeader, SerialRecord
from crlset.domain.ports import SpkiExtractor
from crlset.queries import dump_policy_spkis, dump_serials, fingerprint_from_certificate
from crlset.railway import ErrorCode, Result


class Operation(Enum):
    FETCH = "fetch"
    DUMP = "dump"
    DUMP_SPKIS = "dumpSPKIs"


@dataclass(frozen=True, slots=True)
class CommandConfig:
    """Selected operation and its file arguments."""

    operation: Operation
    crlset_path: Path | None = None
    certificate_path: Path | None = None
    output_path: Path | None = None


@dataclass(frozen=True, slots=True)
class OutputSinks:
    data: BinaryIO
    diagnostics: TextIO

    def emit(self, line: str) -> None:
        self.data.write(line.encode("ascii"))

    def report(self, message: str) -> None:
        self.diagnostics.write(message.rstrip("\n") + "\n")


def format_serial_line(record: SerialRecord, filtered: bool) -> str:
    if filtered:
        return f"{record.serial.hex()}\n"
    return f"\\\\x{record.fingerprint.hex()}\t\\\\x{record.serial.hex()}\t\n"


def format_policy_spki_line(digest: bytes) -> str:
    return f"\t\t\\\\x{digest.hex()}\n"


def _read_file(path: Path | None, what: str) -> Result[bytes]:
    if path is None:
        return Result.failure(ErrorCode.VALIDATION_ERROR, f"No {what} file given")
    return Result.from_computation(path.read_bytes, ErrorCode.IO_ERROR, f"Failed to read {what}")


def _load_crlset(config: CommandConfig) -> Result[CrlSet]:
    return _read_file(config.crlset_path, "CRLSet").flat_map(parse_crlset)


def _load_filter(path: Path, extractor: SpkiExtractor | None) -> Result[bytes]:
    return _read_file(path, "certificate").flat_map(
        lambda raw: fingerprint_from_certificate(load_certificate_der(raw), extractor)
    )


def _write_serials(crlset: CrlSet, spki_filter: bytes | None, sinks: OutputSinks) -> Result[int]:
    written = 0
    for record in dump_serials(crlset, spki_filter):
        if record.is_failure():
            return Result.failure_from(record.error())
        sinks.emit(format_serial_line(record.value(), filtered=spki_filter is not None))
        written += 1
    return Result.success(written)


def _write_policy_spkis(header: CrlSetHeader, sinks: OutputSinks) -> Result[int]:
    written = 0
    for spki in dump_policy_spkis(header):
        if spki.is_failure():
            # One bad entry does not invalidate the rest of the list.
            sinks.report(spki.error().message)
            continue
        sinks.emit(format_policy_spki_line(spki.value().digest))
        written += 1
    return Result.success(written)


def _dump(config: CommandConfig, sinks: OutputSinks, extractor: SpkiExtractor | None) -> Result[int]:
    certificate_path = config.certificate_path

    def _with_filter(crlset: CrlSet) -> Result[int]:
        if certificate_path is None:
            return _write_serials(crlset, None, sinks)
        return _load_filter(certificate_path, extractor).flat_map(
            lambda spki: _write_serials(crlset, spki, sinks)
        )

    return _load_crlset(config).flat_map(_with_filter)


def _write_raw(data: bytes, sinks: OutputSinks) -> int:
    sinks.data.write(data)
    return len(data)


def _write_file(data: bytes, path: Path) -> Result[int]:
    return Result.from_computation(
        lambda: path.write_bytes(data), ErrorCode.IO_ERROR, f"Failed to write {path}"
    )


def _fetch(
    config: CommandConfig,
    sinks: OutputSinks,
    fetch_fn: Callable[[], Result[bytes]] | None,
) -> Result[int]:
    if fetch_fn is None:
        return Result.failure(ErrorCode.CONFIGURATION_ERROR, "fetch requires a fetcher")
    output_path = config.output_path
    if output_path is None:
        return fetch_fn().map(lambda data: _write_raw(data, sinks))
    return fetch_fn().flat_map(lambda data: _write_file(data, output_path))


def run_command(
    config: CommandConfig,
    sinks: OutputSinks,
    fetch_fn: Callable[[], Result[bytes]] | None = None,
    extractor: SpkiExtractor | None = None,
) -> Result[int]:
    """
    Execute `config.operation`, writing to `sinks`.

    Returns the number of records (or bytes, for fetch) written. Any failure
    is reported on `sinks.diagnostics` before being returned; the caller
    decides the exit status.
    """
    match config.operation:
        case Operation.FETCH:
            result = _fetch(config, sinks, fetch_fn)
        case Operation.DUMP:
            result = _dump(config, sinks, extractor)
        case Operation.DUMP_SPKIS:
            result = _load_crlset(config).flat_map(
                lambda crlset: _write_policy_spkis(crlset.header, sinks)
            )

    return result.peek_failure(lambda err: sinks.report(err.message))
