"""
Failure description: structured error information for the failure track.

Every decode, query and fetch stage reports problems as a FailureDescription
carrying an ErrorCode, a human-readable message and, for decode failures, the
name of the stage that ran out of bytes ("serial count", "SPKI hash", ...).

Internal decode helpers raise RailwayError; Result.from_computation converts
it back into the FailureDescription it carries at the adapter boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """
    Error codes for the failure track.

    Decode errors first (fatal for the file being read, except
    INVALID_LIST_ENTRY which is reported per entry), then the ambient
    errors of the command surface, configuration and network layers.
    """

    # --- Decode errors ---
    TRUNCATED = "TRUNCATED"
    """Input ended inside a length-prefixed field; `stage` names the field."""

    NOT_A_CONTAINER = "NOT_A_CONTAINER"
    """Delivery container does not start with the Cr24 magic."""

    ARCHIVE_CORRUPT = "ARCHIVE_CORRUPT"
    """Embedded zip archive could not be read or decompressed."""

    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    """Archive has no entry with the requested name."""

    HEADER_MALFORMED = "HEADER_MALFORMED"
    """CRLSet JSON header is present but does not decode."""

    INVALID_LIST_ENTRY = "INVALID_LIST_ENTRY"
    """One policy-list fingerprint is not valid base64."""

    CERTIFICATE_UNPARSABLE = "CERTIFICATE_UNPARSABLE"
    """Certificate used as a filter could not be parsed."""

    # --- Ambient errors ---
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Bad caller input (e.g. a filter digest of the wrong length)."""

    IO_ERROR = "IO_ERROR"
    """Local file could not be read or written."""

    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """Update server or download host failed."""

    UPDATE_UNAVAILABLE = "UPDATE_UNAVAILABLE"
    """Update metadata names no download for the CRLSet component."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Settings failed validation."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor.

    >>> desc = FailureDescription(ErrorCode.TRUNCATED, "CRLSet truncated at serial", stage="serial")
    >>> desc.stage
    'serial'
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    stage: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class RailwayError(Exception):
    """
    Exception carrying a FailureDescription across internal decode helpers.

    Raised deep inside cursor/decoder code and turned back into a Failure
    by Result.from_computation, so the original code and stage survive.
    """

    def __init__(self, code: ErrorCode, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.stage = stage

    def describe(self) -> FailureDescription:
        return FailureDescription(
            code=self.code,
            message=str(self),
            exception=self,
            stage=self.stage,
        )
