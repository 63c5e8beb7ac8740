"""
Domain models: immutable values produced by the decoders.

Blocks and records are frozen dataclasses. The CRLSet header is a frozen
pydantic model because it is validated straight from the JSON bytes at the
front of a CRLSet file; it is fully materialized so it survives independent
of the cursor that decoded it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SPKI_HASH_LENGTH = 32


class CrlSetHeader(BaseModel):
    """
    JSON header at the front of a CRLSet file.

    Field names on the wire are the Go-style keys (Sequence, NumParents,
    BlockedSPKIs, ...), matched case-insensitively. Unknown keys are ignored,
    integers are strict and a null value leaves the field at its default.
    The SPKI lists hold base64 strings and are decoded lazily, per entry.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sequence: int = Field(default=0, alias="Sequence", strict=True)
    num_parents: int = Field(default=0, alias="NumParents", strict=True)
    blocked_spkis: list[str] = Field(default_factory=list, alias="BlockedSPKIs")
    known_interception_spkis: list[str] = Field(
        default_factory=list, alias="KnownInterceptionSPKIs"
    )
    blocked_interception_spkis: list[str] = Field(
        default_factory=list, alias="BlockedInterceptionSPKIs"
    )

    @model_validator(mode="before")
    @classmethod
    def fold_wire_keys(cls, data: object) -> object:
        """A null document is the empty header; keys match their alias in any case."""
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        return {_WIRE_KEYS.get(key.lower(), key): value for key, value in data.items()}

    @field_validator("sequence", "num_parents", mode="before")
    @classmethod
    def null_int_is_zero(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator(
        "blocked_spkis",
        "known_interception_spkis",
        "blocked_interception_spkis",
        mode="before",
    )
    @classmethod
    def null_list_is_empty(cls, value: object) -> object:
        """A JSON null list reads as an empty list."""
        return [] if value is None else value


_WIRE_KEYS = {
    field.alias.lower(): field.alias
    for field in CrlSetHeader.model_fields.values()
    if field.alias is not None
}


class PolicyList(Enum):
    """The three fingerprint lists carried in the CRLSet header, in wire order."""

    BLOCKED = "BlockedSPKIs"
    KNOWN_INTERCEPTION = "KnownInterceptionSPKIs"
    BLOCKED_INTERCEPTION = "BlockedInterceptionSPKIs"

    def entries(self, header: CrlSetHeader) -> list[str]:
        return _POLICY_LIST_ACCESSORS[self](header)


_POLICY_LIST_ACCESSORS: dict[PolicyList, Callable[[CrlSetHeader], list[str]]] = {
    PolicyList.BLOCKED: lambda h: h.blocked_spkis,
    PolicyList.KNOWN_INTERCEPTION: lambda h: h.known_interception_spkis,
    PolicyList.BLOCKED_INTERCEPTION: lambda h: h.blocked_interception_spkis,
}


@dataclass(frozen=True, slots=True)
class SpkiBlock:
    """
    One body block: an issuer SPKI fingerprint and the serials revoked under it.

    `size` is the number of body bytes the block occupied on the wire.
    """

    fingerprint: bytes
    serials: tuple[bytes, ...]
    size: int


@dataclass(frozen=True, slots=True)
class SerialRecord:
    """A single revoked serial together with its issuer fingerprint."""

    fingerprint: bytes
    serial: bytes


@dataclass(frozen=True, slots=True)
class PolicySpki:
    """A decoded fingerprint from one of the header policy lists."""

    policy_list: PolicyList
    digest: bytes


@dataclass(frozen=True, slots=True)
class UpdateInfo:
    """Download location and version advertised by the update server."""

    url: str
    version: str
