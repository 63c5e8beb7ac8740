"""
Ports: Protocol-based interfaces for the collaborators the core relies on.

The decoders and queries are pure functions over an in-memory buffer. Network
access and certificate parsing sit behind these protocols so they can be
swapped for fakes in tests:

  UpdateChecker       → where is the current CRLSet, and which version?
  ContainerDownloader → fetch the container bytes from that location
  SpkiExtractor       → pull the raw SubjectPublicKeyInfo out of a certificate
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from crlset.domain.models import UpdateInfo
from crlset.railway import Result


@runtime_checkable
class UpdateChecker(Protocol):
    """
    Port: ask the update server for the current CRLSet download.

    Returns Result[UpdateInfo]; UPDATE_UNAVAILABLE when the response names
    no download for the CRLSet component.
    """

    def check(self) -> Result[UpdateInfo]: ...


@runtime_checkable
class ContainerDownloader(Protocol):
    """Port: download the raw container bytes from a URL."""

    def download(self, url: str) -> Result[bytes]: ...


@runtime_checkable
class SpkiExtractor(Protocol):
    """
    Port: return the DER-encoded SubjectPublicKeyInfo of a DER certificate.

    Returns Result.failure(CERTIFICATE_UNPARSABLE, ...) when the input is
    not a certificate.
    """

    def extract_spki(self, der: bytes) -> Result[bytes]: ...
