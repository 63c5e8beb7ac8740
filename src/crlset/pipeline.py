"""
Fetch pipeline: locate, download and unwrap the current CRLSet.

The stages are connected with flat_map, so the first failure short-circuits:

  checker.check()
    → downloader.download(info.url)
      → extract_entry(container, "crl-set")

All I/O is injected via ports; the result is the raw CRLSet file bytes.
"""

from __future__ import annotations

import structlog

from crlset.codec.container import CRLSET_ENTRY_NAME, extract_entry
from crlset.domain.models import UpdateInfo
from crlset.domain.ports import ContainerDownloader, UpdateChecker
from crlset.railway import Result

log = structlog.get_logger()


def _download(info: UpdateInfo, downloader: ContainerDownloader) -> Result[bytes]:
    log.info("crlset.downloading", version=info.version)
    return downloader.download(info.url)


def fetch_crlset(checker: UpdateChecker, downloader: ContainerDownloader) -> Result[bytes]:
    """
    Return the bytes of the CRLSet currently published by the update service.

    Failures come from whichever stage failed first: EXTERNAL_SERVICE_ERROR or
    UPDATE_UNAVAILABLE from the network side, or a container decode error.
    """
    return (
        checker.check()
        .flat_map(lambda info: _download(info, downloader))
        .flat_map(lambda container: extract_entry(container, CRLSET_ENTRY_NAME))
    )
