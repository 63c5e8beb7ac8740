"""
HTTP adapter: update check and container download via httpx.

Implements the UpdateChecker and ContainerDownloader ports:
  1. GET the Omaha version-check URL → UpdateInfo (download URL + version)
  2. GET the container URL → raw container bytes (held fully in memory,
     since the zip reader needs random access)

Retry/backoff via tenacity on transient errors (network, timeout).
All HTTP errors are captured into Result failures.
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from crlset.adapters.omaha import (
    CRLSET_APP_ID,
    UPDATE_SERVICE_URL,
    build_update_url,
    parse_update_response,
)
from crlset.domain.models import UpdateInfo
from crlset.railway import ErrorCode, Result

log = structlog.get_logger()

_transient_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=0.1, max=30),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    reraise=True,
)


class HttpUpdateChecker:
    """
    Ask the update service which CRLSet is current.

    Implements the UpdateChecker port.
    """

    def __init__(
        self,
        service_url: str = UPDATE_SERVICE_URL,
        app_id: str = CRLSET_APP_ID,
        timeout: int = 60,
    ) -> None:
        self._request_url = build_update_url(service_url, app_id)
        self._app_id = app_id
        self._timeout = timeout

    def check(self) -> Result[UpdateInfo]:
        """
        GET the version-check URL and parse the reply.

        Returns Result[UpdateInfo] on success, EXTERNAL_SERVICE_ERROR for
        HTTP/network failures, UPDATE_UNAVAILABLE when no download is listed.
        """
        return (
            Result.from_computation(
                self._do_request,
                ErrorCode.EXTERNAL_SERVICE_ERROR,
                "Failed to get current version",
            )
            .flat_map(lambda body: parse_update_response(body, self._app_id))
            .peek(lambda info: log.info("update.checked", version=info.version, url=info.url))
        )

    @_transient_retry
    def _do_request(self) -> bytes:
        with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
            response = client.get(self._request_url)
            response.raise_for_status()
            return response.content


class HttpContainerDownloader:
    """
    Download a delivery container into memory.

    Implements the ContainerDownloader port.
    """

    def __init__(self, timeout: int = 60) -> None:
        self._timeout = timeout

    def download(self, url: str) -> Result[bytes]:
        """Returns Result[bytes] on success, EXTERNAL_SERVICE_ERROR on failure."""
        return Result.from_computation(
            lambda: self._do_download(url),
            ErrorCode.EXTERNAL_SERVICE_ERROR,
            "Failed to download CRX",
        )

    @_transient_retry
    def _do_download(self, url: str) -> bytes:
        with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
            data = response.content
            log.info("download.complete", url=url, size_bytes=len(data))
            return data
