"""
Update-metadata adapter: the Omaha "update2" protocol used to publish CRLSets.

The request carries the component's app id; the response looks like:

    <gupdate xmlns="http://www.google.com/update2/response" protocol="2.0">
      <app appid="hfnkpimlhhgieaddgfemjhofmfblmnib" status="ok">
        <updatecheck codebase="http://.../crl-set-1234.crx.data" version="56"/>
      </app>
    </gupdate>
"""

from __future__ import annotations

from xml.etree import ElementTree

import httpx

from crlset.domain.models import UpdateInfo
from crlset.railway import ErrorCode, RailwayError, Result

# Hex(ish) encoding of the hash of the key that signs CRLSet containers.
CRLSET_APP_ID = "hfnkpimlhhgieaddgfemjhofmfblmnib"
UPDATE_SERVICE_URL = "https://clients2.google.com/service/update2/crx"


def build_update_url(service_url: str = UPDATE_SERVICE_URL, app_id: str = CRLSET_APP_ID) -> str:
    """The version-check URL: one `x` parameter holding the encoded app query."""
    query = f"id={app_id}&v=&uc&acceptformat=crx3"
    return str(httpx.URL(service_url, params={"x": query}))


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _do_parse(body: bytes, app_id: str) -> UpdateInfo:
    root = ElementTree.fromstring(body)
    if _local_name(root.tag) != "gupdate":
        raise RailwayError(
            ErrorCode.EXTERNAL_SERVICE_ERROR,
            f"Unexpected version reply root element <{_local_name(root.tag)}>",
        )

    url = version = ""
    for app in root:
        if _local_name(app.tag) != "app" or app.get("appid") != app_id:
            continue
        for child in app:
            if _local_name(child.tag) == "updatecheck":
                url = child.get("codebase", "")
                version = child.get("version", "")
                break
        break

    if not url:
        raise RailwayError(
            ErrorCode.UPDATE_UNAVAILABLE,
            f"Version reply has no download for app {app_id}",
        )
    return UpdateInfo(url=url, version=version)


def parse_update_response(body: bytes, app_id: str = CRLSET_APP_ID) -> Result[UpdateInfo]:
    """
    Find the CRLSet download URL and version in an Omaha response.

    Returns Result.failure(UPDATE_UNAVAILABLE) when the app is absent or has
    no codebase, EXTERNAL_SERVICE_ERROR when the XML does not parse.
    """
    return Result.from_computation(
        lambda: _do_parse(body, app_id),
        ErrorCode.EXTERNAL_SERVICE_ERROR,
        "Failed to parse version reply",
    )
