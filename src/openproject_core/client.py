"""Authenticated HTTP client for the OpenProject API v3.

Wraps an httpx.AsyncClient and classifies every failure into one of:
- OpenProjectAPIError: non-success HTTP status (status code + best-effort message)
- OpenProjectParseError: success status with a body that is not JSON
- OpenProjectConnectionError: the request never produced a response

No retries, caching or rate limiting are done here. A rejected update
(e.g. 409 on a stale lockVersion) surfaces like any other API error.
"""
import base64
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from .config import Settings
from .schemas import (
    AttachmentCollection,
    StatusCatalog,
    WorkPackage,
    parse_resource,
)
from .statuses import StatusUpdateRequest

logger = logging.getLogger("openproject-core.client")

API_PREFIX = "/api/v3"
BODY_METHODS = {"POST", "PATCH", "PUT"}


class OpenProjectError(Exception):
    """Base class for failures talking to OpenProject."""


class OpenProjectAPIError(OpenProjectError):
    """Raised when OpenProject answers with a non-success status."""

    def __init__(self, status_code: int, message: str, error_identifier: Optional[str] = None):
        super().__init__(f"OpenProject API error ({status_code}): {message}")
        self.status_code = status_code
        self.message = message
        self.error_identifier = error_identifier


class OpenProjectParseError(OpenProjectError):
    """Raised when a success response body is not valid JSON."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"OpenProject API error ({status_code}): response is not valid JSON ({detail})")
        self.status_code = status_code


class OpenProjectConnectionError(OpenProjectError):
    """Raised when the request fails before a response is received."""


def build_auth_header(api_key: str) -> str:
    """Basic auth value OpenProject expects for API keys: base64("apikey:<key>")."""
    token = base64.b64encode(f"apikey:{api_key}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the httpx client used for one tool invocation."""
    headers = {
        "Authorization": build_auth_header(settings.api_key),
        "Content-Type": "application/json",
        "Accept": "application/hal+json",
    }
    return httpx.AsyncClient(base_url=settings.api_url, headers=headers, timeout=settings.timeout)


def parse_error_message(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Extract (message, errorIdentifier) from an error response.

    OpenProject usually returns a JSON error document, but proxies and crashes
    produce HTML or plain text, so the raw body is the fallback message.
    """
    text = response.text
    try:
        data = response.json()
    except ValueError:
        return (text or "Unknown error"), None
    if not isinstance(data, dict):
        return (text or "Unknown error"), None
    return (data.get("message") or "Unknown error"), data.get("errorIdentifier")


class OpenProjectClient:
    """Typed access to the handful of OpenProject endpoints the tools need."""

    def __init__(self, http: httpx.AsyncClient, api_prefix: str = API_PREFIX):
        self.http = http
        self.api_prefix = api_prefix

    async def request(self, endpoint: str, method: str = "GET", payload: Optional[dict] = None) -> Any:
        """Call an API endpoint and return the decoded JSON body."""
        method = method.upper()
        url = f"{self.api_prefix}{endpoint}"
        kwargs = {}
        if payload is not None and method in BODY_METHODS:
            kwargs["json"] = payload

        logger.debug(f"{method} {url}")
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request error during {method} {url}: {type(e).__name__}: {e}")
            raise OpenProjectConnectionError(f"Connection failed - {e}") from e

        if not response.is_success:
            message, identifier = parse_error_message(response)
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise OpenProjectAPIError(response.status_code, message, identifier)

        try:
            return response.json()
        except ValueError as e:
            raise OpenProjectParseError(response.status_code, str(e)) from e

    async def get_work_package(self, work_package_id: int) -> WorkPackage:
        document = await self.request(f"/work_packages/{work_package_id}")
        return parse_resource(WorkPackage, document, "work package")

    async def list_statuses(self) -> StatusCatalog:
        document = await self.request("/statuses")
        return parse_resource(StatusCatalog, document, "status collection")

    async def update_work_package(self, work_package_id: int, update: StatusUpdateRequest) -> WorkPackage:
        document = await self.request(f"/work_packages/{work_package_id}", "PATCH", update.to_payload())
        return parse_resource(WorkPackage, document, "work package")

    async def list_attachments(self, work_package_id: int) -> AttachmentCollection:
        document = await self.request(f"/work_packages/{work_package_id}/attachments")
        return parse_resource(AttachmentCollection, document, "attachment collection")

    def is_api_origin(self, url: httpx.URL) -> bool:
        """True for relative URLs and absolute URLs on the OpenProject host."""
        if url.is_relative_url:
            return True
        base = self.http.base_url
        return (url.scheme, url.host, url.port) == (base.scheme, base.host, base.port)

    async def download(self, href: str, destination: Path) -> int:
        """Stream a download link to a file and return the number of bytes written.

        `href` is host-relative (e.g. /api/v3/attachments/1/content) or absolute
        for external storage; it is not prefixed with the API path. Redirects are
        followed, since remote storage setups answer the content endpoint with a
        redirect to a presigned URL. The API key is only sent to the OpenProject
        host; httpx also drops it on cross-origin redirects.
        """
        request = self.http.build_request("GET", href)
        if not self.is_api_origin(request.url):
            request.headers.pop("Authorization", None)

        written = 0
        try:
            response = await self.http.send(request, stream=True, follow_redirects=True)
            try:
                if not response.is_success:
                    raise OpenProjectAPIError(
                        response.status_code,
                        f"Failed to download file: {response.status_code} {response.reason_phrase}",
                    )
                with open(destination, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
                        written += len(chunk)
            finally:
                await response.aclose()
        except httpx.RequestError as e:
            raise OpenProjectConnectionError(f"Connection failed - {e}") from e

        logger.debug(f"Downloaded {written} bytes from {href} to {destination}")
        return written
