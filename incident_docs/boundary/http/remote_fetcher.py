"""
Safe remote fetcher.

Downloads a file from an upstream-supplied URL (form uploads hosted by the
form provider) with a hard byte cap and a wall-clock timeout, and classifies
every failure into an ErrorCode.

Dependencies: httpx, pydantic, incident_docs.core.exceptions
System role: Failure-injection boundary between the pipeline and source hosts
"""

import asyncio
import logging
import posixpath
import socket
import time
from typing import Iterator
from urllib.parse import unquote, urlsplit

import httpx
from pydantic import BaseModel, Field

from incident_docs.boundary.db.models.document_model import ErrorCode
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.core.exceptions import FetchError
from incident_docs.observability.log_utils import redact_url

logger = logging.getLogger(__name__)

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)
_REFUSED_MARKERS = ("connection refused", "errno 111", "econnrefused")


class FetchedFile(BaseModel):
    """Body and metadata of one successful download."""

    content: bytes = Field(..., description="Raw file bytes")
    content_type: str = Field(..., description="MIME type without parameters")
    file_name: str = Field(..., description="File name derived from the URL")
    status_code: int = Field(default=200, description="HTTP status of the final response")

    @property
    def size(self) -> int:
        return len(self.content)


def classify_http_status(status_code: int) -> ErrorCode:
    """
    Map an HTTP error status to an ErrorCode.

    Args:
        status_code: Response status (>= 400)

    Returns:
        ErrorCode: AUTH_ERROR, NOT_FOUND, TIMEOUT, RATE_LIMIT, SERVER_ERROR
        or UNKNOWN_ERROR
    """
    if status_code in (401, 403):
        return ErrorCode.AUTH_ERROR
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code in (408, 504):
        return ErrorCode.TIMEOUT
    if status_code == 429:
        return ErrorCode.RATE_LIMIT
    if status_code >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.UNKNOWN_ERROR


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_transport_error(exc: BaseException) -> ErrorCode:
    """
    Map a network-level exception to an ErrorCode.

    Walks the cause chain so the socket error underneath an httpx.ConnectError
    is found; falls back to matching the OS error text.

    Args:
        exc: Exception raised while connecting or reading

    Returns:
        ErrorCode: TIMEOUT, DNS_ERROR, CONNECTION_REFUSED or UNKNOWN_ERROR
    """
    chain = list(_exception_chain(exc))

    for err in chain:
        if isinstance(err, (httpx.TimeoutException, TimeoutError)):
            return ErrorCode.TIMEOUT
    for err in chain:
        if isinstance(err, socket.gaierror):
            return ErrorCode.DNS_ERROR
        if isinstance(err, ConnectionRefusedError):
            return ErrorCode.CONNECTION_REFUSED

    text = " ".join(str(err) for err in chain).lower()
    if any(marker in text for marker in _DNS_MARKERS):
        return ErrorCode.DNS_ERROR
    if any(marker in text for marker in _REFUSED_MARKERS):
        return ErrorCode.CONNECTION_REFUSED
    return ErrorCode.UNKNOWN_ERROR


def file_name_from_url(url: str) -> str:
    """Last path segment of the URL, or a timestamped fallback name."""
    try:
        name = posixpath.basename(unquote(urlsplit(url).path))
    except ValueError:
        name = ""
    if not name:
        name = f"document_{int(time.time() * 1000)}.jpg"
    return name


class RemoteFetcher:
    """
    Bounded HTTP GET for upstream file URLs.

    A new AsyncClient is opened per download; `transport` lets tests plug in
    httpx.MockTransport.
    """

    def __init__(
        self,
        settings: IngestionSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            settings: Supplies default byte cap, timeout and content type
            transport: Optional httpx transport override
        """
        self._settings = settings
        self._transport = transport

    async def fetch(
        self,
        url: str,
        *,
        max_bytes: int | None = None,
        timeout: float | None = None,
    ) -> FetchedFile:
        """
        Download `url` into memory.

        Args:
            url: Absolute http(s) URL
            max_bytes: Byte cap (defaults to settings.max_file_bytes)
            timeout: Wall-clock seconds (defaults to settings.fetch_timeout_seconds)

        Returns:
            FetchedFile: Body, content type and derived file name

        Raises:
            FetchError: Any failure, carrying its ErrorCode
        """
        if max_bytes is None:
            max_bytes = self._settings.max_file_bytes
        if timeout is None:
            timeout = self._settings.fetch_timeout_seconds
        started = time.perf_counter()

        try:
            fetched = await asyncio.wait_for(
                self._download(url, max_bytes=max_bytes, timeout=timeout),
                timeout=timeout,
            )
        except FetchError as e:
            logger.warning(
                f"{__name__}:fetch - {e.message}",
                extra={"url": redact_url(url), "error_code": e.error_code.value},
            )
            raise
        except (TimeoutError, httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            code = classify_transport_error(e)
            logger.warning(
                f"{__name__}:fetch - {type(e).__name__}: {e}",
                extra={"url": redact_url(url), "error_code": code.value},
            )
            if code == ErrorCode.TIMEOUT:
                message = f"Download timed out after {timeout}s"
            else:
                message = f"Download failed: {type(e).__name__}: {e}"
            raise FetchError(message, code, details={"url": redact_url(url)}) from e

        logger.info(
            f"{__name__}:fetch - Downloaded {fetched.size} bytes",
            extra={
                "url": redact_url(url),
                "content_type": fetched.content_type,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return fetched

    async def _download(self, url: str, *, max_bytes: int, timeout: float) -> FetchedFile:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"User-Agent": self._settings.user_agent},
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url) as response:
                if response.status_code >= 400:
                    code = classify_http_status(response.status_code)
                    raise FetchError(
                        f"HTTP {response.status_code}: {response.reason_phrase or 'error'}",
                        code,
                        status_code=response.status_code,
                        details={"url": redact_url(url)},
                    )

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > max_bytes:
                    raise self._too_large(url, int(declared), max_bytes)

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > max_bytes:
                        raise self._too_large(url, len(body), max_bytes)

                content_type = response.headers.get("content-type", "")
                content_type = content_type.split(";", 1)[0].strip() or self._settings.default_content_type

                return FetchedFile(
                    content=bytes(body),
                    content_type=content_type,
                    file_name=file_name_from_url(str(response.url)),
                    status_code=response.status_code,
                )

    @staticmethod
    def _too_large(url: str, size: int, max_bytes: int) -> FetchError:
        return FetchError(
            f"File exceeds maximum size of {max_bytes} bytes",
            ErrorCode.FILE_TOO_LARGE,
            details={"url": redact_url(url), "size": size, "max_bytes": max_bytes},
        )
