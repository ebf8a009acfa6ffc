"""
Test suite for RemoteFetcher and failure classification.

Uses httpx.MockTransport in place of the network.

System role: Verification of the fetch boundary and its error taxonomy
"""

import asyncio
import socket

import httpx
import pytest

from incident_docs.boundary.db.models.document_model import ErrorCode
from incident_docs.boundary.http.remote_fetcher import (
    RemoteFetcher,
    classify_http_status,
    classify_transport_error,
    file_name_from_url,
)
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.core.exceptions import FetchError


URL = "https://files.forms.test/abc123/licence%20front.jpg?token=secret"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"incident-photo" * 64


def image_handler(body: bytes = JPEG_BYTES, content_type: str = "image/jpeg"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"content-type": content_type})

    return handler


def status_handler(status_code: int):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=b"")

    return handler


def timeout_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def make_fetcher(handler, settings: IngestionSettings) -> RemoteFetcher:
    return RemoteFetcher(settings, transport=httpx.MockTransport(handler))


class TestClassifyHttpStatus:
    @pytest.mark.parametrize(
        "status_code, expected",
        [
            (401, ErrorCode.AUTH_ERROR),
            (403, ErrorCode.AUTH_ERROR),
            (404, ErrorCode.NOT_FOUND),
            (408, ErrorCode.TIMEOUT),
            (504, ErrorCode.TIMEOUT),
            (429, ErrorCode.RATE_LIMIT),
            (500, ErrorCode.SERVER_ERROR),
            (503, ErrorCode.SERVER_ERROR),
            (418, ErrorCode.UNKNOWN_ERROR),
        ],
    )
    def test_maps_status_to_code(self, status_code: int, expected: ErrorCode) -> None:
        assert classify_http_status(status_code) == expected


class TestClassifyTransportError:
    def test_gaierror_in_cause_chain_is_dns_error(self) -> None:
        # Arrange
        cause = socket.gaierror(-2, "Name or service not known")
        exc = httpx.ConnectError("connect failed")
        exc.__cause__ = cause

        # Act / Assert
        assert classify_transport_error(exc) == ErrorCode.DNS_ERROR

    def test_connection_refused_in_cause_chain(self) -> None:
        exc = httpx.ConnectError("connect failed")
        exc.__cause__ = ConnectionRefusedError(111, "Connection refused")
        assert classify_transport_error(exc) == ErrorCode.CONNECTION_REFUSED

    def test_falls_back_to_message_text(self) -> None:
        assert classify_transport_error(OSError("getaddrinfo failed")) == ErrorCode.DNS_ERROR
        assert classify_transport_error(OSError("[Errno 111] Connection refused")) == ErrorCode.CONNECTION_REFUSED

    def test_timeouts(self) -> None:
        assert classify_transport_error(TimeoutError()) == ErrorCode.TIMEOUT
        assert classify_transport_error(httpx.ConnectTimeout("slow")) == ErrorCode.TIMEOUT

    def test_anything_else_is_unknown(self) -> None:
        assert classify_transport_error(httpx.RemoteProtocolError("bad frame")) == ErrorCode.UNKNOWN_ERROR


class TestFileNameFromUrl:
    def test_uses_last_path_segment(self) -> None:
        assert file_name_from_url(URL) == "licence front.jpg"

    def test_falls_back_to_timestamped_name(self) -> None:
        name = file_name_from_url("https://files.forms.test/")
        assert name.startswith("document_")
        assert name.endswith(".jpg")


class TestRemoteFetcherFetch:
    @pytest.mark.asyncio
    async def test_successful_download(self, ingestion_settings: IngestionSettings) -> None:
        # Arrange
        fetcher = make_fetcher(image_handler(content_type="image/png; charset=binary"), ingestion_settings)

        # Act
        fetched = await fetcher.fetch(URL)

        # Assert
        assert fetched.content == JPEG_BYTES
        assert fetched.size == len(JPEG_BYTES)
        assert fetched.content_type == "image/png"
        assert fetched.file_name == "licence front.jpg"
        assert fetched.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_content_type_uses_default(self, ingestion_settings: IngestionSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"abc")

        fetched = await make_fetcher(handler, ingestion_settings).fetch(URL)

        assert fetched.content_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_follows_redirects(self, ingestion_settings: IngestionSettings) -> None:
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/start":
                return httpx.Response(302, headers={"location": "https://cdn.forms.test/final.png"})
            return httpx.Response(200, content=b"png", headers={"content-type": "image/png"})

        # Act
        fetched = await make_fetcher(handler, ingestion_settings).fetch("https://files.forms.test/start")

        # Assert
        assert fetched.content == b"png"
        assert fetched.file_name == "final.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, expected",
        [(401, ErrorCode.AUTH_ERROR), (404, ErrorCode.NOT_FOUND), (429, ErrorCode.RATE_LIMIT), (502, ErrorCode.SERVER_ERROR)],
    )
    async def test_http_errors_are_classified(
        self,
        ingestion_settings: IngestionSettings,
        status_code: int,
        expected: ErrorCode,
    ) -> None:
        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(status_handler(status_code), ingestion_settings).fetch(URL)

        assert exc_info.value.error_code == expected
        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_declared_size_over_cap_is_file_too_large(self, ingestion_settings: IngestionSettings) -> None:
        fetcher = make_fetcher(image_handler(body=b"x" * 100), ingestion_settings)

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, max_bytes=10)

        assert exc_info.value.error_code == ErrorCode.FILE_TOO_LARGE
        assert exc_info.value.details["max_bytes"] == 10

    @pytest.mark.asyncio
    async def test_zero_cap_is_not_replaced_by_default(self, ingestion_settings: IngestionSettings) -> None:
        fetcher = make_fetcher(image_handler(body=b"x"), ingestion_settings)

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, max_bytes=0)

        assert exc_info.value.error_code == ErrorCode.FILE_TOO_LARGE
        assert exc_info.value.details["max_bytes"] == 0

    @pytest.mark.asyncio
    async def test_body_at_cap_is_accepted(self, ingestion_settings: IngestionSettings) -> None:
        fetched = await make_fetcher(image_handler(body=b"x" * 10), ingestion_settings).fetch(URL, max_bytes=10)
        assert fetched.size == 10

    @pytest.mark.asyncio
    async def test_read_timeout_is_timeout(self, ingestion_settings: IngestionSettings) -> None:
        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(timeout_handler, ingestion_settings).fetch(URL)

        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_wall_clock_timeout_is_timeout(self, ingestion_settings: IngestionSettings) -> None:
        # Arrange
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, content=b"late")

        # Act / Assert
        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(slow, ingestion_settings).fetch(URL, timeout=0.05)
        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_dns_failure_is_dns_error(self, ingestion_settings: IngestionSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(handler, ingestion_settings).fetch(URL)

        assert exc_info.value.error_code == ErrorCode.DNS_ERROR

    @pytest.mark.asyncio
    async def test_refused_connection(self, ingestion_settings: IngestionSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(handler, ingestion_settings).fetch(URL)

        assert exc_info.value.error_code == ErrorCode.CONNECTION_REFUSED

    @pytest.mark.asyncio
    async def test_error_details_do_not_leak_query_string(self, ingestion_settings: IngestionSettings) -> None:
        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(status_handler(500), ingestion_settings).fetch(URL)

        assert "secret" not in exc_info.value.details["url"]
