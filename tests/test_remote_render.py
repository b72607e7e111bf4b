"""Tests for the remote HTML-to-PDF client (mocked HTTP)."""

from __future__ import annotations

import json

import httpx
import pytest

from docmaker.core.errors import (
    ConfigurationError,
    InvalidResponse,
    RemoteRenderError,
    RequestFailed,
)
from docmaker.generators.remote_render import PDFCO_ENDPOINT, RemoteRenderClient

FILE_URL = "https://files.pdf.co/rendered/doc.pdf"
PDF_BYTES = b"%PDF-1.4 remote"


class Recorder:
    """httpx.MockTransport handler that records requests and replays responses."""

    def __init__(self, responses: dict[tuple[str, str], httpx.Response | Exception]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url))
        result = self.responses[key]
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _client(recorder: Recorder, api_key: str | None = "test-key") -> RemoteRenderClient:
    return RemoteRenderClient(api_key, transport=recorder.transport)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestConfiguration:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", [None, "", "   "])
    async def test_missing_key_raises_before_request(self, key):
        recorder = Recorder({})
        client = _client(recorder, api_key=key)
        assert client.is_configured is False
        with pytest.raises(ConfigurationError):
            await client.render_from_html("<p>x</p>")
        assert recorder.requests == []

    def test_configuration_error_is_remote_error(self):
        assert issubclass(ConfigurationError, RemoteRenderError)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

class TestRender:
    @pytest.mark.asyncio
    async def test_two_step_render(self):
        recorder = Recorder({
            ("POST", PDFCO_ENDPOINT): httpx.Response(200, json={"url": FILE_URL}),
            ("GET", FILE_URL): httpx.Response(200, content=PDF_BYTES),
        })
        data = await _client(recorder).render_from_html("<h1>T</h1><p>S</p>")
        assert data == PDF_BYTES

        post, get = recorder.requests
        assert post.headers["x-api-key"] == "test-key"
        assert post.headers["content-type"] == "application/json"
        body = json.loads(post.content)
        assert body == {"html": "<h1>T</h1><p>S</p>", "name": "DocMaker-generated.pdf"}
        assert get.method == "GET"

    @pytest.mark.asyncio
    async def test_custom_endpoint(self):
        endpoint = "http://render.local/convert"
        recorder = Recorder({
            ("POST", endpoint): httpx.Response(201, json={"url": FILE_URL}),
            ("GET", FILE_URL): httpx.Response(200, content=PDF_BYTES),
        })
        client = RemoteRenderClient("k", endpoint=endpoint, transport=recorder.transport)
        assert await client.render_from_html("<p/>") == PDF_BYTES


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 500, 503])
    async def test_non_2xx_post(self, status):
        recorder = Recorder({("POST", PDFCO_ENDPOINT): httpx.Response(status, text="nope")})
        with pytest.raises(RequestFailed) as excinfo:
            await _client(recorder).render_from_html("<p/>")
        assert excinfo.value.status_code == status
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_non_2xx_download(self):
        recorder = Recorder({
            ("POST", PDFCO_ENDPOINT): httpx.Response(200, json={"url": FILE_URL}),
            ("GET", FILE_URL): httpx.Response(404),
        })
        with pytest.raises(RequestFailed) as excinfo:
            await _client(recorder).render_from_html("<p/>")
        assert excinfo.value.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"error": False}),
            httpx.Response(200, json={"url": 42}),
            httpx.Response(200, json={"url": "ftp://files/doc.pdf"}),
            httpx.Response(200, json=["url"]),
        ],
    )
    async def test_invalid_response(self, response):
        recorder = Recorder({("POST", PDFCO_ENDPOINT): response})
        with pytest.raises(InvalidResponse):
            await _client(recorder).render_from_html("<p/>")
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_empty_download_is_invalid(self):
        recorder = Recorder({
            ("POST", PDFCO_ENDPOINT): httpx.Response(200, json={"url": FILE_URL}),
            ("GET", FILE_URL): httpx.Response(200, content=b""),
        })
        with pytest.raises(InvalidResponse):
            await _client(recorder).render_from_html("<p/>")
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        request = httpx.Request("POST", PDFCO_ENDPOINT)
        recorder = Recorder({
            ("POST", PDFCO_ENDPOINT): httpx.ConnectError("offline", request=request),
        })
        with pytest.raises(RemoteRenderError):
            await _client(recorder).render_from_html("<p/>")
