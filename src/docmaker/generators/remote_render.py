"""HTML-to-PDF rendering through the PDF.co HTTP API.

The API works in two steps: a ``POST`` with the HTML returns JSON holding a
``url`` to the rendered file, and a ``GET`` on that URL returns the bytes.
This client performs both and never retries; callers decide what to do when
it fails.
"""

from __future__ import annotations

import logging

import httpx

from ..core.errors import (
    ConfigurationError,
    InvalidResponse,
    RemoteRenderError,
    RequestFailed,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PDFCO_ENDPOINT = "https://api.pdf.co/v1/pdf/convert/from/html"
_OUTPUT_NAME = "DocMaker-generated.pdf"
_REQUEST_TIMEOUT = 30.0


class RemoteRenderClient:
    """Async client for the remote HTML-to-PDF service.

    Parameters
    ----------
    api_key
        PDF.co API key. Checked before any request is made.
    endpoint
        Render endpoint; override for self-hosted or test servers.
    timeout
        Per-request timeout in seconds.
    transport
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        endpoint: str = PDFCO_ENDPOINT,
        timeout: float = _REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def render_from_html(self, html: str) -> bytes:
        """Render *html* remotely and return the PDF bytes."""
        if not self.is_configured:
            raise ConfigurationError()

        headers = {"x-api-key": self.api_key.strip(), "Content-Type": "application/json"}
        payload = {"html": html, "name": _OUTPUT_NAME}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
                if not resp.is_success:
                    raise RequestFailed(resp.status_code)

                file_url = self._extract_url(resp)
                log.debug("Render accepted, downloading %s", file_url)

                download = await client.get(file_url, follow_redirects=True)
                if not download.is_success:
                    raise RequestFailed(download.status_code)
                if not download.content:
                    raise InvalidResponse("The PDF.co download was empty.")
        except httpx.HTTPError as exc:
            raise RemoteRenderError(f"PDF.co request failed: {exc}") from exc

        return download.content

    # -- private -------------------------------------------------------------

    @staticmethod
    def _extract_url(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError as exc:
            raise InvalidResponse() from exc

        url = body.get("url") if isinstance(body, dict) else None
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise InvalidResponse()
        return url
