"""Remote record-store mirror for stored documents.

Each stored document becomes one remote record holding its title, size,
creation time and the PDF as a file attachment. The store only needs the
identifier the remote side assigns to that record.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from ..core.errors import RemoteUploadError
from ..core.models import DocumentMetadata

log = logging.getLogger(__name__)

RECORD_TYPE = "GeneratedDocument"
_REQUEST_TIMEOUT = 60.0


class RecordMirror(ABC):
    """A remote backend that keeps a synced copy of each document."""

    @abstractmethod
    async def save(self, metadata: DocumentMetadata, data: bytes) -> str:
        """Create a remote record and return its record name.

        Raises :class:`RemoteUploadError` on any failure.
        """
        ...


class HttpRecordMirror(RecordMirror):
    """Mirror documents to an HTTP record store.

    Records are created with a multipart ``POST`` to *url*; the JSON
    response must carry the new record's ``recordName``.
    """

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        timeout: float = _REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout
        self._transport = transport

    async def save(self, metadata: DocumentMetadata, data: bytes) -> str:
        headers: dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        fields = {
            "recordType": RECORD_TYPE,
            "title": metadata.title,
            "fileSize": str(metadata.file_size),
            "createdAt": metadata.created_at.isoformat(),
        }
        files = {"file": (f"{metadata.id}.pdf", data, "application/pdf")}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(self.url, data=fields, files=files, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteUploadError(f"Upload of {metadata.id} failed: {exc}") from exc

        if not resp.is_success:
            raise RemoteUploadError(
                f"Upload of {metadata.id} failed with status code {resp.status_code}"
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise RemoteUploadError("Record store response could not be parsed") from exc

        record_name = body.get("recordName") if isinstance(body, dict) else None
        if not isinstance(record_name, str) or not record_name:
            raise RemoteUploadError("Record store response has no recordName")

        log.debug("Mirrored %s as record %s", metadata.id, record_name)
        return record_name
