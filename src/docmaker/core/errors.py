"""Exception hierarchy for document generation and storage."""

from __future__ import annotations


class DocMakerError(Exception):
    """Base class for every error raised by docmaker."""


class RenderError(DocMakerError):
    """The on-device composer produced no output."""


# ---------------------------------------------------------------------------
# Remote rendering
# ---------------------------------------------------------------------------

class RemoteRenderError(DocMakerError):
    """Any failure of the remote HTML-to-PDF service."""


class ConfigurationError(RemoteRenderError):
    """The render API key is not configured."""

    def __init__(self, message: str = "PDF.co API key is not configured.") -> None:
        super().__init__(message)


class RequestFailed(RemoteRenderError):
    """The render service answered with a non-2xx status."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"PDF.co request failed with status code {status_code}.")


class InvalidResponse(RemoteRenderError):
    """The render service response could not be parsed."""

    def __init__(self, message: str = "The PDF.co response could not be parsed.") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class RemoteUploadError(DocMakerError):
    """Mirroring a stored document to the remote record store failed."""


class NotFoundError(DocMakerError):
    """No stored document has the requested id."""
