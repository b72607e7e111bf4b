"""PDF generation: on-device composer and remote HTML renderer."""

from .pdf_composer import PdfComposer, compose
from .remote_render import RemoteRenderClient

__all__ = ["PdfComposer", "RemoteRenderClient", "compose"]
