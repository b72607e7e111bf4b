"""Generation orchestration: ties the section builder, renderers and store together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from .config import DocMakerConfig
from .core.models import DocumentMetadata, FormSnapshot, GenerationMethod
from .core.sections import build_sections, make_html, make_title
from .generators.pdf_composer import PdfComposer
from .generators.remote_render import RemoteRenderClient
from .storage.mirror import HttpRecordMirror
from .storage.store import DocumentStore

log = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Snapshot → sections → PDF bytes → document store.

    The remote renderer is optional and never fatal: any failure on that
    path falls back to the on-device composer with the same title and
    sections. Only a :class:`~docmaker.core.errors.RenderError` from the
    composer reaches the caller.

    Usage::

        orchestrator = GenerationOrchestrator(store)
        meta = await orchestrator.generate(snapshot)
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        render_client: RemoteRenderClient | None = None,
        composer: PdfComposer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.render_client = render_client or RemoteRenderClient()
        self.composer = composer or PdfComposer()
        self._clock = clock

    async def generate(
        self,
        snapshot: FormSnapshot,
        method: GenerationMethod = GenerationMethod.ON_DEVICE,
    ) -> DocumentMetadata:
        """Generate, persist and return the metadata of one trust packet."""
        moment = self._clock()
        sections = build_sections(snapshot, moment)
        title = make_title(moment)

        if method is GenerationMethod.REMOTE_RENDER:
            data = await self._render_remote(title, sections)
        else:
            data = await self._compose(title, sections)

        return await self.store.store(data, title, mirror_to_remote=True)

    # -- private -------------------------------------------------------------

    async def _compose(self, title: str, sections: list[str]) -> bytes:
        # Layout is blocking CPU work; keep it off the event loop.
        return await asyncio.to_thread(self.composer.compose, title, sections)

    async def _render_remote(self, title: str, sections: list[str]) -> bytes:
        html = make_html(title, sections)
        try:
            return await self.render_client.render_from_html(html)
        except Exception as exc:
            log.warning(
                "Remote render failed (%s) -- falling back to on-device composer", exc
            )
        return await self._compose(title, sections)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

@dataclass
class Services:
    """The long-lived objects a process builds once and passes around."""
    config: DocMakerConfig
    store: DocumentStore
    orchestrator: GenerationOrchestrator


def build_services(config: DocMakerConfig) -> Services:
    """Construct the store and orchestrator described by *config*."""
    config.ensure_workspace()
    composer = PdfComposer()

    mirror = None
    if config.mirror_url:
        mirror = HttpRecordMirror(
            config.mirror_url, token=config.mirror_token, timeout=config.timeout
        )

    store = DocumentStore(config.database_path, mirror=mirror, composer=composer)
    client = RemoteRenderClient(
        config.pdfco_api_key,
        endpoint=config.render_endpoint,
        timeout=config.timeout,
    )
    orchestrator = GenerationOrchestrator(store, render_client=client, composer=composer)
    return Services(config=config, store=store, orchestrator=orchestrator)
