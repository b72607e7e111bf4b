"""Durable document store with an observable metadata collection.

The store is the only writer of persisted documents. Every write runs on a
single dedicated worker thread, so writes never interleave; reads open their
own short-lived sessions and see committed rows only. After each committed
change the newest-first metadata list is reloaded and pushed to subscribers
in commit order.

Mirroring to the remote record store happens in a background task *after*
``store()`` has returned. A failed mirror is logged and the document stays
"Local only"; nothing retries it.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from functools import partial
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import select, update

from ..core.errors import NotFoundError, RemoteUploadError, RenderError
from ..core.models import DocumentMetadata, StoredDocumentRecord, as_utc
from ..generators.pdf_composer import PdfComposer
from .mirror import RecordMirror
from .schema import StoredDocument, create_schema, create_session_factory, create_store_engine

log = logging.getLogger(__name__)

T = TypeVar("T")
Subscriber = Callable[[list[DocumentMetadata]], None]

# Sample documents written on the very first start
SAMPLE_DOCUMENTS: list[tuple[str, list[str]]] = [
    ("Living Trust Overview", [
        "This sample document demonstrates the PDF pipeline inside DocMaker.",
        "It highlights how the generated trust summary renders when the on-device composer is used.",
        "Feel free to replace this demo data with a real trust agreement once integrated with live services.",
    ]),
    ("Estate Summary 2024", [
        "Primary grantor and spouse summary for the 2024 review cycle.",
        "Includes details about children, guardians, and key successor trustees.",
    ]),
    ("Healthcare Directive", [
        "Draft healthcare directive that accompanies the living trust packet.",
        "Contains space for medical wishes, HIPAA releases, and agent designations.",
    ]),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """Persist generated PDFs and publish their metadata.

    Usage::

        store = DocumentStore(Path("~/.docmaker/documents.db"))
        await store.start()
        meta = await store.store(pdf_bytes, "Living Trust Packet")
        assert store.data_for(meta.id) == pdf_bytes
    """

    def __init__(
        self,
        database_path: Path | str,
        *,
        mirror: RecordMirror | None = None,
        composer: PdfComposer | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.database_path = Path(database_path)
        self._engine = create_store_engine(self.database_path)
        self._sessions = create_session_factory(self._engine)
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="docmaker-writer")
        self._mirror = mirror
        self._composer = composer or PdfComposer()
        self._clock = clock

        self._lock = asyncio.Lock()
        self._documents: list[DocumentMetadata] = []
        self._subscribers: list[Subscriber] = []
        self._uploads: set[asyncio.Task[None]] = set()
        self._last_created_at: datetime | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, *, seed_samples: bool = True) -> None:
        """Create the schema, load the collection and seed an empty store.

        Safe to call more than once: seeding only happens while the store
        holds no documents at all.
        """
        await self._run_writer(create_schema, self._engine)
        async with self._lock:
            await self._refresh_and_publish()

        if seed_samples and not self._documents:
            await self._seed_samples()

    async def wait_for_uploads(self) -> None:
        """Wait until every in-flight mirror upload has finished."""
        while self._uploads:
            await asyncio.gather(*list(self._uploads), return_exceptions=True)

    async def close(self) -> None:
        """Abandon pending uploads, stop the writer and release the engine."""
        for task in list(self._uploads):
            task.cancel()
        await asyncio.gather(*list(self._uploads), return_exceptions=True)
        await asyncio.to_thread(self._writer.shutdown, wait=True)
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def store(
        self,
        data: bytes,
        title: str,
        mirror_to_remote: bool = True,
    ) -> DocumentMetadata:
        """Persist *data* under *title* and return its metadata.

        The record is committed and visible through :meth:`data_for` and
        :meth:`all_documents` before this returns. The remote mirror, when
        requested and configured, runs afterwards in the background.
        """
        async with self._lock:
            metadata = DocumentMetadata(
                id=uuid.uuid4(),
                title=title,
                file_size=len(data),
                created_at=self._next_timestamp(),
            )
            await self._run_writer(self._insert, metadata, data)
            await self._refresh_and_publish()

        log.info("Stored document %s (%s, %d bytes)", metadata.id, title, metadata.file_size)

        if mirror_to_remote and self._mirror is not None:
            self._spawn_upload(self._mirror, metadata, data)
        return metadata

    def _insert(self, metadata: DocumentMetadata, data: bytes) -> None:
        with self._sessions() as session, session.begin():
            session.add(
                StoredDocument(
                    id=metadata.id,
                    title=metadata.title,
                    file_size=metadata.file_size,
                    created_at=metadata.created_at.astimezone(timezone.utc).replace(tzinfo=None),
                    cloud_record_name=metadata.cloud_record_name,
                    pdf_data=data,
                )
            )

    def _set_cloud_record(self, document_id: uuid.UUID, record_name: str) -> bool:
        # Only a local-only record may flip; a synced one is never rewritten.
        with self._sessions() as session, session.begin():
            result = session.execute(
                update(StoredDocument)
                .where(StoredDocument.id == document_id)
                .where(StoredDocument.cloud_record_name.is_(None))
                .values(cloud_record_name=record_name)
            )
            return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def data_for(self, document_id: uuid.UUID | str) -> bytes | None:
        """Return the PDF bytes for *document_id*, or ``None`` if unknown."""
        record = self.record(document_id)
        return record.pdf_data if record else None

    def record(self, document_id: uuid.UUID | str) -> StoredDocumentRecord | None:
        """Return the full persisted record for *document_id*."""
        key = _coerce_id(document_id)
        if key is None:
            return None
        with self._sessions() as session:
            row = session.get(StoredDocument, key)
            if row is None:
                return None
            return StoredDocumentRecord(
                id=row.id,
                title=row.title,
                file_size=row.file_size,
                created_at=as_utc(row.created_at),
                cloud_record_name=row.cloud_record_name,
                pdf_data=row.pdf_data,
            )

    def all_documents(self) -> list[DocumentMetadata]:
        """Current metadata snapshot, newest first."""
        return list(self._documents)

    def get(self, document_id: uuid.UUID | str) -> DocumentMetadata | None:
        key = _coerce_id(document_id)
        return next((d for d in self._documents if d.id == key), None)

    def export(self, document_id: uuid.UUID | str, output_path: Path | str) -> Path:
        """Write the stored PDF to *output_path*.

        Raises :class:`NotFoundError` for an unknown id.
        """
        data = self.data_for(document_id)
        if data is None:
            raise NotFoundError(f"No stored document with id {document_id}")
        path = Path(output_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* for every committed change.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def updates(self) -> AsyncIterator[list[DocumentMetadata]]:
        """Yield the current snapshot, then one snapshot per change."""
        queue: asyncio.Queue[list[DocumentMetadata]] = asyncio.Queue()
        unsubscribe = self.subscribe(queue.put_nowait)
        try:
            yield self.all_documents()
            while True:
                yield await queue.get()
        finally:
            unsubscribe()

    async def _refresh_and_publish(self) -> None:
        self._documents = await asyncio.to_thread(self._load_metadata)
        if self._documents:
            newest = self._documents[0].created_at
            if self._last_created_at is None or newest > self._last_created_at:
                self._last_created_at = newest

        snapshot = self.all_documents()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                log.exception("Document subscriber %r failed", callback)

    def _load_metadata(self) -> list[DocumentMetadata]:
        stmt = select(
            StoredDocument.id,
            StoredDocument.title,
            StoredDocument.file_size,
            StoredDocument.created_at,
            StoredDocument.cloud_record_name,
        ).order_by(StoredDocument.created_at.desc(), StoredDocument.id)
        with self._sessions() as session:
            rows = session.execute(stmt).all()
        return [
            DocumentMetadata(
                id=row.id,
                title=row.title,
                file_size=row.file_size,
                created_at=as_utc(row.created_at),
                cloud_record_name=row.cloud_record_name,
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Background mirror
    # ------------------------------------------------------------------

    def _spawn_upload(
        self, mirror: RecordMirror, metadata: DocumentMetadata, data: bytes
    ) -> None:
        task = asyncio.create_task(
            self._upload(mirror, metadata, data), name=f"docmaker-mirror-{metadata.id}"
        )
        self._uploads.add(task)
        task.add_done_callback(self._uploads.discard)

    async def _upload(
        self, mirror: RecordMirror, metadata: DocumentMetadata, data: bytes
    ) -> None:
        try:
            record_name = await mirror.save(metadata, data)
        except RemoteUploadError as exc:
            log.warning("Remote mirror failed for %s: %s", metadata.id, exc)
            return
        except Exception:
            log.exception("Unexpected error mirroring %s", metadata.id)
            return

        async with self._lock:
            changed = await self._run_writer(self._set_cloud_record, metadata.id, record_name)
            if changed:
                await self._refresh_and_publish()
        log.info("Document %s synced as %s", metadata.id, record_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _seed_samples(self) -> None:
        log.info("Empty document store, seeding %d sample documents", len(SAMPLE_DOCUMENTS))
        for title, body in SAMPLE_DOCUMENTS:
            try:
                data = await asyncio.to_thread(self._composer.compose, title, body)
            except RenderError as exc:
                log.warning("Skipping sample %r: %s", title, exc)
                continue
            await self.store(data, title, mirror_to_remote=False)

    async def _run_writer(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._writer, partial(fn, *args))

    def _next_timestamp(self) -> datetime:
        # Strictly increasing, so newest-first ordering never ties.
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now


def _coerce_id(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
