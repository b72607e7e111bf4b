"""Shared pytest fixtures for the docmaker test suite."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest
import pytest_asyncio

from docmaker.core.errors import RemoteUploadError
from docmaker.core.models import (
    ChildInfo,
    DocumentMetadata,
    FormSnapshot,
    PersonInfo,
    SpouseInfo,
    TrusteeInfo,
)
from docmaker.storage.mirror import RecordMirror
from docmaker.storage.store import DocumentStore

FIXED_MOMENT = datetime(2026, 10, 19, 15, 4)


class FakeMirror(RecordMirror):
    """In-process record store that can fail or hold uploads on a gate."""

    def __init__(self, *, fail: bool = False, gate: asyncio.Event | None = None) -> None:
        self.fail = fail
        self.gate = gate
        self.calls: list[tuple[DocumentMetadata, bytes]] = []

    async def save(self, metadata: DocumentMetadata, data: bytes) -> str:
        self.calls.append((metadata, data))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RemoteUploadError("record store offline")
        return f"record-{metadata.id.hex[:8]}"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep real credentials out of the tests."""
    for name in (
        "PDFCO_API_KEY",
        "DOCMAKER_HOME",
        "DOCMAKER_MIRROR_URL",
        "DOCMAKER_MIRROR_TOKEN",
        "DOCMAKER_RENDER_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def jane_snapshot() -> FormSnapshot:
    """Primary person with blank contact details, no children, one trustee."""
    return FormSnapshot(
        primary_person=PersonInfo(full_name="Jane Doe", address="123 Main St"),
        spouse=SpouseInfo(),
        children=(ChildInfo(), ChildInfo(), ChildInfo()),
        trustees=(TrusteeInfo(order=1, full_name="Bob Smith"),),
    )


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "documents.db"


@pytest_asyncio.fixture
async def store(db_path):
    """An empty, started store without a mirror."""
    s = DocumentStore(db_path)
    await s.start(seed_samples=False)
    yield s
    await s.close()


@pytest.fixture
def moment() -> datetime:
    return FIXED_MOMENT


@pytest.fixture
def make_mirror():
    """Factory for :class:`FakeMirror` instances."""
    return FakeMirror
