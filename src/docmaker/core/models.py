"""Pydantic models shared by the generation pipeline and the document store.

``FormSnapshot`` is the read-only view of the collected form data that a
single generation run consumes. ``DocumentMetadata`` is what the store hands
back to callers and publishes to observers; the raw PDF bytes never travel
with it.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class GenerationMethod(str, Enum):
    """How the PDF bytes are produced."""
    ON_DEVICE = "on-device"
    REMOTE_RENDER = "remote-render"


# ---------------------------------------------------------------------------
# Form snapshot
# ---------------------------------------------------------------------------

class PersonInfo(BaseModel):
    """The primary person (grantor)."""
    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""


class SpouseInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    email: str = ""
    phone: str = ""


class ChildInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    date_of_birth: str = ""


class TrusteeInfo(BaseModel):
    """A successor trustee; ``order`` is 1-based."""
    model_config = ConfigDict(frozen=True)

    order: int = Field(default=1, ge=1)
    full_name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""


class FormSnapshot(BaseModel):
    """Point-in-time view of the form data used to generate one document."""
    model_config = ConfigDict(frozen=True)

    primary_person: PersonInfo = Field(default_factory=PersonInfo)
    spouse: SpouseInfo = Field(default_factory=SpouseInfo)
    children: tuple[ChildInfo, ...] = ()
    trustees: tuple[TrusteeInfo, ...] = ()

    @classmethod
    def from_json(cls, text: str) -> FormSnapshot:
        return cls.model_validate_json(text)

    @classmethod
    def load(cls, path: str | Path) -> FormSnapshot:
        """Read a snapshot from a JSON file."""
        path = Path(path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {path}")
        return cls.from_json(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Stored documents
# ---------------------------------------------------------------------------

class DocumentMetadata(BaseModel):
    """Metadata about a generated document held by the store.

    ``cloud_record_name`` is ``None`` until the background mirror succeeds;
    it is set exactly once and never cleared.
    """
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    file_size: int = Field(ge=0)
    created_at: datetime
    cloud_record_name: str | None = None

    @property
    def is_synced(self) -> bool:
        return self.cloud_record_name is not None

    @property
    def cloud_status_description(self) -> str:
        return "Synced" if self.is_synced else "Local only"

    @property
    def formatted_size(self) -> str:
        """Human readable size in bytes, KB or MB (decimal units)."""
        if self.file_size < 1000:
            return f"{self.file_size} bytes"
        kb = self.file_size / 1000
        if kb < 1000:
            return f"{kb:,.0f} KB"
        return f"{self.file_size / 1_000_000:,.1f} MB"

    @property
    def formatted_date(self) -> str:
        """Creation date in local time, e.g. ``Oct 19, 2026``."""
        local = self.created_at.astimezone()
        return f"{local:%b} {local.day}, {local.year}"

    def with_cloud_record(self, record_name: str) -> DocumentMetadata:
        return self.model_copy(update={"cloud_record_name": record_name})


class StoredDocumentRecord(BaseModel):
    """Persisted form of a document: metadata plus the PDF payload."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    title: str
    file_size: int
    created_at: datetime
    cloud_record_name: str | None = None
    pdf_data: bytes

    @property
    def metadata(self) -> DocumentMetadata:
        return DocumentMetadata(
            id=self.id,
            title=self.title,
            file_size=self.file_size,
            created_at=as_utc(self.created_at),
            cloud_record_name=self.cloud_record_name,
        )


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; timestamps are always written in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
