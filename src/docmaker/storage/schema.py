"""SQLAlchemy schema and engine setup for the durable document store."""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path

from sqlalchemy import (
    BigInteger,
    DateTime,
    Engine,
    Index,
    LargeBinary,
    Text,
    Uuid,
    create_engine,
    event,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class StoredDocument(Base):
    """One generated document: metadata columns plus the PDF payload."""

    __tablename__ = "stored_documents"
    __table_args__ = (Index("idx_stored_documents_created_at", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    cloud_record_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    pdf_data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


def _enable_wal(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    # WAL lets readers see committed rows while the writer is busy.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_store_engine(database_path: Path) -> Engine:
    """Create a SQLite engine for *database_path*, creating parent dirs."""
    database_path = Path(database_path).expanduser()
    database_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{database_path}",
        connect_args={"check_same_thread": False},
        echo=False,
    )
    event.listen(engine, "connect", _enable_wal)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create sessionmaker for creating database sessions."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)
