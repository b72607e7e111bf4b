"""Durable document storage and remote mirroring."""

from .mirror import HttpRecordMirror, RecordMirror
from .store import DocumentStore

__all__ = ["DocumentStore", "HttpRecordMirror", "RecordMirror"]
