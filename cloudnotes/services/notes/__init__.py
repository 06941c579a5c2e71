"""Public API for the Notes service."""

from .client import DocumentNotFound, FirestoreClient, FirestoreError
from .documents import DocumentStore, FirestoreDocumentStore
from .domain import SERVER_TIMESTAMP, Document, Write, WriteKind
from .memory import InMemoryDocumentStore
from .models import Note, Record, RecordType
from .service import NotAuthenticated, NoteService, ValidationError
from .store import (
    NoteNotFound,
    NotesError,
    NoteStore,
    NotFound,
    RecordNotFound,
    StoreError,
)

__all__ = [
    "NoteService",
    "NoteStore",
    "Note",
    "Record",
    "RecordType",
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "FirestoreClient",
    "Document",
    "Write",
    "WriteKind",
    "SERVER_TIMESTAMP",
    "NotesError",
    "StoreError",
    "NotFound",
    "NoteNotFound",
    "RecordNotFound",
    "ValidationError",
    "NotAuthenticated",
    "FirestoreError",
    "DocumentNotFound",
]
