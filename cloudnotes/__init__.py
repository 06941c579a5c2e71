"""cloudnotes: personal notes stored in Cloud Firestore."""

from cloudnotes.config import CloudNotesConfig
from cloudnotes.services.auth import AuthResult, FirebaseAuthSession
from cloudnotes.services.notes import (
    Note,
    NoteService,
    NoteStore,
    Record,
    RecordType,
)

__version__ = "0.1.0"

__all__ = [
    "CloudNotesConfig",
    "FirebaseAuthSession",
    "AuthResult",
    "NoteService",
    "NoteStore",
    "Note",
    "Record",
    "RecordType",
]
