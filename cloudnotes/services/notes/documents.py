"""
Transport-agnostic document store seam used by NoteStore.

Defines the minimal async interface (`DocumentStore`) over a hierarchical
collection/document database, plus the Firestore-backed implementation.
Field values are flat primitives (str, bool, int, float, datetime, None) or
the SERVER_TIMESTAMP placeholder.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .client import FirestoreClient
from .domain import SERVER_TIMESTAMP, Document, Write, WriteKind, split_path
from .models.firestore import (
    FSDocument,
    FSDocumentMask,
    FSFieldTransform,
    FSPrecondition,
    FSWrite,
    encode_fields,
)

LOGGER = logging.getLogger(__name__)

_AUTO_ID_ALPHABET = string.ascii_letters + string.digits


def generate_id(length: int = 20) -> str:
    """Random document id in the same shape Firestore SDKs allocate locally."""
    return "".join(secrets.choice(_AUTO_ID_ALPHABET) for _ in range(length))


class DocumentStore(Protocol):
    """Async hierarchical document store required by NoteStore."""

    def new_id(self) -> str: ...

    async def get(self, path: str) -> Optional[Document]: ...

    async def list(self, collection_path: str) -> List[Document]: ...

    async def set(self, path: str, fields: Mapping[str, Any]) -> None: ...

    async def update(self, path: str, fields: Mapping[str, Any]) -> None: ...

    async def add(self, collection_path: str, fields: Mapping[str, Any]) -> str: ...

    async def delete(self, path: str) -> None: ...

    async def commit(self, writes: Sequence[Write]) -> None: ...


class FirestoreDocumentStore:
    """
    DocumentStore over the Firestore REST API.

    Writes that carry SERVER_TIMESTAMP go through :commit so the field is
    filled from the request time on the server.
    """

    def __init__(self, client: FirestoreClient):
        self._raw = client

    @property
    def raw(self) -> FirestoreClient:
        """Escape hatch: the blocking REST client."""
        return self._raw

    def new_id(self) -> str:
        return generate_id()

    async def get(self, path: str) -> Optional[Document]:
        doc = await asyncio.to_thread(self._raw.get_document, path)
        if doc is None:
            return None
        return self._to_document(doc, path)

    async def list(self, collection_path: str) -> List[Document]:
        docs = await asyncio.to_thread(
            lambda: list(self._raw.list_documents(collection_path))
        )
        return [self._to_document(d, f"{collection_path}/{d.id}") for d in docs]

    async def set(self, path: str, fields: Mapping[str, Any]) -> None:
        await self.commit([Write(WriteKind.SET, path, fields)])

    async def update(self, path: str, fields: Mapping[str, Any]) -> None:
        await self.commit([Write(WriteKind.UPDATE, path, fields)])

    async def add(self, collection_path: str, fields: Mapping[str, Any]) -> str:
        if any(v is SERVER_TIMESTAMP for v in fields.values()):
            doc_id = self.new_id()
            await self.set(f"{collection_path}/{doc_id}", fields)
            return doc_id
        doc = await asyncio.to_thread(
            self._raw.create_document, collection_path, dict(fields)
        )
        return doc.id

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._raw.delete_document, path)

    async def commit(self, writes: Sequence[Write]) -> None:
        fs_writes = [self._to_fs_write(w) for w in writes]
        await asyncio.to_thread(self._raw.commit, fs_writes)

    # -------------------------- Internal helpers -----------------------------

    @staticmethod
    def _to_document(doc: FSDocument, path: str) -> Document:
        return Document(id=split_path(path)[1], path=path, fields=doc.to_python())

    @staticmethod
    def _split_transforms(
        fields: Mapping[str, Any],
    ) -> Tuple[Dict[str, Any], List[FSFieldTransform]]:
        plain: Dict[str, Any] = {}
        transforms: List[FSFieldTransform] = []
        for key, value in fields.items():
            if value is SERVER_TIMESTAMP:
                transforms.append(FSFieldTransform(fieldPath=key))
            else:
                plain[key] = value
        return plain, transforms

    def _to_fs_write(self, write: Write) -> FSWrite:
        name = self._raw.document_name(write.path)
        if write.kind is WriteKind.DELETE:
            return FSWrite(delete=name)
        plain, transforms = self._split_transforms(write.fields)
        fs_write = FSWrite(
            update=FSDocument(name=name, fields=encode_fields(plain)),
            updateTransforms=transforms or None,
        )
        if write.kind is WriteKind.UPDATE:
            # Merge semantics: only touch the listed fields, and only if the
            # document exists.
            fs_write.updateMask = FSDocumentMask(fieldPaths=sorted(plain))
            fs_write.currentDocument = FSPrecondition(exists=True)
        return fs_write
