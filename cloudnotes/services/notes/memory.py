"""
In-process DocumentStore backed by a dict.

Answers the same calls as FirestoreDocumentStore, including server
timestamps (from an injectable clock) and atomic commits. Every call yields
to the event loop once, so concurrent operations interleave the way remote
calls do.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .client import DocumentNotFound
from .documents import generate_id
from .domain import SERVER_TIMESTAMP, Document, Write, WriteKind, split_path

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InMemoryDocumentStore:
    clock: Callable[[], datetime] = _utcnow
    _docs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def new_id(self) -> str:
        return generate_id()

    @property
    def paths(self) -> List[str]:
        return sorted(self._docs)

    async def get(self, path: str) -> Optional[Document]:
        await asyncio.sleep(0)
        fields = self._docs.get(path)
        if fields is None:
            return None
        return Document(id=split_path(path)[1], path=path, fields=dict(fields))

    async def list(self, collection_path: str) -> List[Document]:
        await asyncio.sleep(0)
        prefix = collection_path.rstrip("/") + "/"
        out: List[Document] = []
        for path, fields in self._docs.items():
            if not path.startswith(prefix) or "/" in path[len(prefix) :]:
                continue
            out.append(Document(id=split_path(path)[1], path=path, fields=dict(fields)))
        return out

    async def set(self, path: str, fields: Mapping[str, Any]) -> None:
        await asyncio.sleep(0)
        self._apply([Write(WriteKind.SET, path, fields)])

    async def update(self, path: str, fields: Mapping[str, Any]) -> None:
        await asyncio.sleep(0)
        self._apply([Write(WriteKind.UPDATE, path, fields)])

    async def add(self, collection_path: str, fields: Mapping[str, Any]) -> str:
        await asyncio.sleep(0)
        doc_id = self.new_id()
        self._apply([Write(WriteKind.SET, f"{collection_path}/{doc_id}", fields)])
        return doc_id

    async def delete(self, path: str) -> None:
        await asyncio.sleep(0)
        self._docs.pop(path, None)

    async def commit(self, writes: Sequence[Write]) -> None:
        await asyncio.sleep(0)
        self._apply(writes)

    def _apply(self, writes: Sequence[Write]) -> None:
        # Validate the whole batch before touching anything
        for w in writes:
            if w.kind is WriteKind.UPDATE and w.path not in self._docs:
                raise DocumentNotFound(f"No document to update: {w.path}")
        now = self.clock()
        for w in writes:
            if w.kind is WriteKind.DELETE:
                self._docs.pop(w.path, None)
                continue
            resolved = {
                k: (now if v is SERVER_TIMESTAMP else v) for k, v in w.fields.items()
            }
            if w.kind is WriteKind.UPDATE:
                self._docs[w.path].update(resolved)
            else:
                self._docs[w.path] = resolved
        LOGGER.debug("memory.commit writes=%d", len(writes))
