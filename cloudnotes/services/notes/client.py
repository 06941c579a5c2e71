"""
Low-level Firestore REST client for the notes database.

This "escape hatch" is used internally by FirestoreDocumentStore. It returns
typed Pydantic models from cloudnotes.services.notes.models.firestore and
hides HTTP details. Calls are blocking; the async adapter runs them in
worker threads.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from typing import Any, Callable, Dict, Iterator, List, Optional

import requests
from pydantic import ValidationError

from .models.firestore import (
    FSCommitRequest,
    FSCommitResponse,
    FSDocument,
    FSListDocumentsResponse,
    FSWrite,
    encode_fields,
)

LOGGER = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"


# ------------------------------- Errors --------------------------------------


class FirestoreError(Exception):
    """Base Firestore transport error."""


class FirestoreAuthError(FirestoreError):
    """Missing/expired ID token or security-rules denial (401/403)."""


class FirestoreRateLimited(FirestoreError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class DocumentNotFound(FirestoreError):
    """404: the document (or the document an update requires) is absent."""


class FirestoreTransportError(FirestoreError):
    """The request never produced a response (connection error, timeout)."""


class FirestoreApiError(FirestoreError):
    """Catch-all API error."""

    def __init__(self, message: str, payload: Optional[object] = None):
        super().__init__(message)
        self.payload = payload


# ------------------------------- Transport -----------------------------------


class _FirestoreHttp:
    """
    Minimal HTTP transport:
      - JSON requests via `json=payload`
      - Bearer ID token from a provider callable, read per request
      - Bounded debug dumps (CLOUDNOTES_DEBUG_MAX_BYTES)
      - One request at a time; the session is shared by worker threads
    """

    def __init__(
        self,
        base_url: str,
        session,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._token_provider = token_provider
        self._lock = threading.Lock()
        LOGGER.debug("Initialized _FirestoreHttp with base_url: %s", self._base_url)

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict:
        url = f"{self._base_url}/{path.lstrip('/')}"
        LOGGER.info("%s to %s", method, url)
        try:
            with self._lock:
                resp = self._session.request(
                    method, url, json=payload, params=params, headers=self._headers()
                )
        except requests.RequestException as e:
            LOGGER.error("%s to %s failed: %s", method, url, e)
            raise FirestoreTransportError(f"Network error: {e}") from e
        code = getattr(resp, "status_code", 0)
        LOGGER.debug("%s to %s returned status %d", method, url, code)
        if code >= 400:
            self._dump_http_debug(method.lower(), url, payload, resp)
            body = self._error_body(resp)
            if code in (401, 403):
                LOGGER.error("%s to %s failed with auth error: %d", method, url, code)
                raise FirestoreAuthError(f"HTTP {code}: {self._error_message(body)}")
            if code == 404:
                LOGGER.debug("%s to %s: not found", method, url)
                raise DocumentNotFound(self._error_message(body) or "Not found")
            if code == 429:
                retry_after = None
                try:
                    hdr = resp.headers.get("Retry-After")
                    if hdr:
                        retry_after = float(hdr)
                except (TypeError, ValueError):
                    retry_after = None
                LOGGER.warning(
                    "%s to %s was rate-limited. Retry after: %s",
                    method,
                    url,
                    retry_after,
                )
                raise FirestoreRateLimited(
                    "HTTP 429: rate limited", retry_after=retry_after
                )
            LOGGER.error("%s to %s failed with code %d", method, url, code)
            raise FirestoreApiError(
                f"HTTP {code}: {self._error_message(body)}", payload=body
            )
        if method == "DELETE" and not getattr(resp, "content", b""):
            return {}
        try:
            return resp.json()
        except ValueError:
            self._dump_http_debug(method.lower(), url, payload, resp)
            LOGGER.error("Failed to parse JSON response from %s", url)
            raise FirestoreApiError(
                "Invalid JSON response", payload=getattr(resp, "text", None)
            )

    @staticmethod
    def _error_body(resp) -> object:
        try:
            return resp.json()
        except ValueError:
            return getattr(resp, "text", None)

    @staticmethod
    def _error_message(body: object) -> str:
        # Google APIs wrap errors as {"error": {"code", "message", "status"}}
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict) and err.get("message"):
                return str(err["message"])
        if isinstance(body, list) and body and isinstance(body[0], dict):
            return _FirestoreHttp._error_message(body[0])
        return ""

    @staticmethod
    def _dump_http_debug(op: str, url: str, payload: Optional[Dict], resp) -> None:
        if not os.getenv("CLOUDNOTES_DEBUG"):
            return
        ts = time.strftime("%Y%m%d-%H%M%S")
        out_dir = os.path.join("workspace", "cloudnotes_debug")
        try:
            os.makedirs(out_dir, exist_ok=True)
            with open(
                os.path.join(out_dir, f"{ts}_{op}_http_request.json"),
                "w",
                encoding="utf-8",
            ) as f:
                json.dump(
                    {"url": url, "payload": payload}, f, ensure_ascii=False, indent=2
                )
            status = getattr(resp, "status_code", None)
            body_text = getattr(resp, "text", None)
            with open(
                os.path.join(out_dir, f"{ts}_{op}_http_response.txt"),
                "w",
                encoding="utf-8",
            ) as f:
                f.write(f"status={status}\nurl={url}\n\n")
                if body_text:
                    max_bytes = int(os.getenv("CLOUDNOTES_DEBUG_MAX_BYTES", "524288"))
                    if len(body_text) > max_bytes:
                        f.write(body_text[:max_bytes] + "\n[truncated]\n")
                    else:
                        f.write(body_text)
        except OSError as e:
            LOGGER.debug("cloudnotes.debug.dump_failed %s", e)


# ------------------------------ Raw client -----------------------------------


class FirestoreClient:
    """
    Raw Firestore client for one database.

    Methods map 1:1 to REST endpoints:
      - GET    documents/{path}
      - GET    documents/{collection}   (paged)
      - POST   documents/{collection}   (auto id)
      - DELETE documents/{path}
      - POST   documents:commit
    """

    def __init__(
        self,
        project_id: str,
        session,
        *,
        database: str = "(default)",
        base_url: str = FIRESTORE_URL,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self._database_name = f"projects/{project_id}/databases/{database}"
        self._http = _FirestoreHttp(
            f"{base_url.rstrip('/')}/{self._database_name}",
            session,
            token_provider=token_provider,
        )
        LOGGER.info("FirestoreClient initialized for %s", self._database_name)

    def document_name(self, path: str) -> str:
        """Full resource name used inside commit writes."""
        return f"{self._database_name}/documents/{path.strip('/')}"

    # ----- Get -----

    def get_document(self, path: str) -> Optional[FSDocument]:
        try:
            data = self._http.request("GET", f"documents/{path}")
        except DocumentNotFound:
            return None
        return self._validate(FSDocument, "documents.get", data)

    # ----- List (paged generator) -----

    def list_documents(
        self, collection_path: str, *, page_size: int = 300
    ) -> Iterator[FSDocument]:
        params: Dict[str, Any] = {"pageSize": page_size}
        page_num = 1
        while True:
            LOGGER.debug("Listing %s page %d", collection_path, page_num)
            data = self._http.request(
                "GET", f"documents/{collection_path}", params=dict(params)
            )
            resp = self._validate(FSListDocumentsResponse, "documents.list", data)
            LOGGER.info(
                "List page %d of %s returned %d documents.",
                page_num,
                collection_path,
                len(resp.documents),
            )
            yield from resp.documents
            if not resp.nextPageToken:
                return
            params["pageToken"] = resp.nextPageToken
            page_num += 1

    # ----- Create -----

    def create_document(
        self,
        collection_path: str,
        fields: Dict[str, Any],
        *,
        document_id: Optional[str] = None,
    ) -> FSDocument:
        payload = FSDocument(fields=encode_fields(fields)).model_dump(
            mode="json", exclude_none=True
        )
        params = {"documentId": document_id} if document_id else None
        data = self._http.request(
            "POST", f"documents/{collection_path}", payload=payload, params=params
        )
        return self._validate(FSDocument, "documents.create", data)

    # ----- Delete -----

    def delete_document(self, path: str) -> None:
        # Firestore reports success for absent documents as well
        self._http.request("DELETE", f"documents/{path}")

    # ----- Commit -----

    def commit(self, writes: List[FSWrite]) -> FSCommitResponse:
        LOGGER.info("Committing %d writes", len(writes))
        payload = FSCommitRequest(writes=writes).model_dump(
            mode="json", exclude_none=True
        )
        data = self._http.request("POST", "documents:commit", payload=payload)
        return self._validate(FSCommitResponse, "documents.commit", data)

    # ----- Validation / debug -----

    def _validate(self, model, op: str, data: Dict):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self._log_validation(op, data, e)
            LOGGER.error("%s response validation failed.", op)
            raise FirestoreApiError(f"{op} response validation failed", payload=data)

    @staticmethod
    def _log_validation(op: str, data: Dict, err: ValidationError) -> None:
        if not os.getenv("CLOUDNOTES_DEBUG"):
            return
        ts = time.strftime("%Y%m%d-%H%M%S")
        out_dir = os.path.join("workspace", "cloudnotes_debug")
        try:
            os.makedirs(out_dir, exist_ok=True)
            with open(
                os.path.join(out_dir, f"{ts}_{op}_validation.json"),
                "w",
                encoding="utf-8",
            ) as f:
                json.dump(
                    {"op": op, "errors": err.errors(), "data": data},
                    f,
                    ensure_ascii=False,
                    indent=2,
                    default=str,
                )
        except OSError as e:
            LOGGER.debug("cloudnotes.debug.dump_failed %s", e)
