"""
Firestore REST v1 "wire" models for documents, listings and commits.
- Value wrapper with the Python <-> typed-value codec.
- Request models for :commit writes (updates, masks, transforms, preconditions).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional

from dateutil.parser import isoparse
from pydantic import BeforeValidator, Field, PlainSerializer

from ._fs_base import FSModel

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _parse_rfc3339(v):
    if v is None or isinstance(v, datetime):
        return v
    if not isinstance(v, str):
        raise ValueError("Expected an RFC 3339 timestamp string")
    # Firestore sends up to nanoseconds; isoparse keeps the first six digits
    dt = isoparse(v.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _to_rfc3339(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


Timestamp = Annotated[
    datetime,
    BeforeValidator(_parse_rfc3339),
    PlainSerializer(_to_rfc3339, return_type=str, when_used="json"),
]

# int64 travels as a decimal string in the JSON mapping
Int64 = Annotated[
    int,
    BeforeValidator(lambda v: int(v) if isinstance(v, str) else v),
    PlainSerializer(str, return_type=str, when_used="json"),
]


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class FSValue(FSModel):
    """
    A typed Firestore value. Exactly one member is set; nulls are carried as
    ``nullValue: "NULL_VALUE"`` so ``exclude_none`` dumps stay unambiguous.
    """

    nullValue: Optional[Literal["NULL_VALUE"]] = None
    booleanValue: Optional[bool] = None
    integerValue: Optional[Int64] = None
    doubleValue: Optional[float] = None
    timestampValue: Optional[Timestamp] = None
    stringValue: Optional[str] = None

    @classmethod
    def from_python(cls, value: Any) -> "FSValue":
        if value is None:
            return cls(nullValue="NULL_VALUE")
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return cls(booleanValue=value)
        if isinstance(value, int):
            return cls(integerValue=value)
        if isinstance(value, float):
            return cls(doubleValue=value)
        if isinstance(value, datetime):
            return cls(timestampValue=value)
        if isinstance(value, str):
            return cls(stringValue=value)
        raise TypeError(f"Unsupported field value type: {type(value).__name__}")

    def to_python(self) -> Any:
        if self.booleanValue is not None:
            return self.booleanValue
        if self.integerValue is not None:
            return self.integerValue
        if self.doubleValue is not None:
            return self.doubleValue
        if self.timestampValue is not None:
            return self.timestampValue
        if self.stringValue is not None:
            return self.stringValue
        return None


def encode_fields(fields: Dict[str, Any]) -> Dict[str, FSValue]:
    return {k: FSValue.from_python(v) for k, v in fields.items()}


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class FSDocument(FSModel):
    # Absent on create requests; the server fills it in.
    name: Optional[str] = None
    fields: Dict[str, FSValue] = Field(default_factory=dict)
    createTime: Optional[Timestamp] = None
    updateTime: Optional[Timestamp] = None

    @property
    def id(self) -> str:
        return (self.name or "").rsplit("/", 1)[-1]

    def to_python(self) -> Dict[str, Any]:
        return {k: v.to_python() for k, v in self.fields.items()}


class FSListDocumentsResponse(FSModel):
    documents: List[FSDocument] = Field(default_factory=list)
    nextPageToken: Optional[str] = None


# ---------------------------------------------------------------------------
# Commit request / response
# ---------------------------------------------------------------------------


class FSDocumentMask(FSModel):
    fieldPaths: List[str]


class FSPrecondition(FSModel):
    exists: Optional[bool] = None
    updateTime: Optional[Timestamp] = None


class FSFieldTransform(FSModel):
    fieldPath: str
    setToServerValue: Literal["REQUEST_TIME"] = "REQUEST_TIME"


class FSWrite(FSModel):
    update: Optional[FSDocument] = None
    delete: Optional[str] = None
    updateMask: Optional[FSDocumentMask] = None
    updateTransforms: Optional[List[FSFieldTransform]] = None
    currentDocument: Optional[FSPrecondition] = None


class FSCommitRequest(FSModel):
    writes: List[FSWrite]


class FSWriteResult(FSModel):
    updateTime: Optional[Timestamp] = None
    transformResults: Optional[List[FSValue]] = None


class FSCommitResponse(FSModel):
    writeResults: List[FSWriteResult] = Field(default_factory=list)
    commitTime: Optional[Timestamp] = None


__all__ = [
    "FSValue",
    "FSDocument",
    "FSListDocumentsResponse",
    "FSDocumentMask",
    "FSPrecondition",
    "FSFieldTransform",
    "FSWrite",
    "FSCommitRequest",
    "FSWriteResult",
    "FSCommitResponse",
    "encode_fields",
]
