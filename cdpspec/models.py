from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


class Origin(str, Enum):
    AUTHORITATIVE = "authoritative"
    GENERATED = "generated"


class CatalogRecord(BaseModel):
    label: str
    dac: Optional[str] = None
    laser: Optional[str] = None
    origin: Origin = Origin.AUTHORITATIVE
    # Store id; only authoritative records carry one.
    identity: Optional[str] = None
    # Insertion order of generated records within the session.
    sequence: Optional[int] = None

    @field_validator("label")
    @classmethod
    def _label_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("label must not be empty")
        return v

    @property
    def key(self) -> str:
        """Stable display key."""
        if self.origin is Origin.AUTHORITATIVE and self.identity is not None:
            return self.identity
        return f"generated-{self.label}-{self.sequence}"


class SpecPair(BaseModel):
    """Structured answer of the AI specification lookup."""
    dac: str
    laser: str


class Notice(BaseModel):
    kind: Literal["success", "error"]
    message: str


class RecordOut(BaseModel):
    key: str
    label: str
    dac: Optional[str] = None
    laser: Optional[str] = None
    origin: Origin

    @classmethod
    def from_record(cls, record: CatalogRecord) -> "RecordOut":
        return cls(
            key=record.key,
            label=record.label,
            dac=record.dac,
            laser=record.laser,
            origin=record.origin,
        )


class SessionSnapshot(BaseModel):
    session_id: str
    state: str
    busy: bool
    refreshing: bool
    query: str
    ai_available: bool
    authoritative_count: int
    generated_count: int
    notices: List[Notice] = []


class SearchResponse(BaseModel):
    query: str
    results: List[RecordOut]
    can_search_ai: bool
    notices: List[Notice] = []


class ActionResponse(BaseModel):
    """Outcome of identify / ai-search / voice / refresh."""
    ok: bool
    query: str
    label: Optional[str] = None
    record: Optional[RecordOut] = None
    results: List[RecordOut] = []
    notices: List[Notice] = []


class AISearchRequest(BaseModel):
    query: Optional[str] = None
