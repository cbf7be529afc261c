"""
Vector database schemas.

Explicit shape of a Qdrant point payload. Payloads coming back from the
database are validated here, field by field, and never used as raw dicts
past the adapter boundary.

Dependencies: pydantic, knowledge_base.models
System role: Type definitions for Qdrant point payloads
"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from knowledge_base.models.chunk import DEFAULT_DOMAINS, ChunkRecord, SearchResult

# Fixed namespace so the same logical chunk id always maps to the same point id
POINT_ID_NAMESPACE = uuid.UUID("6f1c2f0e-8a43-4c1b-9d8e-2b7a5e3c9f10")

# Payload keys used in filters and indices
ID_KEY = "id"
DOCUMENT_NAME_KEY = "documentName"
TITLE_KEY = "title"
DOMAINS_KEY = "domains"


def point_id_for(chunk_id: str) -> str:
    """Surrogate Qdrant point id for a logical chunk id."""
    return str(uuid.uuid5(POINT_ID_NAMESPACE, chunk_id))


def _scalar_to_str(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ChunkPayload(BaseModel):
    """
    Payload stored on each Qdrant point.

    Keys are camelCase on the wire. Missing, null or mistyped fields fall
    back to defaults field by field, so one bad point never fails a read.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", description="Logical chunk id")
    document_name: str = Field(default="", alias="documentName")
    content: str = Field(default="")
    enhanced_content: str | None = Field(default=None, alias="enhancedContent")
    title: str | None = None
    summary: str | None = None
    source_file: str | None = Field(default=None, alias="sourceFile")
    domains: list[str] = Field(default_factory=lambda: list(DEFAULT_DOMAINS))

    @field_validator("id", "document_name", "content", mode="wrap")
    @classmethod
    def _text_or_empty(cls, value, handler):
        try:
            return handler(_scalar_to_str(value))
        except ValidationError:
            return ""

    @field_validator("enhanced_content", "title", "summary", "source_file", mode="wrap")
    @classmethod
    def _text_or_none(cls, value, handler):
        try:
            return handler(_scalar_to_str(value))
        except ValidationError:
            return None

    @field_validator("domains", mode="before")
    @classmethod
    def _default_domains(cls, value):
        if value is None:
            return list(DEFAULT_DOMAINS)
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            return list(DEFAULT_DOMAINS)
        items = (_scalar_to_str(item) for item in value)
        return [item for item in items if isinstance(item, str)]

    @classmethod
    def from_record(cls, record: ChunkRecord) -> "ChunkPayload":
        return cls.model_validate(record.model_dump(exclude={"embedding"}))

    @classmethod
    def parse(cls, payload: dict[str, Any] | None) -> "ChunkPayload":
        """
        Validate a raw payload returned by Qdrant.

        Never raises on field content: numbers are stringified, and values of
        any other wrong type are replaced by the field default.
        """
        return cls.model_validate(payload if isinstance(payload, dict) else {})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_search_result(self, score: float) -> SearchResult:
        return SearchResult.model_validate({**self.model_dump(), "score": score})
