"""
Document domain models and schemas.

Input shapes handed to the chunker and result shapes returned by the
knowledge service.

Dependencies: pydantic, knowledge_base.models.chunk
System role: Document ingestion and listing contracts
"""

from pydantic import BaseModel, Field

from knowledge_base.models.chunk import SearchResult


class DocumentPage(BaseModel):
    """Single page (or logical section) of a parsed document."""

    page_number: int = Field(ge=1, description="1-based page number")
    content: str = Field(description="Extracted page text")


class PreparedDocument(BaseModel):
    """Parsed document ready for chunking."""

    id: str = Field(description="Document identifier, usually the file stem")
    pages: list[DocumentPage] = Field(default_factory=list)


class ChunkingConfig(BaseModel):
    """Chunking overrides; None leaves the chunker's own default in place."""

    chunks_per_page: int | None = Field(default=None, ge=1)
    chunk_overlap: int | None = Field(default=None, ge=0)
    generate_titles: bool | None = None
    generate_summaries: bool | None = None


class IngestionResult(BaseModel):
    """Outcome of storing one document."""

    total_chunks: int
    document_name: str
    document_title: str
    domains: list[str]


class DocumentListing(BaseModel):
    """Page of document names."""

    documents: list[str]
    total: int
    has_more: bool = False


class DocumentChunks(BaseModel):
    """All stored chunks of one document."""

    document_name: str
    chunks: list[SearchResult]
    total_chunks: int
