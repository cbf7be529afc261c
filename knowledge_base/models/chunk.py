"""
Chunk domain models.

ChunkRecord is the unit the knowledge store persists; SearchResult is what
every read operation returns, regardless of which backend answered.

Dependencies: pydantic
System role: Chunk data structures shared by both store backends
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DOMAINS: tuple[str, ...] = ("default",)

# Score reported by queries that do not rank (e.g. all chunks of a document)
UNRANKED_SCORE = 1.0


class ChunkFields(BaseModel):
    """Descriptive fields shared by stored chunks and search results."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Logical chunk id, prefixed with '<source type>_<source id>'")
    document_name: str = Field(alias="documentName", description="Human-facing grouping key")
    content: str = Field(description="Raw chunk text")
    enhanced_content: str | None = Field(
        default=None,
        alias="enhancedContent",
        description="Text enriched for display and ranking",
    )
    title: str | None = Field(default=None, description="Generated chunk title")
    summary: str | None = Field(default=None, description="Generated chunk summary")
    source_file: str | None = Field(
        default=None,
        alias="sourceFile",
        description="Origin file reference",
    )
    domains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOMAINS),
        description="Ordered domain tags",
    )

    @field_validator("domains", mode="before")
    @classmethod
    def _default_domains(cls, value):
        if value is None:
            return list(DEFAULT_DOMAINS)
        return value


class ChunkRecord(ChunkFields):
    """Immutable chunk with its embedding, as produced by the chunker."""

    embedding: list[float] = Field(description="Embedding vector (configured dimension)")


class SearchResult(ChunkFields):
    """Chunk projection returned by store reads, with a relevance score."""

    score: float = Field(description="Cosine similarity, or UNRANKED_SCORE for listings")

    @classmethod
    def from_record(cls, record: ChunkRecord, score: float) -> "SearchResult":
        """Project a stored record into a result, dropping the embedding."""
        return cls.model_validate({**record.model_dump(exclude={"embedding"}), "score": score})
