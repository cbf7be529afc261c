"""Domain models for chunks and documents."""

from knowledge_base.models.chunk import ChunkRecord, SearchResult, UNRANKED_SCORE

__all__ = ["ChunkRecord", "SearchResult", "UNRANKED_SCORE"]
