"""
Knowledge service orchestrator.

Coordinates document ingestion, semantic search, document listing and
chunk deletion over the KnowledgeStore. Embedding and chunking are
delegated to injected collaborators.

Dependencies: knowledge_base.boundary.vdb, knowledge_base.core
System role: Knowledge base use-case orchestration
"""

import logging
import unicodedata
from typing import Sequence

from knowledge_base.boundary.vdb.knowledge_store import KnowledgeStore
from knowledge_base.core.exceptions import (
    DocumentProcessingError,
    EmbeddingError,
    ValidationError,
)
from knowledge_base.core.interfaces import DocumentChunker, EmbedIntent, Embedder
from knowledge_base.models.chunk import DEFAULT_DOMAINS, SearchResult
from knowledge_base.models.document import (
    ChunkingConfig,
    DocumentChunks,
    DocumentListing,
    IngestionResult,
    PreparedDocument,
)

logger = logging.getLogger(__name__)


def source_id_prefix(source_type: str, source_id: str) -> str:
    """Id prefix shared by every chunk of one source, e.g. 'youtube_abc123'."""
    return f"{source_type}_{source_id}"


def _normalize_name(value: str) -> str:
    return unicodedata.normalize("NFC", value).casefold()


def _paginate(names: list[str], limit: int) -> DocumentListing:
    if limit <= 0:
        return DocumentListing(documents=names, total=len(names), has_more=False)
    return DocumentListing(
        documents=names[:limit],
        total=len(names),
        has_more=len(names) > limit,
    )


class KnowledgeService:
    """
    Knowledge base service orchestrator.

    Uses the chunker to turn prepared documents into embedded chunks,
    the embedder for query vectors, and KnowledgeStore for persistence.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        embedder: Embedder,
        chunker: DocumentChunker,
    ) -> None:
        """
        Initialize knowledge service.

        Args:
            store: Initialized knowledge store
            embedder: Text embedding collaborator
            chunker: Document chunking collaborator
        """
        self.store = store
        self.embedder = embedder
        self.chunker = chunker

    async def ingest_document(
        self,
        document: PreparedDocument,
        source_ref: str,
        config: ChunkingConfig | None = None,
        domains: Sequence[str] | None = None,
        title: str | None = None,
    ) -> IngestionResult:
        """
        Chunk, embed and store a prepared document.

        Args:
            document: Parsed document pages
            source_ref: Origin file reference passed to the chunker
            config: Chunking overrides
            domains: Domain tags (defaults to ["default"])
            title: Document title (defaults to the document id)

        Returns:
            IngestionResult: Chunk count and resolved document metadata

        Raises:
            DocumentProcessingError: If the chunker fails
            DimensionMismatchError: If a chunk embedding has the wrong length
        """
        domains = list(domains) if domains else list(DEFAULT_DOMAINS)
        title = title or document.id

        try:
            chunks = await self.chunker(document, source_ref, config or ChunkingConfig(), domains, title)
        except Exception as e:
            logger.exception(f"{__name__}:ingest_document - Chunking failed for {document.id}")
            raise DocumentProcessingError(
                "Failed to chunk document",
                document_id=document.id,
                details={"error": str(e)},
            ) from e

        await self.store.add_chunks(chunks)
        logger.info(
            f"{__name__}:ingest_document - Stored {len(chunks)} chunks for {document.id} "
            f"in domains: {', '.join(domains)}"
        )
        return IngestionResult(
            total_chunks=len(chunks),
            document_name=document.id,
            document_title=title,
            domains=domains,
        )

    async def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """
        Semantic search over stored chunks.

        Raises:
            ValidationError: If query is blank
            EmbeddingError: If the query cannot be embedded
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required", field="query")

        try:
            vector = await self.embedder(query, EmbedIntent.QUERY)
        except Exception as e:
            raise EmbeddingError("Failed to embed search query", details={"error": str(e)}) from e

        return await self.store.search_by_vector(vector, limit)

    async def list_documents(self, limit: int = 0) -> DocumentListing:
        """List stored document names; limit <= 0 returns all."""
        names = await self.store.list_unique_document_names()
        return _paginate(names, limit)

    async def search_documents_by_name(self, term: str, limit: int = 20) -> DocumentListing:
        """Case-insensitive substring search over document names (NFC normalized)."""
        if not term:
            raise ValidationError("Search term is required", field="term")

        needle = _normalize_name(term)
        names = await self.store.list_unique_document_names()
        matches = [name for name in names if needle in _normalize_name(name)]
        logger.info(f"{__name__}:search_documents_by_name - {len(matches)} documents match '{term}'")
        return _paginate(matches, limit)

    async def get_document_chunks(self, document_name: str) -> DocumentChunks:
        if not document_name:
            raise ValidationError("Document name is required", field="document_name")
        chunks = await self.store.get_chunks_by_document_name(document_name)
        return DocumentChunks(document_name=document_name, chunks=chunks, total_chunks=len(chunks))

    async def delete_chunks(self, chunk_ids: Sequence[str]) -> int:
        """
        Delete selected chunks.

        Raises:
            ValidationError: If no ids are given
        """
        if not chunk_ids:
            raise ValidationError("Chunk IDs are required", field="chunk_ids")
        return await self.store.delete_by_ids(list(chunk_ids))

    async def has_source(self, source_type: str, source_id: str) -> bool:
        return await self.store.exists_by_id_prefix(source_id_prefix(source_type, source_id))

    async def count_source_chunks(self, source_type: str, source_id: str) -> int:
        return await self.store.count_by_id_prefix(source_id_prefix(source_type, source_id))

    async def delete_source(self, source_type: str, source_id: str) -> int:
        """Delete every chunk of one source (e.g. a transcript); returns count deleted."""
        if not source_type or not source_id:
            raise ValidationError(
                "Source type and id are required to build a chunk prefix",
                field="source_id",
                details={"source_type": source_type, "source_id": source_id},
            )
        return await self.store.delete_by_id_prefix(source_id_prefix(source_type, source_id))
