"""
Knowledge store facade.

Single entry point for chunk persistence and retrieval. Every operation is
routed by the ResilienceCoordinator to Qdrant or to the in-memory fallback,
and both paths return the same SearchResult shape.

Dependencies: knowledge_base.boundary.vdb, knowledge_base.core.exceptions
System role: Public knowledge store API consumed by the application layer
"""

import logging
from typing import Sequence

from knowledge_base.boundary.vdb.fallback import ResilienceCoordinator
from knowledge_base.boundary.vdb.memory_store import InMemoryChunkStore
from knowledge_base.boundary.vdb.qdrant_store import QdrantChunkStore
from knowledge_base.core.exceptions import ConfigurationError, DimensionMismatchError
from knowledge_base.models.chunk import ChunkRecord, SearchResult
from knowledge_base.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class KnowledgeStore:
    """
    Resilient chunk store over Qdrant with an in-memory fallback.

    Construction is inert; call `initialize()` once before relying on the
    primary path. The fallback path needs no initialization.
    """

    def __init__(
        self,
        primary: QdrantChunkStore,
        local: InMemoryChunkStore,
        coordinator: ResilienceCoordinator,
    ) -> None:
        """
        Initialize facade over both backends.

        Args:
            primary: Qdrant adapter
            local: In-memory fallback store
            coordinator: Routing state shared by all operations of this store

        Raises:
            ConfigurationError: Backends disagree on the vector dimension
        """
        if primary.dimension != local.dimension:
            raise ConfigurationError(
                "Primary and fallback stores use different vector dimensions",
                details={"primary": primary.dimension, "fallback": local.dimension},
            )
        self.primary = primary
        self.local = local
        self.coordinator = coordinator
        self.dimension = local.dimension

    @property
    def is_degraded(self) -> bool:
        return self.coordinator.is_degraded()

    def _validate_vector(self, vector: Sequence[float], context: str) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), context=context)

    async def initialize(self) -> None:
        """
        Bootstrap the Qdrant collection.

        Always attempts the primary, even when degraded: a success clears
        the degraded state. A failure degrades the store instead of raising.

        Raises:
            ConfigurationError: Collection exists with a different dimension
        """
        try:
            await self.primary.ensure_collection()
        except ConfigurationError:
            logger.error(f"{__name__}:initialize - Qdrant collection is misconfigured")
            raise
        except Exception as e:
            self.coordinator.handle_error("initialize", e)
            return

        self.coordinator.reset_warning("initialize")
        self.coordinator.recover()
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:initialize - Qdrant initialized successfully",
            collection=self.primary.collection_name,
            dimension=self.dimension,
        )

    async def add_chunks(self, records: Sequence[ChunkRecord]) -> None:
        """
        Insert or overwrite chunks by id.

        Raises:
            DimensionMismatchError: Any embedding has the wrong length
        """
        if not records:
            return
        for record in records:
            self._validate_vector(record.embedding, record.id)

        await self.coordinator.execute(
            "add_chunks",
            lambda: self.local.upsert(records),
            lambda: self.primary.upsert(records),
            self.coordinator.is_degraded("add_chunks"),
        )

    async def search_by_vector(self, vector: Sequence[float], limit: int = 10) -> list[SearchResult]:
        """
        Rank chunks by cosine similarity to `vector`.

        Raises:
            DimensionMismatchError: Query vector has the wrong length
        """
        self._validate_vector(vector, "query")
        if limit < 1:
            return []

        return await self.coordinator.execute(
            "search_by_vector",
            lambda: self.local.search(vector, limit),
            lambda: self.primary.search(vector, limit),
            self.coordinator.is_degraded("search_by_vector"),
        )

    async def exists_by_id_prefix(self, pattern: str) -> bool:
        if not pattern:
            return False
        return await self.coordinator.execute(
            "exists_by_id_prefix",
            lambda: self.local.exists_by_prefix(pattern),
            lambda: self.primary.exists_by_prefix(pattern),
            self.coordinator.is_degraded("exists_by_id_prefix"),
        )

    async def count_by_id_prefix(self, pattern: str) -> int:
        if not pattern:
            return 0
        return await self.coordinator.execute(
            "count_by_id_prefix",
            lambda: self.local.count_by_prefix(pattern),
            lambda: self.primary.count_by_prefix(pattern),
            self.coordinator.is_degraded("count_by_id_prefix"),
        )

    async def delete_by_id_prefix(self, pattern: str) -> int:
        """Delete every chunk whose id starts with `pattern`. Empty pattern deletes nothing."""
        if not pattern:
            return 0
        return await self.coordinator.execute(
            "delete_by_id_prefix",
            lambda: self.local.delete_by_prefix(pattern),
            lambda: self.primary.delete_by_prefix(pattern),
            self.coordinator.is_degraded("delete_by_id_prefix"),
        )

    async def delete_by_ids(self, chunk_ids: Sequence[str]) -> int:
        if not chunk_ids:
            return 0
        return await self.coordinator.execute(
            "delete_by_ids",
            lambda: self.local.delete_by_ids(chunk_ids),
            lambda: self.primary.delete_by_ids(chunk_ids),
            self.coordinator.is_degraded("delete_by_ids"),
        )

    async def list_unique_document_names(self) -> list[str]:
        return await self.coordinator.execute(
            "list_unique_document_names",
            self.local.unique_document_names,
            self.primary.unique_document_names,
            self.coordinator.is_degraded("list_unique_document_names"),
        )

    async def get_chunks_by_document_name(self, document_name: str) -> list[SearchResult]:
        return await self.coordinator.execute(
            "get_chunks_by_document_name",
            lambda: self.local.chunks_by_document_name(document_name),
            lambda: self.primary.chunks_by_document_name(document_name),
            self.coordinator.is_degraded("get_chunks_by_document_name"),
        )

    async def close(self) -> None:
        await self.primary.close()
