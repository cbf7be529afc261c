"""
Knowledge store factory.

Builds the Qdrant adapter, in-memory fallback and the coordinator they
share from configuration.

Dependencies: knowledge_base.boundary.vdb, knowledge_base.configs
System role: Knowledge store instantiation
"""

import logging

from qdrant_client import AsyncQdrantClient

from knowledge_base.boundary.vdb.fallback import ResilienceCoordinator
from knowledge_base.boundary.vdb.knowledge_store import KnowledgeStore
from knowledge_base.boundary.vdb.memory_store import InMemoryChunkStore
from knowledge_base.boundary.vdb.qdrant_store import QdrantChunkStore
from knowledge_base.configs import get_settings
from knowledge_base.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def create_knowledge_store(
    settings: VectorStoreSettings | None = None,
    client: AsyncQdrantClient | None = None,
) -> KnowledgeStore:
    """
    Create a knowledge store wired to one coordinator.

    The store is not initialized; await `initialize()` before use.

    Args:
        settings: Vector store settings (defaults to application settings)
        client: Optional pre-built Qdrant client

    Returns:
        KnowledgeStore: Facade over Qdrant and the in-memory fallback
    """
    settings = settings or get_settings().vector_store
    logger.info(
        f"{__name__}:create_knowledge_store - Creating knowledge store "
        f"(collection={settings.collection_name}, dimension={settings.vector_size}, "
        f"degrade_scope={settings.degrade_scope.value})"
    )
    return KnowledgeStore(
        primary=QdrantChunkStore(settings, client=client),
        local=InMemoryChunkStore(settings.vector_size),
        coordinator=ResilienceCoordinator(backend_name="Qdrant", scope=settings.degrade_scope),
    )
