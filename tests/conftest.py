"""
Shared test fixtures and configuration for entire test suite.

Provides: chunk record factory, vector store settings, mocked Qdrant client,
in-memory store, coordinator and knowledge store fixtures
Dependencies: pytest, qdrant_client
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock

import pytest

from knowledge_base.boundary.vdb.fallback import ResilienceCoordinator
from knowledge_base.boundary.vdb.knowledge_store import KnowledgeStore
from knowledge_base.boundary.vdb.memory_store import InMemoryChunkStore
from knowledge_base.boundary.vdb.qdrant_store import QdrantChunkStore
from knowledge_base.configs.vector_store import VectorStoreSettings
from knowledge_base.models.chunk import ChunkRecord

DIMENSION = 4


def make_record(
    chunk_id: str,
    embedding: list[float] | None = None,
    document_name: str | None = None,
    **fields,
) -> ChunkRecord:
    """Build a chunk record; document name defaults to the id's source prefix."""
    return ChunkRecord(
        id=chunk_id,
        document_name=document_name or chunk_id.rsplit("_", 1)[0],
        content=fields.pop("content", f"content of {chunk_id}"),
        embedding=embedding or [1.0, 0.0, 0.0, 0.0],
        **fields,
    )


@pytest.fixture
def vector_settings() -> VectorStoreSettings:
    """Settings with tiny pages and no bootstrap backoff."""
    return VectorStoreSettings(
        url="http://qdrant.test:6333",
        collection_name="test_chunks",
        vector_size=DIMENSION,
        scroll_page_size=2,
        delete_batch_size=2,
        bootstrap_attempts=2,
        bootstrap_wait_initial=0.0,
        bootstrap_wait_max=0.0,
    )


@pytest.fixture
def mock_qdrant_client() -> AsyncMock:
    """
    Create mock AsyncQdrantClient.

    Returns:
        AsyncMock: Client whose methods are all awaitable mocks
    """
    return AsyncMock()


@pytest.fixture
def unreachable_qdrant_client() -> AsyncMock:
    """Client whose every call fails as if Qdrant were down."""
    client = AsyncMock()
    error = ConnectionError("qdrant.test:6333 refused connection")
    for method in (
        "collection_exists",
        "get_collection",
        "create_collection",
        "create_payload_index",
        "upsert",
        "query_points",
        "count",
        "delete",
        "scroll",
    ):
        getattr(client, method).side_effect = error
    return client


@pytest.fixture
def qdrant_store(vector_settings: VectorStoreSettings, mock_qdrant_client: AsyncMock) -> QdrantChunkStore:
    return QdrantChunkStore(vector_settings, client=mock_qdrant_client)


@pytest.fixture
def memory_store() -> InMemoryChunkStore:
    return InMemoryChunkStore(DIMENSION)


@pytest.fixture
def coordinator() -> ResilienceCoordinator:
    return ResilienceCoordinator(backend_name="Qdrant")


@pytest.fixture
def degraded_store(
    vector_settings: VectorStoreSettings,
    unreachable_qdrant_client: AsyncMock,
    memory_store: InMemoryChunkStore,
    coordinator: ResilienceCoordinator,
) -> KnowledgeStore:
    """Knowledge store whose Qdrant is unreachable (not yet initialized)."""
    return KnowledgeStore(
        primary=QdrantChunkStore(vector_settings, client=unreachable_qdrant_client),
        local=memory_store,
        coordinator=coordinator,
    )


@pytest.fixture
def record_factory():
    """Expose make_record to tests."""
    return make_record
