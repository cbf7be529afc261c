"""
Test suite for the KnowledgeStore facade and its factory.

Covers initialize/degrade/recover, routing of every operation between
Qdrant and the in-memory fallback, and input edge cases.

System role: Verification of the public knowledge store API
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from qdrant_client import models

from knowledge_base.boundary.vdb import create_knowledge_store
from knowledge_base.boundary.vdb.fallback import ResilienceCoordinator
from knowledge_base.boundary.vdb.knowledge_store import KnowledgeStore
from knowledge_base.boundary.vdb.memory_store import InMemoryChunkStore
from knowledge_base.boundary.vdb.qdrant_store import QdrantChunkStore
from knowledge_base.configs.vector_store import DegradeScope, VectorStoreSettings
from knowledge_base.core.exceptions import ConfigurationError, DimensionMismatchError


@pytest.fixture
def healthy_store(
    vector_settings: VectorStoreSettings,
    mock_qdrant_client: AsyncMock,
    memory_store: InMemoryChunkStore,
    coordinator: ResilienceCoordinator,
) -> KnowledgeStore:
    """Knowledge store over a responsive (mocked) Qdrant."""
    mock_qdrant_client.collection_exists.return_value = False
    return KnowledgeStore(
        primary=QdrantChunkStore(vector_settings, client=mock_qdrant_client),
        local=memory_store,
        coordinator=coordinator,
    )


def _existing_collection(size: int) -> MagicMock:
    info = MagicMock()
    info.config.params.vectors = models.VectorParams(size=size, distance=models.Distance.COSINE)
    return info


class TestInitialize:
    """Test suite for KnowledgeStore.initialize."""

    @pytest.mark.asyncio
    async def test_initialize_should_stay_healthy_when_qdrant_responds(self, healthy_store: KnowledgeStore) -> None:
        await healthy_store.initialize()

        assert healthy_store.is_degraded is False

    @pytest.mark.asyncio
    async def test_initialize_should_degrade_instead_of_raising(self, degraded_store: KnowledgeStore) -> None:
        """Unreachable Qdrant: initialize completes and the store is degraded."""
        await degraded_store.initialize()

        assert degraded_store.is_degraded is True

    @pytest.mark.asyncio
    async def test_initialize_should_raise_on_dimension_mismatch(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        mock_qdrant_client.collection_exists.return_value = True
        mock_qdrant_client.get_collection.return_value = _existing_collection(768)

        with pytest.raises(DimensionMismatchError):
            await healthy_store.initialize()

        assert healthy_store.is_degraded is False

    @pytest.mark.asyncio
    async def test_initialize_should_recover_degraded_store(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        """A later successful initialize routes operations back to Qdrant."""
        # Arrange
        mock_qdrant_client.collection_exists.side_effect = ConnectionError("down")
        await healthy_store.initialize()
        assert healthy_store.is_degraded is True

        # Act
        mock_qdrant_client.collection_exists.side_effect = None
        mock_qdrant_client.collection_exists.return_value = False
        await healthy_store.initialize()
        mock_qdrant_client.count.return_value = models.CountResult(count=4)

        # Assert
        assert healthy_store.is_degraded is False
        assert await healthy_store.count_by_id_prefix("doc1") == 4


class TestDegradedRouting:
    """Test suite for operations while Qdrant is unreachable."""

    @pytest.mark.asyncio
    async def test_prefix_scenario_should_run_on_fallback(
        self, degraded_store: KnowledgeStore, record_factory
    ) -> None:
        """doc1_0, doc1_1, doc2_0: prefix 'doc1' counts and deletes two."""
        # Arrange
        await degraded_store.initialize()
        await degraded_store.add_chunks([
            record_factory("doc1_0"),
            record_factory("doc1_1"),
            record_factory("doc2_0"),
        ])

        # Act / Assert
        assert await degraded_store.exists_by_id_prefix("doc1") is True
        assert await degraded_store.count_by_id_prefix("doc1") == 2
        assert await degraded_store.delete_by_id_prefix("doc1") == 2
        assert await degraded_store.exists_by_id_prefix("doc1") is False
        assert await degraded_store.list_unique_document_names() == ["doc2"]

    @pytest.mark.asyncio
    async def test_search_should_rank_fallback_records(self, degraded_store: KnowledgeStore, record_factory) -> None:
        await degraded_store.initialize()
        await degraded_store.add_chunks([
            record_factory("pdf_a_0", embedding=[0.0, 1.0, 0.0, 0.0]),
            record_factory("pdf_a_1", embedding=[1.0, 0.0, 0.0, 0.0]),
        ])

        results = await degraded_store.search_by_vector([1.0, 0.0, 0.0, 0.0], limit=1)

        assert [r.id for r in results] == ["pdf_a_1"]
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_first_primary_failure_should_degrade_other_operations(
        self,
        healthy_store: KnowledgeStore,
        mock_qdrant_client: AsyncMock,
        record_factory,
    ) -> None:
        """A failed upsert lands in memory; later reads skip Qdrant entirely."""
        # Arrange
        await healthy_store.initialize()
        mock_qdrant_client.upsert.side_effect = ConnectionError("down")

        # Act
        await healthy_store.add_chunks([record_factory("web_x_0")])
        names = await healthy_store.list_unique_document_names()

        # Assert
        assert healthy_store.is_degraded is True
        assert names == ["web_x"]
        mock_qdrant_client.scroll.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_by_ids_should_fall_back_on_error(
        self, degraded_store: KnowledgeStore, record_factory
    ) -> None:
        await degraded_store.add_chunks([record_factory("a_0"), record_factory("a_1")])

        deleted = await degraded_store.delete_by_ids(["a_0", "missing"])

        assert deleted == 1
        assert degraded_store.is_degraded is True

    @pytest.mark.asyncio
    async def test_chunks_by_document_name_should_return_sentinel_scores(
        self, degraded_store: KnowledgeStore, record_factory
    ) -> None:
        await degraded_store.initialize()
        await degraded_store.add_chunks([record_factory(f"pdf_manual_{i}") for i in range(3)])

        chunks = await degraded_store.get_chunks_by_document_name("pdf_manual")

        assert len(chunks) == 3
        assert {c.score for c in chunks} == {1.0}
        assert all(c.domains == ["default"] for c in chunks)


class TestHealthyRouting:
    """Test suite for operations served by Qdrant."""

    @pytest.mark.asyncio
    async def test_prefix_strategy_exhaustion_should_not_degrade(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        """Prefix operations return a safe default from the adapter itself."""
        await healthy_store.initialize()
        mock_qdrant_client.count.side_effect = RuntimeError("bad request")
        mock_qdrant_client.scroll.side_effect = RuntimeError("bad request")

        assert await healthy_store.count_by_id_prefix("doc1") == 0
        assert await healthy_store.exists_by_id_prefix("doc1") is False
        assert healthy_store.is_degraded is False

    @pytest.mark.asyncio
    async def test_add_chunks_should_write_to_qdrant_only(
        self,
        healthy_store: KnowledgeStore,
        mock_qdrant_client: AsyncMock,
        memory_store: InMemoryChunkStore,
        record_factory,
    ) -> None:
        await healthy_store.initialize()

        await healthy_store.add_chunks([record_factory("doc_0")])

        mock_qdrant_client.upsert.assert_awaited_once()
        assert len(memory_store) == 0


class TestInputEdgeCases:
    """Test suite for argument validation and no-ops."""

    @pytest.mark.asyncio
    async def test_add_chunks_should_ignore_empty_list(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        await healthy_store.add_chunks([])

        mock_qdrant_client.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_chunks_should_reject_wrong_dimension_without_degrading(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock, record_factory
    ) -> None:
        with pytest.raises(DimensionMismatchError):
            await healthy_store.add_chunks([record_factory("doc_0", embedding=[1.0, 0.0])])

        mock_qdrant_client.upsert.assert_not_awaited()
        assert healthy_store.is_degraded is False

    @pytest.mark.asyncio
    async def test_search_should_reject_wrong_query_dimension(self, degraded_store: KnowledgeStore) -> None:
        with pytest.raises(DimensionMismatchError):
            await degraded_store.search_by_vector([1.0, 0.0, 0.0])

    @pytest.mark.asyncio
    async def test_search_should_return_empty_for_non_positive_limit(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        assert await healthy_store.search_by_vector([1.0, 0.0, 0.0, 0.0], limit=0) == []
        mock_qdrant_client.query_points.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_prefix_should_be_a_no_op(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        assert await healthy_store.exists_by_id_prefix("") is False
        assert await healthy_store.count_by_id_prefix("") == 0
        assert await healthy_store.delete_by_id_prefix("") == 0
        mock_qdrant_client.count.assert_not_awaited()
        mock_qdrant_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_by_ids_should_ignore_empty_list(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        assert await healthy_store.delete_by_ids([]) == 0
        mock_qdrant_client.count.assert_not_awaited()

    def test_constructor_should_reject_mismatched_backends(
        self, vector_settings: VectorStoreSettings, mock_qdrant_client: AsyncMock
    ) -> None:
        with pytest.raises(ConfigurationError):
            KnowledgeStore(
                primary=QdrantChunkStore(vector_settings, client=mock_qdrant_client),
                local=InMemoryChunkStore(8),
                coordinator=ResilienceCoordinator(),
            )


class TestFactory:
    """Test suite for create_knowledge_store."""

    def test_factory_should_wire_backends_from_settings(
        self, vector_settings: VectorStoreSettings, mock_qdrant_client: AsyncMock
    ) -> None:
        store = create_knowledge_store(vector_settings, client=mock_qdrant_client)

        assert store.dimension == 4
        assert store.primary.collection_name == "test_chunks"
        assert store.local.dimension == 4
        assert store.coordinator.scope == DegradeScope.GLOBAL
        assert store.is_degraded is False

    def test_factory_should_pass_degrade_scope(self, mock_qdrant_client: AsyncMock) -> None:
        settings = VectorStoreSettings(vector_size=4, degrade_scope=DegradeScope.OPERATION)

        store = create_knowledge_store(settings, client=mock_qdrant_client)

        assert store.coordinator.scope == DegradeScope.OPERATION

    @pytest.mark.asyncio
    async def test_close_should_close_client(self, mock_qdrant_client: AsyncMock, vector_settings) -> None:
        store = create_knowledge_store(vector_settings, client=mock_qdrant_client)

        await store.close()

        mock_qdrant_client.close.assert_awaited_once()


class TestMalformedPayloads:
    """Bad point payloads are data problems, not connectivity failures."""

    @pytest.mark.asyncio
    async def test_search_should_stay_on_qdrant_when_a_payload_is_mistyped(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock, memory_store: InMemoryChunkStore
    ) -> None:
        # Arrange
        await healthy_store.initialize()
        mock_qdrant_client.query_points.return_value = MagicMock(
            points=[
                models.ScoredPoint(id=1, version=0, score=0.9, payload={"id": "a_0", "documentName": "a", "content": "x"}),
                models.ScoredPoint(id=2, version=0, score=0.4, payload={"id": "a_1", "documentName": "a", "title": 42}),
            ]
        )

        # Act
        results = await healthy_store.search_by_vector([1.0, 0.0, 0.0, 0.0], limit=5)

        # Assert
        assert [r.id for r in results] == ["a_0", "a_1"]
        assert healthy_store.is_degraded is False
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_listing_should_stay_on_qdrant_when_a_payload_is_mistyped(
        self, healthy_store: KnowledgeStore, mock_qdrant_client: AsyncMock
    ) -> None:
        await healthy_store.initialize()
        mock_qdrant_client.scroll.return_value = (
            [models.Record(id=1, payload={"id": "a_0", "documentName": "a", "domains": "bio", "summary": [1, 2]})],
            None,
        )

        chunks = await healthy_store.get_chunks_by_document_name("a")

        assert chunks[0].domains == ["bio"]
        assert chunks[0].summary is None
        assert healthy_store.is_degraded is False
