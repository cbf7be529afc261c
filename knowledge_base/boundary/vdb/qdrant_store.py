"""
Qdrant store for chunk storage and similarity search.

Translates knowledge store operations into Qdrant calls: collection
bootstrap, bulk upsert, top-k search, paginated scrolls and filtered
count/delete. Prefix operations on the logical chunk id run an ordered list
of strategies, because Qdrant's text match on the `id` payload is a
substring match whose behavior depends on server version and indexing:

1. native text filter via count (deletes re-check the prefix before removing),
2. filtered scroll with the prefix re-checked client-side,
3. unfiltered scroll of the whole collection, checked client-side.

A strategy is only abandoned when it raises; zero matches is a final answer.

Dependencies: qdrant_client, tenacity, knowledge_base.boundary.vdb.vector_schemas
System role: Primary vector store
"""

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence, TypeVar

from qdrant_client import AsyncQdrantClient, models
from tenacity import (
    AsyncRetrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from knowledge_base.boundary.vdb.vector_schemas import (
    DOCUMENT_NAME_KEY,
    DOMAINS_KEY,
    ID_KEY,
    TITLE_KEY,
    ChunkPayload,
    point_id_for,
)
from knowledge_base.configs.vector_store import VectorStoreSettings
from knowledge_base.core.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    VectorStoreError,
)
from knowledge_base.models.chunk import UNRANKED_SCORE, ChunkRecord, SearchResult
from knowledge_base.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

T = TypeVar("T")
Strategy = tuple[str, Callable[[], Awaitable[T]]]

INDEXED_FIELDS = (DOCUMENT_NAME_KEY, TITLE_KEY, DOMAINS_KEY)


def _id_text_filter(prefix: str) -> models.Filter:
    return models.Filter(
        must=[models.FieldCondition(key=ID_KEY, match=models.MatchText(text=prefix))]
    )


class QdrantChunkStore:
    """
    Chunk store backed by a Qdrant collection.

    Points are keyed by a surrogate UUID derived from the logical chunk id;
    the logical id lives in the payload and is what every filter targets.
    """

    def __init__(
        self,
        settings: VectorStoreSettings,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """
        Initialize the adapter. No network calls are made here.

        Args:
            settings: Vector store settings (url, collection, dimension, paging)
            client: Pre-built async client; created from settings when omitted
        """
        self._settings = settings
        self.collection_name = settings.collection_name
        self.dimension = settings.vector_size
        self._page_size = settings.scroll_page_size
        self._delete_batch_size = settings.delete_batch_size
        self._client = client or AsyncQdrantClient(
            url=settings.url,
            api_key=settings.api_key,
            timeout=settings.timeout,
        )
        logger.info(
            f"{__name__}:__init__ - Qdrant store for collection '{self.collection_name}' "
            f"at {settings.url} (dimension={self.dimension})"
        )

    async def close(self) -> None:
        await self._client.close()

    def _check_dimension(self, vector: Sequence[float], context: str) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), context=context)

    # ------------------------------------------------------------------ #
    # Bootstrap
    # ------------------------------------------------------------------ #
    async def ensure_collection(self) -> None:
        """
        Create the collection and payload indices if missing.

        Retries transient failures with exponential backoff. Safe to call on
        every start.

        Raises:
            DimensionMismatchError: Existing collection has another vector size
            Exception: Last connectivity error once attempts are exhausted
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.bootstrap_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.bootstrap_wait_initial,
                max=self._settings.bootstrap_wait_max,
                jitter=min(1.0, self._settings.bootstrap_wait_max),
            ),
            retry=retry_if_not_exception_type(ConfigurationError),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:ensure_collection - Retry {retry_state.attempt_number}/"
                f"{self._settings.bootstrap_attempts} after "
                f"{type(retry_state.outcome.exception()).__name__}"
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self._ensure_collection_once()

    async def _ensure_collection_once(self) -> None:
        if await self._client.collection_exists(self.collection_name):
            info = await self._client.get_collection(self.collection_name)
            vectors = info.config.params.vectors
            size = getattr(vectors, "size", None)
            if size is not None and size != self.dimension:
                raise DimensionMismatchError(
                    self.dimension,
                    size,
                    context=f"collection {self.collection_name}",
                )
            logger.info(f"{__name__}:ensure_collection - Collection '{self.collection_name}' exists")
            return

        logger.info(
            f"{__name__}:ensure_collection - Creating collection '{self.collection_name}' "
            f"with vector size {self.dimension}"
        )
        await self._client.create_collection(
            collection_name=self.collection_name,
            vectors_config=models.VectorParams(
                size=self.dimension,
                distance=models.Distance.COSINE,
            ),
        )
        for field_name in INDEXED_FIELDS:
            await self._client.create_payload_index(
                collection_name=self.collection_name,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )

    # ------------------------------------------------------------------ #
    # Writes and search
    # ------------------------------------------------------------------ #
    async def upsert(self, records: Sequence[ChunkRecord]) -> None:
        """Upsert records; an existing point with the same logical id is overwritten."""
        if not records:
            return
        for record in records:
            self._check_dimension(record.embedding, record.id)

        points = [
            models.PointStruct(
                id=point_id_for(record.id),
                vector=list(record.embedding),
                payload=ChunkPayload.from_record(record).to_wire(),
            )
            for record in records
        ]
        await self._client.upsert(
            collection_name=self.collection_name,
            points=points,
            wait=True,
        )
        logger.info(f"{__name__}:upsert - Upserted {len(points)} points")

    async def search(self, vector: Sequence[float], limit: int) -> list[SearchResult]:
        """Top-k cosine search; Qdrant's score is returned unchanged."""
        self._check_dimension(vector, "query")
        response = await self._client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            limit=limit,
            with_payload=True,
        )
        return [
            ChunkPayload.parse(point.payload).to_search_result(point.score)
            for point in response.points
        ]

    # ------------------------------------------------------------------ #
    # Scrolling
    # ------------------------------------------------------------------ #
    async def _scroll(
        self,
        scroll_filter: models.Filter | None = None,
        with_payload: bool | list[str] = True,
    ) -> AsyncIterator[models.Record]:
        """Yield every point matching `scroll_filter`, following page offsets."""
        offset: Any = None
        while True:
            points, offset = await self._client.scroll(
                collection_name=self.collection_name,
                scroll_filter=scroll_filter,
                limit=self._page_size,
                offset=offset,
                with_payload=with_payload,
                with_vectors=False,
            )
            for point in points:
                yield point
            if offset is None:
                break

    async def _prefix_matches(self, prefix: str, use_filter: bool) -> AsyncIterator[models.Record]:
        scroll_filter = _id_text_filter(prefix) if use_filter else None
        async for point in self._scroll(scroll_filter, with_payload=[ID_KEY]):
            if ChunkPayload.parse(point.payload).id.startswith(prefix):
                yield point

    # ------------------------------------------------------------------ #
    # Prefix operations
    # ------------------------------------------------------------------ #
    async def _first_success(self, operation: str, prefix: str, strategies: list[Strategy]) -> T:
        """
        Return the result of the first strategy that does not raise.

        Raises:
            VectorStoreError: Every strategy raised
        """
        for name, strategy in strategies:
            try:
                return await strategy()
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:{operation} - Strategy '{name}' failed: {type(e).__name__}: {e}",
                    e,
                    level=logging.WARNING,
                    prefix=prefix,
                )
        raise VectorStoreError(
            f"All strategies failed for {operation}",
            operation=operation,
            details={"prefix": prefix},
        )

    async def _count_native(self, prefix: str) -> int:
        result = await self._client.count(
            collection_name=self.collection_name,
            count_filter=_id_text_filter(prefix),
            exact=True,
        )
        return result.count

    async def _any_match(self, prefix: str, use_filter: bool) -> bool:
        async for _ in self._prefix_matches(prefix, use_filter):
            return True
        return False

    async def _count_matches(self, prefix: str, use_filter: bool) -> int:
        count = 0
        async for _ in self._prefix_matches(prefix, use_filter):
            count += 1
        return count

    async def exists_by_prefix(self, prefix: str) -> bool:
        """Whether any chunk id starts with `prefix`; False if every strategy fails."""

        async def native() -> bool:
            return await self._count_native(prefix) > 0

        try:
            return await self._first_success(
                "exists_by_prefix",
                prefix,
                [
                    ("native_count", native),
                    ("filtered_scroll", lambda: self._any_match(prefix, use_filter=True)),
                    ("full_scroll", lambda: self._any_match(prefix, use_filter=False)),
                ],
            )
        except VectorStoreError as e:
            logger.error(f"{__name__}:exists_by_prefix - {e}")
            return False

    async def count_by_prefix(self, prefix: str) -> int:
        """Number of chunks whose id starts with `prefix`; 0 if every strategy fails."""
        try:
            return await self._first_success(
                "count_by_prefix",
                prefix,
                [
                    ("native_count", lambda: self._count_native(prefix)),
                    ("filtered_scroll", lambda: self._count_matches(prefix, use_filter=True)),
                    ("full_scroll", lambda: self._count_matches(prefix, use_filter=False)),
                ],
            )
        except VectorStoreError as e:
            logger.error(f"{__name__}:count_by_prefix - {e}")
            return 0

    async def _delete_native(self, prefix: str) -> int:
        """
        Gate on the server-side count, then delete exact matches by point id.

        The text filter also matches ids that merely contain `prefix`, so it
        is never used as a delete selector.
        """
        if await self._count_native(prefix) == 0:
            return 0
        return await self._delete_matches(prefix, use_filter=True)

    async def _delete_matches(self, prefix: str, use_filter: bool) -> int:
        point_ids = [point.id async for point in self._prefix_matches(prefix, use_filter)]
        for start in range(0, len(point_ids), self._delete_batch_size):
            batch = point_ids[start:start + self._delete_batch_size]
            await self._client.delete(
                collection_name=self.collection_name,
                points_selector=models.PointIdsList(points=batch),
                wait=True,
            )
        return len(point_ids)

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete chunks whose id starts with `prefix`; returns count deleted, 0 if every strategy fails."""
        try:
            deleted = await self._first_success(
                "delete_by_prefix",
                prefix,
                [
                    ("native_filter", lambda: self._delete_native(prefix)),
                    ("filtered_scroll", lambda: self._delete_matches(prefix, use_filter=True)),
                    ("full_scroll", lambda: self._delete_matches(prefix, use_filter=False)),
                ],
            )
        except VectorStoreError as e:
            logger.error(f"{__name__}:delete_by_prefix - {e}")
            return 0
        logger.info(f"{__name__}:delete_by_prefix - Deleted {deleted} chunks for '{prefix}'")
        return deleted

    # ------------------------------------------------------------------ #
    # Id and document-name operations
    # ------------------------------------------------------------------ #
    async def delete_by_ids(self, chunk_ids: Sequence[str]) -> int:
        """
        Delete chunks by logical id.

        Returns the number of matching points counted before the delete;
        concurrent writes between count and delete can make it inexact.
        """
        if not chunk_ids:
            return 0
        id_filter = models.Filter(
            must=[models.FieldCondition(key=ID_KEY, match=models.MatchAny(any=list(chunk_ids)))]
        )
        result = await self._client.count(
            collection_name=self.collection_name,
            count_filter=id_filter,
            exact=True,
        )
        if result.count == 0:
            logger.info(f"{__name__}:delete_by_ids - No matching chunks among {len(chunk_ids)} ids")
            return 0

        await self._client.delete(
            collection_name=self.collection_name,
            points_selector=models.FilterSelector(filter=id_filter),
            wait=True,
        )
        logger.info(f"{__name__}:delete_by_ids - Deleted {result.count} chunks")
        return result.count

    async def unique_document_names(self) -> list[str]:
        """Distinct document names across the whole collection."""
        names: dict[str, None] = {}
        async for point in self._scroll(with_payload=[DOCUMENT_NAME_KEY]):
            name = ChunkPayload.parse(point.payload).document_name
            if name:
                names.setdefault(name, None)
        return list(names)

    async def chunks_by_document_name(self, document_name: str) -> list[SearchResult]:
        """Every chunk of one document, scored with UNRANKED_SCORE."""
        name_filter = models.Filter(
            must=[
                models.FieldCondition(
                    key=DOCUMENT_NAME_KEY,
                    match=models.MatchValue(value=document_name),
                )
            ]
        )
        return [
            ChunkPayload.parse(point.payload).to_search_result(UNRANKED_SCORE)
            async for point in self._scroll(name_filter)
        ]
