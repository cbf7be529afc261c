"""
In-memory chunk store used when Qdrant is unavailable.

Provides the same operations as QdrantChunkStore over a plain dict,
with linear-scan cosine similarity. Contents are lost on restart.

Dependencies: knowledge_base.models, knowledge_base.core.exceptions
System role: Fallback vector store
"""

import logging
import math
import threading
from typing import Iterable, Sequence

from knowledge_base.core.exceptions import DimensionMismatchError
from knowledge_base.models.chunk import UNRANKED_SCORE, ChunkRecord, SearchResult

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors differ in length: {len(a)} != {len(b)}")

    dot = 0.0
    a_norm = 0.0
    b_norm = 0.0
    for x, y in zip(a, b):
        dot += x * y
        a_norm += x * x
        b_norm += y * y

    if a_norm == 0.0 or b_norm == 0.0:
        return 0.0
    return dot / (math.sqrt(a_norm) * math.sqrt(b_norm))


class InMemoryChunkStore:
    """
    Process-local chunk store keyed by logical chunk id.

    All methods take an internal lock, so the store can be shared between
    the event loop and worker threads.
    """

    def __init__(self, dimension: int) -> None:
        """
        Initialize an empty store.

        Args:
            dimension: Required length of every embedding and query vector
        """
        self.dimension = dimension
        self._records: dict[str, ChunkRecord] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _check_dimension(self, vector: Sequence[float], context: str) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), context=context)

    def upsert(self, records: Iterable[ChunkRecord]) -> None:
        """Insert or overwrite records by id."""
        records = list(records)
        for record in records:
            self._check_dimension(record.embedding, record.id)

        with self._lock:
            for record in records:
                self._records[record.id] = record
        logger.debug(f"{__name__}:upsert - Stored {len(records)} chunks in memory")

    def search(self, vector: Sequence[float], limit: int) -> list[SearchResult]:
        """
        Rank every stored chunk by cosine similarity to `vector`.

        Ties keep insertion order.
        """
        self._check_dimension(vector, "query")
        if limit < 1:
            return []

        with self._lock:
            scored = [
                (cosine_similarity(vector, record.embedding), record)
                for record in self._records.values()
            ]

        scored.sort(key=lambda item: item[0], reverse=True)
        return [SearchResult.from_record(record, score) for score, record in scored[:limit]]

    def _matching_ids(self, prefix: str) -> list[str]:
        return [chunk_id for chunk_id in self._records if chunk_id.startswith(prefix)]

    def exists_by_prefix(self, prefix: str) -> bool:
        with self._lock:
            return any(chunk_id.startswith(prefix) for chunk_id in self._records)

    def count_by_prefix(self, prefix: str) -> int:
        with self._lock:
            return len(self._matching_ids(prefix))

    def delete_by_prefix(self, prefix: str) -> int:
        """Delete every chunk whose id starts with `prefix`; returns count removed."""
        with self._lock:
            matching = self._matching_ids(prefix)
            for chunk_id in matching:
                del self._records[chunk_id]
        logger.info(f"{__name__}:delete_by_prefix - Deleted {len(matching)} in-memory chunks for '{prefix}'")
        return len(matching)

    def delete_by_ids(self, chunk_ids: Iterable[str]) -> int:
        """Delete chunks by id; unknown ids are ignored."""
        deleted = 0
        with self._lock:
            for chunk_id in set(chunk_ids):
                if self._records.pop(chunk_id, None) is not None:
                    deleted += 1
        logger.info(f"{__name__}:delete_by_ids - Deleted {deleted} in-memory chunks")
        return deleted

    def unique_document_names(self) -> list[str]:
        with self._lock:
            names = dict.fromkeys(
                record.document_name for record in self._records.values() if record.document_name
            )
        return list(names)

    def chunks_by_document_name(self, document_name: str) -> list[SearchResult]:
        with self._lock:
            return [
                SearchResult.from_record(record, UNRANKED_SCORE)
                for record in self._records.values()
                if record.document_name == document_name
            ]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
