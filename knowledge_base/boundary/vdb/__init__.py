"""
Vector database boundary layer.

Provides the resilient knowledge store and its two backends.
- KnowledgeStore: facade routing each call to Qdrant or the fallback
- QdrantChunkStore: primary Qdrant adapter
- InMemoryChunkStore: process-local fallback
- ResilienceCoordinator: degrade/recover routing state

Dependencies: qdrant_client, tenacity
System role: Vector store adapter for chunk storage and retrieval
"""

from knowledge_base.boundary.vdb.fallback import ResilienceCoordinator
from knowledge_base.boundary.vdb.knowledge_store import KnowledgeStore
from knowledge_base.boundary.vdb.memory_store import InMemoryChunkStore, cosine_similarity
from knowledge_base.boundary.vdb.qdrant_store import QdrantChunkStore
from knowledge_base.boundary.vdb.vector_schemas import ChunkPayload
from knowledge_base.boundary.vdb.vector_store_factory import create_knowledge_store

__all__ = [
    "ChunkPayload",
    "InMemoryChunkStore",
    "KnowledgeStore",
    "QdrantChunkStore",
    "ResilienceCoordinator",
    "cosine_similarity",
    "create_knowledge_store",
]
