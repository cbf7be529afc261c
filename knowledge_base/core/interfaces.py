"""
Collaborator interfaces.

The knowledge store treats embedding and chunking as opaque services.
These protocols describe the only surface it relies on.

Dependencies: knowledge_base.models
System role: Seams for embedding model and chunking pipeline
"""

from enum import Enum
from typing import Protocol

from knowledge_base.models.chunk import ChunkRecord
from knowledge_base.models.document import ChunkingConfig, PreparedDocument


class EmbedIntent(str, Enum):
    """What an embedding will be used for; models may embed differently per intent."""

    STORE = "store"
    QUERY = "query"


class Embedder(Protocol):
    """Turns text into a fixed-length vector."""

    async def __call__(self, text: str, intent: EmbedIntent) -> list[float]: ...


class DocumentChunker(Protocol):
    """Turns a prepared document into embedded chunk records."""

    async def __call__(
        self,
        document: PreparedDocument,
        source_ref: str,
        config: ChunkingConfig,
        domains: list[str],
        title: str,
    ) -> list[ChunkRecord]: ...
