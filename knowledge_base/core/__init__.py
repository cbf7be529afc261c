"""
Core module.

Contains the exception hierarchy and the collaborator interfaces
(embedder, chunker) the knowledge store consumes.
"""

from knowledge_base.core.exceptions import (
    KnowledgeBaseException,
    ValidationError,
    ConfigurationError,
    DimensionMismatchError,
    VectorStoreError,
    DocumentProcessingError,
    EmbeddingError,
)
from knowledge_base.core.interfaces import DocumentChunker, EmbedIntent, Embedder

__all__ = [
    # Exceptions
    "KnowledgeBaseException",
    "ValidationError",
    "ConfigurationError",
    "DimensionMismatchError",
    "VectorStoreError",
    "DocumentProcessingError",
    "EmbeddingError",
    # Collaborators
    "DocumentChunker",
    "EmbedIntent",
    "Embedder",
]
