"""Application services orchestrating the knowledge store and its collaborators."""

from knowledge_base.application.knowledge_service import KnowledgeService, source_id_prefix

__all__ = ["KnowledgeService", "source_id_prefix"]
