"""
Application settings.

Combines the environment-level base options with the vector store section.

Dependencies: pydantic_settings, knowledge_base.configs.vector_store
System role: Single source of configuration for the knowledge store
"""

from functools import lru_cache

from pydantic import Field

from knowledge_base.configs.base import BaseSettings
from knowledge_base.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Root settings; `vector_store` is read from QDRANT_* variables."""

    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Return the process-wide Settings, built on first call.

    Usage:
        from knowledge_base.configs import get_settings
        dimension = get_settings().vector_store.vector_size
    """
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached Settings and re-read the environment."""
    get_settings.cache_clear()
    return get_settings()
