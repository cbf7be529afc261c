"""
Configuration package.

pydantic-settings classes read from the environment and `.env`.
"""

from knowledge_base.configs.settings import Settings, get_settings, reload_settings
from knowledge_base.configs.vector_store import DegradeScope, VectorStoreSettings

__all__ = ["Settings", "get_settings", "reload_settings", "DegradeScope", "VectorStoreSettings"]
