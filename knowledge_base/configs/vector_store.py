"""
Vector store configuration settings.

Manages Qdrant connection settings, the collection's vector dimension,
scroll/delete paging and the degradation policy of the in-memory fallback.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for the knowledge store
"""

from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DegradeScope(str, Enum):
    """How far a single primary failure spreads."""

    GLOBAL = "global"
    OPERATION = "operation"


class VectorStoreSettings(BaseSettings):
    """Qdrant primary store configuration (in-memory fallback needs none)."""

    model_config = SettingsConfigDict(
        env_prefix="QDRANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    url: str = Field(default="http://localhost:6333", description="Qdrant server URL")
    api_key: str | None = Field(default=None, description="Qdrant API key")
    collection_name: str = Field(
        default="knowledge_base",
        validation_alias=AliasChoices("QDRANT_COLLECTION_NAME", "COLLECTION_NAME"),
        description="Collection holding chunk points",
    )
    vector_size: int = Field(
        default=768,
        gt=0,
        validation_alias=AliasChoices("QDRANT_VECTOR_SIZE", "VECTOR_SIZE"),
        description="Embedding dimension; must match every embedding written",
    )
    timeout: int = Field(default=10, gt=0, description="Client request timeout (seconds)")

    scroll_page_size: int = Field(default=100, gt=0, description="Points per scroll page")
    delete_batch_size: int = Field(
        default=100,
        gt=0,
        description="Point ids per delete request when deleting client-side matches",
    )

    bootstrap_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts at collection bootstrap before degrading",
    )
    bootstrap_wait_initial: float = Field(default=1.0, ge=0.0)
    bootstrap_wait_max: float = Field(default=10.0, ge=0.0)

    degrade_scope: DegradeScope = Field(
        default=DegradeScope.GLOBAL,
        description="'global': one failure degrades every operation; 'operation': only the failing one",
    )
