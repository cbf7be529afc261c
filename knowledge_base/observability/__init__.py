"""
Observability module.

Provides logging configuration and structured logging helpers.
"""

from knowledge_base.observability.logger import configure_logging

__all__ = ["configure_logging"]
