"""
Resilience coordinator for the primary vector store.

Decides per call whether to use Qdrant or the in-memory fallback.
After the first observed primary failure the store stays degraded until an
explicit successful initialize; there is no background re-probing.
Warnings are emitted once per operation name while degraded.

Dependencies: knowledge_base.configs, knowledge_base.core.exceptions
System role: Primary/fallback routing for the knowledge store
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, TypeVar

from knowledge_base.configs.vector_store import DegradeScope
from knowledge_base.core.exceptions import ConfigurationError
from knowledge_base.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResilienceCoordinator:
    """
    Tracks primary backend health and routes calls accordingly.

    One instance is shared by every call site of a knowledge store.
    State is not locked: concurrent first failures may log more than once.
    """

    def __init__(
        self,
        backend_name: str = "Qdrant",
        scope: DegradeScope = DegradeScope.GLOBAL,
    ) -> None:
        """
        Initialize coordinator in the healthy state.

        Args:
            backend_name: Primary backend name used in log messages
            scope: Whether a failure degrades all operations or only the failing one
        """
        self.backend_name = backend_name
        self.scope = scope
        self._degraded = False
        self._degraded_operations: set[str] = set()
        self._warned_operations: set[str] = set()

    def is_degraded(self, operation: str | None = None) -> bool:
        """
        Return whether calls should skip the primary backend.

        Args:
            operation: Operation name; only consulted with operation scope

        Returns:
            bool: True when the fallback is authoritative
        """
        if self.scope == DegradeScope.OPERATION:
            if operation is None:
                return bool(self._degraded_operations)
            return operation in self._degraded_operations
        return self._degraded

    def handle_error(self, operation: str, error: BaseException) -> None:
        """
        Mark the store degraded and warn once for this operation.

        Args:
            operation: Operation name that failed on the primary
            error: Exception raised by the primary
        """
        self._degraded = True
        self._degraded_operations.add(operation)

        if operation in self._warned_operations:
            logger.debug(
                f"{__name__}:handle_error - {operation} failed again on {self.backend_name}: "
                f"{type(error).__name__}"
            )
            return

        self._warned_operations.add(operation)
        log_exception_with_context(
            logger,
            f"{__name__}:handle_error - {self.backend_name} unavailable during {operation}, "
            f"using in-memory fallback: {type(error).__name__}: {error}",
            error,
            level=logging.WARNING,
            operation=operation,
            backend=self.backend_name,
        )

    def reset_warning(self, operation: str) -> None:
        """Allow the next failure of `operation` to be logged again."""
        self._warned_operations.discard(operation)

    def recover(self) -> None:
        """Clear degraded state after the primary was confirmed reachable."""
        if self.is_degraded():
            logger.info(f"{__name__}:recover - {self.backend_name} reachable again, leaving fallback mode")
        self._degraded = False
        self._degraded_operations.clear()

    async def execute(
        self,
        operation: str,
        fallback_fn: Callable[[], T | Awaitable[T]],
        primary_fn: Callable[[], Awaitable[T]],
        force_fallback: bool = False,
    ) -> T:
        """
        Run `primary_fn`, or `fallback_fn` when degraded or when the primary fails.

        Args:
            operation: Operation name for routing and warning suppression
            fallback_fn: In-memory implementation; may be sync or async
            primary_fn: Primary backend implementation (async)
            force_fallback: Skip the primary without attempting it

        Returns:
            Result of whichever path answered

        Raises:
            ConfigurationError: Re-raised from the primary without degrading
        """
        if force_fallback or self.is_degraded(operation):
            return await _resolve(fallback_fn())

        try:
            return await primary_fn()
        except ConfigurationError:
            raise
        except Exception as e:
            self.handle_error(operation, e)

        return await _resolve(fallback_fn())


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result
