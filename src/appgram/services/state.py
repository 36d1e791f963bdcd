"""
Shared plumbing for client-side state holders.

A state holder owns the last-known server data for one query, reports
loading and error state, and can re-issue its fetch on a timer. Fetches are
numbered; a response is applied only if no newer fetch has started since.
"""

import asyncio
import contextlib
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class OptimisticCache(Protocol):
    """
    A cache that can carry optimistic field overlays for an entity.

    find() returns the live entry. hold() patches it and keeps the overlay
    applied across refetches until release() is called.
    """

    def find(self, entity_id: str) -> Optional[Any]:
        ...

    def hold(self, entity_id: str, fields: dict[str, Any]) -> bool:
        ...

    def release(self, entity_id: str) -> None:
        ...


def entity_id(item: Any) -> Optional[str]:
    """Id of a model or mapping entity."""
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def entity_field(item: Any, name: str) -> Any:
    """Field of a model or mapping entity, None when absent."""
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def apply_fields(item: Any, fields: dict[str, Any]) -> Any:
    """Copy of an entity with fields replaced."""
    if isinstance(item, BaseModel):
        return item.model_copy(update=fields)
    if isinstance(item, dict):
        return {**item, **fields}
    return item


class RefreshingState(ABC):
    """Generation counter plus an optional auto-refresh task."""

    def __init__(self, refresh_interval: float = 0, skip: bool = False):
        self.refresh_interval = refresh_interval
        self.skip = skip
        self.is_loading = False
        self.error: Optional[str] = None
        self._generation = 0
        self._refresh_task: Optional[asyncio.Task] = None

    @abstractmethod
    async def refetch(self, silent: bool = False) -> None:
        """Re-issue the current fetch."""

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug(
                "stale_response_discarded",
                state=type(self).__name__,
                generation=generation,
                current=self._generation,
            )
            return True
        return False

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def start(self) -> None:
        """Run the initial fetch and start auto-refresh when an interval is set."""
        if self.skip:
            return
        await self.refetch()
        if self.refresh_interval > 0 and not self.is_refreshing:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            logger.debug("silent_refresh", state=type(self).__name__)
            await self.refetch(silent=True)

    async def aclose(self) -> None:
        """Stop auto-refresh. In-flight fetches become stale."""
        self._next_generation()
        task, self._refresh_task = self._refresh_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
