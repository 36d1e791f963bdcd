"""
Single-resource state for non-paginated reads.
"""

from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import structlog

from appgram.core.errors import get_error_message
from appgram.schemas.result import ApiResult, Ok
from appgram.services.state import RefreshingState, apply_fields, entity_id

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ResourceState(RefreshingState, Generic[T]):
    """
    Last-known value of one resource (a wish, the roadmap, a release, ...).

    Follows the same rules as CollectionState: late responses from
    superseded fetches are discarded, the loading flag is raised only until
    the first successful load, and a failed fetch keeps the previous value.
    When the value is an entity it also accepts optimistic overlays, so a
    VoteCoordinator can be bound to a detail view.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[ApiResult[T]]],
        refresh_interval: float = 0,
        skip: bool = False,
        fallback_error: str = "Failed to fetch data",
    ):
        super().__init__(refresh_interval=refresh_interval, skip=skip)
        self._fetch = fetch
        self.fallback_error = fallback_error
        self.data: Optional[T] = None
        self._overlay: dict[str, Any] = {}

    async def refetch(self, silent: bool = False) -> None:
        if self.skip:
            return

        generation = self._next_generation()
        if not silent and self.data is None:
            self.is_loading = True

        try:
            result = await self._fetch()
        except Exception as e:
            if self._is_stale(generation):
                return
            logger.exception("resource_fetch_error", error=str(e))
            self.error = get_error_message(e, self.fallback_error)
            self.is_loading = False
            return

        if self._is_stale(generation):
            return

        self.is_loading = False
        if not isinstance(result, Ok):
            logger.warning("resource_fetch_failed", code=result.error_code, silent=silent)
            self.error = get_error_message(result.error, self.fallback_error)
            return

        self.error = None
        value = result.value
        self.data = apply_fields(value, self._overlay) if self._overlay else value

    def find(self, item_id: str) -> Optional[T]:
        if self.data is not None and entity_id(self.data) == item_id:
            return self.data
        return None

    def hold(self, item_id: str, fields: dict[str, Any]) -> bool:
        if self.data is None or entity_id(self.data) != item_id:
            return False
        self._overlay = {**self._overlay, **fields}
        self.data = apply_fields(self.data, fields)
        return True

    def release(self, item_id: str) -> None:
        if self.data is None or entity_id(self.data) == item_id:
            self._overlay = {}
