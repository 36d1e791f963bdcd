"""
Paginated collection state.

Holds the latest fetched page of a filterable list plus loading and error
state. Every successful fetch replaces the page wholesale; there is no
incremental merge.

Optimistic mutations on an item in the page go through hold()/release():
held fields are applied to the live entry and re-applied on top of every
refetch until released, so a refetch that lands mid-mutation cannot undo the
optimistic patch with pre-mutation numbers.
"""

from typing import Any, Awaitable, Callable, Optional

import structlog

from appgram.core.errors import get_error_message
from appgram.schemas.pagination import Paginated
from appgram.schemas.result import ApiResult, Ok
from appgram.services.state import RefreshingState, apply_fields, entity_id

logger = structlog.get_logger(__name__)

FetchPage = Callable[[dict[str, Any], int], Awaitable[ApiResult[Paginated[Any]]]]


def _query_key(filters: dict[str, Any], page: int) -> tuple[str, int]:
    return repr(sorted(filters.items())), page


class CollectionState(RefreshingState):
    """
    State for one paginated, filterable list.

    ``fetch_page(filters, page)`` performs the request. Changing filters
    resets the page to 1. The page setter trusts the caller; the loaded page
    is clamped to [1, total_pages] afterwards, with one corrective refetch.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        refresh_interval: float = 0,
        skip: bool = False,
        fallback_error: str = "Failed to fetch data",
    ):
        super().__init__(refresh_interval=refresh_interval, skip=skip)
        self._fetch_page = fetch_page
        self.filters: dict[str, Any] = dict(filters or {})
        self.page = page
        self.fallback_error = fallback_error

        self.items: list[Any] = []
        self.total = 0
        self.per_page = 0
        self.total_pages = 0

        self._loaded_key: Optional[tuple[str, int]] = None
        self._overlays: dict[str, dict[str, Any]] = {}

    @property
    def data(self) -> list[Any]:
        return self.items

    @property
    def is_loaded(self) -> bool:
        return self._loaded_key is not None

    # =========================================================================
    # Fetching
    # =========================================================================

    async def refetch(self, silent: bool = False) -> None:
        """
        Re-issue the fetch for the current filters and page.

        The loading flag is raised only for the first fetch of a filter/page
        combination; silent refreshes never raise it. A failure keeps the
        previous page in place and sets ``error``.
        """
        await self._load(silent=silent, allow_clamp=True)

    async def _load(self, silent: bool, allow_clamp: bool) -> None:
        if self.skip:
            return

        generation = self._next_generation()
        key = _query_key(self.filters, self.page)
        if not silent and key != self._loaded_key:
            self.is_loading = True

        try:
            result = await self._fetch_page(dict(self.filters), self.page)
        except Exception as e:
            if self._is_stale(generation):
                return
            logger.exception("collection_fetch_error", page=self.page, error=str(e))
            self.error = get_error_message(e, self.fallback_error)
            self.is_loading = False
            return

        if self._is_stale(generation):
            return

        self.is_loading = False
        if not isinstance(result, Ok):
            logger.warning(
                "collection_fetch_failed",
                page=self.page,
                code=result.error_code,
                silent=silent,
            )
            self.error = get_error_message(result.error, self.fallback_error)
            return

        collection = result.value
        self.error = None
        self.items = [self._with_overlay(item) for item in collection.data]
        self.total = collection.total
        self.per_page = collection.per_page
        self.total_pages = collection.total_pages
        self._loaded_key = key

        clamped = min(max(self.page, 1), max(self.total_pages, 1))
        if clamped != self.page:
            logger.info("page_clamped", requested=self.page, page=clamped, total_pages=self.total_pages)
            self.page = clamped
            if allow_clamp:
                await self._load(silent=True, allow_clamp=False)

    # =========================================================================
    # Filters and paging
    # =========================================================================

    async def set_filters(self, patch: dict[str, Any]) -> None:
        """Merge a partial filter update; a None value removes the filter."""
        merged = {**self.filters, **patch}
        self.filters = {k: v for k, v in merged.items() if v is not None}
        self.page = 1
        await self.refetch()

    async def replace_filters(self, filters: dict[str, Any]) -> None:
        self.filters = {k: v for k, v in filters.items() if v is not None}
        self.page = 1
        await self.refetch()

    async def set_page(self, page: int) -> None:
        self.page = page
        await self.refetch()

    async def next_page(self) -> None:
        if self.page < self.total_pages:
            await self.set_page(self.page + 1)

    async def prev_page(self) -> None:
        if self.page > 1:
            await self.set_page(self.page - 1)

    # =========================================================================
    # Optimistic overlays
    # =========================================================================

    def _with_overlay(self, item: Any) -> Any:
        fields = self._overlays.get(entity_id(item))
        return apply_fields(item, fields) if fields else item

    def find(self, item_id: str) -> Optional[Any]:
        for item in self.items:
            if entity_id(item) == item_id:
                return item
        return None

    def patch(self, item_id: str, fields: dict[str, Any]) -> bool:
        """Replace fields on the live entry. Returns False when it is not loaded."""
        for index, item in enumerate(self.items):
            if entity_id(item) == item_id:
                self.items[index] = apply_fields(item, fields)
                return True
        return False

    def hold(self, item_id: str, fields: dict[str, Any]) -> bool:
        """Patch the live entry and keep the fields applied across refetches."""
        self._overlays[item_id] = {**self._overlays.get(item_id, {}), **fields}
        return self.patch(item_id, fields)

    def release(self, item_id: str) -> None:
        """Stop re-applying held fields. The live entry keeps its current values."""
        self._overlays.pop(item_id, None)
