"""
Comment thread state for one wish.

New comments are shown as a pending entry while the create request is in
flight. On success the server's comment is prepended and the total grows by
one; on failure the pending entry is dropped and the error is surfaced. The
client never reorders the list; the next full refetch is authoritative.
"""

import itertools
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from appgram.core.config import settings
from appgram.core.errors import ErrorCode, get_error_message
from appgram.schemas.comment import Comment, CommentCreate
from appgram.schemas.pagination import Paginated
from appgram.schemas.result import ApiResult, Ok, err
from appgram.services.appgram_client import AppgramClient
from appgram.services.collection import CollectionState

logger = structlog.get_logger(__name__)

PENDING_ID_PREFIX = "pending-"

_pending_ids = itertools.count(1)


class CommentThread:
    """Paginated comments for a wish plus optimistic comment creation."""

    def __init__(
        self,
        client: AppgramClient,
        wish_id: str,
        per_page: Optional[int] = None,
        skip: bool = False,
    ):
        self.client = client
        self.wish_id = wish_id
        self.per_page = per_page or settings.DEFAULT_PER_PAGE
        self.pending: list[Comment] = []
        self.is_creating = False
        self._create_error: Optional[str] = None
        self._state = CollectionState(
            self._fetch_page,
            skip=skip or not wish_id,
            fallback_error="Failed to fetch comments",
        )

    async def _fetch_page(self, filters: dict[str, Any], page: int) -> ApiResult[Paginated[Comment]]:
        return await self.client.get_comments(self.wish_id, page=page, per_page=self.per_page)

    @property
    def comments(self) -> list[Comment]:
        return self._state.items

    @property
    def visible(self) -> list[Comment]:
        """Pending entries first, then loaded comments."""
        return [*self.pending, *self._state.items]

    @property
    def total(self) -> int:
        return self._state.total

    @property
    def page(self) -> int:
        return self._state.page

    @property
    def total_pages(self) -> int:
        return self._state.total_pages

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> Optional[str]:
        return self._create_error or self._state.error

    async def start(self) -> None:
        await self._state.start()

    async def aclose(self) -> None:
        await self._state.aclose()

    async def refetch(self) -> None:
        self._create_error = None
        await self._state.refetch()

    async def set_page(self, page: int) -> None:
        await self._state.set_page(page)

    async def next_page(self) -> None:
        await self._state.next_page()

    async def prev_page(self) -> None:
        await self._state.prev_page()

    async def create_comment(
        self,
        content: str,
        author_name: Optional[str] = None,
        author_email: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> ApiResult[Comment]:
        """
        Post a comment.

        Invalid input (empty content, malformed email) fails with
        VALIDATION_ERROR before any request is sent.
        """
        try:
            data = CommentCreate(
                wish_id=self.wish_id,
                content=content,
                author_name=author_name,
                author_email=author_email,
                parent_id=parent_id,
            )
        except ValidationError as e:
            message = e.errors()[0]["msg"] if e.errors() else "Invalid comment"
            self._create_error = message
            return err(ErrorCode.VALIDATION_ERROR, message)

        placeholder = Comment(
            id=f"{PENDING_ID_PREFIX}{next(_pending_ids)}",
            wish_id=self.wish_id,
            parent_id=parent_id,
            author_name=data.author_name or "",
            content=data.content,
        )
        self.pending.insert(0, placeholder)
        self.is_creating = True
        self._create_error = None

        try:
            result = await self.client.create_comment(data)
        finally:
            self.is_creating = False
            self.pending = [c for c in self.pending if c.id != placeholder.id]

        if not isinstance(result, Ok):
            self._create_error = get_error_message(result.error, "Failed to create comment")
            logger.warning("comment_create_failed", wish_id=self.wish_id, code=result.error_code)
            return result

        self._state.items = [result.value, *self._state.items]
        self._state.total += 1
        logger.info("comment_created", wish_id=self.wish_id, comment_id=result.value.id)
        return result
