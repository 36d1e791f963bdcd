"""
Vote toggle state machine.

Per wish:

    NOT_VOTED --toggle--> PENDING_VOTE   --success--> VOTED
                                         --failure--> NOT_VOTED (rolled back)
    VOTED     --toggle--> PENDING_UNVOTE --success--> NOT_VOTED
                                         --failure--> VOTED (rolled back)

The local change is applied before the request is sent. While a vote or
unvote is pending, or a status check is running, further toggles are
ignored. Failures are surfaced through ``error`` and never retried.
"""

from enum import Enum
from typing import Any, Callable, Optional

import structlog

from appgram.core.errors import ErrorCode, get_error_message
from appgram.core.identity import IdentityProvider
from appgram.schemas.result import ApiResult, Ok, err
from appgram.schemas.wish import Wish
from appgram.services.appgram_client import AppgramClient
from appgram.services.state import OptimisticCache, entity_field

logger = structlog.get_logger(__name__)

VOTE_FAILED_MESSAGE = "Failed to vote"
UNVOTE_FAILED_MESSAGE = "Failed to remove vote"
MISSING_VOTE_ID_MESSAGE = "Unable to remove vote: vote id is unknown"


class VotePhase(str, Enum):
    """Vote state for the current identity."""

    NOT_VOTED = "not_voted"
    VOTED = "voted"
    PENDING_VOTE = "pending_vote"
    PENDING_UNVOTE = "pending_unvote"


class VoteCoordinator:
    """
    Optimistic vote toggling for one wish.

    When bound to a cache (a CollectionState or ResourceState) each toggle
    starts from the cached entry's current has_voted/vote_count, and the
    optimistic values are held on that entry until the request settles.
    """

    def __init__(
        self,
        client: AppgramClient,
        identity: Optional[IdentityProvider],
        wish_id: str,
        initial_vote_count: int = 0,
        initial_has_voted: bool = False,
        vote_id: Optional[str] = None,
        voter_email: Optional[str] = None,
        cache: Optional[OptimisticCache] = None,
        on_vote_change: Optional[Callable[[bool, int], Any]] = None,
        auto_check: bool = False,
    ):
        self.client = client
        self.identity = identity
        self.wish_id = wish_id
        self.voter_email = voter_email
        self.cache = cache
        self.on_vote_change = on_vote_change
        self.auto_check = auto_check

        self.phase = VotePhase.VOTED if initial_has_voted else VotePhase.NOT_VOTED
        self.vote_count = max(0, initial_vote_count)
        self.vote_id = vote_id
        self.error: Optional[str] = None
        self.is_checking = False
        self.has_checked = False
        self._busy = False

    @property
    def has_voted(self) -> bool:
        return self.phase in (VotePhase.VOTED, VotePhase.PENDING_VOTE)

    @property
    def is_pending(self) -> bool:
        return self.phase in (VotePhase.PENDING_VOTE, VotePhase.PENDING_UNVOTE)

    @property
    def is_loading(self) -> bool:
        return self._busy or self.is_pending

    @property
    def fingerprint(self) -> Optional[str]:
        return self.identity.get_fingerprint() if self.identity is not None else None

    def sync(self, vote_count: int, has_voted: bool) -> None:
        """Adopt authoritative values from a fresh fetch. Ignored while busy."""
        if self.is_loading:
            return
        self.vote_count = max(0, vote_count)
        self.phase = VotePhase.VOTED if has_voted else VotePhase.NOT_VOTED
        if not has_voted:
            self.vote_id = None

    # =========================================================================
    # Status check
    # =========================================================================

    async def start(self) -> None:
        """Check the vote status up front when auto_check is set."""
        if self.auto_check:
            await self.check_vote_status()

    async def check_vote_status(self) -> None:
        """Ask the server whether the current identity has voted. Runs once."""
        if self._busy or self.is_pending:
            return
        self._busy = True
        try:
            await self._check()
        finally:
            self._busy = False

    async def _check(self, force: bool = False) -> None:
        fingerprint = self.fingerprint
        if not fingerprint or (self.has_checked and not force):
            return

        self.is_checking = True
        try:
            result = await self._call(self.client.check_vote(self.wish_id, fingerprint))
        finally:
            self.is_checking = False
        # A failed check is not surfaced; the toggle proceeds on local state
        self.has_checked = True
        if not isinstance(result, Ok):
            logger.warning("vote_check_failed", wish_id=self.wish_id, code=result.error_code)
            return

        self.phase = VotePhase.VOTED if result.value.has_voted else VotePhase.NOT_VOTED
        if result.value.vote_id:
            self.vote_id = result.value.vote_id
        elif not result.value.has_voted:
            self.vote_id = None

    async def _ensure_checked(self) -> None:
        if not self.has_checked:
            await self._check()
        elif self.phase == VotePhase.VOTED and not self.vote_id:
            # Voted according to a fetch, but the vote id was never learned
            await self._check(force=True)

    def _adopt_live_entry(self) -> None:
        """Start from the bound cache's current entry, not a remembered count."""
        entry = self.cache.find(self.wish_id) if self.cache is not None else None
        if entry is None:
            return
        vote_count = entity_field(entry, "vote_count")
        has_voted = entity_field(entry, "has_voted")
        if vote_count is not None:
            self.vote_count = max(0, int(vote_count))
        if has_voted is not None:
            self.phase = VotePhase.VOTED if has_voted else VotePhase.NOT_VOTED
            if not has_voted:
                self.vote_id = None

    # =========================================================================
    # Mutations
    # =========================================================================

    async def toggle(self) -> None:
        """Vote when not voted, unvote when voted."""
        await self._run(None)

    async def vote(self) -> None:
        await self._run(VotePhase.PENDING_VOTE)

    async def unvote(self) -> None:
        await self._run(VotePhase.PENDING_UNVOTE)

    async def _run(self, wanted: Optional[VotePhase]) -> None:
        if self._busy or self.is_pending:
            logger.debug("vote_toggle_ignored", wish_id=self.wish_id, phase=self.phase.value)
            return
        if not self.fingerprint:
            logger.warning("vote_without_identity", wish_id=self.wish_id)
            return

        self._busy = True
        try:
            self._adopt_live_entry()
            await self._ensure_checked()
            if self.phase == VotePhase.NOT_VOTED and wanted != VotePhase.PENDING_UNVOTE:
                await self._cast_vote()
            elif self.phase == VotePhase.VOTED and wanted != VotePhase.PENDING_VOTE:
                await self._remove_vote()
        finally:
            self._busy = False

    async def _cast_vote(self) -> None:
        self.error = None
        self.phase = VotePhase.PENDING_VOTE
        self._apply(self.vote_count + 1)

        result = await self._call(
            self.client.create_vote(self.wish_id, self.fingerprint, self.voter_email)
        )
        if isinstance(result, Ok):
            self.vote_id = result.value.id
            self.phase = VotePhase.VOTED
            logger.info("vote_created", wish_id=self.wish_id, vote_id=self.vote_id)
            self._settle()
            return

        self.phase = VotePhase.NOT_VOTED
        self._apply(self._rolled_back(self.vote_count - 1))
        self.error = get_error_message(result.error, VOTE_FAILED_MESSAGE)
        logger.warning("vote_failed", wish_id=self.wish_id, code=result.error_code)
        self._settle(notify=False)

    async def _remove_vote(self) -> None:
        if not self.vote_id:
            self.error = MISSING_VOTE_ID_MESSAGE
            logger.warning("unvote_without_vote_id", wish_id=self.wish_id)
            return

        self.error = None
        self.phase = VotePhase.PENDING_UNVOTE
        previous_count = self.vote_count
        self._apply(self._rolled_back(self.vote_count - 1))

        result = await self._call(self.client.delete_vote(self.vote_id))
        if isinstance(result, Ok):
            logger.info("vote_deleted", wish_id=self.wish_id, vote_id=self.vote_id)
            self.vote_id = None
            self.phase = VotePhase.NOT_VOTED
            self._settle()
            return

        self.phase = VotePhase.VOTED
        self._apply(previous_count)
        self.error = get_error_message(result.error, UNVOTE_FAILED_MESSAGE)
        logger.warning("unvote_failed", wish_id=self.wish_id, code=result.error_code)
        self._settle(notify=False)

    async def _call(self, awaitable: Any) -> ApiResult[Any]:
        try:
            return await awaitable
        except Exception as e:
            logger.exception("vote_request_error", wish_id=self.wish_id, error=str(e))
            return err(ErrorCode.UNKNOWN_ERROR, str(e) or "An error occurred")

    def _rolled_back(self, count: int) -> int:
        if count < 0:
            logger.error("vote_count_inconsistent", wish_id=self.wish_id, count=count)
            return 0
        return count

    def _apply(self, vote_count: int) -> None:
        self.vote_count = vote_count
        if self.cache is not None:
            self.cache.hold(self.wish_id, {"vote_count": vote_count, "has_voted": self.has_voted})

    def _settle(self, notify: bool = True) -> None:
        if self.cache is not None:
            self.cache.release(self.wish_id)
        if notify and self.on_vote_change is not None:
            self.on_vote_change(self.has_voted, self.vote_count)


class VoteRegistry:
    """
    One VoteCoordinator per wish id.

    Controls rendering the same wish share its state machine, so a duplicate
    toggle from a second control is ignored instead of voting twice.
    """

    def __init__(
        self,
        client: AppgramClient,
        identity: Optional[IdentityProvider],
        cache: Optional[OptimisticCache] = None,
        voter_email: Optional[str] = None,
        on_vote_change: Optional[Callable[[str, bool, int], Any]] = None,
    ):
        self.client = client
        self.identity = identity
        self.cache = cache
        self.voter_email = voter_email
        self.on_vote_change = on_vote_change
        self._coordinators: dict[str, VoteCoordinator] = {}

    def __len__(self) -> int:
        return len(self._coordinators)

    def __contains__(self, wish_id: str) -> bool:
        return wish_id in self._coordinators

    def get(
        self,
        wish_id: str,
        initial_vote_count: int = 0,
        initial_has_voted: bool = False,
    ) -> VoteCoordinator:
        coordinator = self._coordinators.get(wish_id)
        if coordinator is None:
            callback = None
            if self.on_vote_change is not None:
                registry_callback = self.on_vote_change

                def callback(voted: bool, count: int) -> Any:
                    return registry_callback(wish_id, voted, count)

            coordinator = VoteCoordinator(
                self.client,
                self.identity,
                wish_id,
                initial_vote_count=initial_vote_count,
                initial_has_voted=initial_has_voted,
                voter_email=self.voter_email,
                cache=self.cache,
                on_vote_change=callback,
            )
            self._coordinators[wish_id] = coordinator
        return coordinator

    def for_wish(self, wish: Wish) -> VoteCoordinator:
        """Coordinator for a fetched wish, synced to its server values when idle."""
        coordinator = self.get(wish.id, wish.vote_count, wish.has_voted)
        coordinator.sync(wish.vote_count, wish.has_voted)
        return coordinator

    async def toggle(self, wish_id: str) -> None:
        await self.get(wish_id).toggle()
