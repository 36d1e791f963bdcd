"""
Composition root for the SDK.

AppgramProvider is created once at application start. It owns the single
IdentityProvider, the HTTP transport and the resource client, and hands out
state holders wired to them.

Usage:
    async with AppgramProvider(project_id="proj_123") as appgram:
        wishes = appgram.wishes(filters={"status": "planned"})
        await wishes.start()

        votes = appgram.votes(wishes)
        await votes.for_wish(wishes.items[0]).toggle()
"""

from typing import Any, Callable, Optional

import httpx
import structlog

from appgram.core.config import Settings, get_settings
from appgram.core.errors import ConfigurationError
from appgram.core.identity import IdentityProvider
from appgram.core.storage import FileStorage, KeyValueStorage
from appgram.schemas.blog import BlogCategory, BlogFilters, BlogPost
from appgram.schemas.help import HelpArticle, HelpCenterData, HelpFlow
from appgram.schemas.pagination import Paginated
from appgram.schemas.release import Release
from appgram.schemas.result import ApiResult, Ok
from appgram.schemas.roadmap import RoadmapData
from appgram.schemas.status import StatusPageOverview
from appgram.schemas.support import SupportRequest
from appgram.schemas.wish import Wish, WishFilters
from appgram.services.appgram_client import AppgramClient
from appgram.services.collection import CollectionState
from appgram.services.comments import CommentThread
from appgram.services.forms import ContactFormSubmitter, SurveySubmitter
from appgram.services.resource import ResourceState
from appgram.services.state import OptimisticCache
from appgram.services.support import SupportDesk
from appgram.services.transport import TransportClient
from appgram.services.voting import VoteCoordinator, VoteRegistry

logger = structlog.get_logger(__name__)


class AppgramProvider:
    """Owns shared SDK collaborators and builds state holders."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        api_url: Optional[str] = None,
        org_slug: Optional[str] = None,
        project_slug: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        identity: Optional[IdentityProvider] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        enable_fingerprinting: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.project_id = project_id or self.settings.APPGRAM_PROJECT_ID
        if not self.project_id:
            raise ConfigurationError("A project id is required (APPGRAM_PROJECT_ID or project_id=...)")

        if enable_fingerprinting is None:
            enable_fingerprinting = self.settings.ENABLE_FINGERPRINTING
        if not enable_fingerprinting:
            self.identity: Optional[IdentityProvider] = None
        else:
            self.identity = identity or IdentityProvider(
                storage or FileStorage(self.settings.FINGERPRINT_STORAGE_PATH),
                storage_key=self.settings.FINGERPRINT_STORAGE_KEY,
            )

        self.transport = TransportClient(
            base_url=api_url or self.settings.APPGRAM_API_URL,
            http_client=http_client,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            max_upload_bytes=self.settings.MAX_UPLOAD_BYTES,
        )
        self.client = AppgramClient(
            self.transport,
            self.project_id,
            org_slug=org_slug or self.settings.APPGRAM_ORG_SLUG,
            project_slug=project_slug or self.settings.APPGRAM_PROJECT_SLUG,
        )
        self._states: list[Any] = []

        logger.info(
            "appgram_provider_created",
            project_id=self.project_id,
            api_url=self.transport.base_url,
            fingerprinting=self.identity is not None,
        )

    @property
    def fingerprint(self) -> Optional[str]:
        """Identity token, or None when fingerprinting is disabled."""
        return self.identity.get_fingerprint() if self.identity is not None else None

    def reset_fingerprint(self) -> None:
        if self.identity is not None:
            self.identity.reset_fingerprint()

    async def __aenter__(self) -> "AppgramProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop every auto-refresh task and close the transport."""
        for state in self._states:
            await state.aclose()
        self._states.clear()
        await self.transport.aclose()

    def _track(self, state: Any) -> Any:
        self._states.append(state)
        return state

    def _resource(self, fetch: Callable[[], Any], fallback_error: str, **kwargs: Any) -> ResourceState:
        return self._track(ResourceState(fetch, fallback_error=fallback_error, **kwargs))

    # =========================================================================
    # Wishes and votes
    # =========================================================================

    def wishes(
        self,
        filters: Optional[dict[str, Any]] = None,
        refresh_interval: float = 0,
        skip: bool = False,
    ) -> CollectionState:
        """Paginated public wishes; has_voted is computed for this identity."""

        async def fetch_page(current: dict[str, Any], page: int) -> ApiResult[Paginated[Wish]]:
            query = WishFilters(**current, page=page, fingerprint=self.fingerprint)
            return await self.client.get_public_wishes(query)

        return self._track(
            CollectionState(
                fetch_page,
                filters=filters,
                refresh_interval=refresh_interval,
                skip=skip,
                fallback_error="Failed to fetch wishes",
            )
        )

    def wish(self, wish_id: str, skip: bool = False) -> ResourceState:
        """A single wish with has_voted checked for this identity."""

        async def fetch() -> ApiResult[Wish]:
            result = await self.client.get_wish(wish_id)
            fingerprint = self.fingerprint
            if not isinstance(result, Ok) or not fingerprint:
                return result
            check = await self.client.check_vote(wish_id, fingerprint)
            has_voted = isinstance(check, Ok) and check.value.has_voted
            return Ok(value=result.value.model_copy(update={"has_voted": has_voted}))

        return self._resource(fetch, "Failed to fetch wish", skip=skip or not wish_id)

    def vote(
        self,
        wish_id: str,
        initial_vote_count: int = 0,
        initial_has_voted: bool = False,
        voter_email: Optional[str] = None,
        cache: Optional[OptimisticCache] = None,
        on_vote_change: Optional[Callable[[bool, int], Any]] = None,
        auto_check: bool = False,
    ) -> VoteCoordinator:
        return VoteCoordinator(
            self.client,
            self.identity,
            wish_id,
            initial_vote_count=initial_vote_count,
            initial_has_voted=initial_has_voted,
            voter_email=voter_email,
            cache=cache,
            on_vote_change=on_vote_change,
            auto_check=auto_check,
        )

    def votes(
        self,
        cache: Optional[OptimisticCache] = None,
        voter_email: Optional[str] = None,
        on_vote_change: Optional[Callable[[str, bool, int], Any]] = None,
    ) -> VoteRegistry:
        """Vote coordinators shared by every control bound to ``cache``."""
        return VoteRegistry(
            self.client,
            self.identity,
            cache=cache,
            voter_email=voter_email,
            on_vote_change=on_vote_change,
        )

    def comments(self, wish_id: str, per_page: Optional[int] = None, skip: bool = False) -> CommentThread:
        return self._track(CommentThread(self.client, wish_id, per_page=per_page, skip=skip))

    # =========================================================================
    # Roadmap, releases, help, status
    # =========================================================================

    def roadmap(self, refresh_interval: float = 0) -> ResourceState:
        async def fetch() -> ApiResult[RoadmapData]:
            return await self.client.get_roadmap_data()

        return self._resource(fetch, "Failed to fetch roadmap", refresh_interval=refresh_interval)

    def releases(self, limit: Optional[int] = None) -> ResourceState:
        async def fetch() -> ApiResult[list[Release]]:
            return await self.client.get_releases(limit)

        return self._resource(fetch, "Failed to fetch releases")

    def release(self, release_slug: str) -> ResourceState:
        async def fetch() -> ApiResult[Release]:
            return await self.client.get_release(release_slug)

        return self._resource(fetch, "Failed to fetch release", skip=not release_slug)

    def help_collection(self) -> ResourceState:
        async def fetch() -> ApiResult[HelpCenterData]:
            return await self.client.get_help_collection()

        return self._resource(fetch, "Failed to fetch help center")

    def help_flow(self, slug: str) -> ResourceState:
        async def fetch() -> ApiResult[HelpFlow]:
            return await self.client.get_help_flow(slug)

        return self._resource(fetch, "Failed to fetch help flow", skip=not slug)

    def help_article(self, slug: str, flow_id: str) -> ResourceState:
        async def fetch() -> ApiResult[HelpArticle]:
            return await self.client.get_help_article(slug, flow_id)

        return self._resource(fetch, "Failed to fetch help article", skip=not (slug and flow_id))

    def status(self, slug: str = "status", refresh_interval: float = 0) -> ResourceState:
        async def fetch() -> ApiResult[StatusPageOverview]:
            return await self.client.get_public_status_overview(slug)

        return self._resource(fetch, "Failed to fetch status", refresh_interval=refresh_interval)

    # =========================================================================
    # Blog
    # =========================================================================

    def blog_posts(self, filters: Optional[dict[str, Any]] = None, skip: bool = False) -> CollectionState:
        async def fetch_page(current: dict[str, Any], page: int) -> ApiResult[Paginated[BlogPost]]:
            return await self.client.get_blog_posts(BlogFilters(**current, page=page))

        return self._track(
            CollectionState(fetch_page, filters=filters, skip=skip, fallback_error="Failed to fetch blog posts")
        )

    def blog_post(self, slug: str) -> ResourceState:
        async def fetch() -> ApiResult[BlogPost]:
            return await self.client.get_blog_post(slug)

        return self._resource(fetch, "Failed to fetch blog post", skip=not slug)

    def blog_categories(self, skip: bool = False) -> ResourceState:
        async def fetch() -> ApiResult[list[BlogCategory]]:
            return await self.client.get_blog_categories()

        return self._resource(fetch, "Failed to fetch blog categories", skip=skip)

    def featured_posts(self, skip: bool = False) -> ResourceState:
        async def fetch() -> ApiResult[list[BlogPost]]:
            return await self.client.get_featured_blog_posts()

        return self._resource(fetch, "Failed to fetch featured posts", skip=skip)

    # =========================================================================
    # Surveys and contact forms
    # =========================================================================

    def survey(self, slug: str, skip: bool = False) -> ResourceState:
        """Survey definition by slug, including its nodes."""

        async def fetch() -> ApiResult[dict[str, Any]]:
            return await self.client.get_public_survey(slug)

        return self._resource(fetch, "Failed to fetch survey", skip=skip or not slug)

    def survey_submitter(
        self,
        on_success: Optional[Callable[[dict[str, Any]], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None,
    ) -> SurveySubmitter:
        return SurveySubmitter(self.client, on_success=on_success, on_error=on_error)

    def form(self, form_id: str, skip: bool = False) -> ResourceState:
        async def fetch() -> ApiResult[dict[str, Any]]:
            return await self.client.get_public_form(form_id)

        return self._resource(fetch, "Failed to fetch form", skip=skip or not form_id)

    def form_submitter(
        self,
        rate_limit: float = 5.0,
        on_success: Optional[Callable[[dict[str, Any]], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None,
    ) -> ContactFormSubmitter:
        """Contact form submissions, refused locally within ``rate_limit`` seconds of the last one."""
        return ContactFormSubmitter(self.client, rate_limit=rate_limit, on_success=on_success, on_error=on_error)

    # =========================================================================
    # Support
    # =========================================================================

    def support(
        self,
        on_submit_success: Optional[Callable[[SupportRequest], Any]] = None,
        on_submit_error: Optional[Callable[[str], Any]] = None,
    ) -> SupportDesk:
        return SupportDesk(self.client, on_submit_success=on_submit_success, on_submit_error=on_submit_error)
