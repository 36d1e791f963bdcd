"""
Appgram resource client.

One method per remote capability. Every method returns an ApiResult whose
value, on success, is validated against the matching schema. A value that
does not match becomes INVALID_RESPONSE rather than an exception.
"""

from typing import Any, Optional

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from appgram.core.config import settings
from appgram.core.errors import ErrorCode
from appgram.schemas.blog import BlogCategory, BlogFilters, BlogPost
from appgram.schemas.comment import Comment, CommentCreate
from appgram.schemas.help import HelpArticle, HelpCenterData, HelpFlow
from appgram.schemas.pagination import Paginated
from appgram.schemas.release import Release, ReleaseFeature
from appgram.schemas.result import ApiResult, Ok, err, ok
from appgram.schemas.roadmap import RoadmapData
from appgram.schemas.status import StatusPageOverview
from appgram.schemas.upload import UploadFile
from appgram.schemas.support import (
    SupportAttachment,
    SupportMessageCreated,
    SupportRequest,
    SupportRequestInput,
    TicketAccess,
)
from appgram.schemas.vote import VoteCheck, VoteCreate, VoteCreated
from appgram.schemas.wish import Wish, WishCreate, WishFilters
from appgram.services.normalization import reshape_paginated, synthesize_pagination
from appgram.services.transport import TransportClient

logger = structlog.get_logger(__name__)


def parse_value(result: ApiResult[Any], schema: Any) -> ApiResult[Any]:
    """Validate the value of a successful result against a schema or type."""
    if not isinstance(result, Ok):
        return result
    try:
        return ok(TypeAdapter(schema).validate_python(result.value))
    except ValidationError as e:
        logger.warning("response_invalid", schema=getattr(schema, "__name__", str(schema)), errors=e.error_count())
        return err(ErrorCode.INVALID_RESPONSE, "Invalid response from server")


class AppgramClient:
    """API client for Appgram portal and public endpoints."""

    def __init__(
        self,
        transport: TransportClient,
        project_id: str,
        org_slug: Optional[str] = None,
        project_slug: Optional[str] = None,
    ):
        self.transport = transport
        self.project_id = project_id
        self.org_slug = org_slug
        self.project_slug = project_slug

    def _missing_slugs(self, endpoint: str) -> Optional[ApiResult[Any]]:
        if self.org_slug and self.project_slug:
            return None
        return err(
            ErrorCode.MISSING_SLUGS,
            f"org_slug and project_slug are required for {endpoint} endpoint",
        )

    async def _get_paginated(
        self,
        path: str,
        params: dict[str, Any],
        item_model: type[BaseModel],
        default_per_page: int,
    ) -> ApiResult[Paginated[Any]]:
        result = await self.transport.get_raw(path, params)
        if not isinstance(result, Ok):
            return result
        return reshape_paginated(result.value, default_per_page, item_model)

    # =========================================================================
    # Wishes
    # =========================================================================

    async def get_public_wishes(
        self,
        filters: Optional[WishFilters] = None,
    ) -> ApiResult[Paginated[Wish]]:
        """
        Get public wishes for the project.

        When ``filters.fingerprint`` is set the server computes has_voted for
        every wish in the page.
        """
        params: dict[str, Any] = {"project_id": self.project_id}
        if filters is not None:
            params.update(filters.to_params())
        return await self._get_paginated("/portal/wishes", params, Wish, settings.DEFAULT_PER_PAGE)

    async def get_wish(self, wish_id: str) -> ApiResult[Wish]:
        result = await self.transport.get(f"/portal/wishes/{wish_id}", {"project_id": self.project_id})
        return parse_value(result, Wish)

    async def create_wish(self, data: WishCreate) -> ApiResult[Wish]:
        body = {"project_id": self.project_id, **data.model_dump(exclude_none=True, mode="json")}
        result = await self.transport.post("/portal/wishes", body)
        return parse_value(result, Wish)

    # =========================================================================
    # Votes
    # =========================================================================

    async def check_vote(self, wish_id: str, fingerprint: str) -> ApiResult[VoteCheck]:
        """Check whether an identity token has voted on a wish."""
        result = await self.transport.get(f"/api/v1/votes/check/{wish_id}", {"fingerprint": fingerprint})
        return parse_value(result, VoteCheck)

    async def create_vote(
        self,
        wish_id: str,
        fingerprint: str,
        voter_email: Optional[str] = None,
    ) -> ApiResult[VoteCreated]:
        body = VoteCreate(wish_id=wish_id, fingerprint=fingerprint, voter_email=voter_email)
        result = await self.transport.post("/api/v1/votes", body.model_dump())
        return parse_value(result, VoteCreated)

    async def delete_vote(self, vote_id: str) -> ApiResult[Any]:
        """Delete a vote. The server answers with a bare acknowledgement."""
        return await self.transport.delete(f"/api/v1/votes/{vote_id}")

    # =========================================================================
    # Comments
    # =========================================================================

    async def get_comments(
        self,
        wish_id: str,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> ApiResult[Paginated[Comment]]:
        """
        Get comments for a wish.

        The endpoint returns a bare array, so pagination fields are synthesized:
        total is the array length and total_pages is 1.
        """
        per_page = per_page or settings.DEFAULT_PER_PAGE
        result = await self.transport.get(
            "/api/v1/comments",
            {"wish_id": wish_id, "page": page, "per_page": per_page},
        )
        if not isinstance(result, Ok):
            return result
        if isinstance(result.value, dict) and "data" in result.value:
            return reshape_paginated(result.value, per_page, Comment)
        if not isinstance(result.value, list):
            return err(ErrorCode.INVALID_RESPONSE, "Expected a list of comments")
        return synthesize_pagination(result.value, page=page, per_page=per_page, item_model=Comment)

    async def create_comment(self, data: CommentCreate) -> ApiResult[Comment]:
        """Create an anonymous public comment."""
        body = {
            **data.model_dump(exclude_none=True, mode="json"),
            "author_type": "anonymous",
            "is_official": False,
        }
        result = await self.transport.post("/api/v1/comments", body)
        return parse_value(result, Comment)

    # =========================================================================
    # Roadmap
    # =========================================================================

    async def get_roadmap_data(self) -> ApiResult[RoadmapData]:
        params: dict[str, Any] = {"project_id": self.project_id}
        if self.org_slug and self.project_slug:
            params["org_slug"] = self.org_slug
            params["project_slug"] = self.project_slug
        result = await self.transport.get("/portal/roadmap-data", params)
        return parse_value(result, RoadmapData)

    # =========================================================================
    # Releases
    # =========================================================================

    async def get_releases(self, limit: Optional[int] = None) -> ApiResult[list[Release]]:
        missing = self._missing_slugs("releases")
        if missing is not None:
            return missing
        result = await self.transport.get(
            f"/api/v1/releases/public/{self.org_slug}/{self.project_slug}",
            {"limit": limit or settings.RELEASES_LIMIT},
        )
        return parse_value(result, list[Release])

    async def get_release(self, release_slug: str) -> ApiResult[Release]:
        missing = self._missing_slugs("releases")
        if missing is not None:
            return missing
        result = await self.transport.get(
            f"/api/v1/releases/public/{self.org_slug}/{self.project_slug}/{release_slug}"
        )
        return parse_value(result, Release)

    async def get_release_features(self, release_slug: str) -> ApiResult[list[ReleaseFeature]]:
        missing = self._missing_slugs("release features")
        if missing is not None:
            return missing
        result = await self.transport.get(
            f"/api/v1/releases/public/{self.org_slug}/{self.project_slug}/{release_slug}/features"
        )
        return parse_value(result, list[ReleaseFeature])

    # =========================================================================
    # Help Center
    # =========================================================================

    async def get_help_collection(self) -> ApiResult[HelpCenterData]:
        result = await self.transport.get("/portal/help", {"project_id": self.project_id})
        return parse_value(result, HelpCenterData)

    async def get_help_flow(self, slug: str) -> ApiResult[HelpFlow]:
        result = await self.transport.get(f"/portal/help/flows/{slug}", {"project_id": self.project_id})
        return parse_value(result, HelpFlow)

    async def get_help_article(self, slug: str, flow_id: str) -> ApiResult[HelpArticle]:
        result = await self.transport.get(f"/portal/help/articles/{slug}", {"flow_id": flow_id})
        return parse_value(result, HelpArticle)

    # =========================================================================
    # Support
    # =========================================================================

    async def upload_file(self, file: UploadFile) -> ApiResult[SupportAttachment]:
        """Upload a file via the public portal (no auth required)."""
        result = await self.transport.upload(
            "/portal/files/upload",
            file,
            fields={"project_id": self.project_id},
        )
        # Some deployments answer {"data": {...}} without a success flag
        if isinstance(result, Ok) and isinstance(result.value, dict) and isinstance(result.value.get("data"), dict):
            result = ok(result.value["data"])
        return parse_value(result, SupportAttachment)

    async def submit_support_request(self, data: SupportRequestInput) -> ApiResult[SupportRequest]:
        """
        Submit a support request.

        Attachments are validated and uploaded first, in order. The first
        rejected or failed upload aborts the submission.
        """
        uploaded: list[SupportAttachment] = []
        for file in data.attachments:
            rejected = self.transport.validate_upload(file)
            if rejected is not None:
                return rejected

        for file in data.attachments:
            upload = await self.upload_file(file)
            if not isinstance(upload, Ok):
                return upload
            uploaded.append(upload.value)

        payload = data.model_dump(exclude_none=True, exclude={"attachments"}, mode="json")
        payload["project_id"] = self.project_id
        if uploaded:
            payload["attachments"] = [a.model_dump(exclude_none=True) for a in uploaded]

        result = await self.transport.post("/portal/support-requests", payload)
        return parse_value(result, SupportRequest)

    async def send_support_magic_link(self, user_email: str) -> ApiResult[Any]:
        return await self.transport.post(
            "/portal/support-requests/send-magic-link",
            {"project_id": self.project_id, "user_email": user_email},
        )

    async def verify_support_token(self, token: str) -> ApiResult[TicketAccess]:
        result = await self.transport.get(
            "/portal/support-requests/verify-token",
            {"token": token, "project_id": self.project_id},
        )
        return parse_value(result, TicketAccess)

    async def get_support_ticket(self, ticket_id: str, token: str) -> ApiResult[SupportRequest]:
        result = await self.transport.get(f"/portal/support-requests/{ticket_id}", {"token": token})
        return parse_value(result, SupportRequest)

    async def add_support_message(
        self,
        ticket_id: str,
        token: str,
        content: str,
    ) -> ApiResult[SupportMessageCreated]:
        result = await self.transport.post(
            f"/portal/support-requests/{ticket_id}/messages",
            {"content": content},
            params={"token": token},
        )
        return parse_value(result, SupportMessageCreated)

    # =========================================================================
    # Status Pages
    # =========================================================================

    async def get_public_status_overview(self, slug: str = "status") -> ApiResult[StatusPageOverview]:
        result = await self.transport.get(f"/api/v1/status-pages/public/{self.project_id}/{slug}/overview")
        return parse_value(result, StatusPageOverview)

    # =========================================================================
    # Surveys and Contact Forms
    # =========================================================================

    async def get_public_survey(self, slug: str) -> ApiResult[dict[str, Any]]:
        result = await self.transport.get(f"/portal/surveys/{slug}", {"project_id": self.project_id})
        return parse_value(result, dict[str, Any])

    async def submit_survey_response(self, survey_id: str, data: dict[str, Any]) -> ApiResult[dict[str, Any]]:
        result = await self.transport.post(f"/portal/surveys/{survey_id}/responses", data)
        return parse_value(result, dict[str, Any])

    async def get_public_form(self, form_id: str) -> ApiResult[dict[str, Any]]:
        result = await self.transport.get(f"/api/v1/forms/{form_id}")
        return parse_value(result, dict[str, Any])

    async def track_contact_form_view(self, form_id: str) -> ApiResult[dict[str, Any]]:
        """
        Record a contact form view.

        The endpoint may answer with an empty or non-JSON body; any 2xx counts
        as tracked.
        """
        result = await self.transport.post(f"/projects/{self.project_id}/contact-forms/{form_id}/view")
        if not isinstance(result, Ok):
            return result
        return ok({"tracked": True})

    async def submit_contact_form(self, form_id: str, data: dict[str, Any]) -> ApiResult[dict[str, Any]]:
        result = await self.transport.post(
            f"/api/v1/projects/{self.project_id}/contact-forms/{form_id}/submit",
            data,
        )
        return parse_value(result, dict[str, Any])

    # =========================================================================
    # Page Data
    # =========================================================================

    async def get_page_data(self) -> ApiResult[dict[str, Any]]:
        """All public page data in one request."""
        params = {
            "project_id": self.project_id,
            "org_slug": self.org_slug,
            "project_slug": self.project_slug,
        }
        result = await self.transport.get("/portal/page-data", params)
        return parse_value(result, dict[str, Any])

    # =========================================================================
    # Blog
    # =========================================================================

    async def get_blog_posts(self, filters: Optional[BlogFilters] = None) -> ApiResult[Paginated[BlogPost]]:
        params: dict[str, Any] = {"project_id": self.project_id}
        if filters is not None:
            params.update(filters.to_params())
        return await self._get_paginated("/portal/blog/posts", params, BlogPost, settings.BLOG_PER_PAGE)

    async def get_blog_post(self, slug: str) -> ApiResult[BlogPost]:
        result = await self.transport.get(f"/portal/blog/posts/{slug}", {"project_id": self.project_id})
        return parse_value(result, BlogPost)

    async def get_featured_blog_posts(self) -> ApiResult[list[BlogPost]]:
        result = await self.transport.get("/portal/blog/featured", {"project_id": self.project_id})
        return parse_value(result, list[BlogPost])

    async def get_blog_categories(self) -> ApiResult[list[BlogCategory]]:
        result = await self.transport.get("/portal/blog/categories", {"project_id": self.project_id})
        return parse_value(result, list[BlogCategory])

    async def get_blog_posts_by_category(
        self,
        category_slug: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> ApiResult[Paginated[BlogPost]]:
        params = {"project_id": self.project_id, "page": page, "per_page": per_page}
        return await self._get_paginated(
            f"/portal/blog/categories/{category_slug}", params, BlogPost, settings.BLOG_PER_PAGE
        )

    async def get_blog_posts_by_tag(
        self,
        tag: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> ApiResult[Paginated[BlogPost]]:
        params = {"project_id": self.project_id, "page": page, "per_page": per_page}
        return await self._get_paginated(f"/portal/blog/tags/{tag}", params, BlogPost, settings.BLOG_PER_PAGE)

    async def search_blog_posts(
        self,
        query: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> ApiResult[Paginated[BlogPost]]:
        params = {"project_id": self.project_id, "q": query, "page": page, "per_page": per_page}
        return await self._get_paginated("/portal/blog/search", params, BlogPost, settings.BLOG_PER_PAGE)

    async def get_related_blog_posts(self, slug: str) -> ApiResult[list[BlogPost]]:
        result = await self.transport.get(f"/portal/blog/posts/{slug}/related", {"project_id": self.project_id})
        return parse_value(result, list[BlogPost])
