"""
Support desk flows: submitting tickets and magic-link ticket access.
"""

from typing import Any, Callable, Optional, Union

import structlog
from pydantic import ValidationError

from appgram.core.errors import get_error_message
from appgram.schemas.result import Ok
from appgram.schemas.support import (
    MagicLinkRequest,
    SupportMessageCreated,
    SupportRequest,
    SupportRequestInput,
    TicketAccess,
)
from appgram.services.appgram_client import AppgramClient

logger = structlog.get_logger(__name__)

SUBMIT_SUCCESS_MESSAGE = "Your support request has been submitted successfully."
MAGIC_LINK_SUCCESS_MESSAGE = "A magic link has been sent to your email."


def _validation_message(e: ValidationError, fallback: str) -> str:
    errors = e.errors()
    if not errors:
        return fallback
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first['msg']}" if field else first["msg"]


class SupportDesk:
    """
    Ticket submission and access by magic link.

    Each operation returns its value on success or None on failure, with the
    failure described in ``error``.
    """

    def __init__(
        self,
        client: AppgramClient,
        on_submit_success: Optional[Callable[[SupportRequest], Any]] = None,
        on_submit_error: Optional[Callable[[str], Any]] = None,
    ):
        self.client = client
        self.on_submit_success = on_submit_success
        self.on_submit_error = on_submit_error
        self.is_submitting = False
        self.is_sending_magic_link = False
        self.is_verifying = False
        self.error: Optional[str] = None
        self.success_message: Optional[str] = None

    def clear_messages(self) -> None:
        self.error = None
        self.success_message = None

    def _fail_submit(self, message: str) -> None:
        self.error = message
        if self.on_submit_error is not None:
            self.on_submit_error(message)

    async def submit_ticket(
        self,
        data: Union[SupportRequestInput, dict[str, Any]],
    ) -> Optional[SupportRequest]:
        """Submit a ticket, uploading attachments first."""
        self.clear_messages()
        if not isinstance(data, SupportRequestInput):
            try:
                data = SupportRequestInput.model_validate(data)
            except ValidationError as e:
                self._fail_submit(_validation_message(e, "Invalid support request"))
                return None

        self.is_submitting = True
        try:
            result = await self.client.submit_support_request(data)
        finally:
            self.is_submitting = False

        if not isinstance(result, Ok):
            logger.warning("support_request_failed", code=result.error_code)
            self._fail_submit(get_error_message(result.error, "Failed to submit support request"))
            return None

        logger.info("support_request_submitted", ticket_id=result.value.id)
        self.success_message = SUBMIT_SUCCESS_MESSAGE
        if self.on_submit_success is not None:
            self.on_submit_success(result.value)
        return result.value

    async def request_magic_link(self, email: str) -> bool:
        """Email a link that grants access to the user's tickets."""
        self.clear_messages()
        try:
            request = MagicLinkRequest(user_email=email)
        except ValidationError as e:
            self.error = _validation_message(e, "Invalid email address")
            return False

        self.is_sending_magic_link = True
        try:
            result = await self.client.send_support_magic_link(str(request.user_email))
        finally:
            self.is_sending_magic_link = False

        if not isinstance(result, Ok):
            self.error = get_error_message(result.error, "Failed to send magic link")
            return False
        self.success_message = MAGIC_LINK_SUCCESS_MESSAGE
        return True

    async def verify_token(self, token: str) -> Optional[TicketAccess]:
        self.error = None
        self.is_verifying = True
        try:
            result = await self.client.verify_support_token(token)
        finally:
            self.is_verifying = False

        if not isinstance(result, Ok):
            self.error = get_error_message(result.error, "Invalid or expired token")
            return None
        return result.value

    async def get_ticket(self, ticket_id: str, token: str) -> Optional[SupportRequest]:
        self.error = None
        result = await self.client.get_support_ticket(ticket_id, token)
        if not isinstance(result, Ok):
            self.error = get_error_message(result.error, "Failed to fetch ticket")
            return None
        return result.value

    async def add_message(self, ticket_id: str, token: str, content: str) -> Optional[SupportMessageCreated]:
        self.error = None
        result = await self.client.add_support_message(ticket_id, token, content)
        if not isinstance(result, Ok):
            self.error = get_error_message(result.error, "Failed to add message")
            return None
        return result.value
