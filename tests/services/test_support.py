"""
Tests for support desk flows.
"""

from unittest.mock import MagicMock

import pytest

from appgram.schemas.result import err, ok
from appgram.schemas.support import SupportMessageCreated, SupportRequest, SupportRequestInput, TicketAccess
from appgram.services.support import MAGIC_LINK_SUCCESS_MESSAGE, SUBMIT_SUCCESS_MESSAGE, SupportDesk

TICKET = SupportRequest(id="t1", subject="Help", user_email="a@example.com")


@pytest.mark.unit
class TestSubmitTicket:
    """Tests for ticket submission."""

    @pytest.mark.asyncio
    async def test_success(self, mock_client: MagicMock):
        mock_client.submit_support_request.return_value = ok(TICKET)
        submitted: list[SupportRequest] = []
        desk = SupportDesk(mock_client, on_submit_success=submitted.append)

        ticket = await desk.submit_ticket(
            {"subject": "Help", "description": "It broke", "user_email": "a@example.com"}
        )

        assert ticket == TICKET
        assert submitted == [TICKET]
        assert desk.success_message == SUBMIT_SUCCESS_MESSAGE
        assert desk.error is None
        assert desk.is_submitting is False
        sent = mock_client.submit_support_request.await_args.args[0]
        assert isinstance(sent, SupportRequestInput)

    @pytest.mark.asyncio
    async def test_server_failure(self, mock_client: MagicMock):
        mock_client.submit_support_request.return_value = err("FILE_TOO_LARGE", 'File "a" is too large.')
        errors: list[str] = []
        desk = SupportDesk(mock_client, on_submit_error=errors.append)

        ticket = await desk.submit_ticket(
            SupportRequestInput(subject="Help", description="It broke", user_email="a@example.com")
        )

        assert ticket is None
        assert desk.error == 'File "a" is too large.'
        assert errors == [desk.error]
        assert desk.success_message is None

    @pytest.mark.asyncio
    async def test_invalid_email_rejected_before_dispatch(self, mock_client: MagicMock):
        errors: list[str] = []
        desk = SupportDesk(mock_client, on_submit_error=errors.append)

        ticket = await desk.submit_ticket({"subject": "Help", "description": "x", "user_email": "bad"})

        assert ticket is None
        assert desk.error.startswith("user_email")
        assert errors == [desk.error]
        mock_client.submit_support_request.assert_not_awaited()


@pytest.mark.unit
class TestTicketAccess:
    """Tests for magic link and token flows."""

    @pytest.mark.asyncio
    async def test_request_magic_link(self, mock_client: MagicMock):
        mock_client.send_support_magic_link.return_value = ok({"sent": True})
        desk = SupportDesk(mock_client)

        assert await desk.request_magic_link("a@example.com") is True
        assert desk.success_message == MAGIC_LINK_SUCCESS_MESSAGE
        mock_client.send_support_magic_link.assert_awaited_once_with("a@example.com")

    @pytest.mark.asyncio
    async def test_request_magic_link_invalid_email(self, mock_client: MagicMock):
        desk = SupportDesk(mock_client)

        assert await desk.request_magic_link("not-an-email") is False
        assert desk.error
        mock_client.send_support_magic_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_request_magic_link_failure(self, mock_client: MagicMock):
        mock_client.send_support_magic_link.return_value = err("HTTP_500", "")
        desk = SupportDesk(mock_client)

        assert await desk.request_magic_link("a@example.com") is False
        assert desk.error == "Failed to send magic link"

    @pytest.mark.asyncio
    async def test_verify_token(self, mock_client: MagicMock):
        access = TicketAccess(tickets=[TICKET], user_email="a@example.com")
        mock_client.verify_support_token.return_value = ok(access)
        desk = SupportDesk(mock_client)

        assert await desk.verify_token("tok") == access
        assert desk.is_verifying is False

    @pytest.mark.asyncio
    async def test_verify_token_failure(self, mock_client: MagicMock):
        mock_client.verify_support_token.return_value = err("HTTP_401", "")
        desk = SupportDesk(mock_client)

        assert await desk.verify_token("tok") is None
        assert desk.error == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_get_ticket_and_add_message(self, mock_client: MagicMock):
        mock_client.get_support_ticket.return_value = ok(TICKET)
        mock_client.add_support_message.return_value = ok(SupportMessageCreated(id="m1", content="Thanks"))
        desk = SupportDesk(mock_client)

        assert await desk.get_ticket("t1", "tok") == TICKET
        message = await desk.add_message("t1", "tok", "Thanks")

        assert message.id == "m1"
        mock_client.add_support_message.assert_awaited_once_with("t1", "tok", "Thanks")

    @pytest.mark.asyncio
    async def test_add_message_failure(self, mock_client: MagicMock):
        mock_client.add_support_message.return_value = err("HTTP_403", "Token expired")
        desk = SupportDesk(mock_client)

        assert await desk.add_message("t1", "tok", "Hi") is None
        assert desk.error == "Token expired"

    def test_clear_messages(self, mock_client: MagicMock):
        desk = SupportDesk(mock_client)
        desk.error = "x"
        desk.success_message = "y"

        desk.clear_messages()

        assert desk.error is None
        assert desk.success_message is None
