"""
Survey and contact form submission.

Both submitters follow the support desk conventions: the operation returns
the server value on success or None on failure, with ``error`` and
``success_message`` describing the outcome.
"""

import re
import time
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError

from appgram.core.errors import ErrorCode, get_error_message
from appgram.schemas.result import ApiResult, Ok, err
from appgram.services.appgram_client import AppgramClient

logger = structlog.get_logger(__name__)

SURVEY_SUCCESS_MESSAGE = "Survey response submitted successfully."
FORM_SUCCESS_MESSAGE = "Form submitted successfully."
RATE_LIMITED_MESSAGE = "Please wait before submitting again."

_email_adapter = TypeAdapter(EmailStr)


# =============================================================================
# Field validation
# =============================================================================


class FieldValidation(BaseModel):
    """Length and pattern constraints from a form field definition."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_length: Optional[int] = Field(None, alias="minLength")
    max_length: Optional[int] = Field(None, alias="maxLength")
    pattern: Optional[str] = None


class FormField(BaseModel):
    """A contact form field as described by the form configuration."""

    model_config = ConfigDict(extra="ignore")

    type: str = "text"
    required: bool = False
    validation: Optional[FieldValidation] = None


def validate_field(value: str, field: Union[FormField, dict[str, Any]]) -> Optional[str]:
    """Error message for a field value, or None when it is acceptable."""
    if not isinstance(field, FormField):
        field = FormField.model_validate(field)

    if field.required and not value.strip():
        return "This field is required"
    if field.type == "email" and value:
        try:
            _email_adapter.validate_python(value)
        except ValidationError:
            return "Please enter a valid email address"

    rules = field.validation
    if rules is not None:
        if rules.min_length and len(value) < rules.min_length:
            return f"Must be at least {rules.min_length} characters"
        if rules.max_length and len(value) > rules.max_length:
            return f"Must be no more than {rules.max_length} characters"
        if rules.pattern and not re.search(rules.pattern, value):
            return "Invalid format"
    return None


# =============================================================================
# Submitters
# =============================================================================


class _Submitter:
    def __init__(
        self,
        client: AppgramClient,
        on_success: Optional[Callable[[Any], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None,
    ):
        self.client = client
        self.on_success = on_success
        self.on_error = on_error
        self.is_submitting = False
        self.error: Optional[str] = None
        self.success_message: Optional[str] = None

    def clear_messages(self) -> None:
        self.error = None
        self.success_message = None

    async def _submit(
        self,
        request: Awaitable[ApiResult[Any]],
        fallback_error: str,
        success_message: str,
    ) -> Optional[Any]:
        self.clear_messages()
        self.is_submitting = True
        try:
            result = await request
        except Exception as e:
            logger.exception("form_submit_error", submitter=type(self).__name__, error=str(e))
            result = err(ErrorCode.UNKNOWN_ERROR, str(e))
        finally:
            self.is_submitting = False

        if isinstance(result, Ok):
            self.success_message = success_message
            if self.on_success is not None:
                self.on_success(result.value)
            return result.value

        logger.warning("form_submit_failed", submitter=type(self).__name__, code=result.error_code)
        message = get_error_message(result.error, fallback_error)
        self.error = message
        if self.on_error is not None:
            self.on_error(message)
        return None


class SurveySubmitter(_Submitter):
    """Submits survey responses."""

    async def submit_response(self, survey_id: str, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        response = await self._submit(
            self.client.submit_survey_response(survey_id, data),
            "Failed to submit survey response",
            SURVEY_SUCCESS_MESSAGE,
        )
        if self.error is None:
            logger.info("survey_response_submitted", survey_id=survey_id)
        return response


class ContactFormSubmitter(_Submitter):
    """
    Submits contact forms with a cooldown between successful submissions.

    A submission attempted within ``rate_limit`` seconds of the last
    successful one is refused locally and never reaches the server.
    """

    def __init__(
        self,
        client: AppgramClient,
        rate_limit: float = 5.0,
        on_success: Optional[Callable[[Any], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(client, on_success=on_success, on_error=on_error)
        self.rate_limit = rate_limit
        self._clock = clock
        self._last_submit: Optional[float] = None

    @property
    def is_rate_limited(self) -> bool:
        if self._last_submit is None:
            return False
        return self._clock() - self._last_submit < self.rate_limit

    validate_field = staticmethod(validate_field)

    async def submit_form(self, form_id: str, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        if self.is_rate_limited:
            self.error = RATE_LIMITED_MESSAGE
            logger.debug("contact_form_rate_limited", form_id=form_id)
            return None

        submission = await self._submit(
            self.client.submit_contact_form(form_id, data),
            "Failed to submit form",
            FORM_SUCCESS_MESSAGE,
        )
        if self.error is None:
            self._last_submit = self._clock()
            logger.info("contact_form_submitted", form_id=form_id)
        return submission
