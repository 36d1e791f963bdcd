"""
Response normalization.

Backend endpoints answer in several shapes:
- A pre-wrapped envelope: {"success": true, "data": ...} or {"success": false, "error": {...}}
- A bare JSON payload
- A non-JSON or empty body
- A non-2xx status with an optional JSON error body

These helpers fold all of them into the ApiResult contract. List endpoints
additionally have their sibling pagination fields reshaped into one nested
Paginated collection.
"""

from typing import Any, Optional

import structlog
from pydantic import BaseModel, ValidationError

from appgram.core.errors import DEFAULT_ERROR_MESSAGE, ErrorCode, http_error_code
from appgram.schemas.pagination import Paginated
from appgram.schemas.result import ApiResult, Err, err, ok

logger = structlog.get_logger(__name__)


def _first_message(*candidates: Any) -> Optional[str]:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def envelope_error(body: dict[str, Any]) -> Err:
    """Err from a {"success": false, ...} envelope."""
    error = body.get("error")
    code: Any = ErrorCode.UNKNOWN_ERROR
    nested_message = None
    if isinstance(error, dict):
        if error.get("code"):
            code = str(error["code"])
        nested_message = error.get("message")
    message = _first_message(
        nested_message,
        error if isinstance(error, str) else None,
        body.get("message"),
    )
    return err(code, message or DEFAULT_ERROR_MESSAGE)


def normalize_error(status_code: int, body: Any) -> Err:
    """
    Err for a non-2xx response.

    The code is HTTP_<status> unless the body names an explicit error.code.
    The message comes from the body when it carries one, otherwise it is the
    status code itself.
    """
    code = http_error_code(status_code)
    message: Optional[str] = None

    if isinstance(body, dict):
        error = body.get("error")
        nested_message = None
        if isinstance(error, dict):
            if error.get("code"):
                code = str(error["code"])
            nested_message = error.get("message")
        message = _first_message(
            body.get("message"),
            error if isinstance(error, str) else None,
            nested_message,
            body.get("detail"),
        )

    return err(code, message or str(status_code), status_code=status_code)


def normalize_success(body: Any) -> ApiResult[Any]:
    """
    Result for a 2xx response.

    A body that already carries a ``success`` discriminator is an envelope and
    is unwrapped as-is; anything else is wrapped as the value.
    """
    if isinstance(body, dict) and "success" in body:
        if body.get("success"):
            return ok(body.get("data"))
        return envelope_error(body)
    return ok(body)


def reshape_paginated(
    body: Any,
    default_per_page: int,
    item_model: Optional[type[BaseModel]] = None,
) -> ApiResult[Paginated[Any]]:
    """
    Reshape a list response into a Paginated collection.

    Accepted inputs:
    - {"data": [...], "total": .., "page": .., "per_page": .., "total_pages": ..}, bare
      or inside a success envelope (pagination fields are siblings of the array)
    - {"data": {"data": [...], "total": .., ...}} (already nested)
    - [...] (bare array)

    Missing fields default to: total = number of items, page = 1,
    per_page = default_per_page, total_pages = 1. Endpoints that omit
    total_pages are therefore assumed to be single-page. A total_pages value
    the server does send, including 0, is kept unchanged.
    """
    if isinstance(body, list):
        items: Any = body
        meta: dict[str, Any] = {}
    elif isinstance(body, dict):
        if "success" in body and not body.get("success"):
            return envelope_error(body)
        data = body.get("data")
        if isinstance(data, dict) and "data" in data:
            items, meta = data.get("data"), data
        elif data is None or isinstance(data, list):
            items, meta = data, body
        else:
            return err(ErrorCode.INVALID_RESPONSE, "Expected a list of items in the response")
    else:
        return err(ErrorCode.INVALID_RESPONSE, "Expected a paginated JSON response")

    items = items or []
    if not isinstance(items, list):
        return err(ErrorCode.INVALID_RESPONSE, "Expected a list of items in the response")

    total = meta.get("total")
    total_pages = meta.get("total_pages")
    fields = {
        "data": items,
        "total": len(items) if total is None else total,
        "page": meta.get("page") or 1,
        "per_page": meta.get("per_page") or default_per_page,
        "total_pages": 1 if total_pages is None else total_pages,
    }

    model = Paginated[item_model] if item_model is not None else Paginated[Any]
    try:
        return ok(model.model_validate(fields))
    except ValidationError as e:
        logger.warning("paginated_response_invalid", errors=e.error_count())
        return err(ErrorCode.INVALID_RESPONSE, "Invalid paginated response from server")


def synthesize_pagination(
    items: list[Any],
    page: int = 1,
    per_page: int = 20,
    item_model: Optional[type[BaseModel]] = None,
) -> ApiResult[Paginated[Any]]:
    """Paginated collection for endpoints that return a bare, unpaginated array."""
    model = Paginated[item_model] if item_model is not None else Paginated[Any]
    try:
        return ok(
            model.model_validate(
                {
                    "data": items,
                    "total": len(items),
                    "page": page,
                    "per_page": per_page,
                    "total_pages": 1,
                }
            )
        )
    except ValidationError as e:
        logger.warning("list_response_invalid", errors=e.error_count())
        return err(ErrorCode.INVALID_RESPONSE, "Invalid list response from server")
