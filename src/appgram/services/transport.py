"""
HTTP transport for the Appgram API.

Wraps httpx.AsyncClient and guarantees that every call returns an ApiResult:
- Transport failures (DNS, connection, timeout) become NETWORK_ERROR
- Non-2xx responses become HTTP_<status> (or the server's own error code)
- 2xx responses are unwrapped when they carry a success envelope, wrapped otherwise

GET calls are side-effect free and may be retried by the caller. POST and
DELETE calls are never retried here; retry policy belongs to the caller.
"""

from typing import Any, Optional

import httpx
import structlog

from appgram.core.config import settings
from appgram.core.errors import ErrorCode, http_error_code
from appgram.schemas.result import ApiResult, Err, err, ok
from appgram.schemas.upload import UploadFile
from appgram.services.normalization import normalize_error, normalize_success

logger = structlog.get_logger(__name__)

UPLOAD_FAILED_MESSAGE = "File upload failed"


def clean_params(params: Optional[dict[str, Any]]) -> dict[str, str]:
    """
    Query parameters ready to send.

    None and empty values are omitted rather than sent as empty strings.
    Booleans become "true"/"false" and sequences are comma-joined.
    """
    cleaned: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            cleaned[key] = ",".join(str(v) for v in value)
        else:
            cleaned[key] = str(value)
    return cleaned


def _parse_body(response: httpx.Response) -> Any:
    """JSON body, the raw text for non-JSON bodies, or None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def upload_error(status_code: int, body: Any) -> Err:
    """
    Err for a rejected upload.

    The code is UPLOAD_ERROR unless the body names an explicit error.code;
    a body without a message gets a generic one.
    """
    failure = normalize_error(status_code, body)
    code = failure.error_code
    if code == http_error_code(status_code):
        code = ErrorCode.UPLOAD_ERROR
    message = failure.error_message
    if message == str(status_code):
        message = UPLOAD_FAILED_MESSAGE
    return err(code, message, status_code=status_code)


class TransportClient:
    """
    Normalizing HTTP client.

    One instance per application. Pass ``http_client`` to share an existing
    httpx.AsyncClient (it is then not closed by aclose()).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.APPGRAM_API_URL).rstrip("/")
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES

        if timeout is None:
            timeout = settings.REQUEST_TIMEOUT_SECONDS

        if http_client is not None:
            self._client = http_client
            self._owns_client = False
        else:
            client_kwargs: dict[str, Any] = {
                "headers": {"User-Agent": settings.user_agent, "Accept": "application/json"},
            }
            # None keeps the httpx default timeout
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            self._client = httpx.AsyncClient(**client_kwargs)
            self._owns_client = True

    async def __aenter__(self) -> "TransportClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # Core request
    # =========================================================================

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response | ApiResult[Any]:
        url = f"{self.base_url}{path}"
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning("request_timed_out", method=method, path=path)
            return err(ErrorCode.NETWORK_ERROR, "Request timed out")
        except httpx.HTTPError as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            return err(ErrorCode.NETWORK_ERROR, str(e) or "Network error")
        except Exception as e:
            logger.exception("request_error", method=method, path=path, error=str(e))
            return err(ErrorCode.NETWORK_ERROR, str(e) or "Network error")

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        raw: bool = False,
    ) -> ApiResult[Any]:
        """
        Perform a request and normalize the outcome.

        With ``raw=True`` a 2xx body is returned as-is, without envelope
        unwrapping; list endpoints use this to reshape pagination themselves.
        """
        kwargs: dict[str, Any] = {"params": clean_params(params)}
        if body is not None:
            kwargs["json"] = body

        response = await self._send(method, path, **kwargs)
        if not isinstance(response, httpx.Response):
            return response

        data = _parse_body(response)
        if not response.is_success:
            result = normalize_error(response.status_code, data)
            logger.warning(
                "request_unsuccessful",
                method=method,
                path=path,
                status_code=response.status_code,
                code=result.error_code,
            )
            return result

        return ok(data) if raw else normalize_success(data)

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> ApiResult[Any]:
        return await self.request("GET", path, params=params)

    async def get_raw(self, path: str, params: Optional[dict[str, Any]] = None) -> ApiResult[Any]:
        return await self.request("GET", path, params=params, raw=True)

    async def post(
        self,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResult[Any]:
        return await self.request("POST", path, params=params, body=body)

    async def delete(self, path: str, params: Optional[dict[str, Any]] = None) -> ApiResult[Any]:
        return await self.request("DELETE", path, params=params)

    # =========================================================================
    # Upload
    # =========================================================================

    def validate_upload(self, file: UploadFile) -> Optional[ApiResult[Any]]:
        """Err for a file that must not be sent, else None."""
        if file.size == 0:
            return err(ErrorCode.EMPTY_FILE, f'File "{file.name}" is empty.')
        if file.size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            return err(
                ErrorCode.FILE_TOO_LARGE,
                f'File "{file.name}" is too large. Maximum size is {limit_mb}MB.',
            )
        return None

    async def upload(
        self,
        path: str,
        file: UploadFile,
        fields: Optional[dict[str, Any]] = None,
    ) -> ApiResult[Any]:
        """
        Multipart upload of a single file.

        Empty and oversized files are rejected before any network call. The
        multipart boundary header is set by httpx; no JSON content type is sent.
        """
        rejected = self.validate_upload(file)
        if rejected is not None:
            logger.info("upload_rejected", file_name=file.name, size=file.size, code=rejected.error_code)
            return rejected

        response = await self._send(
            "POST",
            path,
            data=clean_params(fields),
            files={"file": (file.name, file.content, file.content_type)},
        )
        if not isinstance(response, httpx.Response):
            return response

        data = _parse_body(response)
        if not response.is_success:
            logger.warning("upload_failed", path=path, status_code=response.status_code)
            return upload_error(response.status_code, data)

        logger.info("upload_completed", file_name=file.name, size=file.size)
        return normalize_success(data)
