"""
Tests for the normalizing HTTP transport.

Requests are answered by httpx.MockTransport handlers; no live network.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from appgram.schemas.result import Err, Ok
from appgram.schemas.upload import UploadFile
from appgram.services.transport import TransportClient, clean_params


@pytest.mark.unit
class TestCleanParams:
    """Tests for query parameter cleaning."""

    def test_omits_empty_values(self):
        assert clean_params({"a": None, "b": "", "c": [], "d": "x"}) == {"d": "x"}

    def test_converts_values(self):
        assert clean_params({"flag": True, "off": False, "ids": ["1", "2"], "page": 2}) == {
            "flag": "true",
            "off": "false",
            "ids": "1,2",
            "page": "2",
        }

    def test_none(self):
        assert clean_params(None) == {}


@pytest.mark.unit
class TestTransportRequests:
    """Tests for request normalization."""

    @pytest.mark.asyncio
    async def test_bare_json_is_wrapped(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(200, json={"id": "w1"}))

        result = await transport.get("/portal/wishes/w1")

        assert isinstance(result, Ok)
        assert result.value == {"id": "w1"}

    @pytest.mark.asyncio
    async def test_envelope_passes_through(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(200, json={"success": True, "data": [1]}))
        assert (await transport.get("/x")).value == [1]

    @pytest.mark.asyncio
    async def test_get_raw_skips_unwrapping(self, make_transport: Callable[..., TransportClient]):
        body = {"success": True, "data": [1], "total": 1}
        transport = make_transport(lambda request: httpx.Response(200, json=body))
        assert (await transport.get_raw("/x")).value == body

    @pytest.mark.asyncio
    async def test_query_params_cleaned(self, make_transport: Callable[..., TransportClient]):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        transport = make_transport(handler)
        await transport.get("/portal/wishes", {"project_id": "p1", "search": "", "status": ["planned", "completed"]})

        params = dict(seen[0].url.params)
        assert params == {"project_id": "p1", "status": "planned,completed"}
        assert seen[0].url.host == "api.test"

    @pytest.mark.asyncio
    async def test_post_sends_json(self, make_transport: Callable[..., TransportClient]):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": "v1"})

        transport = make_transport(handler)
        result = await transport.post("/api/v1/votes", {"wish_id": "w1", "fingerprint": "fp"})

        assert result.value == {"id": "v1"}
        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"wish_id": "w1", "fingerprint": "fp"}

    @pytest.mark.asyncio
    async def test_http_error_with_message(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(409, json={"message": "Already voted"}))

        result = await transport.post("/api/v1/votes", {})

        assert isinstance(result, Err)
        assert result.error_code == "HTTP_409"
        assert result.error_message == "Already voted"
        assert result.error.status_code == 409

    @pytest.mark.asyncio
    async def test_http_error_non_json(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(500, text="Internal Server Error"))

        result = await transport.delete("/api/v1/votes/v1")

        assert result.error_code == "HTTP_500"
        assert result.error_message == "500"

    @pytest.mark.asyncio
    async def test_non_json_success(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(200, text="OK"))
        assert (await transport.post("/track")).value == "OK"

    @pytest.mark.asyncio
    async def test_empty_success(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(204))
        result = await transport.delete("/api/v1/votes/v1")
        assert isinstance(result, Ok)
        assert result.value is None

    @pytest.mark.asyncio
    async def test_connection_error(self, make_transport: Callable[..., TransportClient]):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        result = await make_transport(handler).get("/x")

        assert isinstance(result, Err)
        assert result.error_code == "NETWORK_ERROR"
        assert "Name or service not known" in result.error_message

    @pytest.mark.asyncio
    async def test_timeout(self, make_transport: Callable[..., TransportClient]):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = await make_transport(handler).get("/x")

        assert result.error_code == "NETWORK_ERROR"
        assert result.error_message == "Request timed out"


@pytest.mark.unit
class TestTransportUpload:
    """Tests for multipart upload."""

    @pytest.mark.asyncio
    async def test_empty_file_rejected_before_dispatch(self, make_transport: Callable[..., TransportClient]):
        calls: list[httpx.Request] = []
        transport = make_transport(lambda request: calls.append(request) or httpx.Response(200, json={}))

        result = await transport.upload("/portal/files/upload", UploadFile(name="a.txt", content=b""))

        assert result.error_code == "EMPTY_FILE"
        assert calls == []

    @pytest.mark.asyncio
    async def test_oversized_file_rejected_before_dispatch(self, make_transport: Callable[..., TransportClient]):
        calls: list[httpx.Request] = []
        transport = make_transport(lambda request: calls.append(request) or httpx.Response(200, json={}))
        big = UploadFile(name="big.bin", content=b"x" * (10 * 1024 * 1024 + 1))

        result = await transport.upload("/portal/files/upload", big)

        assert result.error_code == "FILE_TOO_LARGE"
        assert result.error_message == 'File "big.bin" is too large. Maximum size is 10MB.'
        assert calls == []

    @pytest.mark.asyncio
    async def test_file_at_limit_is_sent(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(200, json={"url": "u", "name": "n"}))
        transport.max_upload_bytes = 4

        result = await transport.upload("/portal/files/upload", UploadFile(name="n", content=b"abcd"))

        assert isinstance(result, Ok)

    @pytest.mark.asyncio
    async def test_multipart_body(self, make_transport: Callable[..., TransportClient]):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": {"url": "https://cdn/x", "name": "log.txt"}})

        transport = make_transport(handler)
        file = UploadFile(name="log.txt", content=b"hello", content_type="text/plain")

        result = await transport.upload("/portal/files/upload", file, fields={"project_id": "p1"})

        assert result.value == {"url": "https://cdn/x", "name": "log.txt"}
        content_type = seen[0].headers["content-type"]
        assert content_type.startswith("multipart/form-data")
        assert b'name="project_id"' in seen[0].content
        assert b"hello" in seen[0].content

    @pytest.mark.asyncio
    async def test_rejected_upload_uses_upload_error_code(self, make_transport: Callable[..., TransportClient]):
        transport = make_transport(lambda request: httpx.Response(500, text=""))

        result = await transport.upload("/portal/files/upload", UploadFile(name="a.txt", content=b"abc"))

        assert isinstance(result, Err)
        assert result.error_code == "UPLOAD_ERROR"
        assert result.error_message == "File upload failed"
        assert result.error.status_code == 500

    @pytest.mark.asyncio
    async def test_rejected_upload_keeps_server_code(self, make_transport: Callable[..., TransportClient]):
        body = {"error": {"code": "UNSUPPORTED_TYPE", "message": "Type not allowed"}}
        transport = make_transport(lambda request: httpx.Response(415, json=body))

        result = await transport.upload("/portal/files/upload", UploadFile(name="a.exe", content=b"MZ"))

        assert result.error_code == "UNSUPPORTED_TYPE"
        assert result.error_message == "Type not allowed"


@pytest.mark.unit
class TestTransportLifecycle:
    """Tests for client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with TransportClient(base_url="https://api.test/", http_client=http_client) as transport:
            assert transport.base_url == "https://api.test"
        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        transport = TransportClient(base_url="https://api.test", timeout=5)
        await transport.aclose()
        assert transport._client.is_closed is True
