"""Tests for the accounting API client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from conftest import RecordingTransport, json_response
from ledger_agent.tools.accounting_api import AccountingAPIClient
from ledger_agent.tools.errors import AccountingAPIError, UpstreamHTTPError

HEADERS = {
    "Accept": "application/json",
    "X-COMPANY": "0",
    "X-USER": "admin",
    "X-PASSWORD": "secret",
}


class TestAccountingAPIClientInit:
    """Tests for AccountingAPIClient initialization."""

    def test_init_with_explicit_params(self):
        client = AccountingAPIClient(
            base_url="http://custom:9000", api_path="api", timeout=5.0
        )

        assert client.base_url == "http://custom:9000"
        assert client.api_path == "/api"
        assert client._timeout == 5.0

    def test_init_strips_trailing_slash(self):
        client = AccountingAPIClient(base_url="http://localhost:8000/")

        assert client.base_url == "http://localhost:8000"

    def test_defaults_from_settings(self):
        client = AccountingAPIClient()

        assert client.base_url == "http://accounting.test"
        assert client.resource_path("bankaccounts") == "/modules/api/bankaccounts"


class TestLogin:
    """Tests for the login call."""

    @pytest.mark.asyncio
    async def test_login_posts_credentials_to_base(self):
        transport = RecordingTransport(lambda request: json_response(200, {"ok": True}))
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        result = await client.login("admin", "secret")

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/"
        assert json.loads(request.content) == {"user": "admin", "password": "secret"}
        assert result == {"ok": True}

    @pytest.mark.asyncio
    async def test_login_rejected(self):
        client = AccountingAPIClient(base_url="http://accounting.test")
        response = httpx.Response(401, text="bad credentials")

        with patch.object(client, "_get_client") as mock_get:
            mock_http = AsyncMock()
            mock_http.post = AsyncMock(return_value=response)
            mock_get.return_value = mock_http

            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.login("admin", "wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "bad credentials"

    @pytest.mark.asyncio
    async def test_login_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = AccountingAPIClient(
            base_url="http://accounting.test", transport=httpx.MockTransport(refuse)
        )

        with pytest.raises(AccountingAPIError) as exc_info:
            await client.login("admin", "secret")

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)


class TestAPIRequests:
    """Tests for API request methods."""

    @pytest.mark.asyncio
    async def test_get_sends_session_headers(self, mock_bank_accounts_response):
        transport = RecordingTransport(
            lambda request: json_response(200, mock_bank_accounts_response)
        )
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        result = await client.get("bankaccounts", HEADERS, params={"owner": "Ann Lee"})

        request = transport.requests[0]
        assert request.url.path == "/modules/api/bankaccounts"
        assert request.url.params["owner"] == "Ann Lee"
        assert request.headers["X-USER"] == "admin"
        assert request.headers["X-COMPANY"] == "0"
        assert request.headers["X-PASSWORD"] == "secret"
        assert request.headers["Accept"] == "application/json"
        assert result[0]["id"] == "42"

    @pytest.mark.asyncio
    async def test_put_sends_json_body(self):
        transport = RecordingTransport(lambda request: json_response(200, {"id": "42"}))
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        await client.put("bankaccounts/42", HEADERS, json={"bank_name": "New Bank"})

        request = transport.requests[0]
        assert request.method == "PUT"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"bank_name": "New Bank"}

    @pytest.mark.asyncio
    async def test_delete_without_body(self):
        transport = RecordingTransport(lambda request: httpx.Response(200))
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        result = await client.delete("bankaccounts/42", HEADERS)

        assert transport.requests[0].method == "DELETE"
        assert "Content-Type" not in transport.requests[0].headers
        assert result is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_returned_as_text(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, text="done"))
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        assert await client.get("sales", HEADERS) == "done"

    @pytest.mark.asyncio
    async def test_handles_api_error(self):
        """Non-2xx responses carry status, reason and body."""
        transport = RecordingTransport(lambda request: httpx.Response(404, text="not found"))
        client = AccountingAPIClient(base_url="http://accounting.test", transport=transport)

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await client.get("bankaccounts/999", HEADERS)

        error = exc_info.value
        assert error.status_code == 404
        assert error.reason == "Not Found"
        assert error.body == "not found"
        assert error.method == "GET"
        assert error.path == "/modules/api/bankaccounts/999"

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self):
        transport = RecordingTransport(lambda request: json_response(200, []))

        async with AccountingAPIClient(
            base_url="http://accounting.test", transport=transport
        ) as client:
            await client.get("dimensions", HEADERS)
            assert client._client is not None

        assert client._client is None
