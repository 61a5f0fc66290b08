"""Accounting API client with header-based session authentication."""

from typing import Any, cast

import httpx
import structlog

from ledger_agent.config import get_settings
from ledger_agent.tools.errors import AccountingAPIError, UpstreamHTTPError

logger = structlog.get_logger(__name__)


class AccountingAPIClient:
    """Async client for the accounting REST API.

    The client holds no credentials. Callers pass the session headers on
    every request, so one client can be shared by all handlers.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_path: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.accounting_base_url).rstrip("/")
        self.api_path = "/" + (api_path or settings.accounting_api_path).strip("/")
        self._timeout = timeout if timeout is not None else settings.accounting_timeout
        self._transport = transport

        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AccountingAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # === Authentication ===

    async def login(self, user: str, password: str) -> Any:
        """Check credentials against the login endpoint.

        Raises:
            UpstreamHTTPError: If the endpoint rejects the credentials.
            AccountingAPIError: If the endpoint cannot be reached.
        """
        client = await self._get_client()
        try:
            response = await client.post("/", json={"user": user, "password": password})
        except httpx.RequestError as e:
            raise AccountingAPIError(f"Request failed: {e}") from e

        self._raise_for_status(response, "POST", "/")
        logger.info("logged_in", user=user)
        return self._decode(response)

    # === Generic Request Methods ===

    def resource_path(self, path: str) -> str:
        return f"{self.api_path}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an authenticated API request.

        Args:
            method: HTTP verb.
            path: Resource path relative to the API prefix.
            headers: Session headers from ``SessionStore.build_auth_headers``.
            params: Optional query parameters.
            json: Optional JSON body; sets ``Content-Type`` when present.

        Returns:
            Decoded JSON, raw text for non-JSON bodies, or None when empty.
        """
        client = await self._get_client()
        url = self.resource_path(path)
        request_headers = dict(headers)
        if json is not None:
            request_headers["Content-Type"] = "application/json"

        logger.debug("api_request", method=method, path=url)
        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers=request_headers,
            )
        except httpx.RequestError as e:
            raise AccountingAPIError(f"Request failed: {e}") from e

        self._raise_for_status(response, method, url)
        return self._decode(response)

    async def get(self, path: str, headers: dict[str, str], params: dict[str, Any] | None = None) -> Any:
        """Make GET request."""
        return await self.request("GET", path, headers, params=params)

    async def put(self, path: str, headers: dict[str, str], json: Any = None) -> Any:
        """Make PUT request."""
        return await self.request("PUT", path, headers, json=json)

    async def delete(self, path: str, headers: dict[str, str]) -> Any:
        """Make DELETE request."""
        return await self.request("DELETE", path, headers)

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
        if response.is_success:
            return
        logger.warning("api_error", method=method, path=path, status_code=response.status_code)
        raise UpstreamHTTPError(
            status_code=response.status_code,
            body=response.text,
            reason=response.reason_phrase,
            method=method,
            path=path,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return cast(Any, response.json())
        except ValueError:
            return response.text
