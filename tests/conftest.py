"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Callable

import httpx
import pytest

# Set test environment variables before importing settings
os.environ.setdefault("ACCOUNTING_BASE_URL", "http://accounting.test")
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test")

from ledger_agent.tools.accounting_api import AccountingAPIClient  # noqa: E402
from ledger_agent.tools.definitions import build_registry  # noqa: E402
from ledger_agent.tools.dispatcher import Context, Dispatcher  # noqa: E402
from ledger_agent.tools.session import SessionStore  # noqa: E402
from ledger_agent.tools.undo import UndoLedger  # noqa: E402


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def json_response(status_code: int, data: object) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(data).encode(), headers={
        "Content-Type": "application/json"
    })


@pytest.fixture
def mock_bank_accounts_response():
    """Mock bank accounts list response."""
    return [
        {
            "id": "42",
            "bank_account_name": "Current account",
            "bank_name": "First Bank",
            "bank_curr_code": "USD",
        },
        {
            "id": "43",
            "bank_account_name": "Petty cash",
            "bank_name": "",
            "bank_curr_code": "USD",
        },
    ]


@pytest.fixture
def mock_gl_accounts_response():
    """Mock GL accounts list response."""
    return [
        {"account_code": "1060", "account_name": "Checking Account"},
        {"account_code": "1065", "account_name": "Petty Cash"},
        {"account_code": "4010", "account_name": "Sales"},
    ]


@pytest.fixture
def ok_transport():
    """Transport answering every request with an empty JSON object."""
    return RecordingTransport(lambda request: json_response(200, {}))


@pytest.fixture
def api_client(ok_transport):
    return AccountingAPIClient(base_url="http://accounting.test", transport=ok_transport)


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def logged_in_store():
    store = SessionStore()
    store.login("admin", "secret", "0")
    return store


@pytest.fixture
def undo_ledger():
    return UndoLedger()


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def context(session_store, undo_ledger, api_client):
    return Context(session=session_store, undo=undo_ledger, api=api_client)


@pytest.fixture
def logged_in_context(logged_in_store, undo_ledger, api_client):
    return Context(session=logged_in_store, undo=undo_ledger, api=api_client)
