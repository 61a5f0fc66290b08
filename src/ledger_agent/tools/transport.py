"""Catalogue export and the process-local tool transport.

The agent never touches the registry directly: it lists tools and calls
them through a transport, the same two calls an out-of-process tool server
would answer.
"""

from typing import Any

import structlog

from ledger_agent.tools.accounting_api import AccountingAPIClient
from ledger_agent.tools.dispatcher import Context, Dispatcher, InvocationRequest, InvocationResult
from ledger_agent.tools.registry import OperationRegistry
from ledger_agent.tools.session import SessionStore
from ledger_agent.tools.undo import UndoLedger

logger = structlog.get_logger(__name__)


def export_catalogue(registry: OperationRegistry) -> list[dict[str, Any]]:
    """Describe every registered operation for the model.

    Built from the live registry on each call; nothing is cached or filtered.
    """
    return [
        {
            "name": operation.name,
            "description": operation.description,
            "parameters": operation.input_schema(),
        }
        for operation in registry
    ]


class LocalToolTransport:
    """In-process tool server holding the single active session context."""

    def __init__(
        self,
        registry: OperationRegistry,
        context: Context | None = None,
        api: AccountingAPIClient | None = None,
    ):
        self.registry = registry
        self.dispatcher = Dispatcher(registry)
        self.context = context or Context(
            session=SessionStore(),
            undo=UndoLedger(),
            api=api or AccountingAPIClient(),
        )

    async def list_tools(self) -> list[dict[str, Any]]:
        """List every operation as ``{name, description, inputSchema}``."""
        return [
            {
                "name": entry["name"],
                "description": entry["description"],
                "inputSchema": entry["parameters"],
            }
            for entry in export_catalogue(self.registry)
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> InvocationResult:
        return await self.dispatcher.dispatch(
            InvocationRequest(name=name, arguments=arguments or {}),
            self.context,
        )

    async def close(self) -> None:
        await self.context.api.close()
