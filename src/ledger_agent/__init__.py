"""Ledger Agent - chat assistant bridging an LLM to a FrontAccounting API."""

__version__ = "0.1.0"

from ledger_agent.agents import AgentState, AssistantAgent, BaseAgent
from ledger_agent.clients import ClaudeClient, GeminiClient
from ledger_agent.config import configure_logging, get_settings
from ledger_agent.tools import (
    AccountingAPIClient,
    Dispatcher,
    LocalToolTransport,
    OperationRegistry,
    SessionStore,
    UndoLedger,
    build_registry,
    export_catalogue,
)

__all__ = [
    # Version
    "__version__",
    # Agents
    "BaseAgent",
    "AgentState",
    "AssistantAgent",
    # LLM Clients
    "ClaudeClient",
    "GeminiClient",
    # Tools
    "AccountingAPIClient",
    "OperationRegistry",
    "Dispatcher",
    "LocalToolTransport",
    "SessionStore",
    "UndoLedger",
    "build_registry",
    "export_catalogue",
    # Config
    "get_settings",
    "configure_logging",
]
