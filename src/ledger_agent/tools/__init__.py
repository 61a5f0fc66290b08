"""Tools module: operation registry, dispatcher and accounting API access."""

from ledger_agent.tools.accounting_api import AccountingAPIClient
from ledger_agent.tools.definitions import ENDPOINTS, EndpointSpec, build_registry
from ledger_agent.tools.dispatcher import (
    Context,
    Dispatcher,
    InvocationRequest,
    InvocationResult,
    TextContent,
)
from ledger_agent.tools.errors import (
    AccountingAPIError,
    AuthRequiredError,
    DuplicateOperationError,
    LedgerAgentError,
    OperationNotFoundError,
    UndoUnavailableError,
    UpstreamHTTPError,
    ValidationError,
)
from ledger_agent.tools.registry import OperationDescriptor, OperationRegistry, ParameterSpec
from ledger_agent.tools.session import Session, SessionStore
from ledger_agent.tools.transport import LocalToolTransport, export_catalogue
from ledger_agent.tools.undo import ActionKind, UndoLedger, UndoRecord

__all__ = [
    # API Client
    "AccountingAPIClient",
    # Registry
    "OperationRegistry",
    "OperationDescriptor",
    "ParameterSpec",
    "EndpointSpec",
    "ENDPOINTS",
    "build_registry",
    # Dispatch
    "Context",
    "Dispatcher",
    "InvocationRequest",
    "InvocationResult",
    "TextContent",
    "LocalToolTransport",
    "export_catalogue",
    # Session & Undo
    "Session",
    "SessionStore",
    "ActionKind",
    "UndoLedger",
    "UndoRecord",
    # Errors
    "LedgerAgentError",
    "AccountingAPIError",
    "AuthRequiredError",
    "DuplicateOperationError",
    "OperationNotFoundError",
    "UndoUnavailableError",
    "UpstreamHTTPError",
    "ValidationError",
]
