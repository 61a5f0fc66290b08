"""Dispatcher that validates and executes tool invocations.

This is the last point where failures are structured. Every failure is
rendered into a text result here; nothing raised by a handler reaches the
model-facing layer.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from ledger_agent.config.logging import mask_credentials
from ledger_agent.tools.accounting_api import AccountingAPIClient
from ledger_agent.tools.errors import (
    AccountingAPIError,
    AuthRequiredError,
    OperationNotFoundError,
    UndoUnavailableError,
    UpstreamHTTPError,
    ValidationError,
)
from ledger_agent.tools.registry import OperationRegistry
from ledger_agent.tools.session import SessionStore
from ledger_agent.tools.undo import UndoLedger

logger = structlog.get_logger(__name__)

MAX_ERROR_BODY_CHARS = 2000


@dataclass
class Context:
    """Per-call state handed to every handler."""

    session: SessionStore
    undo: UndoLedger
    api: AccountingAPIClient


@dataclass(frozen=True)
class InvocationRequest:
    """The model's request to run one operation."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextContent:
    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class InvocationResult:
    """Tool result as seen by the model: a sequence of content items."""

    content: list[TextContent]
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "InvocationResult":
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @property
    def text(self) -> str:
        return "\n".join(item.text for item in self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [item.to_dict() for item in self.content],
            "isError": self.is_error,
        }


def render_error(operation: str, error: Exception) -> str:
    """Render a handler failure into the text the model receives."""
    if isinstance(error, AuthRequiredError):
        return str(error)
    if isinstance(error, UpstreamHTTPError):
        body = error.body or ""
        if len(body) > MAX_ERROR_BODY_CHARS:
            body = body[:MAX_ERROR_BODY_CHARS] + "..."
        status = f"{error.status_code} {error.reason}".rstrip()
        return (
            f"Operation '{operation}' failed.\n"
            f"Status: {status} ({error.method} {error.path})\n\n{body}"
        )
    if isinstance(error, AccountingAPIError):
        return f"Operation '{operation}' failed.\nError: {error}"
    if isinstance(error, ValidationError | OperationNotFoundError | UndoUnavailableError):
        return str(error)
    return f"Tool '{operation}' failed unexpectedly: {error}"


class Dispatcher:
    """Executes invocation requests against the operation registry."""

    def __init__(self, registry: OperationRegistry):
        self.registry = registry

    async def dispatch(self, request: InvocationRequest, context: Context) -> InvocationResult:
        """Resolve, validate and run one invocation. Never raises."""
        log = logger.bind(tool=request.name)
        try:
            operation = self.registry.lookup(request.name)
            arguments = operation.validate(request.arguments)
        except (OperationNotFoundError, ValidationError) as e:
            log.warning("tool_rejected", error=str(e))
            return InvocationResult.from_text(str(e), is_error=True)

        log.info("executing_tool", args=mask_credentials(arguments))
        try:
            text = await operation.handler(arguments, context)
        except AuthRequiredError as e:
            log.info("tool_auth_required")
            return InvocationResult.from_text(render_error(request.name, e), is_error=True)
        except AccountingAPIError as e:
            log.warning("tool_api_error", status=e.status_code, error=str(e))
            return InvocationResult.from_text(render_error(request.name, e), is_error=True)
        except Exception as e:
            log.exception("tool_execution_error")
            return InvocationResult.from_text(render_error(request.name, e), is_error=True)

        log.info("tool_executed", success=True)
        return InvocationResult.from_text(text)
