"""Exception hierarchy shared by the registry, handlers and dispatcher."""

from typing import Any

NOT_LOGGED_IN_MESSAGE = "Not logged in. Please call 'loginFrontAccounting' first."


class LedgerAgentError(Exception):
    """Base exception for the ledger agent."""


class DuplicateOperationError(LedgerAgentError):
    """An operation name was registered twice.

    This is a configuration error: it is raised while the registry is
    populated at startup and is never converted into a tool result.
    """

    def __init__(self, name: str):
        super().__init__(f"Operation '{name}' is already registered")
        self.name = name


class OperationNotFoundError(LedgerAgentError):
    """The requested operation is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ValidationError(LedgerAgentError):
    """Invocation arguments do not match the declared input schema."""

    def __init__(self, operation: str, problems: list[str]):
        super().__init__(
            f"Invalid arguments for '{operation}': " + "; ".join(problems)
        )
        self.operation = operation
        self.problems = problems


class AuthRequiredError(LedgerAgentError):
    """No session is present for an operation that needs one."""

    def __init__(self, message: str = NOT_LOGGED_IN_MESSAGE):
        super().__init__(message)


class AccountingAPIError(LedgerAgentError):
    """Base exception for accounting API failures."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamHTTPError(AccountingAPIError):
    """The accounting API answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body: str,
        reason: str = "",
        method: str = "",
        path: str = "",
    ):
        super().__init__(
            f"API error: {status_code} {reason}".rstrip(),
            status_code=status_code,
            body=body,
        )
        self.reason = reason
        self.method = method
        self.path = path


class UndoUnavailableError(LedgerAgentError):
    """Nothing to undo, or undo is not implemented for the action kind."""
