"""Tool definitions for the accounting API.

Every accounting endpoint is one row in ``ENDPOINTS``, interpreted by a single
generic handler. Only the session operations and the few endpoints with
client-side behaviour have handlers of their own.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import quote

import structlog

from ledger_agent.tools.dispatcher import Context
from ledger_agent.tools.registry import Handler, OperationRegistry, ParameterSpec
from ledger_agent.tools.undo import ActionKind, UndoRecord

logger = structlog.get_logger(__name__)

BANK_ACCOUNT_FIELDS = (
    "bank_name",
    "bank_account_number",
    "bank_curr_code",
    "bank_address",
    "dflt_curr_act",
)


@dataclass(frozen=True)
class UndoTemplate:
    """How to describe a successful destructive call in the undo ledger.

    ``resource_id`` is a format string over the call arguments, so composite
    keys such as ``{currency}/{id}`` survive into the record.
    """

    action: ActionKind
    resource: str
    resource_id: str = "{id}"

    def build(self, arguments: dict[str, Any], extra: dict[str, Any] | None = None) -> UndoRecord:
        return UndoRecord(
            action=self.action,
            resource=self.resource,
            resource_id=self.resource_id.format(**arguments),
            extra=extra or {},
        )


@dataclass(frozen=True)
class EndpointSpec:
    """One accounting operation, described as data."""

    name: str
    description: str
    method: Literal["GET", "PUT", "DELETE"]
    path: str
    label: str
    parameters: dict[str, ParameterSpec] = field(default_factory=dict)
    query: tuple[str, ...] = ()
    body_param: str | None = None
    undo: UndoTemplate | None = None

    def build_path(self, arguments: dict[str, Any]) -> str:
        return self.path.format(
            **{key: quote(str(value), safe="") for key, value in arguments.items()}
        )

    def reference(self, arguments: dict[str, Any]) -> str:
        """Human-readable identifier of the target, e.g. ``42`` or ``gl/7``."""
        if self.undo is not None:
            return self.undo.resource_id.format(**arguments)
        return str(arguments.get("id", ""))


def _id(description: str) -> ParameterSpec:
    return ParameterSpec(type="string", description=description)


_PAYLOAD = ParameterSpec(
    type="object",
    description="Fields to update, sent as the JSON request body",
)


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


ENDPOINTS: tuple[EndpointSpec, ...] = (
    # === Bank Accounts ===
    EndpointSpec(
        name="getBankAccounts",
        description="Fetches all bank accounts from the API using HTTP GET.",
        method="GET",
        path="bankaccounts",
        label="Bank accounts",
    ),
    EndpointSpec(
        name="getBankAccountById",
        description="Fetches a specific bank account by its ID from the API.",
        method="GET",
        path="bankaccounts/{id}",
        label="Bank account",
        parameters={"id": _id("The ID of the bank account to fetch")},
    ),
    EndpointSpec(
        name="searchBankAccountsByOwner",
        description="Search bank accounts by owner name using HTTP GET.",
        method="GET",
        path="bankaccounts",
        label="Bank accounts",
        parameters={"owner": _id("The name of the bank account owner to search for")},
        query=("owner",),
    ),
    EndpointSpec(
        name="updateBankAccountById",
        description="Updates a specific bank account by ID using PUT request.",
        method="PUT",
        path="bankaccounts/{id}",
        label="Bank account",
        parameters={"id": _id("The ID of the bank account to update"), "payload": _PAYLOAD},
        body_param="payload",
        undo=UndoTemplate(ActionKind.UPDATE, "bankaccounts"),
    ),
    EndpointSpec(
        name="deleteBankAccountById",
        description="Deletes a bank account by ID using DELETE /bankaccounts/{id}.",
        method="DELETE",
        path="bankaccounts/{id}",
        label="Bank account",
        parameters={"id": _id("The ID of the bank account to delete")},
        undo=UndoTemplate(ActionKind.DELETE, "bankaccounts"),
    ),
    # === Dimensions ===
    EndpointSpec(
        name="getDimensions",
        description="Fetch dimensions data from the API using HTTP GET request.",
        method="GET",
        path="dimensions",
        label="Dimensions",
    ),
    EndpointSpec(
        name="getDimensionById",
        description="Fetches a specific dimension by its ID.",
        method="GET",
        path="dimensions/{id}",
        label="Dimension",
        parameters={"id": _id("The ID of the dimension to fetch")},
    ),
    EndpointSpec(
        name="updateDimensionById",
        description="Updates a specific dimension by ID using PUT /dimensions/{id}.",
        method="PUT",
        path="dimensions/{id}",
        label="Dimension",
        parameters={"id": _id("The ID of the dimension to update"), "payload": _PAYLOAD},
        body_param="payload",
        undo=UndoTemplate(ActionKind.UPDATE, "dimensions"),
    ),
    EndpointSpec(
        name="deleteDimensionById",
        description="Deletes a specific dimension by ID using DELETE /dimensions/{id}.",
        method="DELETE",
        path="dimensions/{id}",
        label="Dimension",
        parameters={"id": _id("The ID of the dimension to delete")},
        undo=UndoTemplate(ActionKind.DELETE, "dimensions"),
    ),
    # === Exchange Rates ===
    EndpointSpec(
        name="getExchangeRatesUSD",
        description="Fetches exchange rates for USD from the API.",
        method="GET",
        path="exchangerates/usd",
        label="Exchange rates",
    ),
    EndpointSpec(
        name="deleteExchangeRateById",
        description=(
            "Deletes an exchange rate entry by currency and ID using "
            "DELETE /exchangerates/{currency}/{id}."
        ),
        method="DELETE",
        path="exchangerates/{currency}/{id}",
        label="Exchange rate",
        parameters={
            "currency": _id("The 3-letter currency code (e.g., 'USD', 'EUR')"),
            "id": _id("The ID of the exchange rate entry to delete"),
        },
        undo=UndoTemplate(ActionKind.DELETE, "exchangerates", "{currency}/{id}"),
    ),
    # === GL Accounts ===
    EndpointSpec(
        name="getGLAccounts",
        description="Fetch general ledger accounts (GL Accounts) using HTTP GET request.",
        method="GET",
        path="glaccounts",
        label="GL accounts",
    ),
    EndpointSpec(
        name="getGLAccountByCode",
        description="Fetch a specific General Ledger account by its account code.",
        method="GET",
        path="glaccounts/{account_code}",
        label="GL account",
        parameters={"account_code": _id("The GL account code")},
    ),
    EndpointSpec(
        name="updateGLAccountById",
        description="Updates a GL account by ID using PUT /glaccounts/{id}.",
        method="PUT",
        path="glaccounts/{id}",
        label="GL account",
        parameters={"id": _id("The ID of the GL account to update"), "payload": _PAYLOAD},
        body_param="payload",
        undo=UndoTemplate(ActionKind.UPDATE, "glaccounts"),
    ),
    EndpointSpec(
        name="deleteGLAccountById",
        description="Deletes a GL account by ID using DELETE /glaccounts/{id}.",
        method="DELETE",
        path="glaccounts/{id}",
        label="GL account",
        parameters={"id": _id("The ID of the GL account to delete")},
        undo=UndoTemplate(ActionKind.DELETE, "glaccounts"),
    ),
    # === Journal Entries ===
    EndpointSpec(
        name="getJournalEntries",
        description="Fetches all journal entries using HTTP GET.",
        method="GET",
        path="journal",
        label="Journal entries",
    ),
    EndpointSpec(
        name="getJournalEntryByTypeAndId",
        description="Fetch a specific journal entry using its type and ID.",
        method="GET",
        path="journal/{type}/{id}",
        label="Journal entry",
        parameters={
            "type": _id("The type of the journal entry (e.g., 'gl', 'bp', 'ar')"),
            "id": _id("The ID of the journal entry"),
        },
    ),
    EndpointSpec(
        name="updateJournalEntryById",
        description="Updates a journal entry by ID using PUT /journal/{id}.",
        method="PUT",
        path="journal/{id}",
        label="Journal entry",
        parameters={"id": _id("The ID of the journal entry to update"), "payload": _PAYLOAD},
        body_param="payload",
        undo=UndoTemplate(ActionKind.UPDATE, "journal"),
    ),
    EndpointSpec(
        name="deleteJournalEntryByTypeAndId",
        description="Deletes a journal entry using DELETE /journal/{type}/{id}.",
        method="DELETE",
        path="journal/{type}/{id}",
        label="Journal entry",
        parameters={
            "type": _id("The type of the journal entry (e.g., 'gl', 'bp', 'ar')"),
            "id": _id("The ID of the journal entry to delete"),
        },
        undo=UndoTemplate(ActionKind.DELETE, "journal", "{type}/{id}"),
    ),
    # === Sales ===
    EndpointSpec(
        name="getSales",
        description="Fetches all sales records from the API using a GET request.",
        method="GET",
        path="sales",
        label="Sales",
    ),
    EndpointSpec(
        name="updateSalesOrderById",
        description="Updates a sales order by ID using PUT /sales/{id}.",
        method="PUT",
        path="sales/{id}",
        label="Sales order",
        parameters={"id": _id("The ID of the sales order to update"), "payload": _PAYLOAD},
        body_param="payload",
        undo=UndoTemplate(ActionKind.UPDATE, "sales"),
    ),
)


def make_endpoint_handler(spec: EndpointSpec) -> Handler:
    """Build the handler that performs ``spec`` against the accounting API."""

    async def handler(arguments: dict[str, Any], ctx: Context) -> str:
        # Raises AuthRequiredError before any request goes out.
        headers = ctx.session.build_auth_headers()
        path = spec.build_path(arguments)
        params = {key: arguments[key] for key in spec.query if key in arguments} or None
        body = arguments.get(spec.body_param) if spec.body_param else None

        data = await ctx.api.request(spec.method, path, headers, params=params, json=body)

        if spec.undo is not None:
            ctx.undo.record(spec.undo.build(arguments))

        reference = spec.reference(arguments)
        if spec.method == "DELETE":
            return f"{spec.label} {reference} deleted successfully."
        if spec.method == "PUT":
            return (
                f"{spec.label} {reference} updated successfully:\n"
                f"```json\n{_pretty(data)}\n```"
            )
        return _pretty(data)

    handler.__name__ = f"handle_{spec.name}"
    return handler


# === Custom Handlers ===


async def login(arguments: dict[str, Any], ctx: Context) -> str:
    """Verify credentials upstream, then commit the session.

    A failed upstream login raises before the store is touched, so the
    previous session (or the empty state) survives.
    """
    await ctx.api.login(arguments["user"], arguments["password"])
    ctx.session.login(arguments["user"], arguments["password"], arguments["companyId"])
    return "Login successful.\nSession saved."


async def logout(arguments: dict[str, Any], ctx: Context) -> str:
    ctx.session.logout()
    return "Logged out."


async def undo_last_operation(arguments: dict[str, Any], ctx: Context) -> str:
    return ctx.undo.undo_last()


async def get_gl_account_by_name(arguments: dict[str, Any], ctx: Context) -> str:
    headers = ctx.session.build_auth_headers()
    accounts = await ctx.api.get("glaccounts", headers)
    needle = arguments["account_name"].lower()
    matches = [
        account
        for account in accounts or []
        if isinstance(account, dict) and needle in str(account.get("account_name") or "").lower()
    ]
    return _pretty(matches)


async def delete_bank_account_fields(arguments: dict[str, Any], ctx: Context) -> str:
    account_id = arguments["id"]
    fields = arguments["fields"]
    headers = ctx.session.build_auth_headers()

    await ctx.api.put(
        f"bankaccounts/{quote(account_id, safe='')}",
        headers,
        json={name: None for name in fields},
    )
    ctx.undo.record(
        UndoRecord(
            action=ActionKind.UPDATE_FIELDS,
            resource="bankaccounts",
            resource_id=account_id,
            extra={"cleared_fields": list(fields)},
        )
    )
    return f"Cleared fields [{', '.join(fields)}] in bank account {account_id}."


@dataclass(frozen=True)
class CustomOperation:
    name: str
    description: str
    parameters: dict[str, ParameterSpec]
    handler: Handler


CUSTOM_OPERATIONS: tuple[CustomOperation, ...] = (
    CustomOperation(
        name="loginFrontAccounting",
        description="Logs into FrontAccounting and stores credentials for reuse.",
        parameters={
            "user": ParameterSpec(
                type="string", description="FrontAccounting user name", non_empty=True
            ),
            "password": ParameterSpec(
                type="string", description="FrontAccounting password", non_empty=True
            ),
            "companyId": ParameterSpec(
                type="string", description="Company to work in", non_empty=True
            ),
        },
        handler=login,
    ),
    CustomOperation(
        name="logoutFrontAccounting",
        description="Forgets the stored FrontAccounting credentials.",
        parameters={},
        handler=logout,
    ),
    CustomOperation(
        name="undoLastOperation",
        description="Undoes the last destructive operation if supported (like DELETE).",
        parameters={},
        handler=undo_last_operation,
    ),
    CustomOperation(
        name="getGLAccountByName",
        description=(
            "Fetches all GL accounts and filters them by account_name "
            "(case-insensitive match)."
        ),
        parameters={"account_name": _id("Part of the GL account name to look for")},
        handler=get_gl_account_by_name,
    ),
    CustomOperation(
        name="deleteBankAccountFields",
        description=(
            "Deletes (nullifies) specific fields of a bank account using "
            "PUT /bankaccounts/{id}."
        ),
        parameters={
            "id": _id("The ID of the bank account"),
            "fields": ParameterSpec(
                type="array",
                description="Fields to clear",
                items=ParameterSpec(type="string", enum=BANK_ACCOUNT_FIELDS),
            ),
        },
        handler=delete_bank_account_fields,
    ),
)


def build_registry(registry: OperationRegistry | None = None) -> OperationRegistry:
    """Populate a registry with every session and accounting operation.

    Raises:
        DuplicateOperationError: If two definitions share a name.
    """
    registry = registry if registry is not None else OperationRegistry()
    for custom in CUSTOM_OPERATIONS:
        registry.register(custom.name, custom.description, custom.parameters, custom.handler)
    for spec in ENDPOINTS:
        registry.register(spec.name, spec.description, spec.parameters, make_endpoint_handler(spec))
    logger.info("registry_built", operations=len(registry))
    return registry
