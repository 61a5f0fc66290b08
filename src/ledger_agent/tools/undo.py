"""Undo ledger: a stack of recent destructive operations.

Records exist so the assistant can tell the user what was destroyed. Nothing
here calls the accounting API; undo is a report, not a compensating
transaction.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from ledger_agent.tools.errors import UndoUnavailableError

logger = structlog.get_logger(__name__)

NOTHING_TO_UNDO = "No operations to undo."


class ActionKind(str, Enum):
    """Kinds of destructive operation that leave an undo record."""

    DELETE = "DELETE"
    UPDATE = "UPDATE"
    UPDATE_FIELDS = "UPDATE_FIELDS"


@dataclass(frozen=True)
class UndoRecord:
    """Metadata describing one destructive call that succeeded."""

    action: ActionKind
    resource: str
    resource_id: str
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class UndoLedger:
    """Last-in-first-out stack of undo records. Grows without bound."""

    def __init__(self) -> None:
        self._records: list[UndoRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[UndoRecord]:
        return self._records.copy()

    def record(self, entry: UndoRecord) -> None:
        self._records.append(entry)
        logger.info(
            "undo_recorded",
            action=entry.action.value,
            resource=entry.resource,
            resource_id=entry.resource_id,
            depth=len(self._records),
        )

    def pop(self) -> UndoRecord:
        """Remove and return the most recent record.

        Raises:
            UndoUnavailableError: If the ledger is empty.
        """
        if not self._records:
            raise UndoUnavailableError(NOTHING_TO_UNDO)
        return self._records.pop()

    def undo_last(self) -> str:
        """Pop the most recent record and report what undo means for it.

        The popped record is not restored whatever the outcome.
        """
        try:
            last = self.pop()
        except UndoUnavailableError as e:
            return str(e)

        logger.info(
            "undo_requested",
            action=last.action.value,
            resource=last.resource,
            resource_id=last.resource_id,
        )
        if last.action is ActionKind.DELETE:
            return (
                f"Undo not supported for DELETE /{last.resource}/{last.resource_id}.\n"
                "You must manually recreate the deleted data."
            )
        return f"Undo for this action type ({last.action.value}) is not implemented."
