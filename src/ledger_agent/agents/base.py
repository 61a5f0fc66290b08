"""Base agent class owning the conversation transcript."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from uuid import UUID, uuid4

import structlog

logger = structlog.get_logger(__name__)

TOOL_RESULT_PREFIX = "Tool result: "


class AgentState(str, Enum):
    """States of one conversational turn."""

    AWAITING_INPUT = "awaiting_input"
    MODEL_CALL = "model_call"
    DISPATCHING = "dispatching"
    RESPONDING = "responding"


@dataclass
class AgentMessage:
    """A turn in the conversation transcript."""

    role: Literal["user", "model"]
    content: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content, "tool_calls": self.tool_calls}


class BaseAgent(ABC):
    """Abstract base class for conversational agents.

    The transcript is append-only. Subclasses must implement:
    - _get_system_prompt(): Returns the agent's instructions
    - handle_message(): Runs one user turn and returns the reply text
    """

    def __init__(self, agent_id: UUID | None = None, name: str = "Agent"):
        self.id = agent_id or uuid4()
        self.name = name
        self.state = AgentState.AWAITING_INPUT
        self._conversation_history: list[AgentMessage] = []

        self._logger = logger.bind(agent_id=str(self.id), agent_name=self.name)

    @property
    def conversation_history(self) -> list[AgentMessage]:
        """Get a copy of the transcript."""
        return self._conversation_history.copy()

    @abstractmethod
    def _get_system_prompt(self) -> str:
        pass

    @abstractmethod
    async def handle_message(self, text: str) -> str:
        """Process one user message and return the reply for the caller."""
        pass

    def add_user_message(self, content: str) -> AgentMessage:
        message = AgentMessage(role="user", content=content)
        self._conversation_history.append(message)
        self._logger.debug("user_message_added", content_length=len(content))
        return message

    def add_model_message(
        self, content: str, tool_calls: list[dict[str, Any]] | None = None
    ) -> AgentMessage:
        message = AgentMessage(role="model", content=content, tool_calls=tool_calls or [])
        self._conversation_history.append(message)
        self._logger.debug(
            "model_message_added",
            content_length=len(content),
            tool_calls=len(tool_calls or []),
        )
        return message

    def add_tool_result(self, result: str) -> AgentMessage:
        """Append a tool result as a synthetic user turn."""
        message = AgentMessage(role="user", content=TOOL_RESULT_PREFIX + result)
        self._conversation_history.append(message)
        self._logger.debug("tool_result_added", content_length=len(result))
        return message

    def _discard_message(self, message: AgentMessage) -> None:
        """Drop ``message`` if it is the newest turn."""
        if self._conversation_history and self._conversation_history[-1] is message:
            self._conversation_history.pop()

    def _format_messages_for_llm(self) -> list[dict[str, Any]]:
        return [message.to_dict() for message in self._conversation_history]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, name={self.name}, state={self.state.value})"
