"""The accounting assistant: bridges the model to the accounting tools."""

import asyncio
from typing import Any, Protocol
from uuid import UUID

import structlog

from ledger_agent.agents.base import AgentState, BaseAgent
from ledger_agent.clients.claude import ClaudeClient
from ledger_agent.clients.gemini import GeminiClient
from ledger_agent.config import get_settings
from ledger_agent.tools.dispatcher import InvocationResult

logger = structlog.get_logger(__name__)

ASSISTANT_SYSTEM_PROMPT = """You are an assistant for a FrontAccounting installation.
You help an operator inspect and maintain bank accounts, dimensions, exchange
rates, GL accounts, journal entries and sales orders through the tools you are
given.

## Guidelines
1. Accounting tools only work after 'loginFrontAccounting' has succeeded. If the
   user has not logged in, ask for their user name, password and company ID.
2. Call at most one tool per reply, with exactly the arguments it declares.
3. Deleting or updating records cannot be reversed. 'undoLastOperation' only
   reports what was changed.
4. Answer questions that need no tool directly and briefly."""


class ModelResponse(Protocol):
    content: str
    tool_calls: list[dict[str, Any]]


class ModelClient(Protocol):
    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> ModelResponse: ...


class ToolTransport(Protocol):
    async def list_tools(self) -> list[dict[str, Any]]: ...

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> InvocationResult: ...


def create_llm_client(provider: str | None = None) -> ClaudeClient | GeminiClient:
    """Create the LLM client for ``provider`` or the configured default."""
    provider = (provider or get_settings().llm_provider).lower()
    if provider == "claude":
        return ClaudeClient()
    if provider == "gemini":
        return GeminiClient()
    raise ValueError(f"Unknown LLM provider: {provider}")


def catalogue_from_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert transport listings to the ``{name, description, parameters}`` form."""
    return [
        {
            "name": tool["name"],
            "description": tool["description"],
            "parameters": {
                "type": tool["inputSchema"].get("type", "object"),
                "properties": tool["inputSchema"].get("properties", {}),
                "required": tool["inputSchema"].get("required", []),
            },
        }
        for tool in tools
    ]


class AssistantAgent(BaseAgent):
    """One-shot tool agent.

    Each user turn makes exactly one model call. If the model asks for a
    tool, the first requested call is dispatched and its text is returned
    verbatim; the model does not get a second pass over the result. Turns
    are serialized by a lock so transcript and session are never shared by
    two turns at once.
    """

    def __init__(
        self,
        transport: ToolTransport,
        llm_client: ModelClient | None = None,
        agent_id: UUID | None = None,
        system_prompt: str = ASSISTANT_SYSTEM_PROMPT,
    ):
        super().__init__(agent_id=agent_id, name="Accounting Assistant")
        self._transport = transport
        self._llm_client = llm_client or create_llm_client()
        self._system_prompt = system_prompt
        self._lock = asyncio.Lock()

    def _get_system_prompt(self) -> str:
        return self._system_prompt

    async def _get_tools(self) -> list[dict[str, Any]]:
        # Listed on every turn so the catalogue always matches the registry.
        return catalogue_from_tools(await self._transport.list_tools())

    async def handle_message(self, text: str) -> str:
        async with self._lock:
            return await self._run_turn(text)

    async def _run_turn(self, text: str) -> str:
        self.state = AgentState.AWAITING_INPUT
        pending = self.add_user_message(text)

        self.state = AgentState.MODEL_CALL
        try:
            tools = await self._get_tools()
            response = await self._llm_client.generate(
                system_prompt=self._get_system_prompt(),
                messages=self._format_messages_for_llm(),
                tools=tools,
            )
        except Exception:
            self._logger.exception("model_call_failed")
            self._discard_message(pending)
            self.state = AgentState.AWAITING_INPUT
            raise

        if not response.tool_calls:
            self.state = AgentState.RESPONDING
            self.add_model_message(response.content)
            self.state = AgentState.AWAITING_INPUT
            return response.content

        if len(response.tool_calls) > 1:
            self._logger.info(
                "extra_tool_calls_ignored", ignored=len(response.tool_calls) - 1
            )
        tool_call = response.tool_calls[0]
        self.add_model_message(response.content, tool_calls=[tool_call])

        self.state = AgentState.DISPATCHING
        result = await self._transport.call_tool(
            tool_call["name"], tool_call.get("arguments") or {}
        )
        self.add_tool_result(result.text)
        self._logger.info(
            "tool_turn_completed", tool=tool_call["name"], is_error=result.is_error
        )

        self.state = AgentState.AWAITING_INPUT
        return result.text
