"""Agent module for the ledger agent."""

from ledger_agent.agents.assistant import (
    ASSISTANT_SYSTEM_PROMPT,
    AssistantAgent,
    create_llm_client,
)
from ledger_agent.agents.base import AgentMessage, AgentState, BaseAgent

__all__ = [
    "AgentMessage",
    "AgentState",
    "BaseAgent",
    "AssistantAgent",
    "ASSISTANT_SYSTEM_PROMPT",
    "create_llm_client",
]
