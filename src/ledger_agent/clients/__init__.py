"""LLM client implementations for the ledger agent."""

from ledger_agent.clients.claude import ClaudeClient, ClaudeResponse
from ledger_agent.clients.gemini import GeminiClient, GeminiResponse

__all__ = [
    "ClaudeClient",
    "ClaudeResponse",
    "GeminiClient",
    "GeminiResponse",
]
