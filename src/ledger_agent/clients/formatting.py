"""Transcript formatting shared by the LLM clients."""

import json
from typing import Any


def describe_tool_calls(tool_calls: list[dict[str, Any]]) -> str:
    """Plain-text rendering of invocation turns for the transcript."""
    return "\n".join(
        f"Called {call['name']} with {json.dumps(call.get('arguments', {}), sort_keys=True)}"
        for call in tool_calls
    )
