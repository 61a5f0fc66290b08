"""Google Gemini client with function calling support."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import structlog
from google import genai
from google.genai import types

from ledger_agent.clients.formatting import describe_tool_calls
from ledger_agent.config import get_settings

logger = structlog.get_logger(__name__)


@dataclass
class GeminiResponse:
    """Response from Gemini API."""

    content: str
    tool_calls: list[dict[str, Any]]
    stop_reason: str
    usage: dict[str, int]


class GeminiClient:
    """Client for Google's Gemini API with tool use support."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        self._api_key = api_key or settings.google_api_key.get_secret_value()
        self._model_name = model or settings.gemini_model
        self._max_tokens = max_tokens or settings.llm_max_tokens
        self._temperature = temperature if temperature is not None else settings.llm_temperature

        self._client = genai.Client(api_key=self._api_key)

        self._logger = logger.bind(client="gemini", model=self._model_name)

    def _convert_json_schema_to_gemini(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Convert JSON Schema to Gemini's schema format.

        Gemini uses a subset of OpenAPI schema format. Free-form objects
        (no declared properties) pass through as plain OBJECT.
        """
        gemini_schema: dict[str, Any] = {}

        if "type" in schema:
            type_map = {
                "string": "STRING",
                "integer": "INTEGER",
                "number": "NUMBER",
                "boolean": "BOOLEAN",
                "array": "ARRAY",
                "object": "OBJECT",
            }
            gemini_schema["type"] = type_map.get(schema["type"], "STRING")

        if "description" in schema:
            gemini_schema["description"] = schema["description"]

        if "enum" in schema:
            gemini_schema["enum"] = [str(value) for value in schema["enum"]]

        if schema.get("properties"):
            gemini_schema["properties"] = {
                k: self._convert_json_schema_to_gemini(v)
                for k, v in schema["properties"].items()
            }

        if schema.get("required"):
            gemini_schema["required"] = schema["required"]

        if "items" in schema:
            gemini_schema["items"] = self._convert_json_schema_to_gemini(schema["items"])

        return gemini_schema

    def _convert_tools_to_gemini_format(
        self, tools: list[dict[str, Any]]
    ) -> list[types.Tool]:
        """Convert catalogue entries to function declarations."""
        function_declarations = []

        for tool in tools:
            func_decl = types.FunctionDeclaration(
                name=tool["name"],
                description=tool["description"],
            )
            # Gemini rejects an OBJECT schema without properties
            if tool["parameters"].get("properties"):
                func_decl.parameters = types.Schema.model_validate(
                    self._convert_json_schema_to_gemini(tool["parameters"])
                )
            function_declarations.append(func_decl)

        return [types.Tool(function_declarations=function_declarations)]

    def _convert_messages_to_gemini_format(
        self, messages: list[dict[str, Any]]
    ) -> list[types.Content]:
        """Convert the transcript to Gemini's content format.

        Invocation turns are rendered as text so a synthetic "Tool result"
        user turn may follow them.
        """
        gemini_contents = []

        for msg in messages:
            text = msg.get("content") or ""
            if msg["role"] == "model" and msg.get("tool_calls"):
                text = "\n".join(
                    part for part in (text, describe_tool_calls(msg["tool_calls"])) if part
                )
            if not text:
                continue
            gemini_contents.append(
                types.Content(
                    role="model" if msg["role"] == "model" else "user",
                    parts=[types.Part(text=text)],
                )
            )

        return gemini_contents

    def _parse_response(self, response: Any) -> GeminiResponse:
        """Parse Gemini response into our format."""
        content = ""
        tool_calls: list[dict[str, Any]] = []
        stop_reason = "end_turn"

        if response.candidates:
            candidate = response.candidates[0]

            for part in (candidate.content.parts if candidate.content else None) or []:
                if getattr(part, "function_call", None):
                    fc = part.function_call
                    tool_calls.append({
                        "id": f"call_{fc.name}_{len(tool_calls)}",
                        "name": fc.name,
                        "arguments": dict(fc.args) if fc.args else {},
                    })
                elif getattr(part, "text", None):
                    content += part.text

            stop_reason_map = {
                "STOP": "end_turn",
                "MAX_TOKENS": "max_tokens",
                "SAFETY": "content_filter",
                "RECITATION": "content_filter",
            }
            finish_reason = getattr(candidate.finish_reason, "value", candidate.finish_reason)
            stop_reason = stop_reason_map.get(str(finish_reason), "end_turn")

            if tool_calls:
                stop_reason = "tool_use"

        usage = {"input_tokens": 0, "output_tokens": 0}
        if getattr(response, "usage_metadata", None):
            usage["input_tokens"] = (
                getattr(response.usage_metadata, "prompt_token_count", 0) or 0
            )
            usage["output_tokens"] = (
                getattr(response.usage_metadata, "candidates_token_count", 0) or 0
            )

        return GeminiResponse(
            content=content,
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            usage=usage,
        )

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> GeminiResponse:
        """Generate a response from Gemini.

        Args:
            system_prompt: The system prompt defining agent behavior.
            messages: Transcript as list of ``{role, content, tool_calls}`` dicts.
            tools: Optional catalogue entries for function calling.

        Returns:
            GeminiResponse with content, tool calls, and usage info.
        """
        self._logger.debug(
            "generating_response",
            message_count=len(messages),
            tool_count=len(tools) if tools else 0,
        )

        config = types.GenerateContentConfig(
            max_output_tokens=self._max_tokens,
            temperature=self._temperature,
            system_instruction=system_prompt,
        )

        if tools:
            config.tools = cast(
                list[types.Tool | Callable[..., Any]],
                self._convert_tools_to_gemini_format(tools),
            )
            # The agent executes calls itself; never let the SDK run them.
            config.automatic_function_calling = types.AutomaticFunctionCallingConfig(
                disable=True
            )

        contents_payload = cast(list[Any], self._convert_messages_to_gemini_format(messages))

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=contents_payload,
                config=config,
            )
        except Exception as e:
            self._logger.error("api_error", error=str(e))
            raise

        parsed = self._parse_response(response)
        self._logger.info(
            "response_generated",
            stop_reason=parsed.stop_reason,
            tool_calls=len(parsed.tool_calls),
            input_tokens=parsed.usage["input_tokens"],
            output_tokens=parsed.usage["output_tokens"],
        )
        return parsed
