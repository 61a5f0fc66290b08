"""Tests for Gemini LLM client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import types

from ledger_agent.clients.formatting import describe_tool_calls
from ledger_agent.clients.gemini import GeminiClient
from ledger_agent.tools.definitions import build_registry
from ledger_agent.tools.transport import export_catalogue


def make_response(parts, finish_reason="STOP"):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        ],
        usage_metadata=types.GenerateContentResponseUsageMetadata(
            prompt_token_count=12, candidates_token_count=3
        ),
    )


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_client_initialization_with_defaults(self):
        client = GeminiClient()

        assert client._model_name == "gemini-2.0-flash"
        assert client._api_key == "test-key"

    def test_schema_conversion(self):
        client = GeminiClient()

        converted = client._convert_json_schema_to_gemini(
            {
                "type": "object",
                "properties": {
                    "fields": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["bank_name"]},
                    }
                },
                "required": ["fields"],
            }
        )

        assert converted["type"] == "OBJECT"
        assert converted["properties"]["fields"]["type"] == "ARRAY"
        assert converted["properties"]["fields"]["items"]["enum"] == ["bank_name"]
        assert converted["required"] == ["fields"]

    def test_full_catalogue_converts(self):
        """Every exported operation becomes a function declaration."""
        client = GeminiClient()
        catalogue = export_catalogue(build_registry())

        tools = client._convert_tools_to_gemini_format(catalogue)
        declarations = tools[0].function_declarations

        assert [d.name for d in declarations] == [entry["name"] for entry in catalogue]
        by_name = {d.name: d for d in declarations}
        assert by_name["getBankAccounts"].parameters is None
        assert by_name["deleteBankAccountById"].parameters.required == ["id"]

    def test_transcript_conversion(self):
        client = GeminiClient()
        messages = [
            {"role": "user", "content": "delete bank account 42", "tool_calls": []},
            {
                "role": "model",
                "content": "",
                "tool_calls": [
                    {"id": "c", "name": "deleteBankAccountById", "arguments": {"id": "42"}}
                ],
            },
            {"role": "user", "content": "Tool result: done", "tool_calls": []},
        ]

        contents = client._convert_messages_to_gemini_format(messages)

        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[1].parts[0].text == 'Called deleteBankAccountById with {"id": "42"}'
        assert contents[2].parts[0].text == "Tool result: done"

    def test_parse_text_response(self):
        client = GeminiClient()

        parsed = client._parse_response(make_response([types.Part(text="Hello")]))

        assert parsed.content == "Hello"
        assert parsed.tool_calls == []
        assert parsed.stop_reason == "end_turn"
        assert parsed.usage == {"input_tokens": 12, "output_tokens": 3}

    def test_parse_function_call(self):
        client = GeminiClient()
        part = types.Part(
            function_call=types.FunctionCall(name="getBankAccounts", args={})
        )

        parsed = client._parse_response(make_response([part]))

        assert parsed.stop_reason == "tool_use"
        assert parsed.tool_calls[0]["name"] == "getBankAccounts"
        assert parsed.tool_calls[0]["arguments"] == {}

    @pytest.mark.asyncio
    async def test_generate_uses_async_sdk(self):
        client = GeminiClient()
        client._client = MagicMock()
        client._client.aio.models.generate_content = AsyncMock(
            return_value=make_response([types.Part(text="Hi")])
        )

        response = await client.generate(
            system_prompt="Be brief.",
            messages=[{"role": "user", "content": "hello", "tool_calls": []}],
            tools=export_catalogue(build_registry()),
        )

        kwargs = client._client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["config"].automatic_function_calling.disable is True
        assert response.content == "Hi"


def test_describe_tool_calls_is_stable():
    text = describe_tool_calls([{"name": "x", "arguments": {"b": 1, "a": 2}}])

    assert text == 'Called x with {"a": 2, "b": 1}'
