"""Unit tests for the shared LLM client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from src.llm.client import LLMClient, LLMError
from src.llm.config import LLMConfig


class SampleOutput(BaseModel):
    """Sample Pydantic model for testing structured output."""

    name: str
    value: int


def _response(content: str | None, tool_arguments: str | None = None) -> MagicMock:
    response = MagicMock()
    message = MagicMock()
    message.content = content
    if tool_arguments is None:
        message.tool_calls = None
    else:
        call = MagicMock()
        call.function.arguments = tool_arguments
        message.tool_calls = [call]
    response.choices = [MagicMock(message=message)]
    return response


def _client(**overrides) -> LLMClient:
    values = {"provider": "openai", "model": "gpt-4o-mini", "max_retries": 0}
    values.update(overrides)
    return LLMClient(config=LLMConfig(_env_file=None, **values))


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_defaults(self, monkeypatch):
        """Defaults are usable without any environment."""
        for var in ("LLM_PROVIDER", "LLM_MODEL", "LLM_MAX_RETRIES", "LLM_TIMEOUT"):
            monkeypatch.delenv(var, raising=False)

        config = LLMConfig(_env_file=None)

        assert config.provider == "deepseek"
        assert config.max_retries == 1
        assert config.repair_temperature == 0.1

    def test_provider_is_lower_cased(self):
        """Provider names are normalized."""
        config = LLMConfig(_env_file=None, provider="  OpenAI ")
        assert config.provider == "openai"

    def test_reads_prefixed_env(self, monkeypatch):
        """Settings come from LLM_-prefixed variables."""
        monkeypatch.setenv("LLM_MODEL", "gpt-4.1")
        monkeypatch.setenv("LLM_TIMEOUT", "12.5")

        config = LLMConfig(_env_file=None)

        assert config.model == "gpt-4.1"
        assert config.timeout == 12.5

    def test_rejects_negative_retries(self):
        """max_retries must not be negative."""
        with pytest.raises(ValueError):
            LLMConfig(_env_file=None, max_retries=-1)


class TestModelName:
    """Tests for provider-prefixed model names."""

    def test_openai_model_unprefixed(self):
        assert _client()._get_model_name() == "gpt-4o-mini"

    def test_other_provider_is_prefixed(self):
        client = _client(provider="deepseek", model="deepseek-chat")
        assert client._get_model_name() == "deepseek/deepseek-chat"

    def test_base_url_routes_through_openai_prefix(self):
        client = _client(provider="local", model="llama3", base_url="http://localhost:8000/v1")
        assert client._get_model_name() == "openai/llama3"


class TestGenerateText:
    """Tests for plain text generation."""

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        """generate_text returns the completion content."""
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response("Hello there")
            text = await client.generate_text("Say hello", system_prompt="Be brief")

        assert text == "Hello there"
        messages = mock.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "Be brief"}
        assert messages[1]["content"] == "Say hello"

    @pytest.mark.asyncio
    async def test_temperature_override(self):
        """An explicit temperature wins over the config default."""
        client = _client(temperature=0.3)
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response("ok")
            await client.generate_text("x", temperature=0.75)

        assert mock.call_args.kwargs["temperature"] == 0.75

    @pytest.mark.asyncio
    async def test_none_content_becomes_empty_string(self):
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response(None)
            text = await client.generate_text("x")

        assert text == ""

    @pytest.mark.asyncio
    async def test_failure_raises_llm_error(self):
        """A failing call surfaces as LLMError once retries are exhausted."""
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.side_effect = RuntimeError("boom")
            with pytest.raises(LLMError) as exc_info:
                await client.generate_text("x")

        assert isinstance(exc_info.value.original_error, RuntimeError)

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self):
        """A failed attempt is retried before giving up."""
        client = _client(max_retries=1)
        with (
            patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock,
            patch("src.llm.client.asyncio.sleep", new_callable=AsyncMock),
        ):
            mock.side_effect = [RuntimeError("temporary"), _response("second")]
            text = await client.generate_text("x")

        assert text == "second"
        assert mock.call_count == 2


class TestGenerateJson:
    """Tests for structured JSON generation."""

    @pytest.mark.asyncio
    async def test_parses_valid_json(self):
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response('{"name": "a", "value": 1}')
            result = await client.generate_json("x", SampleOutput)

        assert result == SampleOutput(name="a", value=1)
        assert mock.call_args.kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_strips_code_fences_and_preamble(self):
        client = _client()
        fenced = '```json\n{"name": "b", "value": 2}\n```'
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response(fenced)
            fenced_result = await client.generate_json("x", SampleOutput)

            mock.return_value = _response('Sure! {"name": "c", "value": 3} done')
            preamble_result = await client.generate_json("x", SampleOutput)

        assert fenced_result.value == 2
        assert preamble_result.value == 3

    @pytest.mark.asyncio
    async def test_reads_tool_call_arguments(self):
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response(None, tool_arguments='{"name": "t", "value": 4}')
            result = await client.generate_json("x", SampleOutput)

        assert result.name == "t"

    @pytest.mark.asyncio
    async def test_malformed_json_gets_one_repair(self):
        """A malformed response is repaired with exactly one extra call."""
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.side_effect = [
                _response("{name: a, value: 1"),
                _response('{"name": "a", "value": 1}'),
            ]
            result = await client.generate_json("x", SampleOutput)

        assert result.value == 1
        assert mock.call_count == 2
        repair_messages = mock.call_args_list[1].kwargs["messages"]
        assert "{name: a, value: 1" in repair_messages[-1]["content"]
        assert mock.call_args_list[1].kwargs["temperature"] == 0.1

    @pytest.mark.asyncio
    async def test_still_malformed_after_repair_raises(self):
        client = _client()
        with patch("src.llm.client.acompletion", new_callable=AsyncMock) as mock:
            mock.return_value = _response("not json")
            with pytest.raises(LLMError, match="after repair"):
                await client.generate_json("x", SampleOutput)

        assert mock.call_count == 2
