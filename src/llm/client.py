"""LLM client for the job-fit pipeline.

Provides a unified interface for LLM calls with JSON output support,
retry logic, a single malformed-JSON repair round-trip, and error handling
using LiteLLM.
"""

from __future__ import annotations

import asyncio
import logging
import os
import warnings
from typing import TypeVar

from litellm import Timeout, acompletion
from pydantic import BaseModel, ValidationError

from src.llm.config import LLMConfig, get_llm_config

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)

JSON_SYSTEM_PROMPT = (
    "You output ONLY valid JSON. No markdown fences, no commentary, "
    "no trailing text."
)
REPAIR_SYSTEM_PROMPT = "Repair the JSON. Output ONLY valid JSON."
REPAIR_USER_PROMPT = "Fix this into valid JSON ONLY:\n\n{raw}"


class LLMError(Exception):
    """Exception raised when LLM operations fail."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class LLMClient:
    """Client for the external text-generation service.

    Callers treat every LLMError as a soft failure of the tier or attempt
    that issued the call; nothing in the pipeline lets one escape as fatal.
    """

    def __init__(self, config: LLMConfig | None = None):
        """Initialize the LLM client.

        Args:
            config: Optional LLMConfig. Uses global config if not provided.
        """
        self.config = config or get_llm_config()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Set up provider-specific environment variables.

        Some providers (like Anthropic) require environment variables for
        custom base URLs rather than passing them as parameters.
        """
        if self.config.base_url and self.config.provider == "anthropic":
            # Strip /v1 suffix if present since Anthropic SDK adds it
            base_url = self.config.base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.api_key

    def _get_model_name(self) -> str:
        """Get the model name formatted for LiteLLM.

        Returns:
            Model name with provider prefix if needed.
        """
        if self.config.provider == "anthropic":
            if "/" in self.config.model:
                return self.config.model
            return f"anthropic/{self.config.model}"

        # Custom base URLs (local models, proxies) route through the
        # OpenAI-compatible endpoint
        if self.config.base_url:
            if "/" in self.config.model:
                return self.config.model
            return f"openai/{self.config.model}"

        if self.config.provider == "openai":
            return self.config.model

        if self.config.model.startswith(f"{self.config.provider}/"):
            return self.config.model
        return f"{self.config.provider}/{self.config.model}"

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate plain text response.

        Args:
            prompt: The user prompt to send to the LLM.
            system_prompt: Optional system prompt for context.
            temperature: Sampling temperature. Uses config default if None.

        Returns:
            Generated text response (may be empty).

        Raises:
            LLMError: If the LLM call fails or times out.
        """
        messages = _build_messages(prompt, system_prompt)
        return await self._complete(messages, temperature)

    async def generate_json(
        self,
        prompt: str,
        output_model: type[T],
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> T:
        """Generate a JSON object validated against a Pydantic model.

        A malformed response gets exactly one repair round-trip asking the
        same service to fix it into valid JSON.

        Args:
            prompt: The user prompt to send to the LLM.
            output_model: Pydantic model class defining the expected output.
            system_prompt: Optional system prompt. Defaults to a JSON-only prompt.
            temperature: Sampling temperature. Uses config default if None.

        Returns:
            Parsed Pydantic model instance.

        Raises:
            LLMError: If the call fails, or the response is still invalid
                after the repair round-trip.
        """
        messages = _build_messages(prompt, system_prompt or JSON_SYSTEM_PROMPT)
        content = await self._complete(messages, temperature, json_mode=True)

        try:
            return self._parse_json(content, output_model)
        except LLMError as e:
            logger.warning(f"Malformed JSON from LLM, attempting one repair: {e}")

        repair_messages = _build_messages(
            REPAIR_USER_PROMPT.format(raw=content), REPAIR_SYSTEM_PROMPT
        )
        repaired = await self._complete(
            repair_messages, self.config.repair_temperature, json_mode=True
        )
        try:
            return self._parse_json(repaired, output_model)
        except LLMError as e:
            raise LLMError(
                f"LLM response is not valid JSON after repair: {e}",
                e.original_error,
            ) from e

    async def _complete(
        self,
        messages: list[dict],
        temperature: float | None,
        json_mode: bool = False,
    ) -> str:
        """Call the service with retries and return the message content."""
        last_error: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                response = await self._call_completion(
                    messages=messages,
                    temperature=temperature,
                    json_mode=json_mode,
                )
                return _message_content(response)

            except Timeout as e:
                raise LLMError(
                    f"LLM request timed out (timeout={self.config.timeout}s). "
                    "Increase `LLM_TIMEOUT` or use a faster model.",
                    e,
                ) from e

            except asyncio.TimeoutError as e:
                raise LLMError("LLM request timed out", e) from e

            except Exception as e:
                last_error = e
                if attempt < self.config.max_retries:
                    is_rate_limit = "rate_limit" in str(e).lower() or "429" in str(e)
                    base_wait = 8 if is_rate_limit else 2
                    wait_time = base_wait * (attempt + 1)
                    logger.warning(
                        f"LLM call failed (attempt {attempt + 1}), retrying in {wait_time}s: {e}"
                    )
                    await asyncio.sleep(wait_time)
                else:
                    raise LLMError(f"LLM call failed after retries: {e}", e) from e

        raise LLMError(f"LLM call failed: {last_error}", last_error)

    async def _call_completion(
        self,
        messages: list[dict],
        temperature: float | None = None,
        json_mode: bool = False,
    ):
        """Make the actual LLM API call.

        Args:
            messages: List of message dictionaries.
            temperature: Sampling temperature override.
            json_mode: Ask the provider for a JSON object response.

        Returns:
            LiteLLM completion response.
        """
        kwargs = {
            "model": self._get_model_name(),
            "messages": messages,
            "timeout": self.config.timeout,
            "temperature": (
                self.config.temperature if temperature is None else temperature
            ),
        }

        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key

        # For Anthropic, base_url is set via env var in _setup_provider_env()
        if self.config.base_url and self.config.provider != "anthropic":
            kwargs["base_url"] = self.config.base_url

        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        return await acompletion(**kwargs)

    def _parse_json(self, content: str, output_model: type[T]) -> T:
        """Parse and validate a JSON response.

        Raises:
            LLMError: If parsing or validation fails.
        """
        if not content or not content.strip():
            raise LLMError("LLM returned no content to parse.")

        content = self._extract_json_from_response(content)

        try:
            return output_model.model_validate_json(content)
        except ValidationError as e:
            raise LLMError(
                f"Failed to parse LLM response - validation error: {e}", e
            ) from e
        except ValueError as e:
            raise LLMError(f"Failed to parse LLM response as JSON: {e}", e) from e

    def _extract_json_from_response(self, content: str) -> str:
        """Extract JSON from response, handling markdown code fences.

        Args:
            content: Raw response content.

        Returns:
            Extracted JSON string.
        """
        content = content.strip()

        # Remove markdown code fences (```json ... ``` or ``` ... ```)
        if content.startswith("```"):
            first_newline = content.find("\n")
            if first_newline != -1:
                content = content[first_newline + 1 :]

            if content.endswith("```"):
                content = content[:-3]

            content = content.strip()

        if content.startswith("{") or content.startswith("["):
            return content

        def extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
            start = text.find(open_char)
            if start == -1:
                return None

            depth = 0
            for idx in range(start, len(text)):
                ch = text[idx]
                if ch == open_char:
                    depth += 1
                elif ch == close_char:
                    depth -= 1
                    if depth == 0:
                        return text[start : idx + 1].strip()
            return None

        # Some models prepend non-JSON text (reasoning). Extract the first JSON object.
        extracted = extract_balanced(content, "{", "}")
        if extracted is not None:
            return extracted

        return content


def _build_messages(prompt: str, system_prompt: str | None) -> list[dict]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _message_content(response) -> str:
    message = response.choices[0].message
    content = getattr(message, "content", None)

    # Some providers return structured output as tool call arguments with no content.
    if content is None:
        tool_calls = getattr(message, "tool_calls", None) or []
        if tool_calls:
            function = getattr(tool_calls[0], "function", None)
            arguments = getattr(function, "arguments", None)
            if isinstance(arguments, str) and arguments.strip():
                content = arguments

    return content or ""
