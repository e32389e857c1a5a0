"""Shared client for the external text-generation service.

Public API:
    - LLMClient: text and JSON generation with retry and JSON repair
    - LLMError: raised when generation fails
    - LLMConfig / get_llm_config: LLM_-prefixed settings
"""

from src.llm.client import LLMClient, LLMError
from src.llm.config import LLMConfig, get_llm_config

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMConfig",
    "get_llm_config",
]
