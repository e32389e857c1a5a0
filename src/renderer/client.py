"""HTTP client for the external document-rendering service."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.renderer.config import RendererConfig, get_renderer_config
from src.renderer.models import RendererError

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_CHARS = 800


def join_url(base: str, path: str) -> str:
    """Join base and path with exactly one slash between them."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def parse_maybe_json_string(text: str | None) -> Any:
    """Decode a response body that may be a JSON string, object or bare text.

    Returns:
        The decoded JSON value for quoted strings and objects, otherwise the
        stripped text without surrounding quotes.
    """
    value = (text or "").strip()
    if not value:
        return ""
    quoted = (value.startswith('"') and value.endswith('"')) or (
        value.startswith("'") and value.endswith("'")
    )
    if quoted or value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except ValueError:
            pass
    return value.strip("\"'")


class RendererClient:
    """Thin async client over the rendering service's HTTP API."""

    def __init__(
        self,
        config: RendererConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            config: Optional RendererConfig. Uses global config if not provided.
            transport: Optional httpx transport (used by tests).
        """
        self.config = config or get_renderer_config()
        self.transport = transport

    def require_configured(self) -> None:
        """Raise if the base URL or API key is missing.

        Raises:
            RendererError: If the client cannot reach the service.
        """
        if not self.config.configured:
            raise RendererError(
                "Rendering service is not configured. "
                "Set RENDERER_BASE_URL and RENDERER_API_KEY."
            )

    async def import_resume(self, payload: dict) -> httpx.Response:
        """POST a document to the import endpoint.

        The response is returned whatever its status so that the caller can
        inspect validation errors.

        Raises:
            RendererError: On network failure or timeout.
        """
        self.require_configured()
        url = join_url(self.config.base_url, self.config.import_path)
        return await self._request("POST", url, json=payload)

    async def get_pdf_url(self, resume_id: str) -> str:
        """Ask the printer endpoint for a PDF URL.

        Raises:
            RendererError: On failure or when no URL is returned.
        """
        self.require_configured()
        path = self.config.pdf_path.format(resume_id=quote(resume_id, safe=""))
        response = await self._request("GET", join_url(self.config.base_url, path))
        if not response.is_success:
            raise RendererError(
                f"PDF export failed HTTP {response.status_code}: "
                f"{response.text[:MAX_ERROR_BODY_CHARS]}",
                status_code=response.status_code,
                body=response.text,
            )

        value = parse_maybe_json_string(response.text)
        if isinstance(value, dict):
            value = value.get("url") or value.get("href") or ""
        if not isinstance(value, str) or not value:
            raise RendererError(
                "Rendering service did not return a PDF URL",
                status_code=response.status_code,
                body=response.text,
            )
        return value

    async def download(self, url: str) -> bytes:
        """Download a rendered file.

        Raises:
            RendererError: On failure.
        """
        response = await self._request("GET", url)
        if not response.is_success:
            raise RendererError(
                f"Download failed HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text[:MAX_ERROR_BODY_CHARS],
            )
        return response.content

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {"x-api-key": self.config.api_key} if self.config.api_key else {}
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self.transport,
                headers=headers,
                follow_redirects=True,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise RendererError(f"Rendering service timed out: {e}") from e
        except httpx.HTTPError as e:
            raise RendererError(f"Rendering service request failed: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response
