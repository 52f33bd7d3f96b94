"""Gemini generateContent client used for JavaScript client generation."""

from __future__ import annotations

import logging

import httpx

from specforge.errors.exceptions import ConfigMissingError, UpstreamError
from specforge.integrations.base import TextGenerator

logger = logging.getLogger(__name__)


class GeminiGenerator(TextGenerator):
    """Calls ``{base_url}/models/{model}:generateContent`` once per prompt.

    There is no retry: any non-2xx status or malformed payload is raised as
    ``UpstreamError`` and the caller decides what to do.
    """

    generator_type: str = "gemini"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-2.0-flash",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ConfigMissingError("Generative API key is not configured")

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.info("Calling %s (prompt %d chars)", self.endpoint, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamError("gemini", f"Gemini request failed: {exc}") from exc

        if not response.is_success:
            logger.error("Gemini API error: %s %s", response.status_code, response.text[:500])
            raise UpstreamError(
                "gemini",
                f"Gemini API error: {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:2000]},
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("gemini", "Gemini API returned a non-JSON body") from exc

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data) -> str:
        """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Invalid response format from Gemini API: %s", str(data)[:500])
            raise UpstreamError("gemini", "Invalid response format from Gemini API") from exc
        if not isinstance(text, str):
            raise UpstreamError("gemini", "Invalid response format from Gemini API")
        return text
