"""Gemini API vision backend for fruit analysis."""

from __future__ import annotations

import logging
from typing import Any

from ..errors import MalformedResponse, NetworkFailure
from . import ANALYSIS_PROMPT, FruitVisionBackend

logger = logging.getLogger(__name__)


class GeminiFruitBackend(FruitVisionBackend):
    """Analyze fruit photos using Google Gemini's vision capability."""

    def __init__(
        self, api_key: str = "", model: str = "gemini-2.5-flash-preview-05-20"
    ) -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        parts: list = [ANALYSIS_PROMPT, {"mime_type": mime_type, "data": image}]
        logger.info("Sending %d byte image to %s", len(image), self._model)
        response = await self._generate(parts)
        return _extract_text(response)

    async def _generate(self, parts: list) -> Any:
        try:
            import google.generativeai as genai
            from google.api_core import exceptions as google_exceptions
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)
        try:
            return await model.generate_content_async(parts)
        except google_exceptions.GoogleAPIError as exc:
            raise NetworkFailure(f"API request failed: {exc}") from exc


def _extract_text(response: Any) -> str:
    """Return candidates[0].content.parts[0].text or raise MalformedResponse."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise MalformedResponse("Invalid AI response.")
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    text = getattr(parts[0], "text", None) if parts else None
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponse("Invalid AI response.")
    return text
