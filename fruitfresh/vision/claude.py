"""Claude API vision backend for fruit analysis."""

from __future__ import annotations

import base64
import logging

from ..errors import MalformedResponse, NetworkFailure
from . import ANALYSIS_PROMPT, FruitVisionBackend

logger = logging.getLogger(__name__)


class ClaudeFruitBackend(FruitVisionBackend):
    """Analyze fruit photos using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": mime_type,
                    "data": base64.standard_b64encode(image).decode(),
                },
            },
            {"type": "text", "text": ANALYSIS_PROMPT},
        ]

        logger.info("Sending %d byte image to %s", len(image), self._model)
        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=2048,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as exc:
            raise NetworkFailure(f"API request failed: {exc}") from exc

        blocks = getattr(response, "content", None) or []
        text = getattr(blocks[0], "text", None) if blocks else None
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponse("Invalid AI response.")
        return text
