"""Recipe illustration via the Gemini image-generation REST endpoint."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

import httpx

from ..config import DEFAULT_GEMINI_BASE_URL
from ..errors import MalformedResponse, NetworkFailure

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    data: bytes
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode()
        return f"data:{self.mime_type};base64,{encoded}"


def build_image_prompt(recipe_idea: str) -> str:
    return (
        f"A vibrant, high-quality, appealing photograph of: {recipe_idea}. "
        "Food photography style, bright lighting, clean background."
    )


class RecipeImageGenerator:
    """Generate a photo-style image for a recipe idea."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.5-flash-image-preview",
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(self, recipe_idea: str) -> GeneratedImage:
        """Request one image for *recipe_idea*.

        Raises:
            ValueError: If no API key is configured.
            NetworkFailure: Transport error or non-success status.
            MalformedResponse: No inline image data in the response.
        """
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        payload = {
            "contents": [{"parts": [{"text": build_image_prompt(recipe_idea)}]}],
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }
        url = f"{self._base_url}/models/{self._model}:generateContent"

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url, params={"key": self._api_key}, json=payload
                )
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"Image generation failed: {exc}") from exc

        if not response.is_success:
            raise NetworkFailure(
                f"Image generation failed: {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponse("Image response was not JSON.") from exc

        image = _find_inline_image(body)
        if image is None:
            raise MalformedResponse("No image data returned from API.")
        logger.info("Generated %d byte recipe image", len(image.data))
        return image


def _find_inline_image(body: object) -> GeneratedImage | None:
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    for part in parts:
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            return GeneratedImage(
                data=base64.b64decode(inline["data"]),
                mime_type=inline.get("mimeType", "image/png"),
            )
    return None
