"""Vision backend base class, analysis prompt, and factories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import FruitConfig
    from .imagegen import RecipeImageGenerator

ANALYSIS_PROMPT = """\
Analyze the fruit in this image.
0.  **Fruit Name**: Identify the fruit in the image.
1.  **Main Analysis**: Provide a one-paragraph analysis. Determine its ripeness (Unripe, Perfectly Ripe, Overripe). If unripe, estimate when it will be best to eat.
2.  **Metadata**: After the main analysis, provide these exact sub-headings and their values:
    - **Wait Time**: Estimated time until ripe. State "Ready to eat" if ripe.
    - **Shelf Period**: Estimated time it will last in its current state.
    - **Ripeness Percentage**: A numerical percentage of ripeness (e.g., 85%).
3.  **Details**: After the metadata, provide the following details using these exact sub-headings:
    - **Nutrition**: Key nutritional benefits.
    - **Daily Intake**: A general recommendation for daily consumption.
    - **Seasonal Info**: When is this fruit typically in season?
    - **Recipe Idea**: A simple recipe idea, like a smoothie or salad, with brief instructions.
    - **Good to Know**: If the fruit is overripe or spoiling, what are the potential health risks? Describe its energy potential.
    - **Nutrition Score**: A number from 0-100.
"""


class FruitVisionBackend(ABC):
    """Abstract base for fruit analysis from a single image."""

    @abstractmethod
    async def analyze(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        """Send the image with ANALYSIS_PROMPT and return the model's text.

        Raises:
            NetworkFailure: transport error or non-success status.
            MalformedResponse: no candidate text in the response.
        """
        ...


def create_backend(config: FruitConfig) -> FruitVisionBackend:
    """Create the analysis backend selected in configuration."""
    backend_name = config.vision.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiFruitBackend

            return GeminiFruitBackend(
                api_key=config.vision.gemini.api_key,
                model=config.vision.gemini.model,
            )
        case "claude":
            from .claude import ClaudeFruitBackend

            return ClaudeFruitBackend(
                api_key=config.vision.claude.api_key,
                model=config.vision.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )


def create_image_generator(config: FruitConfig) -> RecipeImageGenerator:
    """Create the recipe image generator (always Gemini)."""
    from .imagegen import RecipeImageGenerator

    gemini = config.vision.gemini
    return RecipeImageGenerator(
        api_key=gemini.api_key,
        model=gemini.image_model,
        base_url=gemini.base_url,
        timeout=gemini.timeout,
    )
