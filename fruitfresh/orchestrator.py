"""Analysis state machine: one capture → analysis → view cycle."""

from __future__ import annotations

import base64
import enum
import logging
from typing import TYPE_CHECKING

from .errors import AnalysisError
from .parser import FruitAnalysis, parse_analysis_text

if TYPE_CHECKING:
    from .vision import FruitVisionBackend
    from .vision.imagegen import GeneratedImage, RecipeImageGenerator

logger = logging.getLogger(__name__)

RECIPE_IMAGE_ERROR = "Sorry, couldn't create an image for this recipe."


class AnalysisState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class RecipeImage:
    """Lazily generated illustration bound to one analysis record."""

    def __init__(self, analysis: FruitAnalysis) -> None:
        self.analysis = analysis
        self.state = AnalysisState.IDLE
        self.image: GeneratedImage | None = None
        self.error: str | None = None


class AnalysisSession:
    """Holds the visible analysis state for one user.

    Each call to :meth:`analyze` takes a new request token. When a call
    completes, its result is applied only if its token is still the latest
    one issued; responses from superseded requests are dropped.
    """

    def __init__(
        self,
        backend: FruitVisionBackend,
        image_generator: RecipeImageGenerator | None = None,
    ) -> None:
        self._backend = backend
        self._image_generator = image_generator
        self._latest_token = 0

        self.state = AnalysisState.IDLE
        self.image_url: str | None = None
        self.result: FruitAnalysis | None = None
        self.error: str | None = None
        self.recipe_image: RecipeImage | None = None

    @property
    def is_loading(self) -> bool:
        return self.state is AnalysisState.LOADING

    def _issue_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def _is_current(self, token: int) -> bool:
        return token == self._latest_token

    async def analyze(
        self, image: bytes, mime_type: str = "image/jpeg"
    ) -> FruitAnalysis | None:
        """Analyze *image* and update the session state.

        Returns the parsed record if this request is still current when it
        finishes, otherwise None. Failures are recorded in ``error``, not
        raised.
        """
        token = self._issue_token()

        # Show the captured image before the request resolves.
        encoded = base64.b64encode(image).decode()
        self.image_url = f"data:{mime_type};base64,{encoded}"
        self.state = AnalysisState.LOADING
        self.result = None
        self.error = None
        self.recipe_image = None

        try:
            text = await self._backend.analyze(image, mime_type)
        except AnalysisError as exc:
            if not self._is_current(token):
                logger.debug("Dropping failure from stale request %d", token)
                return None
            logger.warning("Analysis request %d failed: %s", token, exc)
            self.error = f"Analysis failed: {exc}"
            self.state = AnalysisState.FAILED
            return None
        except Exception as exc:
            # Unexpected errors still end the request, then propagate.
            if self._is_current(token):
                logger.error("Analysis request %d raised: %s", token, exc)
                self.error = f"Analysis failed: {exc}"
                self.state = AnalysisState.FAILED
            raise

        if not self._is_current(token):
            logger.debug("Dropping response from stale request %d", token)
            return None

        analysis = parse_analysis_text(text)
        self.result = analysis
        self.recipe_image = RecipeImage(analysis)
        self.state = AnalysisState.SUCCESS
        logger.info(
            "Analyzed %s: %s (score %d)",
            analysis.fruit_name,
            analysis.ripeness,
            analysis.nutrition_score,
        )
        return analysis

    async def ensure_recipe_image(self) -> RecipeImage | None:
        """Generate the recipe illustration once for the current record.

        Called when the "more" view is first shown. Later calls return the
        cached state without contacting the endpoint again.
        """
        holder = self.recipe_image
        if holder is None or self._image_generator is None:
            return holder
        if not holder.analysis.has_recipe_idea:
            return holder
        if holder.state is not AnalysisState.IDLE:
            return holder

        holder.state = AnalysisState.LOADING
        holder.error = None
        try:
            image = await self._image_generator.generate(holder.analysis.recipe_idea)
        except (AnalysisError, ValueError) as exc:
            logger.warning("Recipe image generation failed: %s", exc)
            holder.error = RECIPE_IMAGE_ERROR
            holder.state = AnalysisState.FAILED
            return holder

        holder.image = image
        holder.state = AnalysisState.SUCCESS
        if holder is not self.recipe_image:
            logger.debug("Recipe image finished for a superseded analysis")
        return holder
