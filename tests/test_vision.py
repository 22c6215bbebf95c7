"""Tests for vision backends (mocked API calls)."""

import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fruitfresh.config import load_config
from fruitfresh.errors import MalformedResponse, NetworkFailure
from fruitfresh.vision import ANALYSIS_PROMPT, create_backend, create_image_generator
from fruitfresh.vision.claude import ClaudeFruitBackend
from fruitfresh.vision.gemini import GeminiFruitBackend, _extract_text
from fruitfresh.vision.imagegen import RecipeImageGenerator

RESPONSE_TEXT = "**Fruit Name**: Apple\n**Nutrition Score**: 70"


class FakeAPIError(Exception):
    pass


def _gemini_response(text):
    part = SimpleNamespace(text=text)
    candidate = SimpleNamespace(content=SimpleNamespace(parts=[part]))
    return SimpleNamespace(candidates=[candidate])


@pytest.fixture
def mock_genai():
    """Inject mock google.generativeai / google.api_core modules."""
    genai = MagicMock()
    exceptions = MagicMock()
    exceptions.GoogleAPIError = FakeAPIError
    api_core = MagicMock()
    api_core.exceptions = exceptions
    google = MagicMock()
    google.generativeai = genai
    google.api_core = api_core
    modules = {
        "google": google,
        "google.generativeai": genai,
        "google.api_core": api_core,
        "google.api_core.exceptions": exceptions,
    }
    with patch.dict(sys.modules, modules):
        yield genai


class TestCreateBackend:
    def test_create_gemini_backend(self):
        config = load_config()
        backend = create_backend(config)
        assert isinstance(backend, GeminiFruitBackend)

    def test_create_claude_backend(self):
        config = load_config()
        config.vision.backend = "claude"
        backend = create_backend(config)
        assert isinstance(backend, ClaudeFruitBackend)

    def test_create_unknown_backend(self):
        config = load_config()
        config.vision.backend = "unknown"
        with pytest.raises(ValueError, match="Unknown vision backend"):
            create_backend(config)

    def test_create_image_generator(self):
        config = load_config()
        generator = create_image_generator(config)
        assert isinstance(generator, RecipeImageGenerator)


class TestPrompt:
    def test_prompt_lists_every_heading(self):
        for heading in (
            "Fruit Name", "Main Analysis", "Metadata", "Wait Time",
            "Shelf Period", "Ripeness Percentage", "Details", "Nutrition",
            "Daily Intake", "Seasonal Info", "Recipe Idea", "Good to Know",
            "Nutrition Score",
        ):
            assert f"**{heading}**" in ANALYSIS_PROMPT


class TestGeminiExtractText:
    def test_extracts_first_part_text(self):
        assert _extract_text(_gemini_response(RESPONSE_TEXT)) == RESPONSE_TEXT

    def test_no_candidates(self):
        with pytest.raises(MalformedResponse):
            _extract_text(SimpleNamespace(candidates=[]))

    def test_no_parts(self):
        candidate = SimpleNamespace(content=SimpleNamespace(parts=[]))
        with pytest.raises(MalformedResponse):
            _extract_text(SimpleNamespace(candidates=[candidate]))

    def test_blank_text(self):
        with pytest.raises(MalformedResponse):
            _extract_text(_gemini_response("   "))


class TestGeminiFruitBackend:
    @pytest.mark.asyncio
    async def test_analyze_requires_api_key(self):
        backend = GeminiFruitBackend(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await backend.analyze(b"img")

    @pytest.mark.asyncio
    async def test_analyze_sends_prompt_and_image(self):
        backend = GeminiFruitBackend(api_key="test-key")
        generate = AsyncMock(return_value=_gemini_response(RESPONSE_TEXT))
        with patch.object(backend, "_generate", generate):
            text = await backend.analyze(b"\x89PNG", "image/png")

        assert text == RESPONSE_TEXT
        parts = generate.await_args.args[0]
        assert parts[0] == ANALYSIS_PROMPT
        assert parts[1] == {"mime_type": "image/png", "data": b"\x89PNG"}

    @pytest.mark.asyncio
    async def test_analyze_with_mocked_sdk(self, mock_genai):
        model = MagicMock()
        model.generate_content_async = AsyncMock(
            return_value=_gemini_response(RESPONSE_TEXT)
        )
        mock_genai.GenerativeModel.return_value = model

        backend = GeminiFruitBackend(api_key="test-key", model="gemini-test")
        text = await backend.analyze(b"img")

        assert text == RESPONSE_TEXT
        mock_genai.configure.assert_called_once_with(api_key="test-key")
        mock_genai.GenerativeModel.assert_called_once_with("gemini-test")

    @pytest.mark.asyncio
    async def test_api_error_becomes_network_failure(self, mock_genai):
        model = MagicMock()
        model.generate_content_async = AsyncMock(
            side_effect=FakeAPIError("503 Service Unavailable")
        )
        mock_genai.GenerativeModel.return_value = model

        backend = GeminiFruitBackend(api_key="test-key")
        with pytest.raises(NetworkFailure, match="503"):
            await backend.analyze(b"img")


class TestClaudeFruitBackend:
    @pytest.mark.asyncio
    async def test_analyze_requires_api_key(self):
        backend = ClaudeFruitBackend(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await backend.analyze(b"img")

    @pytest.mark.asyncio
    async def test_analyze_mocked(self):
        mock_response = MagicMock()
        mock_response.content = [SimpleNamespace(text=RESPONSE_TEXT)]

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client
        mock_anthropic.APIError = FakeAPIError

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            backend = ClaudeFruitBackend(api_key="test-key")
            text = await backend.analyze(b"img", "image/png")

        assert text == RESPONSE_TEXT
        content = mock_client.messages.create.await_args.kwargs["messages"][0]["content"]
        assert content[0]["source"]["media_type"] == "image/png"
        assert content[1]["text"] == ANALYSIS_PROMPT

    @pytest.mark.asyncio
    async def test_empty_content_is_malformed(self):
        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)
        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client
        mock_anthropic.APIError = FakeAPIError

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            backend = ClaudeFruitBackend(api_key="test-key")
            with pytest.raises(MalformedResponse):
                await backend.analyze(b"img")

    @pytest.mark.asyncio
    async def test_api_error_becomes_network_failure(self):
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(side_effect=FakeAPIError("overloaded"))
        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client
        mock_anthropic.APIError = FakeAPIError

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            backend = ClaudeFruitBackend(api_key="test-key")
            with pytest.raises(NetworkFailure, match="overloaded"):
                await backend.analyze(b"img")
