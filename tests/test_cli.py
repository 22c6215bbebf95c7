"""Tests for the fruitfresh command line."""

import json
from unittest.mock import patch

import pytest

from fruitfresh.cli import main
from fruitfresh.errors import NetworkFailure
from fruitfresh.vision import FruitVisionBackend

RESPONSE = (
    "**Fruit Name**: Banana\n"
    "**Main Analysis**: Yellow with brown freckles, perfectly ripe.\n"
    "- **Wait Time**: Ready to eat\n"
    "- **Nutrition**: Potassium\n"
    "- **Recipe Idea**: Banana bread\n"
    "- **Nutrition Score**: 85\n"
)


class StubBackend(FruitVisionBackend):
    def __init__(self, text=RESPONSE, error=None):
        self.text = text
        self.error = error

    async def analyze(self, image, mime_type="image/jpeg"):
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        f'[database]\npath = "{tmp_path / "fruit.db"}"\n\n[user]\nid = "tester"\n'
    )
    return str(path)


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "banana.jpg"
    path.write_bytes(b"\xff\xd8fake-jpeg")
    return str(path)


def _run(config_path, *args):
    main(["--config", config_path, *args])


def _analyze(config_path, image_path, *args, backend=None):
    with patch("fruitfresh.cli.create_backend", return_value=backend or StubBackend()):
        with patch("fruitfresh.cli.create_image_generator", return_value=None):
            _run(config_path, "analyze", "--image", image_path, *args)


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out


class TestZip:
    def test_unset(self, config_path, capsys):
        _run(config_path, "zip")
        assert "Zip code not set." in capsys.readouterr().out

    def test_set_and_show(self, config_path, capsys):
        _run(config_path, "zip", "10001")
        assert "Zip code saved: 10001" in capsys.readouterr().out

        _run(config_path, "zip")
        assert capsys.readouterr().out.strip() == "10001"

    def test_invalid(self, config_path, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(config_path, "zip", "1234")
        assert exc.value.code == 1
        assert "Please enter a valid 5-digit zip code." in capsys.readouterr().err

    def test_tip_shown_until_zip_is_set(self, config_path, capsys):
        _run(config_path, "suggest")
        assert "fruitfresh zip" in capsys.readouterr().err

        _run(config_path, "zip", "10001")
        capsys.readouterr()
        _run(config_path, "suggest")
        captured = capsys.readouterr()
        assert "fruitfresh zip" not in captured.err
        assert "Fruit suggestion for 10001" in captured.out


class TestAnalyze:
    def test_renders_tab(self, config_path, image_path, capsys):
        _analyze(config_path, image_path, "--tab", "analysis")
        out = capsys.readouterr().out
        assert "Banana  [Perfectly Ripe]" in out
        assert "Ready to eat" in out

    def test_json(self, config_path, image_path, capsys):
        _analyze(config_path, image_path, "--tab", "analysis", "--json")
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{"):])
        assert payload["fruit_name"] == "Banana"
        assert payload["nutrition_score"] == 85

    def test_failure_exits(self, config_path, image_path, capsys):
        backend = StubBackend(error=NetworkFailure("API request failed: 503"))
        with pytest.raises(SystemExit) as exc:
            _analyze(config_path, image_path, backend=backend)
        assert exc.value.code == 1
        assert "Analysis failed: API request failed: 503" in capsys.readouterr().err

    def test_log_then_history(self, config_path, image_path, capsys):
        _analyze(config_path, image_path, "--tab", "nutrition", "--log")
        assert "Banana has been logged to your calendar!" in capsys.readouterr().out

        _run(config_path, "history")
        out = capsys.readouterr().out
        assert "- Banana" in out
        assert "Score: 85" in out

    def test_logbook_shows_logged_day(self, config_path, image_path, capsys):
        from datetime import date

        from fruitfresh.logbook import date_key

        _analyze(config_path, image_path, "--tab", "nutrition", "--log")
        capsys.readouterr()

        key = date_key(date.today())
        _run(config_path, "logbook", "--date", key)
        out = capsys.readouterr().out
        assert f"Fruits logged on {key}:" in out
        assert "  - Banana (85% vitality)" in out


def test_history_empty(config_path, capsys):
    _run(config_path, "history")
    assert "No fruit logs yet." in capsys.readouterr().out


def test_logbook_invalid_month(config_path, capsys):
    with pytest.raises(SystemExit) as exc:
        _run(config_path, "logbook", "--month", "September")
    assert exc.value.code == 1
    assert "Invalid month" in capsys.readouterr().err


def test_analyze_missing_image(config_path, tmp_path, capsys):
    missing = str(tmp_path / "nope.jpg")
    with pytest.raises(SystemExit) as exc:
        _analyze(config_path, missing)
    assert exc.value.code == 1
    assert "nope.jpg" in capsys.readouterr().err


def test_json_includes_recipe_image(config_path, image_path, capsys):
    from fruitfresh.vision.imagegen import GeneratedImage

    class StubGenerator:
        async def generate(self, recipe_idea):
            return GeneratedImage(data=b"abc")

    with patch("fruitfresh.cli.create_backend", return_value=StubBackend()):
        with patch("fruitfresh.cli.create_image_generator", return_value=StubGenerator()):
            _run(config_path, "analyze", "--image", image_path, "--tab", "more", "--json")

    out = capsys.readouterr().out
    payload = json.loads(out[out.index("{"):])
    assert payload["recipe_image"] == "data:image/png;base64,YWJj"


def test_remind_daemon_without_notifications(config_path, capsys):
    with patch("shutil.which", return_value=None):
        with pytest.raises(SystemExit) as exc:
            _run(config_path, "remind", "--daemon")
    assert exc.value.code == 1
    assert "notify-send not found" in capsys.readouterr().err
