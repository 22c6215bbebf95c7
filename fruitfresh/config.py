"""TOML configuration loader for fruitfresh."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_DB_PATH = "~/.config/fruitfresh/fruitfresh.db"


@dataclass
class GeminiVisionConfig:
    api_key: str = ""
    model: str = "gemini-2.5-flash-preview-05-20"
    image_model: str = "gemini-2.5-flash-image-preview"
    base_url: str = DEFAULT_GEMINI_BASE_URL
    timeout: float = 60.0


@dataclass
class ClaudeVisionConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class VisionConfig:
    backend: str = "gemini"
    gemini: GeminiVisionConfig = field(default_factory=GeminiVisionConfig)
    claude: ClaudeVisionConfig = field(default_factory=ClaudeVisionConfig)


@dataclass
class CameraConfig:
    index: int = 0
    save_dir: str = "/tmp/fruitfresh"


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class UserConfig:
    id: str = "demoUser123"


@dataclass
class ReminderConfig:
    enabled: bool = False
    schedule: str = "0 15 * * *"


@dataclass
class FruitConfig:
    vision: VisionConfig = field(default_factory=VisionConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    user: UserConfig = field(default_factory=UserConfig)
    reminder: ReminderConfig = field(default_factory=ReminderConfig)


def load_config(path: str | Path | None = None) -> FruitConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path).expanduser()
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    vis = raw.get("vision", {})
    cam = raw.get("camera", {})
    dbs = raw.get("database", {})
    usr = raw.get("user", {})
    rem = raw.get("reminder", {})

    gemini_cfg = vis.get("gemini", {})
    claude_cfg = vis.get("claude", {})

    # Resolve API keys: config file → environment variable
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    defaults = GeminiVisionConfig()
    return FruitConfig(
        vision=VisionConfig(
            backend=vis.get("backend", "gemini"),
            gemini=GeminiVisionConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", defaults.model),
                image_model=gemini_cfg.get("image_model", defaults.image_model),
                base_url=gemini_cfg.get("base_url", defaults.base_url),
                timeout=float(gemini_cfg.get("timeout", defaults.timeout)),
            ),
            claude=ClaudeVisionConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        camera=CameraConfig(
            index=cam.get("index", 0),
            save_dir=cam.get("save_dir", "/tmp/fruitfresh"),
        ),
        database=DatabaseConfig(
            path=dbs.get("path", DEFAULT_DB_PATH),
        ),
        user=UserConfig(
            id=usr.get("id", "demoUser123"),
        ),
        reminder=ReminderConfig(
            enabled=rem.get("enabled", False),
            schedule=rem.get("schedule", "0 15 * * *"),
        ),
    )
