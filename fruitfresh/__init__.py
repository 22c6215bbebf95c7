"""Fruit ripeness and nutrition checks from a photo, with a fruit logbook."""

from .camera import CameraCapture, FruitCamera, load_image
from .config import (
    CameraConfig,
    DatabaseConfig,
    FruitConfig,
    ReminderConfig,
    UserConfig,
    VisionConfig,
    load_config,
)
from .context import AppContext, validate_postal_code
from .errors import (
    AnalysisError,
    FruitFreshError,
    MalformedResponse,
    NetworkFailure,
    PersistenceFailure,
    ValidationFailure,
)
from .logbook import DayLog, FruitLogEntry, FruitMark, date_key, group_by_date
from .orchestrator import AnalysisSession, AnalysisState, RecipeImage
from .parser import FruitAnalysis, parse_analysis_text
from .vision import FruitVisionBackend, create_backend, create_image_generator

__all__ = [
    "FruitCamera",
    "CameraCapture",
    "load_image",
    "FruitConfig",
    "VisionConfig",
    "CameraConfig",
    "DatabaseConfig",
    "UserConfig",
    "ReminderConfig",
    "load_config",
    "AppContext",
    "validate_postal_code",
    "FruitFreshError",
    "AnalysisError",
    "NetworkFailure",
    "MalformedResponse",
    "PersistenceFailure",
    "ValidationFailure",
    "FruitLogEntry",
    "FruitMark",
    "DayLog",
    "date_key",
    "group_by_date",
    "AnalysisSession",
    "AnalysisState",
    "RecipeImage",
    "FruitAnalysis",
    "parse_analysis_text",
    "FruitVisionBackend",
    "create_backend",
    "create_image_generator",
]
