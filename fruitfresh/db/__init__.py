"""SQLite storage for fruit logs and preferences."""

from .fruit_log import FruitLogDB, Subscription
from .preferences import PreferenceDB
from .schema import ensure_schema

__all__ = [
    "FruitLogDB",
    "PreferenceDB",
    "Subscription",
    "ensure_schema",
]
