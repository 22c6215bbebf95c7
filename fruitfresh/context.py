"""Application context shared by the CLI commands and scheduled jobs."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .config import FruitConfig
from .db import FruitLogDB, PreferenceDB
from .db.preferences import POSTAL_CODE_KEY
from .errors import ValidationFailure

logger = logging.getLogger(__name__)

_POSTAL_CODE_RE = re.compile(r"[0-9]{5}")

POSTAL_CODE_ERROR = "Please enter a valid 5-digit zip code."


def validate_postal_code(code: str) -> str:
    """Return *code* if it is exactly five digits, else raise ValidationFailure."""
    if not _POSTAL_CODE_RE.fullmatch(code or ""):
        raise ValidationFailure(POSTAL_CODE_ERROR)
    return code


@dataclass
class AppContext:
    """Per-process state: config, current user, postal code and stores.

    Created once at startup; the postal code changes only through
    :meth:`set_postal_code`.
    """

    config: FruitConfig
    user_id: str
    postal_code: str
    preferences: PreferenceDB
    fruit_logs: FruitLogDB

    @classmethod
    def create(cls, config: FruitConfig) -> AppContext:
        preferences = PreferenceDB(config.database.path)
        fruit_logs = FruitLogDB(config.database.path)
        return cls(
            config=config,
            user_id=config.user.id,
            postal_code=preferences.get(POSTAL_CODE_KEY),
            preferences=preferences,
            fruit_logs=fruit_logs,
        )

    @property
    def needs_postal_code(self) -> bool:
        return not self.postal_code

    def set_postal_code(self, code: str) -> None:
        code = validate_postal_code(code.strip())
        self.preferences.set(POSTAL_CODE_KEY, code)
        self.postal_code = code
        logger.info("Postal code updated")

    def close(self) -> None:
        self.fruit_logs.close()
        self.preferences.close()
