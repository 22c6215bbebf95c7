"""Daily fruit suggestion and reminder text."""

from __future__ import annotations

REMINDER_TITLE = "Fruit Fresh Reminder!"

_DEFAULT_SUGGESTION = (
    "Try a ripe banana today! "
    "It's great for potassium and provides a natural energy boost."
)


def daily_suggestion(postal_code: str = "") -> str:
    # TODO: use local weather for the postal code once a forecast source is configured
    if postal_code:
        return f"Fruit suggestion for {postal_code}: Try a ripe banana today!"
    return _DEFAULT_SUGGESTION


def reminder_body(suggestion: str) -> str:
    """Reminder text built from the first sentence of *suggestion*."""
    return f"Time for a healthy snack! How about that {suggestion.split('!')[0]}?"
