"""Turn the free-form analysis text returned by the model into a FruitAnalysis.

The model is asked to answer with bolded headings (``**Wait Time**: ...``).
Parsing runs in two passes: every known heading present in the text is
located first, then each field takes the text between its own heading and
the next located heading. A heading that is missing or out of order only
affects its own field.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

RIPENESS_UNKNOWN = "Unknown"
RIPENESS_UNRIPE = "Unripe"
RIPENESS_PERFECT = "Perfectly Ripe"
RIPENESS_OVERRIPE = "Overripe"

DEFAULT_ANALYSIS = "No analysis provided."
DEFAULT_RECIPE_IDEA = "No recipe idea provided."


@dataclass
class FruitAnalysis:
    """Structured result of one fruit analysis."""

    fruit_name: str = "Fruit"
    analysis: str = DEFAULT_ANALYSIS
    ripeness: str = RIPENESS_UNKNOWN
    wait_time: str = "N/A"
    shelf_period: str = "N/A"
    ripeness_percentage: str = "N/A"
    nutrition: str = "No nutrition details provided."
    daily_intake: str = "No intake recommendation provided."
    seasonal_info: str = "No seasonal information provided."
    recipe_idea: str = DEFAULT_RECIPE_IDEA
    good_to_know: str = "No information provided."
    nutrition_score: int = 0

    @property
    def has_recipe_idea(self) -> bool:
        return bool(self.recipe_idea) and self.recipe_idea != DEFAULT_RECIPE_IDEA

    def to_dict(self) -> dict:
        return asdict(self)


# Longest labels first so "Nutrition Score" never resolves to "Nutrition".
_LABELS = [
    "Ripeness Percentage",
    "Nutrition Score",
    "Main Analysis",
    "Seasonal Info",
    "Daily Intake",
    "Shelf Period",
    "Recipe Idea",
    "Good to Know",
    "Fruit Name",
    "Wait Time",
    "Nutrition",
    "Metadata",
    "Details",
]

_HEADING_RE = re.compile(
    r"[-*•]?[ \t]*\*\*\s*("
    + "|".join(r"\s+".join(map(re.escape, label.split())) for label in _LABELS)
    + r")\s*:?\s*\*\*[ \t]*:?",
    re.IGNORECASE,
)

_SCORE_RE = re.compile(
    r"\*\*\s*Nutrition\s+Score\s*:?\s*\*\*\s*:?\s*(\d+)", re.IGNORECASE
)

_RIPENESS_RE = re.compile(r"perfectly ripe|unripe|overripe", re.IGNORECASE)

_RIPENESS_NAMES = {
    "perfectly ripe": RIPENESS_PERFECT,
    "unripe": RIPENESS_UNRIPE,
    "overripe": RIPENESS_OVERRIPE,
}

# heading label -> FruitAnalysis attribute
_SECTION_FIELDS = {
    "wait time": "wait_time",
    "shelf period": "shelf_period",
    "ripeness percentage": "ripeness_percentage",
    "nutrition": "nutrition",
    "daily intake": "daily_intake",
    "seasonal info": "seasonal_info",
    "recipe idea": "recipe_idea",
    "good to know": "good_to_know",
}

_TRAILING_NUMBERING_RE = re.compile(r"\s*(?<!\S)\d+\.?\s*$")
_WORDS_RE = re.compile(r"[\w\s]+")


def clean_text(value: str | None) -> str:
    """Strip whitespace and a trailing standalone ``N.`` numbering artifact."""
    if not value:
        return ""
    return _TRAILING_NUMBERING_RE.sub("", value.strip())


def _label_key(label: str) -> str:
    return " ".join(label.lower().split())


def locate_sections(text: str) -> dict[str, str]:
    """Map each heading found in *text* to the raw text under it.

    Only the first occurrence of a heading is used. A section ends where the
    next located heading (of any kind) starts, or at the end of the text.
    """
    matches = list(_HEADING_RE.finditer(text))
    sections: dict[str, str] = {}
    for i, match in enumerate(matches):
        key = _label_key(match.group(1))
        if key in sections:
            continue
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        sections[key] = text[match.end():end]
    return sections


def _parse_fruit_name(raw: str) -> str:
    for line in raw.splitlines():
        if line.strip():
            match = _WORDS_RE.match(line.strip())
            return clean_text(match.group(0)) if match else ""
    return ""


def _parse_ripeness(analysis: str) -> str:
    match = _RIPENESS_RE.search(analysis)
    if match is None:
        return RIPENESS_UNKNOWN
    return _RIPENESS_NAMES[match.group(0).lower()]


def parse_nutrition_score(text: str) -> int:
    """Return the integer after the Nutrition Score heading, or 0."""
    match = _SCORE_RE.search(text)
    if match is None:
        return 0
    try:
        score = int(match.group(1))
    except ValueError:
        return 0
    return max(0, min(100, score))


def parse_analysis_text(text: str | None) -> FruitAnalysis:
    """Parse a model response into a fully populated FruitAnalysis.

    Never raises. Any section that is missing, or empty after cleanup,
    keeps its default value.
    """
    result = FruitAnalysis()
    if not text:
        return result

    sections = locate_sections(text)

    if "fruit name" in sections:
        name = _parse_fruit_name(sections["fruit name"])
        if name:
            result.fruit_name = name

    if "main analysis" in sections:
        analysis = clean_text(sections["main analysis"])
        if analysis:
            result.analysis = analysis
        # Only the analysis paragraph decides ripeness; the recipe or
        # good-to-know sections often mention "ripe" too.
        result.ripeness = _parse_ripeness(analysis)

    for label, attr in _SECTION_FIELDS.items():
        if label not in sections:
            continue
        value = clean_text(sections[label])
        if value:
            setattr(result, attr, value)

    result.nutrition_score = parse_nutrition_score(text)
    return result
