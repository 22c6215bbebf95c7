"""Plain-text rendering of analyses, the logbook calendar and suggestions."""

from __future__ import annotations

import calendar
import re
from typing import TYPE_CHECKING

from .logbook import DayLog, FruitLogEntry
from .orchestrator import AnalysisState

if TYPE_CHECKING:
    from .orchestrator import RecipeImage
    from .parser import FruitAnalysis

TABS = ("analysis", "nutrition", "more", "goodToKnow")

_BOLD = "\033[1m"
_RESET = "\033[0m"

_RIPENESS_COLORS = {
    "perfectly ripe": "\033[32m",
    "unripe": "\033[33m",
    "overripe": "\033[31m",
}

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")


def render_bold(text: str, color: bool = True) -> str:
    """Turn ``**markup**`` into terminal bold (or strip it)."""
    if not text:
        return ""
    replacement = rf"{_BOLD}\1{_RESET}" if color else r"\1"
    return _BOLD_RE.sub(replacement, text)


def ripeness_badge(ripeness: str, color: bool = True) -> str:
    label = f"[{ripeness or 'Unknown'}]"
    code = _RIPENESS_COLORS.get((ripeness or "").lower())
    if not color or code is None:
        return label
    return f"{code}{label}{_RESET}"


def vitality_meter(score: int) -> str:
    """Ten-cell bar for a 0-100 nutrition score."""
    score = max(0, min(100, score))
    filled = score // 10
    mood = "energetic" if score >= 50 else "sluggish"
    return f"{'█' * filled}{'░' * (10 - filled)} {score}% ({mood})"


def tab_title(tab: str) -> str:
    return "Good to Know" if tab == "goodToKnow" else tab.capitalize()


def render_tab(
    analysis: FruitAnalysis,
    tab: str,
    recipe_image: RecipeImage | None = None,
    color: bool = True,
) -> str:
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab!r}")

    lines = [f"── {tab_title(tab)} ──"]
    if tab == "analysis":
        lines += [
            f"{analysis.fruit_name}  {ripeness_badge(analysis.ripeness, color)}",
            render_bold(analysis.analysis, color),
            f"  Wait time:    {analysis.wait_time}",
            f"  Shelf period: {analysis.shelf_period}",
            f"  Ripeness:     {analysis.ripeness_percentage}",
        ]
    elif tab == "nutrition":
        lines += [
            f"Vitality: {vitality_meter(analysis.nutrition_score)}",
            render_bold(analysis.nutrition, color),
            f"Daily intake: {render_bold(analysis.daily_intake, color)}",
        ]
    elif tab == "more":
        lines += [
            f"In season: {render_bold(analysis.seasonal_info, color)}",
            f"Recipe idea: {render_bold(analysis.recipe_idea, color)}",
        ]
        if recipe_image is not None:
            lines.append(_recipe_image_status(recipe_image))
    else:
        lines.append(render_bold(analysis.good_to_know, color))
    return "\n".join(lines)


def _recipe_image_status(recipe_image: RecipeImage) -> str:
    match recipe_image.state:
        case AnalysisState.LOADING:
            return "Recipe image: generating..."
        case AnalysisState.SUCCESS:
            size = len(recipe_image.image.data) if recipe_image.image else 0
            return f"Recipe image: ready ({size} bytes)"
        case AnalysisState.FAILED:
            return f"Recipe image: {recipe_image.error}"
        case _:
            return "Recipe image: not requested"


def render_analysis(
    analysis: FruitAnalysis,
    tabs: tuple[str, ...] = TABS,
    recipe_image: RecipeImage | None = None,
    color: bool = True,
) -> str:
    return "\n\n".join(
        render_tab(analysis, tab, recipe_image, color) for tab in tabs
    )


def render_calendar(
    fruit_logs: dict[str, DayLog],
    year: int,
    month: int,
    selected: str | None = None,
) -> str:
    """Month grid; days with log entries are marked with ``*``.

    When *selected* names a logged day its fruits are listed below the grid.
    """
    lines = [f"{calendar.month_name[month]} {year}".center(28), "Su  Mo  Tu  We  Th  Fr  Sa"]
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    for week in cal.monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append("  ")
                continue
            key = f"{year}-{month}-{day}"
            mark = "*" if key in fruit_logs else " "
            if key == selected:
                mark = ">"
            cells.append(f"{day:>2}{mark}")
        lines.append(" ".join(c.ljust(3) for c in cells).rstrip())

    if selected and selected in fruit_logs:
        lines.append("")
        lines.append(f"Fruits logged on {selected}:")
        for fruit in fruit_logs[selected].fruits:
            lines.append(f"  - {fruit.name} ({fruit.score}% vitality)")
    return "\n".join(lines)


def render_history(entries: list[FruitLogEntry]) -> str:
    if not entries:
        return "No fruit logs yet."
    lines = ["Fruit Log History"]
    for entry in entries:
        lines.append(f"  {entry.date} - {entry.fruit_name} ({entry.created:%H:%M})")
        lines.append(f"    Score: {entry.nutrition_score}  Ripeness: {entry.ripeness or 'N/A'}")
        if entry.nutrition:
            lines.append(f"    Nutrition: {render_bold(entry.nutrition, color=False)}")
    return "\n".join(lines)


def render_suggestion(text: str) -> str:
    return "\n".join(["Today's Suggestion", f"  {text}"])

