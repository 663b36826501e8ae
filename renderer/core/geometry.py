"""
Text layout and bounding boxes for the two element kinds.

The renderer draws the selection outline from ``element_box`` and the
hit-tester tests points against the very same box (inflated for touch), so
what is outlined is what is clickable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from renderer.core.models import PERSON_LIST, QUOTE, EditorState, PersonEntry, TextElement

MOUSE_PADDING = 0
TOUCH_PADDING = 20

OUTLINE_MARGIN = 5
PLACEHOLDER_LINE = "Name - Birthdate"
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


@dataclass(frozen=True)
class Box:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def inflate(self, padding: float) -> "Box":
        if not padding:
            return self
        return Box(
            self.left - padding,
            self.top - padding,
            self.width + 2 * padding,
            self.height + 2 * padding,
        )


@dataclass(frozen=True)
class PersonLine:
    person_id: str
    text: str
    offset: float


# ─────────────────────────────────────────────
# Text
# ─────────────────────────────────────────────

def format_birthdate(value: date) -> str:
    """``January 1, 2000``"""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def person_display_text(person: PersonEntry) -> str:
    if not person.name and not person.birthdate:
        return ""
    text = person.name if person.name else "Name"
    if person.birthdate:
        text += " - " + format_birthdate(person.birthdate)
    elif person.name:
        text += " - Birthdate"
    return text


def is_drawn_line(text: str) -> bool:
    # also matches a person literally named "Name" without a birthdate
    stripped = text.strip()
    return stripped != PLACEHOLDER_LINE and stripped != ""


def layout_person_lines(element: TextElement, persons: Sequence[PersonEntry]) -> List[PersonLine]:
    """Drawn lines with their vertical offset from the element anchor."""
    lines: List[PersonLine] = []
    offset = 0
    for person in persons:
        text = person_display_text(person)
        if not is_drawn_line(text):
            continue
        lines.append(PersonLine(person.id, text, offset))
        offset += element.font_size + element.spacing
    return lines


def quote_display_text(element: TextElement, quote: str) -> str:
    """The quote as one line; line breaks become spaces."""
    text = quote if quote else element.text
    return _LINE_BREAK_RE.sub(" ", text)


# ─────────────────────────────────────────────
# Boxes
# ─────────────────────────────────────────────

def person_list_box(element: TextElement, persons: Sequence[PersonEntry], measurer, padding: float = 0) -> Box:
    lines = layout_person_lines(element, persons)
    max_width = max(
        (measurer.measure(line.text, element.font_size, element.font_family) for line in lines),
        default=0.0,
    )
    # height follows the person count, skipped lines included
    height = len(persons) * (element.font_size + element.spacing)
    box = Box(
        element.x - OUTLINE_MARGIN,
        element.y - element.font_size,
        max_width + 2 * OUTLINE_MARGIN,
        height,
    )
    return box.inflate(padding)


def quote_box(element: TextElement, quote: str, measurer, padding: float = 0) -> Box:
    text = quote_display_text(element, quote)
    width = measurer.measure(text, element.font_size, element.font_family)
    box = Box(
        element.x - OUTLINE_MARGIN,
        element.y - element.font_size,
        width + 2 * OUTLINE_MARGIN,
        element.font_size + 10,
    )
    return box.inflate(padding)


def element_box(element: TextElement, state: EditorState, measurer, padding: float = 0) -> Optional[Box]:
    if element.kind == PERSON_LIST:
        return person_list_box(element, state.persons, measurer, padding)
    if element.kind == QUOTE:
        return quote_box(element, state.quote, measurer, padding)
    return None
