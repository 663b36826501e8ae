"""Dataclasses that describe the editor state: elements, persons and style."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, Tuple

PERSON_LIST = "personList"
QUOTE = "quote"
ELEMENT_KINDS = (PERSON_LIST, QUOTE)

DEFAULT_LINE_SPACING = 10

PANEL_CONTENT = "content"
PANEL_STYLE = "style"


@dataclass(frozen=True)
class PersonEntry:
    id: str
    name: str = ""
    birthdate: Optional[date] = None


@dataclass(frozen=True)
class TextElement:
    id: str
    text: str
    x: float
    y: float
    font_size: int
    color: str
    font_family: str
    dragging: bool = False
    line_spacing: Optional[int] = None

    @property
    def kind(self) -> str:
        return self.id

    @property
    def spacing(self) -> int:
        """Line spacing with the default applied when the element has none."""
        if self.line_spacing is None:
            return DEFAULT_LINE_SPACING
        return self.line_spacing

    def moved_to(self, x: float, y: float) -> "TextElement":
        return replace(self, x=x, y=y)


@dataclass(frozen=True)
class StyleDefaults:
    font_family: str = "Arial"
    font_size: int = 24
    color: str = "#000000"
    line_spacing: int = DEFAULT_LINE_SPACING


def default_elements() -> Tuple[TextElement, ...]:
    """Elements every freshly loaded template starts with."""
    return (
        TextElement(
            id=PERSON_LIST,
            text="Person List",
            x=100,
            y=100,
            font_size=24,
            color="#000000",
            font_family="Arial",
            line_spacing=DEFAULT_LINE_SPACING,
        ),
        TextElement(
            id=QUOTE,
            text="Your quote here",
            x=100,
            y=200,
            font_size=18,
            color="#000000",
            font_family="Arial",
        ),
    )


def _initial_persons() -> Tuple[PersonEntry, ...]:
    return (PersonEntry(id="person-1"),)


@dataclass(frozen=True)
class EditorState:
    elements: Tuple[TextElement, ...] = ()
    persons: Tuple[PersonEntry, ...] = field(default_factory=_initial_persons)
    quote: str = ""
    selected_id: Optional[str] = None
    style: StyleDefaults = field(default_factory=StyleDefaults)
    panel: str = PANEL_CONTENT

    def element(self, element_id: Optional[str]) -> Optional[TextElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    @property
    def selected(self) -> Optional[TextElement]:
        return self.element(self.selected_id)

    @property
    def dragging(self) -> Optional[TextElement]:
        for element in self.elements:
            if element.dragging:
                return element
        return None

    def person(self, person_id: str) -> Optional[PersonEntry]:
        for person in self.persons:
            if person.id == person_id:
                return person
        return None
