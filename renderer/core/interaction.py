"""
Editor state transitions.

Every operation is a pure function ``(EditorState, ...) -> EditorState``.
``EditorController`` keeps the current state, applies the functions, tells
listeners to redraw and reports ``EditorError`` through the notifier.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from renderer.core.errors import ConstraintViolation, EditorError
from renderer.core.hit_test import POINTER_MOUSE, hit_test, padding_for
from renderer.core.models import (
    PANEL_CONTENT,
    PANEL_STYLE,
    PERSON_LIST,
    EditorState,
    PersonEntry,
    TextElement,
    default_elements,
)

logger = logging.getLogger(__name__)

MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 72
MIN_LINE_SPACING = 0
MAX_LINE_SPACING = 40

_PERSON_ID_RE = re.compile(r"^person-(\d+)$")


class Phase(Enum):
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"


def phase(state: EditorState) -> Phase:
    if state.dragging is not None:
        return Phase.DRAGGING
    if state.selected_id is not None:
        return Phase.SELECTED
    return Phase.IDLE


# ─────────────────────────────────────────────
# Template
# ─────────────────────────────────────────────

def load_template(state: EditorState) -> EditorState:
    """Fresh elements for a (re)loaded template; persons and quote are kept."""
    return replace(state, elements=default_elements(), selected_id=None, panel=PANEL_CONTENT)


# ─────────────────────────────────────────────
# Pointer
# ─────────────────────────────────────────────

def pointer_down(state: EditorState, x: float, y: float, measurer, padding: float = 0) -> EditorState:
    hit_id = hit_test(state, x, y, measurer, padding)
    if hit_id is None:
        return replace(
            state,
            elements=_with_dragging(state.elements, None),
            selected_id=None,
            panel=PANEL_CONTENT,
        )

    element = state.element(hit_id)
    style = replace(
        state.style,
        font_family=element.font_family,
        font_size=element.font_size,
        color=element.color,
    )
    if element.kind == PERSON_LIST:
        style = replace(style, line_spacing=element.spacing)

    return replace(
        state,
        elements=_with_dragging(state.elements, hit_id),
        selected_id=hit_id,
        style=style,
        panel=PANEL_STYLE,
    )


def pointer_move(state: EditorState, x: float, y: float) -> EditorState:
    dragged = state.dragging
    if dragged is None:
        return state
    # the anchor jumps to the pointer, no grab offset
    return _update_element(state, dragged.id, lambda el: el.moved_to(x, y))


def pointer_up(state: EditorState) -> EditorState:
    if state.dragging is None:
        return state
    return replace(state, elements=_with_dragging(state.elements, None))


def _with_dragging(elements, dragging_id: Optional[str]):
    return tuple(
        el if el.dragging == (el.id == dragging_id) else replace(el, dragging=el.id == dragging_id)
        for el in elements
    )


def _update_element(state: EditorState, element_id: str, update: Callable[[TextElement], TextElement]) -> EditorState:
    return replace(
        state,
        elements=tuple(update(el) if el.id == element_id else el for el in state.elements),
    )


# ─────────────────────────────────────────────
# Style panel
# ─────────────────────────────────────────────

def set_font_family(state: EditorState, family: str) -> EditorState:
    state = replace(state, style=replace(state.style, font_family=family))
    return _update_selected(state, font_family=family)


def set_font_size(state: EditorState, size: int) -> EditorState:
    size = _clamp(int(size), MIN_FONT_SIZE, MAX_FONT_SIZE)
    state = replace(state, style=replace(state.style, font_size=size))
    return _update_selected(state, font_size=size)


def set_color(state: EditorState, color: str) -> EditorState:
    state = replace(state, style=replace(state.style, color=color))
    return _update_selected(state, color=color)


def set_line_spacing(state: EditorState, spacing: int) -> EditorState:
    spacing = _clamp(int(spacing), MIN_LINE_SPACING, MAX_LINE_SPACING)
    state = replace(state, style=replace(state.style, line_spacing=spacing))
    selected = state.selected
    if selected is None or selected.kind != PERSON_LIST:
        return state
    return _update_element(state, selected.id, lambda el: replace(el, line_spacing=spacing))


def _update_selected(state: EditorState, **changes) -> EditorState:
    if state.selected is None:
        return state
    return _update_element(state, state.selected_id, lambda el: replace(el, **changes))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


# ─────────────────────────────────────────────
# Persons & quote
# ─────────────────────────────────────────────

def next_person_id(persons) -> str:
    numbers = [int(m.group(1)) for m in (_PERSON_ID_RE.match(p.id) for p in persons) if m]
    return f"person-{max(numbers, default=0) + 1}"


def add_person(state: EditorState) -> EditorState:
    entry = PersonEntry(id=next_person_id(state.persons))
    return replace(state, persons=state.persons + (entry,))


def remove_person(state: EditorState, person_id: str) -> EditorState:
    if len(state.persons) <= 1:
        raise ConstraintViolation("You must have at least one person entry.")
    return replace(state, persons=tuple(p for p in state.persons if p.id != person_id))


_UNSET = object()


def update_person(state: EditorState, person_id: str, name=_UNSET, birthdate=_UNSET) -> EditorState:
    changes = {}
    if name is not _UNSET:
        changes["name"] = name
    if birthdate is not _UNSET:
        changes["birthdate"] = birthdate
    if not changes:
        return state
    return replace(
        state,
        persons=tuple(replace(p, **changes) if p.id == person_id else p for p in state.persons),
    )


def set_quote(state: EditorState, quote: str) -> EditorState:
    return replace(state, quote=quote)


def set_panel(state: EditorState, panel: str) -> EditorState:
    # the style panel needs a selection
    if panel == PANEL_STYLE and state.selected_id is None:
        return state
    return replace(state, panel=panel)


# ─────────────────────────────────────────────
# Controller
# ─────────────────────────────────────────────

class EditorController:
    """Holds the current ``EditorState`` for the UI thread."""

    def __init__(self, measurer, error_notifier=None, touch_padding: Optional[int] = None, strings: Optional[dict] = None):
        self.measurer = measurer
        self.error_notifier = error_notifier
        self.touch_padding = touch_padding
        self.strings: dict = strings or {}
        self.state = EditorState()
        self._listeners: List[Callable[[EditorState], None]] = []

    # -------------------------------------------------
    def subscribe(self, listener: Callable[[EditorState], None]):
        self._listeners.append(listener)

    def _apply(self, new_state: EditorState) -> EditorState:
        if new_state is self.state:
            return new_state
        self.state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def _run(self, operation, *args, **kwargs) -> EditorState:
        try:
            return self._apply(operation(self.state, *args, **kwargs))
        except EditorError as exc:
            self._emit_error(exc)
            return self.state

    def _emit_error(self, exc: EditorError):
        title = self.strings.get(f"{exc.code}_title", exc.title)
        message = self.strings.get(f"{exc.code}_message", str(exc))
        logger.debug("%s: %s", exc.title, exc)
        if self.error_notifier:
            self.error_notifier.emit_error(title, message, exc.level)

    # -------------------------------------------------
    @property
    def phase(self) -> Phase:
        return phase(self.state)

    def load_template(self) -> EditorState:
        return self._run(load_template)

    def pointer_down(self, x: float, y: float, pointer: str = POINTER_MOUSE) -> EditorState:
        if self.touch_padding is None:
            padding = padding_for(pointer)
        else:
            padding = padding_for(pointer, self.touch_padding)
        return self._run(pointer_down, x, y, self.measurer, padding)

    def pointer_move(self, x: float, y: float) -> EditorState:
        return self._run(pointer_move, x, y)

    def pointer_up(self) -> EditorState:
        return self._run(pointer_up)

    def set_font_family(self, family: str) -> EditorState:
        return self._run(set_font_family, family)

    def set_font_size(self, size: int) -> EditorState:
        return self._run(set_font_size, size)

    def set_color(self, color: str) -> EditorState:
        return self._run(set_color, color)

    def set_line_spacing(self, spacing: int) -> EditorState:
        return self._run(set_line_spacing, spacing)

    def add_person(self) -> EditorState:
        return self._run(add_person)

    def remove_person(self, person_id: str) -> EditorState:
        return self._run(remove_person, person_id)

    def update_person_name(self, person_id: str, name: str) -> EditorState:
        return self._run(update_person, person_id, name=name)

    def update_person_birthdate(self, person_id: str, birthdate: Optional[date]) -> EditorState:
        return self._run(update_person, person_id, birthdate=birthdate)

    def set_quote(self, quote: str) -> EditorState:
        return self._run(set_quote, quote)

    def set_panel(self, panel: str) -> EditorState:
        return self._run(set_panel, panel)
