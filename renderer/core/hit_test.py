from __future__ import annotations

from typing import Optional

from renderer.core.geometry import MOUSE_PADDING, TOUCH_PADDING, element_box
from renderer.core.models import EditorState

POINTER_MOUSE = "mouse"
POINTER_TOUCH = "touch"


def padding_for(pointer: str, touch_padding: int = TOUCH_PADDING) -> int:
    if pointer == POINTER_TOUCH:
        return touch_padding
    return MOUSE_PADDING


def hit_test(state: EditorState, x: float, y: float, measurer, padding: float = MOUSE_PADDING) -> Optional[str]:
    """Id of the topmost element whose box contains (x, y), or None.

    Elements are tested in reverse draw order so the one drawn last wins.
    """
    for element in reversed(state.elements):
        box = element_box(element, state, measurer, padding)
        if box is not None and box.contains(x, y):
            return element.id
    return None
