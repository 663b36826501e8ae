from dataclasses import replace
from datetime import date

import pytest

from renderer.core import interaction
from renderer.core.errors import ConstraintViolation
from renderer.core.hit_test import POINTER_TOUCH
from renderer.core.interaction import EditorController, Phase, phase
from renderer.core.models import (
    PANEL_CONTENT,
    PANEL_STYLE,
    PERSON_LIST,
    QUOTE,
    EditorState,
    PersonEntry,
)


# ─────────────────────────────────────────────
# Pure transitions
# ─────────────────────────────────────────────

def test_load_template_keeps_persons_and_quote(state):
    moved_quote = state.element(QUOTE).moved_to(5, 5)
    state = replace(
        state,
        elements=(state.element(PERSON_LIST), moved_quote),
        persons=(PersonEntry("person-1", "Alice"),),
        quote="Hi",
        selected_id=QUOTE,
    )
    reloaded = interaction.load_template(state)
    assert [el.id for el in reloaded.elements] == [PERSON_LIST, QUOTE]
    assert (reloaded.element(QUOTE).x, reloaded.element(QUOTE).y) == (100, 200)
    assert reloaded.persons == state.persons
    assert reloaded.quote == "Hi"
    assert reloaded.selected_id is None


def test_pointer_down_on_element_selects_and_drags(state, fonts):
    new = interaction.pointer_down(state, 110, 200, fonts)
    assert new.selected_id == QUOTE
    assert new.dragging.id == QUOTE
    assert new.panel == PANEL_STYLE
    assert new.style.font_size == 18
    assert phase(new) is Phase.DRAGGING


def test_pointer_down_on_person_list_loads_spacing(state, fonts):
    person_list = replace(state.element(PERSON_LIST), line_spacing=25, color="#ff0000")
    state = replace(state, elements=(person_list, state.element(QUOTE)))
    new = interaction.pointer_down(state, 100, 90, fonts)
    assert new.selected_id == PERSON_LIST
    assert new.style.line_spacing == 25
    assert new.style.color == "#ff0000"


def test_pointer_down_on_empty_space_deselects(state, fonts):
    selected = interaction.pointer_down(state, 110, 200, fonts)
    cleared = interaction.pointer_down(selected, 5, 5, fonts)
    assert cleared.selected_id is None
    assert cleared.dragging is None
    assert cleared.panel == PANEL_CONTENT
    assert phase(cleared) is Phase.IDLE


def test_drag_moves_anchor_to_pointer(state, fonts):
    new = interaction.pointer_down(state, 110, 200, fonts)
    new = interaction.pointer_move(new, 150, 260)
    new = interaction.pointer_move(new, 173.5, 241.25)
    quote = new.element(QUOTE)
    assert (quote.x, quote.y) == (173.5, 241.25)

    released = interaction.pointer_up(new)
    assert released.dragging is None
    assert released.selected_id == QUOTE
    assert phase(released) is Phase.SELECTED


def test_pointer_move_without_drag_is_a_no_op(state):
    assert interaction.pointer_move(state, 300, 300) is state
    assert interaction.pointer_up(state) is state


def test_style_edits_apply_to_selected_only(state, fonts):
    selected = interaction.pointer_down(state, 110, 200, fonts)
    selected = interaction.set_font_family(selected, "Georgia")
    selected = interaction.set_color(selected, "#00ff00")
    selected = interaction.set_font_size(selected, 40)
    quote = selected.element(QUOTE)
    assert (quote.font_family, quote.color, quote.font_size) == ("Georgia", "#00ff00", 40)
    assert selected.element(PERSON_LIST) == state.element(PERSON_LIST)


def test_style_edit_without_selection_only_changes_defaults(state):
    new = interaction.set_color(state, "#123456")
    assert new.style.color == "#123456"
    assert new.elements == state.elements


def test_font_size_is_clamped(state):
    assert interaction.set_font_size(state, 200).style.font_size == 72
    assert interaction.set_font_size(state, 2).style.font_size == 12


def test_line_spacing_only_touches_person_list(state, fonts):
    quote_selected = interaction.pointer_down(state, 110, 200, fonts)
    new = interaction.set_line_spacing(quote_selected, 30)
    assert new.element(QUOTE).line_spacing is None

    list_selected = interaction.pointer_down(state, 100, 90, fonts)
    new = interaction.set_line_spacing(list_selected, 0)
    assert new.element(PERSON_LIST).line_spacing == 0
    assert interaction.set_line_spacing(list_selected, 99).element(PERSON_LIST).line_spacing == 40


def test_add_person_uses_next_free_id():
    state = EditorState(persons=(PersonEntry("person-1"), PersonEntry("person-4")))
    new = interaction.add_person(state)
    assert new.persons[-1] == PersonEntry("person-5")


def test_remove_person(state):
    state = interaction.add_person(state)
    new = interaction.remove_person(state, "person-1")
    assert [p.id for p in new.persons] == ["person-2"]


def test_remove_last_person_is_rejected(state):
    with pytest.raises(ConstraintViolation):
        interaction.remove_person(state, "person-1")


def test_update_person_fields_independently(state):
    new = interaction.update_person(state, "person-1", name="Alice")
    new = interaction.update_person(new, "person-1", birthdate=date(2000, 1, 1))
    assert new.person("person-1") == PersonEntry("person-1", "Alice", date(2000, 1, 1))
    cleared = interaction.update_person(new, "person-1", birthdate=None)
    assert cleared.person("person-1").birthdate is None
    assert cleared.person("person-1").name == "Alice"


def test_style_panel_needs_selection(state):
    assert interaction.set_panel(state, PANEL_STYLE).panel == PANEL_CONTENT


# ─────────────────────────────────────────────
# Controller
# ─────────────────────────────────────────────

def test_controller_notifies_listeners(fonts):
    controller = EditorController(fonts)
    seen = []
    controller.subscribe(seen.append)
    controller.load_template()
    controller.set_quote("Hello")
    assert len(seen) == 2
    assert seen[-1].quote == "Hello"


def test_controller_skips_unchanged_state(fonts):
    controller = EditorController(fonts)
    seen = []
    controller.subscribe(seen.append)
    controller.pointer_up()
    assert seen == []


def test_remove_down_to_one_then_again(fonts, notifier):
    controller = EditorController(
        fonts,
        error_notifier=notifier,
        strings={"constraint_violation_message": "Keep one"},
    )
    controller.add_person()
    controller.add_person()
    controller.remove_person("person-1")
    controller.remove_person("person-2")
    assert [p.id for p in controller.state.persons] == ["person-3"]
    assert notifier.events == []

    controller.remove_person("person-3")
    assert [p.id for p in controller.state.persons] == ["person-3"]
    assert notifier.events == [("Cannot Remove", "Keep one", "warning")]


def test_touch_pointer_uses_configured_padding(fonts):
    controller = EditorController(fonts, touch_padding=20)
    controller.load_template()
    # 10px left of the quote box
    controller.pointer_down(85, 190, POINTER_TOUCH)
    assert controller.state.selected_id == QUOTE
    assert controller.phase is Phase.DRAGGING
