from dataclasses import replace
from datetime import date

import pytest

from renderer.core.geometry import OUTLINE_MARGIN, TOUCH_PADDING, Box, element_box
from renderer.core.hit_test import POINTER_MOUSE, POINTER_TOUCH, hit_test, padding_for
from renderer.core.models import PERSON_LIST, QUOTE, PersonEntry


@pytest.fixture
def populated(state):
    return replace(
        state,
        persons=(
            PersonEntry("person-1", "Alice", date(2000, 1, 1)),
            PersonEntry("person-2", "Bob"),
        ),
        quote="Happy birthday!",
    )


def test_box_contains_is_inclusive():
    box = Box(10, 20, 30, 40)
    assert box.contains(10, 20)
    assert box.contains(40, 60)
    assert not box.contains(40.5, 60)


def test_person_list_box(populated, fonts):
    element = populated.element(PERSON_LIST)
    box = element_box(element, populated, fonts)
    widest = max(
        fonts.measure(text, element.font_size, element.font_family)
        for text in ("Alice - January 1, 2000", "Bob - Birthdate")
    )
    assert box.left == element.x - OUTLINE_MARGIN
    assert box.top == element.y - element.font_size
    assert box.width == pytest.approx(widest + 2 * OUTLINE_MARGIN)
    assert box.height == 2 * (element.font_size + element.spacing)


def test_person_list_height_counts_skipped_entries(populated, fonts):
    state = replace(populated, persons=populated.persons + (PersonEntry("person-3"),))
    element = state.element(PERSON_LIST)
    box = element_box(element, state, fonts)
    assert box.height == 3 * (element.font_size + element.spacing)


def test_quote_box(populated, fonts):
    element = populated.element(QUOTE)
    box = element_box(element, populated, fonts)
    width = fonts.measure("Happy birthday!", element.font_size, element.font_family)
    assert box == Box(element.x - 5, element.y - element.font_size, width + 10, element.font_size + 10)


def test_touch_box_is_inflated_on_all_sides(populated, fonts):
    for element in populated.elements:
        mouse = element_box(element, populated, fonts)
        touch = element_box(element, populated, fonts, TOUCH_PADDING)
        assert touch.left == mouse.left - TOUCH_PADDING
        assert touch.top == mouse.top - TOUCH_PADDING
        assert touch.right == pytest.approx(mouse.right + TOUCH_PADDING)
        assert touch.bottom == pytest.approx(mouse.bottom + TOUCH_PADDING)


def test_padding_for_pointer():
    assert padding_for(POINTER_MOUSE) == 0
    assert padding_for(POINTER_TOUCH) == TOUCH_PADDING
    assert padding_for(POINTER_TOUCH, 30) == 30


def test_hit_inside_and_outside(populated, fonts):
    assert hit_test(populated, 110, 90, fonts) == PERSON_LIST
    assert hit_test(populated, 110, 195, fonts) == QUOTE
    assert hit_test(populated, 5, 5, fonts) is None


def test_touch_reaches_past_the_mouse_box(populated, fonts):
    quote = element_box(populated.element(QUOTE), populated, fonts)
    x, y = quote.left - 10, quote.top + 1
    assert hit_test(populated, x, y, fonts) is None
    assert hit_test(populated, x, y, fonts, padding=TOUCH_PADDING) == QUOTE


def test_overlap_picks_the_later_element(populated, fonts):
    person_list = populated.element(PERSON_LIST)
    quote = replace(populated.element(QUOTE), x=person_list.x, y=person_list.y)
    state = replace(populated, elements=(person_list, quote))
    assert hit_test(state, person_list.x + 2, person_list.y - 2, fonts) == QUOTE
