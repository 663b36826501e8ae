from datetime import date

from renderer.core.geometry import (
    format_birthdate,
    is_drawn_line,
    layout_person_lines,
    person_display_text,
    quote_display_text,
)
from renderer.core.models import PERSON_LIST, QUOTE, PersonEntry


def test_name_and_birthdate():
    person = PersonEntry("person-1", "Alice", date(2000, 1, 1))
    assert person_display_text(person) == "Alice - January 1, 2000"


def test_name_without_birthdate():
    assert person_display_text(PersonEntry("person-1", "Bob")) == "Bob - Birthdate"


def test_birthdate_without_name():
    person = PersonEntry("person-1", "", date(1990, 12, 31))
    assert person_display_text(person) == "Name - December 31, 1990"


def test_format_birthdate_has_no_leading_zero():
    assert format_birthdate(date(2021, 3, 7)) == "March 7, 2021"


def test_empty_entry_takes_no_line(state):
    element = state.element(PERSON_LIST)
    persons = [
        PersonEntry("person-1", "Alice", date(2000, 1, 1)),
        PersonEntry("person-2"),
        PersonEntry("person-3", "Carol"),
    ]
    lines = layout_person_lines(element, persons)
    assert [line.person_id for line in lines] == ["person-1", "person-3"]
    # the empty entry does not advance the layout
    assert [line.offset for line in lines] == [0, element.font_size + element.spacing]


def test_placeholder_guard_skips_literal_name():
    assert not is_drawn_line("Name - Birthdate")
    assert not is_drawn_line("   ")
    assert person_display_text(PersonEntry("person-1", "Name")) == "Name - Birthdate"


def test_line_spacing_zero_is_kept(state):
    from dataclasses import replace

    element = replace(state.element(PERSON_LIST), line_spacing=0)
    persons = [PersonEntry("person-1", "A"), PersonEntry("person-2", "B")]
    lines = layout_person_lines(element, persons)
    assert lines[1].offset == element.font_size


def test_quote_falls_back_to_label(state):
    element = state.element(QUOTE)
    assert quote_display_text(element, "") == "Your quote here"
    assert quote_display_text(element, "Carpe diem") == "Carpe diem"


def test_quote_line_breaks_collapse_to_spaces(state):
    element = state.element(QUOTE)
    assert quote_display_text(element, "Happy\nbirthday\r\nto you") == "Happy birthday to you"
