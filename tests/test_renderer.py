from dataclasses import replace

from PIL import Image, ImageChops

from renderer.core.geometry import element_box
from renderer.core.hit_test import hit_test
from renderer.core.models import QUOTE, EditorState, PersonEntry
from renderer.core.renderer import SELECTION_COLOR, TemplateRenderer, text_color


def _changed_area(rendered, background):
    return ImageChops.difference(rendered.convert("RGB"), background.convert("RGB")).getbbox()


def test_output_matches_background_size(state, fonts, background):
    rendered = TemplateRenderer(fonts).render(background, state)
    assert rendered.size == background.size
    assert rendered.mode == "RGBA"


def test_no_elements_leaves_background(fonts, background):
    rendered = TemplateRenderer(fonts).render(background, EditorState())
    assert _changed_area(rendered, background) is None


def test_quote_is_drawn_above_its_baseline(state, fonts, background):
    rendered = TemplateRenderer(fonts).render(background, state)
    left, top, right, bottom = _changed_area(rendered, background)
    quote = state.element(QUOTE)
    # the only visible text is the quote label; the empty person entry is skipped
    assert left >= quote.x - 2
    assert bottom <= quote.y + quote.font_size // 2
    assert top >= quote.y - quote.font_size - 2


def test_person_lines_are_drawn(state, fonts, background):
    state = replace(state, persons=(PersonEntry("person-1", "Alice"),))
    rendered = TemplateRenderer(fonts).render(background, state)
    left, top, right, bottom = _changed_area(rendered, background)
    assert top < 100


def test_selection_outline(state, fonts, background):
    renderer = TemplateRenderer(fonts)
    box = element_box(state.element(QUOTE), state, fonts)
    probe = (int(box.left), int(box.top + box.height / 2))

    plain = renderer.render(background, state)
    assert plain.getpixel(probe)[:3] == (255, 255, 255)

    selected = renderer.render(background, replace(state, selected_id=QUOTE))
    expected = Image.new("RGB", (1, 1), SELECTION_COLOR).getpixel((0, 0))
    assert selected.getpixel(probe)[:3] == expected


def test_invalid_color_falls_back_to_black(state):
    quote = replace(state.element(QUOTE), color="not-a-color")
    assert text_color(quote) == (0, 0, 0)
    assert text_color(replace(quote, color="#ff0000")) == (255, 0, 0)


def test_multiline_quote_stays_inside_its_box(state, fonts, background):
    state = replace(state, quote="Happy\nbirthday\nto you")
    rendered = TemplateRenderer(fonts).render(background, state)
    left, top, right, bottom = _changed_area(rendered, background)
    box = element_box(state.element(QUOTE), state, fonts)
    assert bottom <= box.bottom
    assert right <= box.right + 1
    assert hit_test(state, (left + right) / 2, bottom - 1, fonts) == QUOTE
