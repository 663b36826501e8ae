import logging

from PIL import Image, ImageColor, ImageDraw

from renderer.core.fonts import FontResolver
from renderer.core.geometry import element_box, layout_person_lines, quote_display_text
from renderer.core.models import PERSON_LIST, QUOTE, EditorState, TextElement

logger = logging.getLogger(__name__)

DEFAULT_TEXT_COLOR = "#000000"
SELECTION_COLOR = "#3b82f6"
SELECTION_WIDTH = 2


class TemplateRenderer:
    """
    Composites the template: background at (0, 0), then every text element
    in list order, then the selection outline of the selected element.

    The background must already be scaled to canvas size; the output has
    exactly its size.
    """

    def __init__(self, fonts: FontResolver):
        self.fonts = fonts

    # -------------------------------------------------
    # MAIN RENDER
    # -------------------------------------------------
    def render(self, background: Image.Image, state: EditorState) -> Image.Image:
        canvas = background.convert("RGBA")
        draw = ImageDraw.Draw(canvas)

        for element in state.elements:
            if element.kind == PERSON_LIST:
                self._draw_person_list(draw, element, state)
            elif element.kind == QUOTE:
                self._draw_quote(draw, element, state)

            if state.selected_id == element.id:
                self._draw_selection(draw, element, state)

        return canvas

    # -------------------------------------------------
    # PERSON LIST
    # -------------------------------------------------
    def _draw_person_list(self, draw: ImageDraw.ImageDraw, element: TextElement, state: EditorState):
        font = self.fonts.get(element.font_size, element.font_family)
        fill = text_color(element)
        for line in layout_person_lines(element, state.persons):
            # (x, y) is the baseline of the first line, like canvas fillText
            draw.text((element.x, element.y + line.offset), line.text, font=font, fill=fill, anchor="ls")

    # -------------------------------------------------
    # QUOTE
    # -------------------------------------------------
    def _draw_quote(self, draw: ImageDraw.ImageDraw, element: TextElement, state: EditorState):
        font = self.fonts.get(element.font_size, element.font_family)
        text = quote_display_text(element, state.quote)
        if not text:
            return
        draw.text((element.x, element.y), text, font=font, fill=text_color(element), anchor="ls")

    # -------------------------------------------------
    # SELECTION OUTLINE
    # -------------------------------------------------
    def _draw_selection(self, draw: ImageDraw.ImageDraw, element: TextElement, state: EditorState):
        box = element_box(element, state, self.fonts)
        if box is None:
            return
        draw.rectangle(
            (box.left, box.top, box.right, box.bottom),
            outline=SELECTION_COLOR,
            width=SELECTION_WIDTH,
        )


def text_color(element: TextElement):
    color = element.color or DEFAULT_TEXT_COLOR
    try:
        return ImageColor.getrgb(color)
    except ValueError:
        logger.warning("Invalid color %r on %s, drawing black", color, element.id)
        return ImageColor.getrgb(DEFAULT_TEXT_COLOR)
