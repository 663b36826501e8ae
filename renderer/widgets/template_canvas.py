from PIL import Image
from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QImage, QPainter, QPixmap
from PySide6.QtWidgets import QWidget

from renderer.core.hit_test import POINTER_MOUSE, POINTER_TOUCH
from renderer.core.interaction import EditorController
from renderer.core.renderer import TemplateRenderer


def pil_to_qimage(image: Image.Image) -> QImage:
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format_RGBA8888)
    # QImage does not own ``data``
    return qimage.copy()


# ============================================================
# TemplateCanvas: shows the Pillow render and feeds pointer input
# ============================================================
class TemplateCanvas(QWidget):
    TOUCH_EVENTS = {
        QEvent.TouchBegin,
        QEvent.TouchUpdate,
        QEvent.TouchEnd,
        QEvent.TouchCancel,
    }

    def __init__(self, controller: EditorController, renderer: TemplateRenderer, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.renderer = renderer

        self.background = None
        self.rendered = None
        self._pixmap = QPixmap()

        # touch gestures on the canvas must not scroll or zoom the window
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.setCursor(Qt.OpenHandCursor)

        controller.subscribe(self._on_state_changed)

    # --------------------------------------------------------
    # Background / rendering
    # --------------------------------------------------------
    def set_background(self, image):
        self.background = image
        if image is None:
            self.setFixedSize(0, 0)
        else:
            self.setFixedSize(image.width, image.height)
        self.refresh()

    def refresh(self):
        if self.background is None:
            self.rendered = None
            self._pixmap = QPixmap()
        else:
            self.rendered = self.renderer.render(self.background, self.controller.state)
            self._pixmap = QPixmap.fromImage(pil_to_qimage(self.rendered))
        self.update()

    def _on_state_changed(self, state):
        self.refresh()

    def paintEvent(self, event):
        painter = QPainter(self)
        if not self._pixmap.isNull():
            painter.drawPixmap(0, 0, self._pixmap)
        painter.end()

    # --------------------------------------------------------
    # Mouse
    # --------------------------------------------------------
    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton or self.background is None:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self.controller.pointer_down(pos.x(), pos.y(), POINTER_MOUSE)
        if self.controller.state.dragging is not None:
            self.setCursor(Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event):
        if self.controller.state.dragging is None:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        self.controller.pointer_move(pos.x(), pos.y())

    def mouseReleaseEvent(self, event):
        self._end_drag()

    def leaveEvent(self, event):
        self._end_drag()
        super().leaveEvent(event)

    def _end_drag(self):
        self.controller.pointer_up()
        self.setCursor(Qt.OpenHandCursor)

    # --------------------------------------------------------
    # Touch
    # --------------------------------------------------------
    def event(self, event):
        if event.type() in self.TOUCH_EVENTS:
            self._handle_touch(event)
            return True
        return super().event(event)

    def _handle_touch(self, event):
        event.accept()
        if self.background is None:
            return

        kind = event.type()
        if kind in (QEvent.TouchEnd, QEvent.TouchCancel):
            self.controller.pointer_up()
            return

        points = event.points()
        # pinch and multi-finger gestures are ignored
        if len(points) != 1:
            return
        pos = points[0].position()
        if kind == QEvent.TouchBegin:
            self.controller.pointer_down(pos.x(), pos.y(), POINTER_TOUCH)
        elif self.controller.state.dragging is not None:
            self.controller.pointer_move(pos.x(), pos.y())
