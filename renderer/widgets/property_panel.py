from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QColorDialog,
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from renderer.core.fonts import FONT_OPTIONS
from renderer.core.interaction import (
    MAX_FONT_SIZE,
    MAX_LINE_SPACING,
    MIN_FONT_SIZE,
    MIN_LINE_SPACING,
    EditorController,
)
from renderer.core.models import PERSON_LIST

PRESET_COLORS = [
    "#000000",
    "#ffffff",
    "#ff0000",
    "#00ff00",
    "#0000ff",
    "#ffff00",
    "#00ffff",
    "#ff00ff",
    "#ff9900",
    "#9900ff",
]


class StylePanel(QWidget):
    """Font / size / spacing / color of the selected element."""

    def __init__(self, controller: EditorController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.strings: dict = {}
        self.build_ui()
        self.sync_from_state(controller.state)

    # ───────────────────────────────────────────────
    # UI
    # ───────────────────────────────────────────────
    def build_ui(self):
        layout = QVBoxLayout(self)

        # Font family
        self.lbl_font = QLabel()
        layout.addWidget(self.lbl_font)
        self.cmb_font = QComboBox()
        self.cmb_font.addItems(FONT_OPTIONS)
        self.cmb_font.currentTextChanged.connect(self.controller.set_font_family)
        layout.addWidget(self.cmb_font)

        # Font size
        self.lbl_size = QLabel()
        layout.addWidget(self.lbl_size)
        self.slider_size = QSlider(Qt.Horizontal)
        self.slider_size.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        self.slider_size.valueChanged.connect(self._on_size_changed)
        self.lbl_size_value = QLabel()
        layout.addWidget(self._row(self.slider_size, self.lbl_size_value))

        # Line spacing (person list only)
        self.lbl_spacing = QLabel()
        self.slider_spacing = QSlider(Qt.Horizontal)
        self.slider_spacing.setRange(MIN_LINE_SPACING, MAX_LINE_SPACING)
        self.slider_spacing.valueChanged.connect(self._on_spacing_changed)
        self.lbl_spacing_value = QLabel()
        self.spacing_box = QWidget()
        spacing_layout = QVBoxLayout(self.spacing_box)
        spacing_layout.setContentsMargins(0, 0, 0, 0)
        spacing_layout.addWidget(self.lbl_spacing)
        spacing_layout.addWidget(self._row(self.slider_spacing, self.lbl_spacing_value))
        layout.addWidget(self.spacing_box)

        # Text color
        self.lbl_color = QLabel()
        layout.addWidget(self.lbl_color)
        presets = QGridLayout()
        for idx, color in enumerate(PRESET_COLORS):
            btn = QPushButton()
            btn.setFixedSize(28, 28)
            btn.setStyleSheet(f"background-color: {color}; border: 1px solid #999; border-radius: 4px;")
            btn.clicked.connect(lambda _checked=False, c=color: self.controller.set_color(c))
            row, col = divmod(idx, 5)
            presets.addWidget(btn, row, col)
        layout.addLayout(presets)

        self.edit_color = QLineEdit()
        self.edit_color.editingFinished.connect(self._on_hex_entered)
        self.btn_custom_color = QPushButton()
        self.btn_custom_color.clicked.connect(self.pick_color)
        layout.addWidget(self._row(self.edit_color, self.btn_custom_color))

        layout.addStretch()

    def _row(self, *widgets):
        row = QWidget()
        h = QHBoxLayout(row)
        h.setContentsMargins(0, 0, 0, 0)
        for widget in widgets:
            h.addWidget(widget)
        return row

    def set_language(self, strings: dict):
        self.strings = strings
        self.lbl_font.setText(strings.get("font_family", "Font Family"))
        self.lbl_size.setText(strings.get("font_size", "Font Size"))
        self.lbl_spacing.setText(strings.get("line_spacing", "Line Spacing"))
        self.lbl_color.setText(strings.get("text_color", "Text Color"))
        self.btn_custom_color.setText(strings.get("custom_color", "Custom..."))

    # ───────────────────────────────────────────────
    # State → widgets
    # ───────────────────────────────────────────────
    def sync_from_state(self, state):
        style = state.style
        widgets = (self.cmb_font, self.slider_size, self.slider_spacing, self.edit_color)
        for widget in widgets:
            widget.blockSignals(True)
        try:
            if self.cmb_font.findText(style.font_family) == -1:
                self.cmb_font.addItem(style.font_family)
            self.cmb_font.setCurrentText(style.font_family)
            self.slider_size.setValue(style.font_size)
            self.slider_spacing.setValue(style.line_spacing)
            self.edit_color.setText(style.color)
        finally:
            for widget in widgets:
                widget.blockSignals(False)

        self.lbl_size_value.setText(f"{style.font_size}px")
        self.lbl_spacing_value.setText(f"{style.line_spacing}px")
        selected = state.selected
        self.spacing_box.setVisible(selected is not None and selected.kind == PERSON_LIST)

    # ───────────────────────────────────────────────
    # Widgets → controller
    # ───────────────────────────────────────────────
    def _on_size_changed(self, value: int):
        self.controller.set_font_size(value)

    def _on_spacing_changed(self, value: int):
        self.controller.set_line_spacing(value)

    def _on_hex_entered(self):
        text = self.edit_color.text().strip()
        if QColor.isValidColor(text):
            self.controller.set_color(QColor(text).name())
        else:
            self.edit_color.setText(self.controller.state.style.color)

    def pick_color(self):
        col = QColorDialog.getColor(QColor(self.controller.state.style.color), self)
        if not col.isValid():
            return
        self.controller.set_color(col.name())
