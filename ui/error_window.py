from datetime import datetime

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QGuiApplication
from PySide6.QtWidgets import (
    QHBoxLayout,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from renderer.core.errors import EditorError, LoadFailure
from ui.locales import ensure_language, get_section

MAX_ENTRIES = 500

LEVEL_COLORS = {
    "error": QColor("#b91c1c"),
    "warning": QColor("#b45309"),
}


def describe_error(exc: Exception, strings: dict, fallback=LoadFailure):
    """(title, message, level) for an exception, localized from the ``errors`` section."""
    if isinstance(exc, EditorError):
        code, title, level = exc.code, exc.title, exc.level
        message = strings.get(f"{code}_message", str(exc))
    else:
        code, title, level = fallback.code, fallback.title, fallback.level
        message = f'{strings.get(f"{code}_message", "")} ({exc})'.strip()
    return strings.get(f"{code}_title", title), message, level


class ErrorLogWidget(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.language = ensure_language("en")
        self.strings: dict = {}

        layout = QVBoxLayout()

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["", "", "", ""])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.itemSelectionChanged.connect(self.update_copy_button_state)
        layout.addWidget(self.table)

        controls = QHBoxLayout()
        self.copy_button = QPushButton()
        self.copy_button.clicked.connect(self.copy_selected)
        controls.addWidget(self.copy_button)
        self.clear_button = QPushButton()
        self.clear_button.clicked.connect(self.clear_entries)
        controls.addWidget(self.clear_button)
        controls.addStretch(1)
        layout.addLayout(controls)

        self.setLayout(layout)
        self.set_language(self.language)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        self.strings = get_section(language, "error_log")

        headers = [
            self.strings.get("timestamp", ""),
            self.strings.get("level", ""),
            self.strings.get("title", ""),
            self.strings.get("details", ""),
        ]
        for idx, text in enumerate(headers):
            self.table.horizontalHeaderItem(idx).setText(text)

        self.copy_button.setText(self.strings.get("copy", ""))
        self.clear_button.setText(self.strings.get("clear", ""))
        self.update_copy_button_state()

    def add_entry(self, title: str, message: str, level: str = "error"):
        # oldest entries go first once the log is full
        while self.table.rowCount() >= MAX_ENTRIES:
            self.table.removeRow(0)

        row = self.table.rowCount()
        self.table.insertRow(row)

        cells = (
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            level,
            title,
            message,
        )
        color = LEVEL_COLORS.get(level)
        for col, text in enumerate(cells):
            item = QTableWidgetItem(text)
            item.setFlags(item.flags() & ~Qt.ItemIsEditable)
            if color is not None:
                item.setForeground(color)
            self.table.setItem(row, col, item)

        self.table.resizeColumnsToContents()
        self.table.scrollToBottom()

    def clear_entries(self):
        self.table.setRowCount(0)
        self.update_copy_button_state()

    def copy_selected(self):
        rows = sorted({index.row() for index in self.table.selectedIndexes()})
        if not rows:
            return

        entries: list[str] = []
        for row in rows:
            texts = []
            for col in range(self.table.columnCount()):
                item = self.table.item(row, col)
                if item and item.text():
                    texts.append(item.text())
            entries.append(" | ".join(texts))

        QGuiApplication.clipboard().setText("\n".join(entries))

    def update_copy_button_state(self):
        self.copy_button.setEnabled(bool(self.table.selectedIndexes()))
