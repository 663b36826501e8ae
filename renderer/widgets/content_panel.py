from datetime import date
from typing import Optional

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QCalendarWidget,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMenu,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
    QWidgetAction,
)

from renderer.core.geometry import format_birthdate
from renderer.core.interaction import EditorController
from renderer.core.models import PersonEntry


def to_qdate(value: date) -> QDate:
    return QDate(value.year, value.month, value.day)


def from_qdate(value: QDate) -> Optional[date]:
    if not value.isValid():
        return None
    return date(value.year(), value.month(), value.day())


def birthdate_label(value: Optional[date], strings: dict) -> str:
    if value is None:
        return strings.get("pick_date", "Pick a date")
    return format_birthdate(value)


class PersonRow(QFrame):
    def __init__(self, person: PersonEntry, controller: EditorController, strings: dict, parent=None):
        super().__init__(parent)
        self.person_id = person.id
        self.controller = controller
        self.strings = strings
        self.birthdate: Optional[date] = person.birthdate
        self.setFrameShape(QFrame.StyledPanel)

        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        header.addWidget(QLabel(strings.get("name", "Name")))
        header.addStretch(1)
        self.btn_remove = QPushButton(strings.get("remove", "Remove"))
        self.btn_remove.clicked.connect(lambda: self.controller.remove_person(self.person_id))
        header.addWidget(self.btn_remove)
        layout.addLayout(header)

        self.edit_name = QLineEdit(person.name)
        self.edit_name.setPlaceholderText(strings.get("name_placeholder", "Enter name"))
        self.edit_name.textEdited.connect(lambda text: self.controller.update_person_name(self.person_id, text))
        layout.addWidget(self.edit_name)

        layout.addWidget(QLabel(strings.get("birthdate", "Birthdate")))
        date_row = QHBoxLayout()

        # the calendar lives in a popup menu under the date button
        self.calendar = QCalendarWidget()
        self.calendar.setGridVisible(True)
        self.calendar.clicked.connect(self._on_date_picked)
        self.date_menu = QMenu(self)
        calendar_action = QWidgetAction(self.date_menu)
        calendar_action.setDefaultWidget(self.calendar)
        self.date_menu.addAction(calendar_action)
        self.date_menu.aboutToShow.connect(self._sync_calendar)

        self.btn_date = QPushButton()
        self.btn_date.setMenu(self.date_menu)
        date_row.addWidget(self.btn_date, 1)
        self.btn_clear = QPushButton(strings.get("clear_date", "Clear"))
        self.btn_clear.clicked.connect(lambda: self.set_birthdate(None))
        date_row.addWidget(self.btn_clear)
        layout.addLayout(date_row)

        self._update_date_button()

    def set_birthdate(self, value: Optional[date]):
        self.birthdate = value
        self._update_date_button()
        self.controller.update_person_birthdate(self.person_id, value)

    def _on_date_picked(self, value: QDate):
        self.date_menu.close()
        self.set_birthdate(from_qdate(value))

    def _sync_calendar(self):
        if self.birthdate is not None:
            self.calendar.setSelectedDate(to_qdate(self.birthdate))

    def _update_date_button(self):
        self.btn_date.setText(birthdate_label(self.birthdate, self.strings))
        self.btn_clear.setEnabled(self.birthdate is not None)


class ContentPanel(QWidget):
    """People list and quote."""

    def __init__(self, controller: EditorController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.strings: dict = {}
        self.rows: list[PersonRow] = []
        self._row_ids: tuple = ()

        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        self.lbl_people = QLabel()
        header.addWidget(self.lbl_people)
        header.addStretch(1)
        self.btn_add = QPushButton()
        self.btn_add.clicked.connect(self.controller.add_person)
        header.addWidget(self.btn_add)
        layout.addLayout(header)

        self.rows_container = QWidget()
        self.rows_layout = QVBoxLayout(self.rows_container)
        self.rows_layout.addStretch(1)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setMaximumHeight(300)
        scroll.setWidget(self.rows_container)
        layout.addWidget(scroll)

        self.lbl_quote = QLabel()
        layout.addWidget(self.lbl_quote)
        self.edit_quote = QPlainTextEdit()
        self.edit_quote.setFixedHeight(80)
        self.edit_quote.textChanged.connect(self._on_quote_changed)
        layout.addWidget(self.edit_quote)

        self.lbl_hint = QLabel()
        self.lbl_hint.setWordWrap(True)
        layout.addWidget(self.lbl_hint)
        layout.addStretch(1)

    def set_language(self, strings: dict):
        self.strings = strings
        self.lbl_people.setText(strings.get("people", "People"))
        self.btn_add.setText(strings.get("add_person", "Add Person"))
        self.lbl_quote.setText(strings.get("quote", "Quote"))
        self.edit_quote.setPlaceholderText(strings.get("quote_placeholder", "Enter a quote"))
        self.lbl_hint.setText(strings.get("hint", ""))
        self._rebuild_rows(self.controller.state.persons)

    # ───────────────────────────────────────────────
    def sync_from_state(self, state):
        ids = tuple(p.id for p in state.persons)
        # rows are rebuilt only on add/remove so typing keeps focus
        if ids != self._row_ids:
            self._rebuild_rows(state.persons)
        if self.edit_quote.toPlainText() != state.quote:
            self.edit_quote.blockSignals(True)
            self.edit_quote.setPlainText(state.quote)
            self.edit_quote.blockSignals(False)

    def _rebuild_rows(self, persons):
        for row in self.rows:
            self.rows_layout.removeWidget(row)
            row.deleteLater()
        self.rows = []
        for person in persons:
            row = PersonRow(person, self.controller, self.strings)
            self.rows_layout.insertWidget(self.rows_layout.count() - 1, row)
            self.rows.append(row)
        self._row_ids = tuple(p.id for p in persons)

    def _on_quote_changed(self):
        self.controller.set_quote(self.edit_quote.toPlainText())
