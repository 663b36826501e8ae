from datetime import date

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QDate  # noqa: E402

from renderer.widgets.content_panel import birthdate_label, from_qdate, to_qdate  # noqa: E402


def test_birthdate_label_shows_placeholder_without_date():
    assert birthdate_label(None, {"pick_date": "Виберіть дату"}) == "Виберіть дату"
    assert birthdate_label(None, {}) == "Pick a date"


def test_earliest_calendar_dates_are_real_birthdates():
    assert from_qdate(QDate(1900, 1, 1)) == date(1900, 1, 1)
    assert birthdate_label(date(1900, 1, 1), {}) == "January 1, 1900"


def test_qdate_conversion():
    assert to_qdate(date(1999, 5, 4)) == QDate(1999, 5, 4)
    assert from_qdate(QDate()) is None
