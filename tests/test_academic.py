from datetime import date

import pytest

from reportcards.errors import InvalidSelection
from reportcards.utils.academic import (
    current_academic_year,
    default_term,
    is_academic_year,
    resolve_academic_year,
    resolve_term,
)


@pytest.mark.parametrize("today, expected", [
    (date(2024, 7, 1), "2024/2025"),
    (date(2024, 12, 31), "2024/2025"),
    (date(2025, 6, 30), "2024/2025"),
    (date(2025, 1, 15), "2024/2025"),
])
def test_current_academic_year_rolls_over_in_july(today, expected):
    assert current_academic_year(today) == expected


def test_is_academic_year():
    assert is_academic_year("2024/2025")
    assert not is_academic_year("2024/2026")
    assert not is_academic_year("2024-2025")
    assert not is_academic_year("")


def test_resolve_term():
    assert resolve_term("second term") == "SECOND TERM"
    assert resolve_term(" Third Term ") == "THIRD TERM"
    assert resolve_term(None) == default_term() == "FIRST TERM"

    with pytest.raises(InvalidSelection):
        resolve_term("SUMMER")


def test_resolve_term_uses_app_config(app):
    app.config["TERMS"] = ("TERM 1", "TERM 2")

    assert resolve_term("term 2") == "TERM 2"
    assert default_term() == "TERM 1"


def test_resolve_academic_year():
    assert resolve_academic_year("2023/2024") == "2023/2024"
    assert resolve_academic_year("") == current_academic_year()

    with pytest.raises(InvalidSelection):
        resolve_academic_year("2023")
