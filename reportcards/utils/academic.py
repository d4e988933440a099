import re
from datetime import date

from flask import current_app, has_app_context

from reportcards.config import Config
from reportcards.errors import InvalidSelection


ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4})/(\d{4})$")


def get_terms():
    if has_app_context():
        return tuple(current_app.config.get("TERMS", Config.TERMS))
    return tuple(Config.TERMS)


def default_term():
    return get_terms()[0]


def current_academic_year(today=None):
    """Academic years roll over in July: 2024/2025 runs July 2024 to June 2025."""
    today = today or date.today()

    if today.month >= 7:
        return f"{today.year}/{today.year + 1}"
    return f"{today.year - 1}/{today.year}"


def is_academic_year(value):
    match = ACADEMIC_YEAR_PATTERN.match(str(value or "").strip())
    if not match:
        return False
    return int(match.group(2)) == int(match.group(1)) + 1


def match_term(value):
    """Configured spelling of ``value`` (case and padding ignored), or None."""
    wanted = str(value or "").strip().upper()
    for term in get_terms():
        if term.upper() == wanted:
            return term
    return None


def resolve_term(value):
    """Return the configured spelling of ``value`` or raise InvalidSelection."""
    if not value:
        return default_term()

    term = match_term(value)
    if term:
        return term

    raise InvalidSelection(
        f"Unknown term '{value}'. Expected one of: {', '.join(get_terms())}"
    )


def resolve_academic_year(value):
    if not value:
        return current_academic_year()

    value = str(value).strip()
    if not is_academic_year(value):
        raise InvalidSelection(
            f"Academic year '{value}' must look like 2024/2025"
        )
    return value
