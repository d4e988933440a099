"""
Header inference for score spreadsheets.

Schools phrase their headers differently ("Student ID", "REGISTER ID",
"Student Name ", ...), so the default matcher looks for keyword pairs anywhere
in the upper-cased header. That can match a header it should not; stricter
rules go in another matcher, e.g. ``ExactColumnMatcher``.
"""
from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_IDENTIFIER_COLUMN = "STUDENT REGISTER ID"
DEFAULT_NAME_COLUMN = "STUDENT NAME"

ATTENDANCE_COLUMN = "ATTENDANCE"
TERM_COLUMN = "TERM"
ACADEMIC_YEAR_COLUMN = "ACADEMIC YEAR"

METADATA_COLUMNS = (ATTENDANCE_COLUMN, TERM_COLUMN, ACADEMIC_YEAR_COLUMN)


def _normalise(header):
    return str(header).upper()


@dataclass
class ColumnLayout:
    identifier: str
    name: str
    assessments: List[str] = field(default_factory=list)
    attendance: Optional[str] = None
    term: Optional[str] = None
    academic_year: Optional[str] = None
    identifier_found: bool = True
    name_found: bool = True


class SubstringColumnMatcher:
    """Keyword-pair matching, first matching header wins."""

    identifier_keywords = (("STUDENT", "ID"), ("REGISTER", "ID"))
    name_keywords = (("STUDENT", "NAME"),)

    def _matches(self, header, keyword_sets):
        text = _normalise(header)
        return any(
            all(keyword in text for keyword in keywords)
            for keywords in keyword_sets
        )

    def find_identifier(self, headers):
        for header in headers:
            if self._matches(header, self.identifier_keywords):
                return header
        return None

    def find_name(self, headers):
        for header in headers:
            if self._matches(header, self.name_keywords):
                return header
        return None


class ExactColumnMatcher:
    """Only accepts the canonical header spellings (case and padding ignored)."""

    identifier_headers = (DEFAULT_IDENTIFIER_COLUMN, "STUDENT ID")
    name_headers = (DEFAULT_NAME_COLUMN,)

    def _find(self, headers, accepted):
        for header in headers:
            if _normalise(header).strip() in accepted:
                return header
        return None

    def find_identifier(self, headers):
        return self._find(headers, self.identifier_headers)

    def find_name(self, headers):
        return self._find(headers, self.name_headers)


def find_metadata_column(headers, label):
    for header in headers:
        if _normalise(header) == label:
            return header
    return None


def infer_columns(headers, matcher=None):
    """Split a header row into identifier, name, assessment and metadata columns."""
    matcher = matcher or SubstringColumnMatcher()
    headers = list(headers)

    identifier = matcher.find_identifier(headers)
    name = matcher.find_name(headers)

    layout = ColumnLayout(
        identifier=identifier or DEFAULT_IDENTIFIER_COLUMN,
        name=name or DEFAULT_NAME_COLUMN,
        identifier_found=identifier is not None,
        name_found=name is not None,
        attendance=find_metadata_column(headers, ATTENDANCE_COLUMN),
        term=find_metadata_column(headers, TERM_COLUMN),
        academic_year=find_metadata_column(headers, ACADEMIC_YEAR_COLUMN),
    )

    layout.assessments = [
        header for header in headers
        if header != layout.identifier
        and header != layout.name
        and _normalise(header) not in METADATA_COLUMNS
    ]

    return layout
