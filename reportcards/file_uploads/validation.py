import math
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from reportcards.file_uploads.columns import infer_columns
from reportcards.utils.academic import get_terms, is_academic_year, match_term


EMPTY_FILE_MESSAGE = "The file appears to be empty or has no valid data"
NO_VALID_RECORDS_MESSAGE = (
    "No valid student records found in the file. "
    "Make sure each row has both a student ID and name."
)
MISSING_ID_MESSAGE = (
    'Missing student ID column. Please include a column with '
    '"Student ID" or "Register ID" in the name.'
)
MISSING_NAME_MESSAGE = (
    'Missing student name column. Please include a column with '
    '"Student Name" in the name.'
)
NOT_A_NUMBER_MESSAGE = "Score must be a number"
OUT_OF_RANGE_MESSAGE = "Score must be between 0 and 100"
ATTENDANCE_MESSAGE = "Attendance must be a number"
ACADEMIC_YEAR_MESSAGE = "Academic year must look like 2024/2025"

MIN_SCORE = 0
MAX_SCORE = 100

# data row i sits on spreadsheet row i + 2 (1-based, after the header)
ROW_OFFSET = 2


@dataclass
class StudentRecord:
    student_id: str
    name: str
    term: str
    academic_year: str
    scores: Dict[str, float] = field(default_factory=dict)
    attendance: Optional[int] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class ValidationError:
    row: int
    column: str
    message: str

    def to_dict(self):
        return asdict(self)

    def __str__(self):
        return f"Row {self.row}, {self.column}: {self.message}"


@dataclass
class ParseResult:
    records: List[StudentRecord] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    assessment_columns: List[str] = field(default_factory=list)
    empty_file: bool = False

    @property
    def is_valid(self):
        return not self.errors and len(self.records) > 0

    @property
    def problem(self):
        """File-level reason for rejection, if there is one."""
        if self.empty_file:
            return EMPTY_FILE_MESSAGE
        if not self.records:
            return NO_VALID_RECORDS_MESSAGE
        return None

    def summary(self, limit=5):
        lines = [str(error) for error in self.errors[:limit]]
        if len(self.errors) > limit:
            lines.append(f"+{len(self.errors) - limit} more")
        return lines

    def to_dict(self):
        return {
            "is_valid": self.is_valid,
            "problem": self.problem,
            "records": [record.to_dict() for record in self.records],
            "errors": [error.to_dict() for error in self.errors],
            "summary": self.summary(),
            "assessment_columns": list(self.assessment_columns),
        }


def is_blank(value):
    return value is None or (isinstance(value, str) and value == "")


def coerce_number(value):
    """Return ``value`` as a float, or None when it is not numeric."""
    if isinstance(value, bool):
        return float(value)

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        # float() accepts "1_000", "inf" and "1e999"; none of them is a score
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return number


def cell_text(value):
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def validate_rows(rows, term, academic_year, headers=None, matcher=None):
    """
    Turn parsed rows into StudentRecords plus cell-level ValidationErrors.

    ``rows`` are dicts keyed by header with blank cells as "". ``term`` and
    ``academic_year`` are used when a row has no TERM / ACADEMIC YEAR cell.
    Rows without an identifier or a name are skipped without an error.
    """
    rows = list(rows)
    if headers is None:
        headers = list(rows[0].keys()) if rows else []

    result = ParseResult(headers=list(headers))

    if not rows:
        result.empty_file = True
        result.errors.append(ValidationError(1, "File", EMPTY_FILE_MESSAGE))
        return result

    layout = infer_columns(headers, matcher=matcher)
    result.assessment_columns = list(layout.assessments)

    if not layout.identifier_found:
        result.errors.append(ValidationError(1, "Header", MISSING_ID_MESSAGE))
    if not layout.name_found:
        result.errors.append(ValidationError(1, "Header", MISSING_NAME_MESSAGE))

    for index, row in enumerate(rows):
        row_number = index + ROW_OFFSET

        student_id = cell_text(row.get(layout.identifier))
        name = cell_text(row.get(layout.name))

        if not student_id or not name:
            continue

        record = StudentRecord(
            student_id=student_id,
            name=name,
            term=term,
            academic_year=academic_year,
        )

        row_term = cell_text(row.get(layout.term)) if layout.term else ""
        if row_term:
            matched = match_term(row_term)
            if matched:
                record.term = matched
            else:
                result.errors.append(ValidationError(
                    row_number, layout.term,
                    f"Term must be one of: {', '.join(get_terms())}"
                ))

        row_year = (
            cell_text(row.get(layout.academic_year)) if layout.academic_year else ""
        )
        if row_year:
            if is_academic_year(row_year):
                record.academic_year = row_year
            else:
                result.errors.append(ValidationError(
                    row_number, layout.academic_year, ACADEMIC_YEAR_MESSAGE
                ))

        for column in layout.assessments:
            value = row.get(column)

            # a missing assessment counts as zero
            if is_blank(value):
                record.scores[column] = 0.0
                continue

            score = coerce_number(value)
            if score is None:
                result.errors.append(
                    ValidationError(row_number, column, NOT_A_NUMBER_MESSAGE)
                )
                continue

            record.scores[column] = score
            if not MIN_SCORE <= score <= MAX_SCORE:
                result.errors.append(
                    ValidationError(row_number, column, OUT_OF_RANGE_MESSAGE)
                )

        if layout.attendance and not is_blank(row.get(layout.attendance)):
            attendance = coerce_number(row.get(layout.attendance))
            if attendance is None:
                result.errors.append(
                    ValidationError(row_number, layout.attendance, ATTENDANCE_MESSAGE)
                )
            else:
                record.attendance = int(round(attendance))

        result.records.append(record)

    return result
