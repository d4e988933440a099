import logging
import sys

from reportcards.errors import BatchReportError, NotFound
from reportcards.results.builder import build_student_report
from reportcards.results.ranking import (
    ClassScores,
    calculate_overall_position,
    calculate_subject_positions,
    roster_key,
)


logger = logging.getLogger(__name__)

# unranked reports (N/A, Error) sort after every numbered position
UNRANKED_SORT_VALUE = sys.maxsize

FETCHED_PROGRESS = 10
STUDENTS_START_PROGRESS = 20
STUDENTS_END_PROGRESS = 90


def report_sort_key(report):
    number = report.position_number
    return UNRANKED_SORT_VALUE if number is None else number


class BatchReportGenerator:
    """
    Generates ranked reports for every student of a class.

    Students are processed one after another. A student whose report fails is
    logged and left out; the rest of the class still gets reports. ``progress``
    receives percentages: 10 once students and subjects are loaded, 20 to 90
    across students, 100 when done.
    """

    def __init__(self, store, cache=None, progress=None, attendance_source=None):
        self.store = store
        self.cache = cache
        self.progress = progress
        self.attendance_source = attendance_source
        self.skipped = []

    def _report_progress(self, value):
        if self.progress:
            self.progress(value)

    def load_class(self, class_id):
        class_row = self.store.find_one("classes", {"id": class_id})
        if not class_row:
            raise NotFound(f"Class {class_id} not found")

        school = self.store.find_one("schools", {"id": class_row["school_id"]})
        return class_row, school

    def generate_for_student(self, student, subjects, class_row, school,
                             term, academic_year, class_scores=None):
        report = build_student_report(
            self.store, student, subjects, class_row, school,
            term, academic_year,
            attendance_source=self.attendance_source,
        )
        calculate_subject_positions(self.store, report, class_row["id"], class_scores)
        calculate_overall_position(self.store, report, class_row["id"], class_scores)
        return report

    def generate(self, class_id, term, academic_year):
        class_row, school = self.load_class(class_id)
        self._report_progress(0)

        students = sorted(self.store.find("students", {"class_id": class_id}), key=roster_key)
        if not students:
            raise BatchReportError("No students found in this class")

        subjects = sorted(
            self.store.find("subjects", {"class_id": class_id}),
            key=lambda subject: subject["name"]
        )
        if not subjects:
            raise BatchReportError("No subjects found for this class")

        self._report_progress(FETCHED_PROGRESS)
        logger.info(
            "Generating %s report(s) for class %s, %s %s",
            len(students), class_id, term, academic_year
        )

        class_scores = None
        try:
            class_scores = ClassScores.load(self.store, class_id, term, academic_year)
        except Exception:
            # each ranking pass retries the load and records Error on failure
            logger.exception("Could not preload scores for class %s", class_id)

        reports = []
        self.skipped = []
        span = STUDENTS_END_PROGRESS - STUDENTS_START_PROGRESS

        for index, student in enumerate(students):
            try:
                reports.append(self.generate_for_student(
                    student, subjects, class_row, school,
                    term, academic_year, class_scores
                ))
            except Exception:
                logger.exception(
                    "Error generating report for student %s", student.get("name")
                )
                self.skipped.append(student)

            self._report_progress(
                STUDENTS_START_PROGRESS + round((index + 1) / len(students) * span)
            )

        reports.sort(key=report_sort_key)

        if self.cache is not None:
            self.cache.put(
                class_id, term, academic_year, reports,
                name=f"{class_row['name']} - {term} {academic_year}"
            )

        self._report_progress(100)
        logger.info(
            "Generated %s report(s) for class %s, skipped %s",
            len(reports), class_id, len(self.skipped)
        )

        return reports
