"""
Class-relative positions for a student's report.

Both passes rank the target student against every classmate using the same
CA/exam weighting as the report itself. Sorting is stable over the class
roster (student name, then registration id), so tied students keep roster
order and get consecutive positions; there is no shared rank.
"""
import logging

from reportcards.results.builder import NOT_RANKED, RANK_ERROR, score_filters
from reportcards.results.scoring import group_scores, weighted_components


logger = logging.getLogger(__name__)


def roster_key(student):
    return (str(student.get("name") or "").upper(), str(student.get("student_id") or ""))


class ClassScores:
    """Every student, subject and score row of a class for one period."""

    def __init__(self, students, subjects, score_rows):
        self.students = sorted(students, key=roster_key)
        self.subjects = subjects
        self.score_rows = score_rows
        self._by_student = group_scores(score_rows, "student_id")

    @classmethod
    def load(cls, store, class_id, term, academic_year):
        students = store.find("students", {"class_id": class_id})
        subjects = store.find("subjects", {"class_id": class_id})

        student_ids = [student["id"] for student in students]
        subject_ids = [subject["id"] for subject in subjects]

        score_rows = []
        if student_ids and subject_ids:
            score_rows = store.find("scores", score_filters(
                term, academic_year,
                student_id=student_ids,
                subject_id=subject_ids,
            ))

        return cls(students, subjects, score_rows)

    def rows_for(self, student_pk):
        return self._by_student.get(student_pk, [])

    def subject_totals(self, subject_id):
        """[(student pk, total)] for classmates with scores in the subject."""
        totals = []
        for student in self.students:
            rows = [
                row for row in self.rows_for(student["id"])
                if row["subject_id"] == subject_id
            ]
            if rows:
                totals.append((student["id"], weighted_components(rows)[2]))
        return totals

    def averages(self):
        """[(student pk, average subject total)] for the whole roster."""
        averages = []
        for student in self.students:
            by_subject = group_scores(self.rows_for(student["id"]), "subject_id")
            totals = [weighted_components(rows)[2] for rows in by_subject.values()]
            average = sum(totals) / len(totals) if totals else 0
            averages.append((student["id"], average))
        return averages


def rank_of(student_pk, totals):
    ranked = sorted(totals, key=lambda entry: entry[1], reverse=True)
    for index, (pk, _) in enumerate(ranked):
        if pk == student_pk:
            return str(index + 1)
    return NOT_RANKED


def calculate_subject_positions(store, report, class_id, class_scores=None):
    """Fill ``position`` on every subject of ``report``."""
    try:
        class_scores = class_scores or ClassScores.load(
            store, class_id, report.term, report.academic_year
        )

        for subject in report.subjects:
            totals = class_scores.subject_totals(subject.subject_id)
            subject.position = rank_of(report.student["id"], totals) if totals else NOT_RANKED

    except Exception:
        logger.exception(
            "Could not rank subjects for student %s", report.student.get("id")
        )
        for subject in report.subjects:
            subject.position = RANK_ERROR


def calculate_overall_position(store, report, class_id, class_scores=None):
    """Fill the overall ``position`` of ``report`` from subject averages."""
    try:
        class_scores = class_scores or ClassScores.load(
            store, class_id, report.term, report.academic_year
        )

        if not class_scores.students or not class_scores.subjects:
            report.position = NOT_RANKED
            return

        averages = class_scores.averages()
        report.class_size = len(averages)
        report.position = rank_of(report.student["id"], averages)

    except Exception:
        logger.exception(
            "Could not rank student %s overall", report.student.get("id")
        )
        report.position = RANK_ERROR
