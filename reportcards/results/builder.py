import random
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from flask import current_app, has_app_context

from reportcards.config import Config
from reportcards.results.grading import grade_from_score
from reportcards.results.scoring import (
    group_scores,
    round_half_up,
    weighted_components,
)


NOT_RANKED = "N/A"
RANK_ERROR = "Error"


@dataclass
class Attendance:
    present: int = 0
    total: int = 0


@dataclass
class SubjectReport:
    subject_id: int
    subject_name: str
    continuous_assessment: int = 0
    exam_score: int = 0
    total_score: int = 0
    grade: str = ""
    position: str = NOT_RANKED
    remark: str = ""
    raw_scores: Dict[str, float] = field(default_factory=dict)


@dataclass
class Report:
    student: dict
    class_: dict
    school: Optional[dict]
    term: str
    academic_year: str
    attendance: Attendance = field(default_factory=Attendance)
    position: str = NOT_RANKED
    class_size: int = 0
    subjects: List[SubjectReport] = field(default_factory=list)

    @property
    def position_number(self):
        """Numeric overall rank, or None for the N/A / Error sentinels."""
        head = str(self.position).split(" ")[0]
        return int(head) if head.isdigit() else None

    def to_dict(self):
        data = asdict(self)
        data["class"] = data.pop("class_")
        data["academicYear"] = data.pop("academic_year")
        return data


def placeholder_attendance(student, term, academic_year):
    """Stand-in until attendance is recorded; returns a random present count."""
    total = Config.ATTENDANCE_TOTAL_DAYS
    if has_app_context():
        total = current_app.config.get("ATTENDANCE_TOTAL_DAYS", total)
    return Attendance(present=random.randint(min(20, total), total), total=total)


def score_filters(term, academic_year, **filters):
    if term:
        filters["term"] = term
    if academic_year:
        filters["academic_year"] = academic_year
    return filters


def build_subject_report(subject, score_rows):
    subject_report = SubjectReport(
        subject_id=subject["id"],
        subject_name=subject["name"],
    )

    if not score_rows:
        return subject_report

    for row in score_rows:
        subject_report.raw_scores[row["assessment_type"]] = row["score"]

    ca, exam, total = weighted_components(score_rows)

    subject_report.continuous_assessment = round_half_up(ca)
    subject_report.exam_score = round_half_up(exam)
    subject_report.total_score = round_half_up(total)

    # graded on the unrounded total
    subject_report.grade, subject_report.remark = grade_from_score(total)

    return subject_report


def build_student_report(store, student, subjects, class_row, school,
                         term, academic_year, attendance_source=None):
    """
    Build one student's report for a class, term and academic year.

    All of the student's scores for the class subjects are fetched in one
    query. Positions stay "N/A" until the ranking pass fills them in.
    """
    attendance_source = attendance_source or placeholder_attendance

    report = Report(
        student=student,
        class_=class_row,
        school=school,
        term=term,
        academic_year=academic_year,
        attendance=attendance_source(student, term, academic_year),
    )

    subject_ids = [subject["id"] for subject in subjects]
    score_rows = store.find("scores", score_filters(
        term, academic_year,
        student_id=student["id"],
        subject_id=subject_ids,
    )) if subject_ids else []

    by_subject = group_scores(score_rows, "subject_id")

    for subject in subjects:
        report.subjects.append(
            build_subject_report(subject, by_subject.get(subject["id"], []))
        )

    return report
