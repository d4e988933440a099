"""
Continuous assessment (CA) and exam weighting shared by reports and rankings.

Every assessment whose type mentions EXAM is an exam entry; everything else
is class assessment. CA is half the sum of the class assessments and the exam
counts half of the first exam entry found.
"""
from decimal import Decimal, ROUND_HALF_UP


CA_WEIGHT = 0.5
EXAM_WEIGHT = 0.5


def is_exam(assessment_type):
    return "EXAM" in str(assessment_type).upper()


def split_scores(score_rows):
    exams = []
    class_assessments = []

    for row in score_rows:
        if is_exam(row["assessment_type"]):
            exams.append(row)
        else:
            class_assessments.append(row)

    return exams, class_assessments


def weighted_components(score_rows):
    """Return unrounded ``(continuous_assessment, exam, total)``."""
    exams, class_assessments = split_scores(score_rows)

    ca = sum(row["score"] for row in class_assessments) * CA_WEIGHT
    # TODO: confirm with schools whether several exam columns should be summed
    exam = exams[0]["score"] * EXAM_WEIGHT if exams else 0

    return ca, exam, ca + exam


def round_half_up(value):
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def group_scores(score_rows, *keys):
    """Group score rows by the values of ``keys`` (keeps fetch order)."""
    grouped = {}
    for row in score_rows:
        key = tuple(row[k] for k in keys)
        if len(keys) == 1:
            key = key[0]
        grouped.setdefault(key, []).append(row)
    return grouped
