import pytest

from reportcards.results.grading import GRADING_SCALE, grade_from_score, score_range
from reportcards.results.scoring import round_half_up, weighted_components


@pytest.mark.parametrize("score, expected", [
    (100, ("1", "Excellent")),
    (80, ("1", "Excellent")),
    (79.9, ("2", "Very Good")),
    (75, ("2", "Very Good")),
    (74.5, ("3", "Good")),
    (65, ("4", "Credit")),
    (60, ("5", "Average")),
    (50, ("6", "Below Average")),
    (49.99, ("7", "Pass")),
    (40, ("8", "Developing")),
    (39, ("9", "Emerging")),
    (0, ("9", "Emerging")),
])
def test_grade_boundaries(score, expected):
    assert grade_from_score(score) == expected


def test_grades_never_improve_as_scores_drop():
    grades = [int(grade_from_score(score / 2)[0]) for score in range(200, -1, -1)]
    assert grades == sorted(grades)


def test_score_range_labels():
    assert score_range(GRADING_SCALE[0]) == "80-100"
    assert score_range(GRADING_SCALE[1]) == "75-79"
    assert score_range(GRADING_SCALE[-1]) == "0-39"


def rows(**scores):
    return [{"assessment_type": k.replace("_", " "), "score": v} for k, v in scores.items()]


def test_weighted_components():
    ca, exam, total = weighted_components(rows(TEST_1=30, GW=20, PW=20, TEST_2=10, EXAM=90))
    assert (ca, exam, total) == (40, 45, 85)


def test_first_exam_entry_wins():
    score_rows = [
        {"assessment_type": "MID EXAM", "score": 60},
        {"assessment_type": "Final Exam", "score": 100},
    ]
    assert weighted_components(score_rows) == (0, 30, 30)


def test_no_scores_is_zero():
    assert weighted_components([]) == (0, 0, 0)


def test_round_half_up():
    assert round_half_up(42.5) == 43
    assert round_half_up(43.5) == 44
    assert round_half_up(42.49) == 42
    assert round_half_up(0) == 0
