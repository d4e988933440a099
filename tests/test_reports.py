import pytest

from reportcards.errors import BatchReportError, NotFound
from reportcards.results.batch import BatchReportGenerator
from reportcards.results.builder import (
    Attendance,
    NOT_RANKED,
    RANK_ERROR,
    build_student_report,
)
from reportcards.results.cache import ReportCache
from reportcards.results.ranking import (
    ClassScores,
    calculate_overall_position,
    calculate_subject_positions,
)

from tests.helpers import add_scores

TERM = "FIRST TERM"
YEAR = "2024/2025"


def fixed_attendance(student, term, academic_year):
    return Attendance(present=60, total=64)


@pytest.fixture
def subjects(store, school, class_row):
    return store.insert("subjects", [
        {"name": "Mathematics", "class_id": class_row["id"], "school_id": school["id"]},
        {"name": "Science", "class_id": class_row["id"], "school_id": school["id"]},
    ])


@pytest.fixture
def students(store, school, class_row):
    return store.insert("students", [
        {"student_id": "S1", "name": "Ann", "class_id": class_row["id"], "school_id": school["id"]},
        {"student_id": "S2", "name": "Ben", "class_id": class_row["id"], "school_id": school["id"]},
        {"student_id": "S3", "name": "Cal", "class_id": class_row["id"], "school_id": school["id"]},
    ])


@pytest.fixture
def scored_class(store, subjects, students):
    maths, science = subjects
    ann, ben, cal = students

    add_scores(store, ann, maths, {"TEST 1": 30, "GW": 20, "PW": 20, "TEST 2": 10, "EXAM": 90})
    add_scores(store, ben, maths, {"TEST 1": 20, "EXAM": 70})
    add_scores(store, cal, maths, {"TEST 1": 10, "EXAM": 40})

    add_scores(store, ann, science, {"TEST 1": 25, "EXAM": 80})
    add_scores(store, ben, science, {"TEST 1": 30, "EXAM": 95})
    add_scores(store, cal, science, {"TEST 1": 5, "EXAM": 20})

    return subjects, students


def build(store, student, subjects, class_row, school):
    return build_student_report(
        store, student, subjects, class_row, school, TERM, YEAR,
        attendance_source=fixed_attendance,
    )


def test_subject_report_weighting(store, school, class_row, scored_class):
    subjects, (ann, _, _) = scored_class

    report = build(store, ann, subjects, class_row, school)
    maths = report.subjects[0]

    assert maths.subject_name == "Mathematics"
    assert maths.continuous_assessment == 40
    assert maths.exam_score == 45
    assert maths.total_score == 85
    assert maths.grade == "1"
    assert maths.remark == "Excellent"
    assert maths.raw_scores["EXAM"] == 90
    assert report.attendance == Attendance(present=60, total=64)
    assert report.position == NOT_RANKED


def test_subject_without_scores_is_blank(store, school, class_row, subjects, students):
    report = build(store, students[0], subjects, class_row, school)

    assert [s.total_score for s in report.subjects] == [0, 0]
    assert [s.grade for s in report.subjects] == ["", ""]


def test_grade_uses_unrounded_total(store, school, class_row, subjects, students):
    # CA 39.5 + exam 40 = 79.5, displayed as 80 but graded 2
    add_scores(store, students[0], subjects[0], {"TEST 1": 79, "EXAM": 80})

    report = build(store, students[0], subjects, class_row, school)
    maths = report.subjects[0]

    assert maths.total_score == 80
    assert maths.grade == "2"


def test_scores_from_other_periods_are_ignored(store, school, class_row, subjects, students):
    add_scores(store, students[0], subjects[0], {"EXAM": 100}, term="SECOND TERM")

    report = build(store, students[0], subjects, class_row, school)

    assert report.subjects[0].total_score == 0


def test_subject_and_overall_positions(store, school, class_row, scored_class):
    subjects, (ann, ben, cal) = scored_class
    class_scores = ClassScores.load(store, class_row["id"], TERM, YEAR)

    positions = {}
    for student in (ann, ben, cal):
        report = build(store, student, subjects, class_row, school)
        calculate_subject_positions(store, report, class_row["id"], class_scores)
        calculate_overall_position(store, report, class_row["id"], class_scores)
        positions[student["name"]] = (
            [s.position for s in report.subjects], report.position, report.class_size
        )

    assert positions["Ann"] == (["1", "2"], "1", 3)
    assert positions["Ben"] == (["2", "1"], "2", 3)
    assert positions["Cal"] == (["3", "3"], "3", 3)


def test_ties_follow_roster_order(store, school, class_row, subjects, students):
    ann, ben, _ = students
    add_scores(store, ben, subjects[0], {"EXAM": 50})
    add_scores(store, ann, subjects[0], {"EXAM": 50})

    reports = [build(store, s, subjects[:1], class_row, school) for s in (ann, ben)]
    for report in reports:
        calculate_subject_positions(store, report, class_row["id"])

    assert [r.subjects[0].position for r in reports] == ["1", "2"]


def test_student_without_subject_scores_is_not_ranked_in_it(store, school, class_row, subjects, students):
    add_scores(store, students[0], subjects[0], {"EXAM": 50})

    report = build(store, students[1], subjects, class_row, school)
    calculate_subject_positions(store, report, class_row["id"])
    calculate_overall_position(store, report, class_row["id"])

    assert [s.position for s in report.subjects] == [NOT_RANKED, NOT_RANKED]
    # ranked overall with an average of zero
    assert report.position == "2"


def test_overall_position_without_subjects(store, school, class_row, students):
    report = build(store, students[0], [], class_row, school)

    calculate_overall_position(store, report, class_row["id"])

    assert report.position == NOT_RANKED


def test_ranking_failure_marks_error(store, school, class_row, scored_class, monkeypatch):
    subjects, (ann, _, _) = scored_class
    report = build(store, ann, subjects, class_row, school)

    def broken_load(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(ClassScores, "load", broken_load)

    calculate_subject_positions(store, report, class_row["id"])
    calculate_overall_position(store, report, class_row["id"])

    assert [s.position for s in report.subjects] == [RANK_ERROR, RANK_ERROR]
    assert report.position == RANK_ERROR
    assert report.position_number is None


def test_batch_generation(store, class_row, scored_class):
    progress = []
    cache = ReportCache()
    generator = BatchReportGenerator(
        store, cache=cache, progress=progress.append, attendance_source=fixed_attendance
    )

    reports = generator.generate(class_row["id"], TERM, YEAR)

    assert [r.student["name"] for r in reports] == ["Ann", "Ben", "Cal"]
    assert [r.position for r in reports] == ["1", "2", "3"]
    assert progress[0] == 0
    assert progress[1] == 10
    assert progress[-1] == 100
    assert progress == sorted(progress)
    assert all(20 <= value <= 90 for value in progress[2:-1])

    batch = cache.get(class_row["id"], TERM, YEAR)
    assert batch.name == "JHS 1 - FIRST TERM 2024/2025"
    assert batch.reports == reports


def test_batch_sorts_by_position_not_roster(store, class_row, subjects, students):
    ann, ben, cal = students
    add_scores(store, cal, subjects[0], {"EXAM": 90})
    add_scores(store, ben, subjects[0], {"EXAM": 60})
    add_scores(store, ann, subjects[0], {"EXAM": 30})

    reports = BatchReportGenerator(store, attendance_source=fixed_attendance).generate(
        class_row["id"], TERM, YEAR
    )

    assert [r.student["name"] for r in reports] == ["Cal", "Ben", "Ann"]


def test_batch_skips_failed_students(store, class_row, scored_class, monkeypatch):
    import reportcards.results.batch as batch

    real_build = batch.build_student_report

    def flaky_build(store_, student, *args, **kwargs):
        if student["name"] == "Ben":
            raise RuntimeError("bad row")
        return real_build(store_, student, *args, **kwargs)

    monkeypatch.setattr(batch, "build_student_report", flaky_build)

    generator = BatchReportGenerator(store, attendance_source=fixed_attendance)
    reports = generator.generate(class_row["id"], TERM, YEAR)

    assert [r.student["name"] for r in reports] == ["Ann", "Cal"]
    assert [s["name"] for s in generator.skipped] == ["Ben"]


def test_unranked_reports_sort_last(store, class_row, scored_class, monkeypatch):
    import reportcards.results.batch as batch

    real_overall = batch.calculate_overall_position

    def overall(store_, report, class_id, class_scores=None):
        real_overall(store_, report, class_id, class_scores)
        if report.student["name"] == "Ann":
            report.position = RANK_ERROR

    monkeypatch.setattr(batch, "calculate_overall_position", overall)

    reports = BatchReportGenerator(store, attendance_source=fixed_attendance).generate(
        class_row["id"], TERM, YEAR
    )

    assert [r.student["name"] for r in reports] == ["Ben", "Cal", "Ann"]


def test_batch_without_students(store, class_row, subjects):
    with pytest.raises(BatchReportError) as excinfo:
        BatchReportGenerator(store).generate(class_row["id"], TERM, YEAR)

    assert excinfo.value.message == "No students found in this class"


def test_batch_without_subjects(store, class_row, students):
    with pytest.raises(BatchReportError) as excinfo:
        BatchReportGenerator(store).generate(class_row["id"], TERM, YEAR)

    assert excinfo.value.message == "No subjects found for this class"


def test_batch_for_unknown_class(store):
    with pytest.raises(NotFound):
        BatchReportGenerator(store).generate(999, TERM, YEAR)


def test_report_to_dict(store, school, class_row, scored_class):
    subjects, (ann, _, _) = scored_class

    data = build(store, ann, subjects, class_row, school).to_dict()

    assert data["academicYear"] == YEAR
    assert data["class"]["name"] == "JHS 1"
    assert data["subjects"][0]["subject_name"] == "Mathematics"
