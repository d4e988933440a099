"""
Class, subject and uploaded-score housekeeping.

Deleting a class removes its subjects, students and their scores; deleting a
subject removes its scores. Score edits follow the upload rules: values must
be numbers in 0-100 and an assessment type with no row yet gets a new one.
"""
import logging

from reportcards.errors import InvalidSelection, NotFound
from reportcards.file_uploads.validation import MAX_SCORE, MIN_SCORE, coerce_number
from reportcards.models import MAX_SCORE as STORED_MAX_SCORE
from reportcards.results.builder import score_filters
from reportcards.results.ranking import roster_key
from reportcards.utils.academic import get_terms


logger = logging.getLogger(__name__)


def get_or_404(store, collection, record_id, label):
    row = store.find_one(collection, {"id": record_id})
    if not row:
        raise NotFound(f"{label} {record_id} not found")
    return row


def create_class(store, school_id, name):
    name = (name or "").strip()
    if not name:
        raise InvalidSelection("Class name is required")

    get_or_404(store, "schools", school_id, "School")
    return store.insert("classes", {"school_id": school_id, "name": name})[0]


def create_subject(store, class_id, name):
    name = (name or "").strip()
    if not name:
        raise InvalidSelection("Subject name is required")

    class_row = get_or_404(store, "classes", class_id, "Class")
    return store.insert("subjects", {
        "name": name,
        "class_id": class_id,
        "school_id": class_row["school_id"],
    })[0]


def delete_subject(store, subject_id):
    get_or_404(store, "subjects", subject_id, "Subject")

    with store.transaction():
        scores = store.delete("scores", {"subject_id": subject_id})
        store.delete("subjects", {"id": subject_id})

    logger.info("Deleted subject %s and %s score(s)", subject_id, scores)


def delete_class(store, class_id):
    get_or_404(store, "classes", class_id, "Class")

    student_ids = [s["id"] for s in store.find("students", {"class_id": class_id})]
    subject_ids = [s["id"] for s in store.find("subjects", {"class_id": class_id})]

    with store.transaction():
        if student_ids:
            store.delete("scores", {"student_id": student_ids})
        if subject_ids:
            store.delete("scores", {"subject_id": subject_ids})
        store.delete("students", {"class_id": class_id})
        store.delete("subjects", {"class_id": class_id})
        store.delete("classes", {"id": class_id})

    logger.info(
        "Deleted class %s with %s student(s) and %s subject(s)",
        class_id, len(student_ids), len(subject_ids)
    )


def subject_uploads(store, subject_id, term=None, academic_year=None):
    """
    Previously uploaded scores for a subject, one entry per student.

    With a term or academic year filter, students left without any matching
    score are dropped from the list.
    """
    subject = get_or_404(store, "subjects", subject_id, "Subject")

    students = sorted(
        store.find("students", {"class_id": subject["class_id"]}),
        key=roster_key
    )
    if not students:
        return {"subject": subject, "students": [], "assessment_types": [],
                "academic_years": [], "terms": list(get_terms())}

    score_rows = store.find("scores", {
        "subject_id": subject_id,
        "student_id": [s["id"] for s in students],
    })

    entries = []
    for student in students:
        rows = [
            row for row in score_rows
            if row["student_id"] == student["id"]
            and (not term or row["term"] == term)
            and (not academic_year or row["academic_year"] == academic_year)
        ]
        if (term or academic_year) and not rows:
            continue
        entries.append({
            "id": student["id"],
            "student_id": student["student_id"],
            "name": student["name"],
            "scores": rows,
        })

    return {
        "subject": subject,
        "students": entries,
        "assessment_types": sorted({row["assessment_type"] for row in score_rows}),
        "academic_years": sorted({
            row["academic_year"] for row in score_rows if row["academic_year"]
        }),
        "terms": list(get_terms()),
    }


def edit_student_scores(store, subject_id, student_pk, term, academic_year, scores):
    """Update or add a student's scores for one subject and period."""
    get_or_404(store, "subjects", subject_id, "Subject")
    get_or_404(store, "students", student_pk, "Student")

    if not isinstance(scores, dict) or not scores:
        raise InvalidSelection("Scores must map assessment types to values")

    cleaned = {}
    for assessment_type, value in scores.items():
        number = coerce_number(value)
        if number is None or not MIN_SCORE <= number <= MAX_SCORE:
            raise InvalidSelection(
                f"{assessment_type}: score must be a number between 0 and 100"
            )
        cleaned[assessment_type] = number

    existing = store.find("scores", {
        "student_id": student_pk,
        "subject_id": subject_id,
        "term": term,
        "academic_year": academic_year,
    })
    by_type = {row["assessment_type"]: row for row in existing}

    with store.transaction():
        for assessment_type, number in cleaned.items():
            if assessment_type in by_type:
                store.update(
                    "scores",
                    {"id": by_type[assessment_type]["id"]},
                    {"score": number}
                )
            else:
                store.insert("scores", {
                    "student_id": student_pk,
                    "subject_id": subject_id,
                    "assessment_type": assessment_type,
                    "score": number,
                    "max_score": STORED_MAX_SCORE,
                    "term": term,
                    "academic_year": academic_year,
                })

    return store.find("scores", {
        "student_id": student_pk,
        "subject_id": subject_id,
        "term": term,
        "academic_year": academic_year,
    })


def delete_student_scores(store, subject_id, student_pk, term=None, academic_year=None):
    get_or_404(store, "subjects", subject_id, "Subject")

    return store.delete("scores", score_filters(
        term, academic_year,
        student_id=student_pk,
        subject_id=subject_id,
    ))
