from flask import request, jsonify

from reportcards.errors import InvalidSelection
from reportcards.store import SQLAlchemyStore
from reportcards.academic import records
from reportcards.results.ranking import roster_key
from reportcards.utils.academic import resolve_academic_year, resolve_term
from . import academic_bp


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


def _optional_term():
    term = request.args.get("term")
    return resolve_term(term) if term else None


def _optional_year():
    academic_year = request.args.get("academic_year")
    return resolve_academic_year(academic_year) if academic_year else None


# ---------------- SCHOOLS ---------------- #

@academic_bp.route("/schools", methods=["GET", "POST"])
def schools():
    store = SQLAlchemyStore()

    if request.method == "POST":
        data = _payload()
        name = (data.get("name") or "").strip()
        if not name:
            raise InvalidSelection("School name is required")

        school = store.insert("schools", {
            "name": name,
            "slogan": data.get("slogan"),
            "address": data.get("address"),
            "email": data.get("email"),
            "phone": data.get("phone"),
            "crest_url": data.get("crest_url"),
        })[0]
        return jsonify(school), 201

    return jsonify(store.find("schools"))


# ---------------- CLASSES ---------------- #

@academic_bp.route("/schools/<int:school_id>/classes", methods=["GET", "POST"])
def school_classes(school_id):
    store = SQLAlchemyStore()

    if request.method == "POST":
        class_row = records.create_class(store, school_id, _payload().get("name"))
        return jsonify(class_row), 201

    classes = store.find("classes", {"school_id": school_id})
    return jsonify(sorted(classes, key=lambda c: c["name"]))


@academic_bp.route("/classes/<int:class_id>", methods=["DELETE"])
def delete_class(class_id):
    records.delete_class(SQLAlchemyStore(), class_id)
    return jsonify({"deleted": True})


@academic_bp.route("/classes/<int:class_id>/students")
def class_students(class_id):
    store = SQLAlchemyStore()
    records.get_or_404(store, "classes", class_id, "Class")

    students = store.find("students", {"class_id": class_id})
    return jsonify(sorted(students, key=roster_key))


# ---------------- SUBJECTS ---------------- #

@academic_bp.route("/classes/<int:class_id>/subjects", methods=["GET", "POST"])
def class_subjects(class_id):
    store = SQLAlchemyStore()

    if request.method == "POST":
        subject = records.create_subject(store, class_id, _payload().get("name"))
        return jsonify(subject), 201

    records.get_or_404(store, "classes", class_id, "Class")
    subjects = store.find("subjects", {"class_id": class_id})
    return jsonify(sorted(subjects, key=lambda s: s["name"]))


@academic_bp.route("/subjects/<int:subject_id>", methods=["DELETE"])
def delete_subject(subject_id):
    records.delete_subject(SQLAlchemyStore(), subject_id)
    return jsonify({"deleted": True})


# ---------------- PREVIOUS UPLOADS ---------------- #

@academic_bp.route("/subjects/<int:subject_id>/scores")
def subject_scores(subject_id):
    return jsonify(records.subject_uploads(
        SQLAlchemyStore(),
        subject_id,
        term=_optional_term(),
        academic_year=_optional_year(),
    ))


@academic_bp.route(
    "/subjects/<int:subject_id>/students/<int:student_pk>/scores",
    methods=["PUT", "DELETE"]
)
def student_subject_scores(subject_id, student_pk):
    store = SQLAlchemyStore()

    if request.method == "DELETE":
        deleted = records.delete_student_scores(
            store, subject_id, student_pk,
            term=_optional_term(),
            academic_year=_optional_year(),
        )
        return jsonify({"deleted": deleted})

    data = _payload()
    scores = records.edit_student_scores(
        store, subject_id, student_pk,
        term=resolve_term(data.get("term")),
        academic_year=resolve_academic_year(data.get("academic_year")),
        scores=data.get("scores"),
    )
    return jsonify(scores)
