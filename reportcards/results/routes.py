from flask import request, jsonify

from reportcards.errors import NotFound
from reportcards.store import SQLAlchemyStore
from reportcards.results.batch import BatchReportGenerator
from reportcards.results.cache import report_cache
from reportcards.results.grading import GRADING_SCALE, score_range
from reportcards.results.ranking import ClassScores
from reportcards.utils.academic import resolve_academic_year, resolve_term
from . import results_bp


def _request_value(name):
    payload = request.get_json(silent=True) or {}
    return payload.get(name) or request.values.get(name)


def _selected_period():
    term = resolve_term(_request_value("term"))
    academic_year = resolve_academic_year(_request_value("academic_year"))
    return term, academic_year


@results_bp.route("/grading-scale")
def grading_scale():
    return jsonify([
        {"range": score_range(band), "grade": band.grade, "remark": band.remark}
        for band in GRADING_SCALE
    ])


@results_bp.route("/classes/<int:class_id>/batch", methods=["POST"])
def generate_batch_reports(class_id):
    term, academic_year = _selected_period()

    generator = BatchReportGenerator(SQLAlchemyStore(), cache=report_cache)
    reports = generator.generate(class_id, term, academic_year)

    batch = report_cache.get(class_id, term, academic_year)

    return jsonify({
        "batch": batch.metadata(),
        "skipped": [student["name"] for student in generator.skipped],
        "reports": [report.to_dict() for report in reports],
    })


@results_bp.route("/classes/<int:class_id>/students/<int:student_pk>")
def student_report(class_id, student_pk):
    term, academic_year = _selected_period()
    store = SQLAlchemyStore()

    student = store.find_one("students", {"id": student_pk, "class_id": class_id})
    if not student:
        raise NotFound(f"Student {student_pk} not found in this class")

    generator = BatchReportGenerator(store)
    class_row, school = generator.load_class(class_id)
    class_scores = ClassScores.load(store, class_id, term, academic_year)

    report = generator.generate_for_student(
        student,
        sorted(class_scores.subjects, key=lambda subject: subject["name"]),
        class_row, school, term, academic_year, class_scores
    )

    return jsonify(report.to_dict())


@results_bp.route("/cache")
def list_cached_batches():
    return jsonify([batch.metadata() for batch in report_cache.list()])


@results_bp.route("/cache/<int:class_id>", methods=["GET", "DELETE"])
def cached_batch(class_id):
    term, academic_year = _selected_period()

    if request.method == "DELETE":
        if not report_cache.delete(class_id, term, academic_year):
            raise NotFound("No cached reports for this class and period")
        return jsonify({"deleted": True})

    batch = report_cache.get(class_id, term, academic_year)
    if not batch:
        raise NotFound("No cached reports for this class and period")

    data = batch.metadata()
    data["reports"] = [report.to_dict() for report in batch.reports]
    return jsonify(data)
