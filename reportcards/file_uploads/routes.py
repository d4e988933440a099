import os

from flask import request, jsonify

from reportcards.errors import InvalidSelection, NotFound, UploadRejected
from reportcards.store import SQLAlchemyStore
from reportcards.file_uploads.parser import parse_upload
from reportcards.file_uploads.persistence import ScoreUploader
from reportcards.utils.academic import resolve_academic_year, resolve_term
from . import uploads_bp


def _selected_period():
    term = resolve_term(request.form.get("term"))
    academic_year = resolve_academic_year(request.form.get("academic_year"))
    return term, academic_year


def _uploaded_files():
    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files and request.files.get("file") and request.files["file"].filename:
        files = [request.files["file"]]
    if not files:
        raise UploadRejected("No file selected")
    return files


def _parse_all(files, term, academic_year, subject_name=None):
    parsed = []
    for file in files:
        # subject names come from the filename verbatim, so keep spaces
        filename = os.path.basename(file.filename.replace("\\", "/"))
        parsed.append(parse_upload(
            filename,
            file.read(),
            term=term,
            academic_year=academic_year,
            subject_name=subject_name,
        ))
    return parsed


def _get_class(store, class_id):
    class_row = store.find_one("classes", {"id": class_id})
    if not class_row:
        raise NotFound(f"Class {class_id} not found")
    return class_row


def _rejected(parsed):
    return jsonify({
        "is_valid": False,
        "files": [p.to_dict() for p in parsed],
    }), 400


@uploads_bp.route("/preview", methods=["POST"])
def preview_upload():
    term, academic_year = _selected_period()
    parsed = _parse_all(_uploaded_files(), term, academic_year)

    return jsonify({
        "is_valid": all(p.is_valid for p in parsed),
        "files": [p.to_dict() for p in parsed],
    })


@uploads_bp.route("/classes/<int:class_id>/bulk", methods=["POST"])
def upload_bulk_subjects(class_id):
    store = SQLAlchemyStore()
    class_row = _get_class(store, class_id)

    term, academic_year = _selected_period()
    parsed = _parse_all(_uploaded_files(), term, academic_year)

    if not all(p.is_valid for p in parsed):
        return _rejected(parsed)

    uploader = ScoreUploader(store, class_row["school_id"], class_id)
    summary = uploader.upload_files(parsed)

    return jsonify({
        "message": f"{len(summary)} subjects and their scores have been uploaded successfully.",
        "subjects": summary,
        "term": term,
        "academic_year": academic_year,
    })


@uploads_bp.route("/classes/<int:class_id>/subjects/<int:subject_id>", methods=["POST"])
def upload_subject_scores(class_id, subject_id):
    store = SQLAlchemyStore()
    class_row = _get_class(store, class_id)

    subject = store.find_one("subjects", {"id": subject_id, "class_id": class_id})
    if not subject:
        raise NotFound(f"Subject {subject_id} not found in this class")

    files = _uploaded_files()
    if len(files) > 1:
        raise InvalidSelection("Upload one file per subject")

    term, academic_year = _selected_period()
    parsed = _parse_all(files, term, academic_year, subject_name=subject["name"])

    if not parsed[0].is_valid:
        return _rejected(parsed)

    uploader = ScoreUploader(store, class_row["school_id"], class_id)
    result = uploader.upload_subject(parsed[0].result.records, subject_id)

    return jsonify({
        "message": f"Scores for {result['students']} students uploaded to {subject['name']}",
        "subject_id": subject_id,
        "students": result["students"],
        "term": term,
        "academic_year": academic_year,
    })
