from io import BytesIO

import pandas as pd
from flask import request, send_file
from openpyxl import load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from werkzeug.utils import secure_filename

from reportcards.store import SQLAlchemyStore
from reportcards.academic.records import get_or_404
from reportcards.file_uploads.columns import (
    ATTENDANCE_COLUMN,
    DEFAULT_IDENTIFIER_COLUMN,
    DEFAULT_NAME_COLUMN,
)
from reportcards.results.ranking import roster_key
from . import downloads_bp


XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# assessment column -> maximum raw score, shown on the guidance row
TEMPLATE_ASSESSMENTS = {
    "TEST 1": 30,
    "GW": 20,
    "PW": 20,
    "TEST 2": 30,
    "EXAM": 100,
}

TEMPLATE_SAMPLE_STUDENTS = [
    ("STU0001", "ABBEY TRYPHOSA"),
    ("STU0002", "ADDAI ANNA"),
    ("STU0003", "AHLIJAH NINA"),
]


def build_score_template(students=None, sheet_name="Scores"):
    """
    Workbook bytes for a score upload: canonical headers, a max-score guidance
    row (it has no ID or name, so uploads skip it) and one row per student.
    """
    headers = [DEFAULT_IDENTIFIER_COLUMN, DEFAULT_NAME_COLUMN] + \
        list(TEMPLATE_ASSESSMENTS) + [ATTENDANCE_COLUMN]

    rows = [["", ""] + list(TEMPLATE_ASSESSMENTS.values()) + [""]]
    for student_id, name in students or TEMPLATE_SAMPLE_STUDENTS:
        rows.append([student_id, name] + [""] * (len(TEMPLATE_ASSESSMENTS) + 1))

    df = pd.DataFrame(rows, columns=headers)

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    output.seek(0)

    # --- Styling ---
    wb = load_workbook(output)
    ws = wb.active

    header_fill = PatternFill(start_color="1E3C72", end_color="1E3C72", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for cell in ws[2]:
        cell.font = Font(italic=True, color="808080")

    ws.freeze_panes = "A2"

    for col in ws.columns:
        max_length = max(len(str(cell.value)) for cell in col if cell.value is not None)
        ws.column_dimensions[col[0].column_letter].width = max_length + 2

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    return output


@downloads_bp.route("/score-template")
def download_score_template():
    """Bulk upload template, pre-filled with a class roster when class_id is given."""
    class_id = request.args.get("class_id", type=int)

    students = None
    filename = "bulk_upload_template.xlsx"

    if class_id:
        store = SQLAlchemyStore()
        class_row = get_or_404(store, "classes", class_id, "Class")
        roster = sorted(store.find("students", {"class_id": class_id}), key=roster_key)
        students = [(s["student_id"], s["name"]) for s in roster] or None
        filename = secure_filename(f"{class_row['name']}_upload_template.xlsx")

    return send_file(
        build_score_template(students),
        as_attachment=True,
        download_name=filename,
        mimetype=XLSX_MIMETYPE
    )
