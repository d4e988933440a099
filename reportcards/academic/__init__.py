from flask import Blueprint

academic_bp = Blueprint("academic", __name__, url_prefix="/academic")

from reportcards.academic import routes  # noqa: E402,F401
