from flask import Blueprint

results_bp = Blueprint("results", __name__, url_prefix="/reports")

from reportcards.results import routes  # noqa: E402,F401
