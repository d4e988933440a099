from flask import Blueprint

downloads_bp = Blueprint("downloads", __name__, url_prefix="/downloads")

from reportcards.downloads import routes  # noqa: E402,F401
