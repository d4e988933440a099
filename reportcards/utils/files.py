import os

from flask import current_app, has_app_context

from reportcards.config import Config
from reportcards.errors import UploadRejected


def _setting(name):
    if has_app_context():
        return current_app.config.get(name, getattr(Config, name))
    return getattr(Config, name)


def file_extension(filename):
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def allowed_file(filename, allowed=None):

    allowed = allowed or _setting("ALLOWED_EXTENSIONS")

    return (
        "." in filename and
        file_extension(filename) in allowed
    )


def check_upload(filename, size):
    """Reject a file before any parsing is attempted."""
    max_bytes = _setting("MAX_UPLOAD_BYTES")

    if size > max_bytes:
        raise UploadRejected(
            f"File {filename} exceeds {max_bytes // (1024 * 1024)}MB limit",
            filename=filename
        )

    if not allowed_file(filename):
        allowed = " and ".join(
            f".{ext}" for ext in sorted(_setting("ALLOWED_EXTENSIONS"), reverse=True)
        )
        raise UploadRejected(
            f"File {filename} is not supported. Only {allowed} files are allowed.",
            filename=filename
        )


def subject_name_from_filename(filename):
    """'Mathematics.xlsx' -> 'Mathematics'."""
    stem, ext = os.path.splitext(os.path.basename(filename))
    if ext.lower().lstrip(".") not in _setting("ALLOWED_EXTENSIONS"):
        stem = os.path.basename(filename)
    return stem.strip()
