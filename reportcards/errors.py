import logging

from flask import jsonify


logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Failed to upload data. Please try again."


class ReportCardError(Exception):
    """Base class for errors raised by the report card core."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class UploadRejected(ReportCardError):
    """The file was refused before parsing (extension, size, unreadable)."""

    def __init__(self, message, filename=None):
        super().__init__(message)
        self.filename = filename


class InvalidSelection(ReportCardError):
    """A caller picked a term, year, class or subject that does not exist."""


class NotFound(ReportCardError):

    status_code = 404


class StoreError(ReportCardError):

    status_code = 500


class DuplicateRecordError(StoreError):
    """A write hit a uniqueness constraint."""

    status_code = 409


class UploadFailed(ReportCardError):

    status_code = 500

    def __init__(self, message=UPLOAD_FAILED_MESSAGE):
        super().__init__(message)


class BatchReportError(ReportCardError):

    status_code = 422


def register_error_handlers(app):

    @app.errorhandler(ReportCardError)
    def handle_report_card_error(error):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({"error": "Upload exceeds the allowed request size"}), 413
