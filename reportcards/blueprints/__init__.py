from reportcards.academic import academic_bp
from reportcards.downloads import downloads_bp
from reportcards.file_uploads import uploads_bp
from reportcards.results import results_bp
from reportcards.errors import register_error_handlers


def register_blueprints(app):
    app.register_blueprint(academic_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(results_bp)
    app.register_blueprint(downloads_bp)

    register_error_handlers(app)
