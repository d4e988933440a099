from flask import Flask

from reportcards.config import Config
from reportcards.extensions import db, migrate
from reportcards.results.cache import report_cache
from reportcards.blueprints import register_blueprints


def create_app(config_object=None):

    app = Flask(__name__)

    app.config.from_object(config_object or Config)

    db.init_app(app)
    migrate.init_app(app, db)
    report_cache.init_app(app)

    register_blueprints(app)

    with app.app_context():
        # models must be imported before create_all sees them
        from reportcards import models  # noqa: F401
        db.create_all()

    return app
