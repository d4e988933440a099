import os


class Config:

    SECRET_KEY = os.environ.get(
        "SECRET_KEY",
        "report_card_secret_key"
    )

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///reportcards.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    ALLOWED_EXTENSIONS = {"csv", "xlsx"}

    # per file; the request limit leaves room for a bulk upload of several files
    MAX_UPLOAD_BYTES = 10 * 1024 * 1024
    MAX_CONTENT_LENGTH = 100 * 1024 * 1024

    TERMS = ("FIRST TERM", "SECOND TERM", "THIRD TERM")

    ATTENDANCE_TOTAL_DAYS = 64

    REPORT_CACHE_LIMIT = int(os.environ.get("REPORT_CACHE_LIMIT", 20))


class TestConfig(Config):

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REPORT_CACHE_LIMIT = 5
