import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as portfolio.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "portfolio.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS = 3
    LOCKOUT_MINUTES = 15

    # Login attempts older than this are purged by the daily cleanup
    LOGIN_ATTEMPT_RETENTION_HOURS = 24

    # Drop successful rows for an email right after it logs in
    CLEAR_SUCCESSFUL_ATTEMPTS_ON_LOGIN = (
        os.getenv("CLEAR_SUCCESSFUL_ATTEMPTS_ON_LOGIN", "false").lower() == "true"
    )

    # Number of reverse proxies in front of the app. 0 means X-Forwarded-For is
    # ignored and the socket address is the origin.
    TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))

    # Daily cleanup job
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    LOGIN_ATTEMPT_CLEANUP_HOUR = int(os.getenv("LOGIN_ATTEMPT_CLEANUP_HOUR", "3"))

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SCHEDULER_ENABLED = False
    CLEAR_SUCCESSFUL_ATTEMPTS_ON_LOGIN = False
