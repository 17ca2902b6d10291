import os

class Config:
    raw_db_url = os.getenv("DATABASE_URL")

    if raw_db_url:
        if raw_db_url.startswith("postgres://"):
            raw_db_url = raw_db_url.replace("postgres://", "postgresql://", 1)
        SQLALCHEMY_DATABASE_URI = raw_db_url
    else:
        SQLALCHEMY_DATABASE_URI = "sqlite:///tournament.db"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-dev-secret")

    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "letmein123")
    # Comma-separated list of admin emails, e.g. "tab@ziggy.org,director@ziggy.org"
    ADMIN_EMAILS = os.getenv("ADMIN_EMAILS", "")

    RESEND_API_KEY = os.getenv("RESEND_API_KEY", None)
    RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", None)
    SITE_URL = os.getenv("SITE_URL", "http://127.0.0.1:5000")

    # Evidence uploads
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Advertised staleness bounds for polling clients (seconds)
    CHAT_POLL_SECONDS = int(os.getenv("CHAT_POLL_SECONDS", "10"))
    STATUS_POLL_SECONDS = int(os.getenv("STATUS_POLL_SECONDS", "15"))

    LOGIN_CODE_TTL_MINUTES = int(os.getenv("LOGIN_CODE_TTL_MINUTES", "10"))
    SPONSOR_INVITE_TTL_DAYS = int(os.getenv("SPONSOR_INVITE_TTL_DAYS", "14"))
