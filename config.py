import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as foodtruck.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "foodtruck.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Identity provider / storage service account (raw JSON or base64 JSON)
    FIREBASE_SERVICE_ACCOUNT = os.getenv("FIREBASE_SERVICE_ACCOUNT") or os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")
    FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET")

    # Cloud IAM lookups (falls back to the firebase service account)
    GOOGLE_SERVICE_ACCOUNT = os.getenv("GOOGLE_SERVICE_ACCOUNT") or os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON")
    GCP_PROJECT_ID = os.getenv("GCP_PROJECT_ID") or os.getenv("FIREBASE_PROJECT_ID")
    IAM_CACHE_TTL_SECONDS = int(os.getenv("IAM_CACHE_TTL_SECONDS", "60"))

    # Shared secret for the login-failure hook
    ADMIN_ACTION_SECRET = os.getenv("ADMIN_ACTION_SECRET")

    # Login-failure lockout
    MAX_LOGIN_ATTEMPTS = int(os.getenv("MAX_LOGIN_ATTEMPTS", "3"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Where booking requests are delivered
    BOOK_TO_EMAIL = os.getenv("BOOK_TO_EMAIL")

    # Bot challenge (verification is skipped when unset)
    TURNSTILE_SECRET_KEY = os.getenv("TURNSTILE_SECRET_KEY")
    TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

    # Address autocomplete / static map previews (disabled when unset)
    GEOAPIFY_API_KEY = os.getenv("GEOAPIFY_API_KEY")

    # Social posts
    FACEBOOK_PAGE_ID = os.getenv("FACEBOOK_PAGE_ID")
    FACEBOOK_ACCESS_TOKEN = os.getenv("FACEBOOK_ACCESS_TOKEN")
    FACEBOOK_POSTS_LIMIT = 4

    # Basic app settings
    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"

    FIREBASE_SERVICE_ACCOUNT = None
    GOOGLE_SERVICE_ACCOUNT = None
    GCP_PROJECT_ID = "test-project"

    ADMIN_ACTION_SECRET = "test-secret"
    MAX_LOGIN_ATTEMPTS = 3

    SMTP_HOST = "smtp.test"
    SMTP_PORT = 587
    SMTP_USERNAME = "bookings@test"
    SMTP_PASSWORD = "pw"
    SMTP_FROM_EMAIL = "bookings@test"
    BOOK_TO_EMAIL = "owner@test"

    TURNSTILE_SECRET_KEY = None
    GEOAPIFY_API_KEY = None
    FACEBOOK_PAGE_ID = None
    FACEBOOK_ACCESS_TOKEN = None
