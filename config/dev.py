# config/dev.py
from .base import *  # noqa

DEBUG = True

ALLOWED_HOSTS = env.list("DJANGO_ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])
CSRF_TRUSTED_ORIGINS = env.list(
    "DJANGO_CSRF_TRUSTED_ORIGINS",
    default=["http://localhost:8000", "http://127.0.0.1:8000"],
)

# --- Database: allow SQLite for fast local setup ---
if env.bool("USE_SQLITE", default=False):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }
else:
    # falls back to DATABASE_URL in base.py if you already have it wired
    pass

# --- Louder messaging logs while developing ---
LOGGING["loggers"] = {
    "apps.messaging": {"level": "DEBUG"},
}
