# config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

# Postgres is the default; opt into SQLite for a quick local run.
if os.getenv("DB_ENGINE", "").lower() == "sqlite":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }
