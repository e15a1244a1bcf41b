# config/settings/test.py
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"

# TEST_DB_ENGINE=postgres runs the suite against the DB_* database from base.
if os.getenv("TEST_DB_ENGINE", "").lower() != "postgres":
    # File-backed so threaded tests get real separate connections. SQLite
    # ignores select_for_update; IMMEDIATE makes each transaction take the
    # write lock at BEGIN, which serializes writers the same way.
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test_custody.sqlite3",
            "OPTIONS": {
                "transaction_mode": "IMMEDIATE",
                "timeout": 20,
            },
            "TEST": {
                "NAME": BASE_DIR / "test_custody.sqlite3",
            },
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["custody_core"]["level"] = "WARNING"
LOGGING["loggers"]["custody_core"]["propagate"] = True
