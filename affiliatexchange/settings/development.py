"""
Local development: values from a ``.env`` file, SQLite, any origin.
"""

from dotenv import load_dotenv

load_dotenv()

from .base import *  # noqa: E402,F401,F403
from .base import BASE_DIR, REST_FRAMEWORK  # noqa: E402

DEBUG = True
ALLOWED_HOSTS = ["*"]
CORS_ALLOW_ALL_ORIGINS = True

DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": BASE_DIR / "db.sqlite3"}}

# Without a worker running, send emails and run payouts inline
CELERY_TASK_ALWAYS_EAGER = True

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {"anon": "10000/hour", "user": "10000/hour"}
