"""
Picks the settings module from ``DJANGO_ENV``: production, test or
development (the default).
"""

import os

_ENV = os.getenv("DJANGO_ENV", "development").lower()

if _ENV == "production":
    from .production import *  # noqa: F401,F403
elif _ENV == "test":
    from .test import *  # noqa: F401,F403
else:
    from .development import *  # noqa: F401,F403
