"""
WSGI config for AffiliateXchange (REST API only; WebSockets need asgi.py).
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "affiliatexchange.settings")

application = get_wsgi_application()
