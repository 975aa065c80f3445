"""
AffiliateXchange URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.conf import settings
from django.conf.urls.static import static

from affiliatexchange.config import config
from applications.views import tracking_redirect


def api_root(request):
    """
    API root: service name plus the realtime parameters clients need.
    """
    return JsonResponse({
        "service": "AffiliateXchange API",
        "version": "1.0.0",
        "api": "/api/v1/",
        "realtime": {
            "websocket": "/ws/?token=<access token>",
            "typing_timeout_seconds": config.platform.typing_timeout_seconds,
            "reconnect_backoff_seconds": config.platform.reconnect_backoff_seconds,
        },
    })


urlpatterns = [
    path('', api_root, name='api_root'),
    path(f'{config.security.admin_url}/', admin.site.urls),  # Dynamic admin URL from ADMIN_URL env var

    # Public tracking links
    path('go/<str:code>', tracking_redirect, name='tracking_redirect'),

    # ── Versioned API ─────────────────────────────────────────────────
    path('api/v1/auth/', include('users.urls')),
    path('api/v1/', include('users.onboarding_urls')),
    path('api/v1/', include('offers.urls')),
    path('api/v1/', include('applications.urls')),
    path('api/v1/', include('analytics.urls')),
    path('api/v1/', include('retainers.urls')),
    path('api/v1/', include('messaging.urls')),
    path('api/v1/', include('notifications.urls')),
    path('api/v1/', include('reviews.urls')),
    path('api/v1/', include('payments.urls')),
    path('api/v1/', include('moderation.urls')),
    path('api/v1/', include('administration.urls')),
]

# Serve uploaded attachments in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
