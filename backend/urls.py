"""
Root URL configuration for the membership portal backend.

- /admin/: Django admin (Jazzmin)
- /api/: portal endpoints (auth, programs, content, progress, newsletter)
- /api/checkout/, /api/webhooks/stripe/: Stripe integration
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("portal.urls")),
    path("api/", include("core.stripe_integration.urls")),
]
