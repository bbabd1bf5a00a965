"""
Membership Portal Application Configuration

This module contains the Django application configuration for the membership
portal. Besides the usual metadata it builds the long-lived outbound clients
once per process:

- ``storage``: SignedUrlService for protected program assets
- ``notifier``: BrevoService for transactional email and contact sync

Views and services receive these clients from here instead of constructing
their own, so tests can swap them for mocks in one place.

Author: Portal Development Team
Version: 1.0.0
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class PortalConfig(AppConfig):
    """
    Configuration class for the portal Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "portal"
    label: str = "portal"
    verbose_name: str = "Membership Portal"

    storage = None
    notifier = None

    def ready(self) -> None:
        """
        Build the outbound clients.

        Only client objects are created here; no network or database access
        happens at start-up.
        """
        super().ready()

        from .services.cloud_storage import SignedUrlService
        from .services.notifications import BrevoService

        self.storage = SignedUrlService.from_settings()
        self.notifier = BrevoService.from_settings()

        if not self.notifier.is_configured:
            logger.warning("BREVO_API_KEY is not set; emails and contact sync are disabled")
