"""
Stripe Integration AppConfig
============================

This module defines the Django application configuration for the local
`core.stripe_integration` package. It is responsible for:

- Registering with Django (name, verbose label, default PK field).
- Resolving the Stripe mode once per process into an immutable
  ``StripeConfig``.
- Building the ``StripeGateway`` that the checkout service, the webhook
  reconciler and the views share.

Operational notes
-----------------
- `ready()` runs on every process start (runserver, gunicorn worker, test
  runner); it only builds objects and never calls Stripe.
- An invalid ``STRIPE_MODE`` fails start-up with ImproperlyConfigured
  instead of surfacing on the first checkout.

Author: Portal Development Team
Date: 2025-09-03
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class StripeIntegrationConfig(AppConfig):
    """
    App configuration for the `core.stripe_integration` package.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "core.stripe_integration"
    label = "stripe_integration"
    verbose_name = "Stripe Integration"

    stripe_config = None
    gateway = None

    def ready(self):
        from .config import StripeConfig
        from .gateway import StripeGateway

        self.stripe_config = StripeConfig.from_settings()
        self.gateway = StripeGateway(self.stripe_config)

        logger.info("Stripe integration ready in %s mode", self.stripe_config.mode.value)
        if not self.stripe_config.secret_key:
            logger.warning(
                "No Stripe secret key for %s mode; checkout will fail with a configuration error",
                self.stripe_config.mode.value,
            )
