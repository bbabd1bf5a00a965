"""
Stripe Mode and Configuration
=============================

The Stripe mode (test or live) is resolved once at start-up from
``settings.STRIPE_MODE`` into an immutable ``StripeConfig``. The secret key
and the product price ids used for checkout always belong to the same mode.

Author: Portal Development Team
Date: 2025-09-03
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class StripeMode(str, Enum):
    TEST = "test"
    LIVE = "live"

    @classmethod
    def parse(cls, value: str) -> "StripeMode":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ImproperlyConfigured(
                f"STRIPE_MODE must be 'test' or 'live', got {value!r}"
            ) from None


@dataclass(frozen=True)
class StripeConfig:
    """
    Immutable Stripe settings of one process.

    Attributes:
        mode: TEST or LIVE
        secret_key: Secret key of ``mode`` (may be empty; checkout then fails
            with a configuration error)
        webhook_secret: Signing secret of the webhook endpoint
        api_version: Pinned Stripe API version
        plan_installments: Paid invoices needed to complete a payment plan
    """

    mode: StripeMode
    secret_key: str
    webhook_secret: str
    api_version: str
    plan_installments: int = 3

    @property
    def is_live(self) -> bool:
        return self.mode is StripeMode.LIVE

    @classmethod
    def from_settings(cls) -> "StripeConfig":
        mode = StripeMode.parse(settings.STRIPE_MODE)
        secret_key = (
            settings.STRIPE_LIVE_SECRET_KEY
            if mode is StripeMode.LIVE
            else settings.STRIPE_TEST_SECRET_KEY
        )
        installments = int(settings.PAYMENT_PLAN_INSTALLMENTS)
        if installments < 1:
            raise ImproperlyConfigured("PAYMENT_PLAN_INSTALLMENTS must be at least 1")

        return cls(
            mode=mode,
            secret_key=secret_key,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            api_version=settings.STRIPE_API_VERSION,
            plan_installments=installments,
        )
