"""
Stripe Gateway Client
=====================

Single entry point for every call the portal makes to Stripe. The gateway is
built once in ``StripeIntegrationConfig.ready()`` from the process-wide
``StripeConfig`` and passed to the checkout service, the webhook reconciler
and the views.

Calls pass the secret key and API version per request instead of mutating
the global ``stripe.api_key``, so the mode of every call is explicit.

Operations
----------
- create_checkout_session(**params)  -> Checkout Session
- retrieve_session(session_id)       -> Checkout Session
- verify_webhook(payload, signature) -> event dict (raises on bad signature)
- count_paid_invoices(subscription)  -> int
- retrieve_subscription(subscription_id)

Errors
------
``stripe.StripeError`` is logged and re-raised as
``UpstreamServiceException``; signature failures raise
``stripe.SignatureVerificationError`` unchanged so the webhook view can
answer 400.

Author: Portal Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

import stripe

from core.exceptions import ConfigurationException, UpstreamServiceException

from .config import StripeConfig

logger = logging.getLogger(__name__)


class StripeGateway:
    def __init__(self, config: StripeConfig) -> None:
        self.config = config

    @property
    def mode(self):
        return self.config.mode

    def _request_options(self) -> Dict[str, Any]:
        if not self.config.secret_key:
            raise ConfigurationException(
                f"Stripe secret key for {self.config.mode.value} mode is not set"
            )
        return {
            "api_key": self.config.secret_key,
            "stripe_version": self.config.api_version,
        }

    def create_checkout_session(self, **params):
        options = self._request_options()
        try:
            return stripe.checkout.Session.create(**params, **options)
        except stripe.StripeError as e:
            logger.error("Stripe checkout session creation failed: %s", getattr(e, "user_message", None) or e)
            raise UpstreamServiceException("stripe", str(e)) from e

    def retrieve_session(self, session_id: str):
        options = self._request_options()
        try:
            return stripe.checkout.Session.retrieve(session_id, **options)
        except stripe.StripeError as e:
            logger.error("Stripe session %s could not be retrieved: %s", session_id, e)
            raise UpstreamServiceException("stripe", str(e)) from e

    def retrieve_subscription(self, subscription_id: str):
        options = self._request_options()
        try:
            return stripe.Subscription.retrieve(subscription_id, **options)
        except stripe.StripeError as e:
            logger.error("Stripe subscription %s could not be retrieved: %s", subscription_id, e)
            raise UpstreamServiceException("stripe", str(e)) from e

    def count_paid_invoices(self, subscription_id: str) -> int:
        """
        Number of paid invoices of a subscription, always read from Stripe.

        The count is re-derived on every installment webhook, so duplicated
        or out-of-order invoice events cannot skew it.
        """
        options = self._request_options()
        try:
            invoices = stripe.Invoice.list(
                subscription=subscription_id,
                status="paid",
                limit=100,
                **options,
            )
            return sum(1 for _ in invoices.auto_paging_iter())
        except stripe.StripeError as e:
            logger.error("Stripe invoices of %s could not be listed: %s", subscription_id, e)
            raise UpstreamServiceException("stripe", str(e)) from e

    def verify_webhook(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Verify the ``Stripe-Signature`` header against the raw body and
        return the parsed event.

        Raises:
            ConfigurationException: no webhook secret configured
            stripe.SignatureVerificationError: missing or invalid signature
            ValueError: body is not valid JSON
        """
        if not self.config.webhook_secret:
            raise ConfigurationException("STRIPE_WEBHOOK_SECRET is not set")

        body = payload.decode("utf-8")
        if not signature:
            raise stripe.SignatureVerificationError("Missing Stripe-Signature header", signature, body)

        stripe.WebhookSignature.verify_header(
            body,
            signature,
            self.config.webhook_secret,
            tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
        )
        event = json.loads(body)
        if not isinstance(event, dict):
            raise ValueError("Webhook payload is not a JSON object")
        return event
