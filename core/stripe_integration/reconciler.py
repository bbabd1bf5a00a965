"""
Stripe Webhook Reconciler
=========================

Turns verified Stripe events into Purchase rows. Stripe delivers events at
least once, in any order and possibly concurrently, so every handler is
idempotent:

- ``checkout.session.completed`` / ``checkout.session.async_payment_succeeded``
  create one COMPLETED purchase per checkout session. The unique
  ``stripe_session_id`` column is the dedup key; a constraint violation on
  insert means a concurrent delivery won the race.
- ``checkout.session.async_payment_failed`` records a FAILED purchase for
  auditing. It never touches an existing row.
- ``invoice.payment_succeeded`` / ``invoice.paid`` re-derive the number of
  paid installments from Stripe and flip ``plan_complete`` once the
  configured threshold is reached, with a conditional update so the flip
  (and the bonus email) happens once.

Checkout sessions carry ``userId``, ``productId`` and ``priceType`` in their
metadata; sessions created with the snake_case keys are still accepted.

Malformed events (missing metadata, unknown product or user) are logged and
acknowledged, since a retry cannot fix them. Anything else propagates so the
view answers 500 and Stripe retries.

Author: Portal Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from portal.programs.models import Product, Purchase
from portal.services.notifications import send_best_effort

from .checkout import PriceType
from .gateway import StripeGateway

logger = logging.getLogger(__name__)
User = get_user_model()

CHECKOUT_COMPLETED_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}
CHECKOUT_FAILED_EVENTS = {"checkout.session.async_payment_failed"}
INVOICE_PAID_EVENTS = {"invoice.payment_succeeded", "invoice.paid"}

# Handler outcomes, logged per event and asserted in tests
CREATED = "created"
DUPLICATE = "duplicate"
FAILED_RECORDED = "failed_recorded"
PLAN_COMPLETED = "plan_completed"
PLAN_IN_PROGRESS = "plan_in_progress"
IGNORED = "ignored"


def _extract_data_object(event: Dict[str, Any]) -> Dict[str, Any]:
    data = event.get("data") or {}
    obj = data.get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}


def _invoice_subscription_id(invoice: Dict[str, Any]) -> Optional[str]:
    """
    Subscription id of an invoice.

    Older API versions expose ``invoice.subscription``; newer ones nest it
    under ``invoice.parent.subscription_details.subscription``.
    """
    subscription = invoice.get("subscription")
    if isinstance(subscription, dict):
        subscription = subscription.get("id")
    if subscription:
        return subscription

    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    subscription = details.get("subscription")
    if isinstance(subscription, dict):
        subscription = subscription.get("id")
    return subscription or None


def _metadata_value(metadata: Dict[str, Any], key: str, legacy_key: str):
    value = metadata.get(key)
    if value is None:
        value = metadata.get(legacy_key)
    return value


def _stripe_id(value) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("id")
    return value or None


class WebhookReconciler:
    """
    Example:
        >>> reconciler = WebhookReconciler(gateway, notifier)
        >>> reconciler.handle_event(event)
        'created'
    """

    def __init__(
        self,
        gateway: StripeGateway,
        notifier=None,
        plan_installments: Optional[int] = None,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier
        self.plan_installments = plan_installments or gateway.config.plan_installments

    def handle_event(self, event: Dict[str, Any]) -> str:
        event_type = event.get("type")
        event_id = event.get("id")
        obj = _extract_data_object(event)

        logger.info("[webhook] %s (event_id=%s)", event_type, event_id)

        if event_type in CHECKOUT_COMPLETED_EVENTS:
            outcome = self._handle_checkout_completed(obj)
        elif event_type in CHECKOUT_FAILED_EVENTS:
            outcome = self._handle_checkout_failed(obj)
        elif event_type in INVOICE_PAID_EVENTS:
            outcome = self._handle_invoice_paid(obj)
        else:
            logger.debug("Unhandled event type: %s", event_type)
            outcome = IGNORED

        logger.info("[webhook] %s (event_id=%s) -> %s", event_type, event_id, outcome)
        return outcome

    # ---------- helpers ----------

    def _resolve_user_and_product(self, session: Dict[str, Any]):
        session_id = session.get("id")
        metadata = session.get("metadata") or {}
        user_id = _metadata_value(metadata, "userId", "user_id")
        product_id = _metadata_value(metadata, "productId", "product_id")

        if not str(user_id or "").isdigit() or not str(product_id or "").isdigit():
            logger.error(
                "Missing or malformed userId/productId in metadata of session %s: %s",
                session_id,
                metadata,
            )
            return None, None

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            logger.error("Stripe webhook: user %s of session %s not found", user_id, session_id)
            return None, None

        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            logger.error("Stripe webhook: product %s of session %s not found", product_id, session_id)
            return None, None

        return user, product

    @staticmethod
    def _payment_type(session: Dict[str, Any]) -> str:
        metadata = session.get("metadata") or {}
        if session.get("mode") == "subscription":
            return Purchase.PaymentType.PLAN
        if _metadata_value(metadata, "priceType", "price_type") == PriceType.PAYMENT_PLAN.value:
            return Purchase.PaymentType.PLAN
        return Purchase.PaymentType.FULL

    def _notify(self, description: str, method_name: str, *args) -> None:
        if self.notifier is None:
            return
        send_best_effort(description, getattr(self.notifier, method_name), *args)

    # ---------- concrete handlers ----------

    def _handle_checkout_completed(self, session: Dict[str, Any]) -> str:
        session_id = session.get("id")
        if not session_id:
            logger.error("Checkout session event without session id")
            return IGNORED

        if session.get("payment_status") == "unpaid":
            # Purchase is created by checkout.session.async_payment_succeeded;
            # a failed async payment arrives as async_payment_failed.
            logger.info("Session %s completed but unpaid, waiting for async payment", session_id)
            return IGNORED

        user, product = self._resolve_user_and_product(session)
        if user is None or product is None:
            return IGNORED

        if Purchase.objects.filter(stripe_session_id=session_id).exists():
            logger.info("Purchase already recorded for session %s", session_id)
            return DUPLICATE

        payment_type = self._payment_type(session)
        amount_total = session.get("amount_total")
        amount = amount_total if amount_total is not None else product.price

        try:
            with transaction.atomic():
                purchase = Purchase.objects.create(
                    user=user,
                    product=product,
                    stripe_session_id=session_id,
                    stripe_customer_id=_stripe_id(session.get("customer")),
                    stripe_subscription_id=_stripe_id(session.get("subscription")),
                    amount=amount,
                    status=Purchase.Status.COMPLETED,
                    payment_type=payment_type,
                    plan_complete=payment_type == Purchase.PaymentType.FULL,
                )
        except IntegrityError:
            logger.info("Purchase for session %s was recorded concurrently", session_id)
            return DUPLICATE

        logger.info(
            "Purchase %s created: user=%s product=%s payment_type=%s session=%s",
            purchase.pk,
            user.pk,
            product.slug,
            payment_type,
            session_id,
        )

        self._notify(
            f"purchase confirmation for session {session_id}",
            "send_purchase_confirmation",
            user.email,
            user.name,
            product.name,
            purchase.amount,
            f"{settings.APP_URL}{product.dashboard_path}",
        )
        return CREATED

    def _handle_checkout_failed(self, session: Dict[str, Any]) -> str:
        session_id = session.get("id")
        if not session_id:
            logger.error("Failed checkout event without session id")
            return IGNORED

        user, product = self._resolve_user_and_product(session)
        if user is None or product is None:
            return IGNORED

        if Purchase.objects.filter(stripe_session_id=session_id).exists():
            logger.info("Session %s already has a purchase row, not recording failure", session_id)
            return DUPLICATE

        try:
            with transaction.atomic():
                Purchase.objects.create(
                    user=user,
                    product=product,
                    stripe_session_id=session_id,
                    stripe_customer_id=_stripe_id(session.get("customer")),
                    amount=session.get("amount_total") or 0,
                    status=Purchase.Status.FAILED,
                    payment_type=self._payment_type(session),
                )
        except IntegrityError:
            logger.info("Failure for session %s was recorded concurrently", session_id)
            return DUPLICATE

        logger.info("Failed purchase recorded: user=%s product=%s session=%s", user.pk, product.slug, session_id)
        return FAILED_RECORDED

    def _handle_invoice_paid(self, invoice: Dict[str, Any]) -> str:
        subscription_id = _invoice_subscription_id(invoice)
        if not subscription_id:
            logger.debug("Invoice %s is not a subscription invoice", invoice.get("id"))
            return IGNORED

        purchase = (
            Purchase.objects.select_related("user", "product")
            .filter(
                stripe_subscription_id=subscription_id,
                status=Purchase.Status.COMPLETED,
            )
            .order_by("-created_at")
            .first()
        )
        if purchase is None:
            logger.info("No purchase tracks subscription %s", subscription_id)
            return IGNORED

        if purchase.plan_complete:
            logger.info("Plan of purchase %s already complete", purchase.pk)
            return IGNORED

        paid_invoices = self.gateway.count_paid_invoices(subscription_id)
        if paid_invoices < self.plan_installments:
            logger.info(
                "Subscription %s: %s of %s installments paid",
                subscription_id,
                paid_invoices,
                self.plan_installments,
            )
            return PLAN_IN_PROGRESS

        updated = Purchase.objects.filter(pk=purchase.pk, plan_complete=False).update(plan_complete=True)
        if not updated:
            logger.info("Plan of purchase %s was completed concurrently", purchase.pk)
            return IGNORED

        logger.info(
            "Payment plan complete: purchase=%s user=%s product=%s installments=%s",
            purchase.pk,
            purchase.user_id,
            purchase.product.slug,
            paid_invoices,
        )
        self._notify(
            f"bonus unlocked for purchase {purchase.pk}",
            "send_bonus_unlocked",
            purchase.user.email,
            purchase.user.name,
            purchase.product.name,
            f"{settings.APP_URL}{purchase.product.dashboard_path}",
        )
        return PLAN_COMPLETED
