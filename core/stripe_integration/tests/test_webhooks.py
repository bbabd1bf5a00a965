"""
Stripe Webhook Tests

End-to-end tests post HMAC-signed payloads (the same scheme Stripe uses for
the ``Stripe-Signature`` header) to the webhook endpoint. The reconciler
tests drive ``WebhookReconciler`` directly with a mocked gateway.
"""

import hashlib
import hmac
import json
import time
from unittest import mock

from django.apps import apps
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import UpstreamServiceException
from core.stripe_integration.config import StripeConfig, StripeMode
from core.stripe_integration.gateway import StripeGateway
from core.stripe_integration.reconciler import (
    CREATED,
    DUPLICATE,
    FAILED_RECORDED,
    IGNORED,
    PLAN_COMPLETED,
    PLAN_IN_PROGRESS,
    WebhookReconciler,
)
from portal.programs.models import Product, Purchase
from portal.tests.helpers import make_product, make_purchase, make_user

WEBHOOK_SECRET = "whsec_test_secret"
WEBHOOK_URL = "/api/webhooks/stripe/"


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_event(event_type, session_id, user, product, **session_fields):
    session = {
        "id": session_id,
        "object": "checkout.session",
        "mode": "payment",
        "payment_status": "paid",
        "amount_total": product.price,
        "customer": "cus_123",
        "metadata": {"userId": str(user.pk), "productId": str(product.pk), "priceType": "one-time"},
    }
    session.update(session_fields)
    return {"id": f"evt_{session_id}", "type": event_type, "data": {"object": session}}


def invoice_event(subscription_id, invoice_id="in_1", nested=False):
    invoice = {"id": invoice_id, "object": "invoice", "status": "paid"}
    if nested:
        invoice["parent"] = {"subscription_details": {"subscription": subscription_id}}
    else:
        invoice["subscription"] = subscription_id
    return {"id": f"evt_{invoice_id}", "type": "invoice.payment_succeeded", "data": {"object": invoice}}


class WebhookReconcilerTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product(product_type=Product.ProductType.PAID_WITH_PLAN)

    def setUp(self):
        self.gateway = mock.Mock()
        self.gateway.config.plan_installments = 3
        self.notifier = mock.Mock()
        self.reconciler = WebhookReconciler(self.gateway, notifier=self.notifier)

    def test_completed_checkout_creates_purchase(self):
        event = checkout_event("checkout.session.completed", "cs_1", self.user, self.product)

        with self.captureOnCommitCallbacks(execute=True):
            outcome = self.reconciler.handle_event(event)

        self.assertEqual(outcome, CREATED)
        purchase = Purchase.objects.get(stripe_session_id="cs_1")
        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.assertEqual(purchase.payment_type, Purchase.PaymentType.FULL)
        self.assertTrue(purchase.plan_complete)
        self.assertEqual(purchase.amount, 14900)
        self.assertEqual(purchase.stripe_customer_id, "cus_123")
        self.notifier.send_purchase_confirmation.assert_called_once()
        self.assertEqual(self.notifier.send_purchase_confirmation.call_args.args[3], 14900)

    def test_redelivered_checkout_is_idempotent(self):
        event = checkout_event("checkout.session.completed", "cs_1", self.user, self.product)

        with self.captureOnCommitCallbacks(execute=True):
            self.assertEqual(self.reconciler.handle_event(event), CREATED)
            self.assertEqual(self.reconciler.handle_event(event), DUPLICATE)

        self.assertEqual(Purchase.objects.filter(stripe_session_id="cs_1").count(), 1)
        self.notifier.send_purchase_confirmation.assert_called_once()

    def test_subscription_checkout_is_open_plan(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_plan",
            self.user,
            self.product,
            mode="subscription",
            subscription="sub_123",
            amount_total=4967,
        )

        self.reconciler.handle_event(event)

        purchase = Purchase.objects.get(stripe_session_id="cs_plan")
        self.assertEqual(purchase.payment_type, Purchase.PaymentType.PLAN)
        self.assertFalse(purchase.plan_complete)
        self.assertEqual(purchase.stripe_subscription_id, "sub_123")
        self.assertEqual(purchase.amount, 4967)

    def test_unpaid_session_waits_for_async_payment(self):
        event = checkout_event(
            "checkout.session.completed", "cs_async", self.user, self.product, payment_status="unpaid"
        )
        self.assertEqual(self.reconciler.handle_event(event), IGNORED)
        self.assertFalse(Purchase.objects.exists())

        event = checkout_event("checkout.session.async_payment_succeeded", "cs_async", self.user, self.product)
        self.assertEqual(self.reconciler.handle_event(event), CREATED)

    def test_session_metadata_without_price_type(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_test_1",
            self.user,
            self.product,
            metadata={"userId": str(self.user.pk), "productId": str(self.product.pk)},
        )

        outcomes = [self.reconciler.handle_event(event), self.reconciler.handle_event(event)]

        self.assertEqual(outcomes, [CREATED, DUPLICATE])
        purchases = Purchase.objects.filter(status=Purchase.Status.COMPLETED)
        self.assertEqual(purchases.count(), 1)
        self.assertEqual(purchases.get().user, self.user)
        self.assertEqual(purchases.get().payment_type, Purchase.PaymentType.FULL)

    def test_snake_case_metadata_is_still_accepted(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_legacy",
            self.user,
            self.product,
            metadata={"user_id": str(self.user.pk), "product_id": str(self.product.pk), "price_type": "payment-plan"},
        )

        self.assertEqual(self.reconciler.handle_event(event), CREATED)
        purchase = Purchase.objects.get(stripe_session_id="cs_legacy")
        self.assertEqual(purchase.payment_type, Purchase.PaymentType.PLAN)

    def test_price_type_metadata_marks_plan(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_plan_meta",
            self.user,
            self.product,
            metadata={"userId": str(self.user.pk), "productId": str(self.product.pk), "priceType": "payment-plan"},
        )

        self.reconciler.handle_event(event)

        purchase = Purchase.objects.get(stripe_session_id="cs_plan_meta")
        self.assertEqual(purchase.payment_type, Purchase.PaymentType.PLAN)
        self.assertFalse(purchase.plan_complete)

    def test_missing_metadata_is_acknowledged(self):
        event = checkout_event("checkout.session.completed", "cs_1", self.user, self.product, metadata={})
        self.assertEqual(self.reconciler.handle_event(event), IGNORED)
        self.assertFalse(Purchase.objects.exists())

    def test_unknown_product_is_acknowledged(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_1",
            self.user,
            self.product,
            metadata={"userId": str(self.user.pk), "productId": "987654"},
        )
        self.assertEqual(self.reconciler.handle_event(event), IGNORED)

    def test_async_payment_failure_is_recorded(self):
        event = checkout_event("checkout.session.async_payment_failed", "cs_fail", self.user, self.product)

        self.assertEqual(self.reconciler.handle_event(event), FAILED_RECORDED)
        self.assertEqual(self.reconciler.handle_event(event), DUPLICATE)

        purchase = Purchase.objects.get(stripe_session_id="cs_fail")
        self.assertEqual(purchase.status, Purchase.Status.FAILED)

    def test_unhandled_event_type(self):
        self.assertEqual(self.reconciler.handle_event({"id": "evt_1", "type": "customer.created"}), IGNORED)

    def test_plan_completes_when_threshold_reached(self):
        make_purchase(
            self.user,
            self.product,
            payment_type=Purchase.PaymentType.PLAN,
            stripe_session_id="cs_plan",
            stripe_subscription_id="sub_123",
        )
        self.gateway.count_paid_invoices.side_effect = [1, 3]

        with self.captureOnCommitCallbacks(execute=True):
            self.assertEqual(self.reconciler.handle_event(invoice_event("sub_123", "in_1")), PLAN_IN_PROGRESS)
            self.assertFalse(Purchase.objects.get(stripe_session_id="cs_plan").plan_complete)

            self.assertEqual(self.reconciler.handle_event(invoice_event("sub_123", "in_3")), PLAN_COMPLETED)
            self.assertEqual(self.reconciler.handle_event(invoice_event("sub_123", "in_2")), IGNORED)

        self.assertTrue(Purchase.objects.get(stripe_session_id="cs_plan").plan_complete)
        self.assertEqual(self.gateway.count_paid_invoices.call_count, 2)
        self.notifier.send_bonus_unlocked.assert_called_once()

    def test_invoice_subscription_in_parent_details(self):
        make_purchase(
            self.user,
            self.product,
            payment_type=Purchase.PaymentType.PLAN,
            stripe_session_id="cs_plan",
            stripe_subscription_id="sub_456",
        )
        self.gateway.count_paid_invoices.return_value = 3

        outcome = self.reconciler.handle_event(invoice_event("sub_456", nested=True))

        self.assertEqual(outcome, PLAN_COMPLETED)
        self.gateway.count_paid_invoices.assert_called_once_with("sub_456")

    def test_invoice_of_unknown_subscription_is_ignored(self):
        self.assertEqual(self.reconciler.handle_event(invoice_event("sub_unknown")), IGNORED)
        self.gateway.count_paid_invoices.assert_not_called()

    def test_configured_installment_count(self):
        reconciler = WebhookReconciler(self.gateway, plan_installments=2)
        make_purchase(
            self.user,
            self.product,
            payment_type=Purchase.PaymentType.PLAN,
            stripe_session_id="cs_plan",
            stripe_subscription_id="sub_123",
        )
        self.gateway.count_paid_invoices.return_value = 2

        self.assertEqual(reconciler.handle_event(invoice_event("sub_123")), PLAN_COMPLETED)


@override_settings(APP_URL="https://portal.example.com")
class StripeWebhookViewTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()

    def setUp(self):
        self.gateway = StripeGateway(
            StripeConfig(
                mode=StripeMode.TEST,
                secret_key="sk_test_123",
                webhook_secret=WEBHOOK_SECRET,
                api_version="2024-11-20.acacia",
                plan_installments=3,
            )
        )
        self.notifier = mock.Mock()
        for app_label, attribute, value in (
            ("stripe_integration", "gateway", self.gateway),
            ("portal", "notifier", self.notifier),
        ):
            patcher = mock.patch.object(apps.get_app_config(app_label), attribute, value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def post_event(self, event, signature=None):
        payload = event if isinstance(event, str) else json.dumps(event)
        headers = {}
        if signature is not False:
            headers["HTTP_STRIPE_SIGNATURE"] = signature or sign(payload)
        return self.client.post(WEBHOOK_URL, data=payload, content_type="application/json", **headers)

    def test_signed_checkout_event_creates_purchase(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.post_event(event)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"received": True})
        self.assertTrue(Purchase.objects.filter(stripe_session_id="cs_view_1").exists())
        self.notifier.send_purchase_confirmation.assert_called_once_with(
            "jane@example.com",
            "Jane Doe",
            self.product.name,
            14900,
            "https://portal.example.com/dashboard/programs/optimal-fertility-blueprint",
        )

    def test_redelivery_is_acknowledged_without_new_row(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)

        self.post_event(event)
        response = self.post_event(event)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Purchase.objects.count(), 1)

    def test_invalid_signature_is_rejected_without_state_change(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)
        payload = json.dumps(event)

        response = self.post_event(payload, signature=sign(payload, secret="whsec_wrong"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {"error": "Invalid signature"})
        self.assertFalse(Purchase.objects.exists())

    def test_tampered_payload_is_rejected(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)
        signature = sign(json.dumps(event))
        event["data"]["object"]["amount_total"] = 1

        response = self.post_event(json.dumps(event), signature=signature)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Purchase.objects.exists())

    def test_missing_signature_is_rejected(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)

        response = self.post_event(event, signature=False)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Purchase.objects.exists())

    def test_expired_signature_is_rejected(self):
        event = checkout_event("checkout.session.completed", "cs_view_1", self.user, self.product)
        payload = json.dumps(event)

        response = self.post_event(payload, signature=sign(payload, timestamp=int(time.time()) - 3600))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signed_non_json_payload_is_rejected(self):
        response = self.post_event("not json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {"error": "Invalid payload"})

    def test_malformed_metadata_is_acknowledged(self):
        event = checkout_event(
            "checkout.session.completed",
            "cs_view_1",
            self.user,
            self.product,
            metadata={"userId": "abc"},
        )

        response = self.post_event(event)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Purchase.objects.exists())

    def test_handler_failure_is_500_so_stripe_retries(self):
        make_purchase(
            self.user,
            self.product,
            payment_type=Purchase.PaymentType.PLAN,
            stripe_session_id="cs_plan",
            stripe_subscription_id="sub_123",
        )

        with mock.patch.object(
            self.gateway, "count_paid_invoices", side_effect=UpstreamServiceException("stripe", "timeout")
        ):
            response = self.post_event(invoice_event("sub_123"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json(), {"error": "Webhook handler failed"})
        self.assertFalse(Purchase.objects.get(stripe_session_id="cs_plan").plan_complete)

    def test_invoice_events_complete_plan(self):
        make_purchase(
            self.user,
            self.product,
            payment_type=Purchase.PaymentType.PLAN,
            stripe_session_id="cs_plan",
            stripe_subscription_id="sub_123",
        )

        with mock.patch.object(self.gateway, "count_paid_invoices", side_effect=[1, 3]):
            self.post_event(invoice_event("sub_123", "in_1"))
            self.assertFalse(Purchase.objects.get(stripe_session_id="cs_plan").plan_complete)
            self.post_event(invoice_event("sub_123", "in_3"))

        self.assertTrue(Purchase.objects.get(stripe_session_id="cs_plan").plan_complete)
