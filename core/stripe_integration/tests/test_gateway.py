from unittest import mock

import stripe
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from core.exceptions import ConfigurationException, UpstreamServiceException
from core.stripe_integration.config import StripeConfig, StripeMode
from core.stripe_integration.gateway import StripeGateway


def make_config(**overrides):
    values = dict(
        mode=StripeMode.TEST,
        secret_key="sk_test_123",
        webhook_secret="whsec_test",
        api_version="2024-11-20.acacia",
        plan_installments=3,
    )
    values.update(overrides)
    return StripeConfig(**values)


class StripeConfigTests(SimpleTestCase):
    @override_settings(STRIPE_MODE="LIVE", STRIPE_LIVE_SECRET_KEY="sk_live_1", STRIPE_TEST_SECRET_KEY="sk_test_1")
    def test_live_mode_uses_live_key(self):
        config = StripeConfig.from_settings()
        self.assertIs(config.mode, StripeMode.LIVE)
        self.assertTrue(config.is_live)
        self.assertEqual(config.secret_key, "sk_live_1")

    @override_settings(STRIPE_MODE="test", STRIPE_LIVE_SECRET_KEY="sk_live_1", STRIPE_TEST_SECRET_KEY="sk_test_1")
    def test_test_mode_uses_test_key(self):
        config = StripeConfig.from_settings()
        self.assertFalse(config.is_live)
        self.assertEqual(config.secret_key, "sk_test_1")

    @override_settings(STRIPE_MODE="sandbox")
    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ImproperlyConfigured):
            StripeConfig.from_settings()

    @override_settings(PAYMENT_PLAN_INSTALLMENTS=0)
    def test_installments_must_be_positive(self):
        with self.assertRaises(ImproperlyConfigured):
            StripeConfig.from_settings()


class StripeGatewayTests(SimpleTestCase):
    def test_calls_pass_key_and_version_per_request(self):
        gateway = StripeGateway(make_config())

        with mock.patch.object(stripe.checkout.Session, "create") as create:
            gateway.create_checkout_session(mode="payment")

        create.assert_called_once_with(
            mode="payment",
            api_key="sk_test_123",
            stripe_version="2024-11-20.acacia",
        )

    def test_missing_secret_key_is_configuration_error(self):
        gateway = StripeGateway(make_config(secret_key=""))

        with mock.patch.object(stripe.checkout.Session, "create") as create:
            with self.assertRaises(ConfigurationException):
                gateway.create_checkout_session(mode="payment")
        create.assert_not_called()

    def test_stripe_error_is_upstream_error(self):
        gateway = StripeGateway(make_config())

        with mock.patch.object(
            stripe.checkout.Session, "retrieve", side_effect=stripe.APIConnectionError("network down")
        ):
            with self.assertRaises(UpstreamServiceException) as ctx:
                gateway.retrieve_session("cs_123")
        self.assertEqual(ctx.exception.service, "stripe")

    def test_retrieve_subscription(self):
        gateway = StripeGateway(make_config())

        with mock.patch.object(stripe.Subscription, "retrieve", return_value={"id": "sub_123"}) as retrieve:
            subscription = gateway.retrieve_subscription("sub_123")

        self.assertEqual(subscription["id"], "sub_123")
        retrieve.assert_called_once_with("sub_123", api_key="sk_test_123", stripe_version="2024-11-20.acacia")

    def test_count_paid_invoices_pages_through_all(self):
        gateway = StripeGateway(make_config())
        invoices = mock.Mock()
        invoices.auto_paging_iter.return_value = iter([{"id": "in_1"}, {"id": "in_2"}, {"id": "in_3"}])

        with mock.patch.object(stripe.Invoice, "list", return_value=invoices) as invoice_list:
            self.assertEqual(gateway.count_paid_invoices("sub_123"), 3)

        self.assertEqual(invoice_list.call_args.kwargs["subscription"], "sub_123")
        self.assertEqual(invoice_list.call_args.kwargs["status"], "paid")

    def test_verify_webhook_requires_secret(self):
        gateway = StripeGateway(make_config(webhook_secret=""))

        with self.assertRaises(ConfigurationException):
            gateway.verify_webhook(b"{}", "t=1,v1=abc")

    def test_verify_webhook_requires_signature(self):
        gateway = StripeGateway(make_config())

        with self.assertRaises(stripe.SignatureVerificationError):
            gateway.verify_webhook(b"{}", "")

    def test_verify_webhook_rejects_non_object_payload(self):
        gateway = StripeGateway(make_config())

        with mock.patch.object(stripe.WebhookSignature, "verify_header", return_value=True):
            with self.assertRaises(ValueError):
                gateway.verify_webhook(b"[1, 2]", "t=1,v1=abc")
