"""
Entitlement Tests

Covers the tier resolution (none / partial / full) and the access checks
that every protected content endpoint relies on.
"""

from datetime import timedelta

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from django.utils import timezone

from core.exceptions import AccessDeniedException
from portal.programs.models import Purchase
from portal.services.entitlements import Tier, require_access, resolve_entitlement

from .helpers import make_product, make_purchase, make_user


class ResolveEntitlementTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.other_user = make_user(email="other@example.com")
        cls.product = make_product()
        cls.free_product = make_product(slug="free-workshop", price=0)

    def test_no_purchase_is_not_entitled(self):
        entitlement = resolve_entitlement(self.user, self.product)
        self.assertFalse(entitlement.entitled)
        self.assertEqual(entitlement.tier, Tier.NONE)

    def test_anonymous_user_is_not_entitled(self):
        self.assertFalse(resolve_entitlement(AnonymousUser(), self.product).entitled)

    def test_free_price_alone_grants_nothing(self):
        entitlement = resolve_entitlement(self.user, self.free_product)
        self.assertFalse(entitlement.entitled)

    def test_full_payment_grants_full_tier(self):
        make_purchase(self.user, self.product)
        entitlement = resolve_entitlement(self.user, self.product)
        self.assertTrue(entitlement.entitled)
        self.assertEqual(entitlement.tier, Tier.FULL)
        self.assertTrue(entitlement.can_access_bonus)

    def test_free_claim_grants_full_tier(self):
        make_purchase(self.user, self.free_product, payment_type=Purchase.PaymentType.FREE, amount=0)
        self.assertEqual(resolve_entitlement(self.user, self.free_product).tier, Tier.FULL)

    def test_open_payment_plan_grants_partial_tier(self):
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN)
        entitlement = resolve_entitlement(self.user, self.product)
        self.assertTrue(entitlement.entitled)
        self.assertEqual(entitlement.tier, Tier.PARTIAL)
        self.assertFalse(entitlement.can_access_bonus)

    def test_completed_payment_plan_grants_full_tier(self):
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN, plan_complete=True)
        self.assertEqual(resolve_entitlement(self.user, self.product).tier, Tier.FULL)

    def test_pending_and_failed_purchases_are_ignored(self):
        make_purchase(self.user, self.product, status=Purchase.Status.PENDING, stripe_session_id="cs_pending")
        make_purchase(self.user, self.product, status=Purchase.Status.FAILED, stripe_session_id="cs_failed")
        self.assertFalse(resolve_entitlement(self.user, self.product).entitled)

    def test_purchase_of_other_user_is_ignored(self):
        make_purchase(self.other_user, self.product)
        self.assertFalse(resolve_entitlement(self.user, self.product).entitled)

    def test_most_recent_completed_purchase_decides(self):
        older = make_purchase(self.user, self.product)
        Purchase.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=30))
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN)

        self.assertEqual(resolve_entitlement(self.user, self.product).tier, Tier.PARTIAL)


class RequireAccessTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()

    def test_denied_without_purchase_redirects_to_sales_page(self):
        with self.assertRaises(AccessDeniedException) as ctx:
            require_access(self.user, self.product)

        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.redirect_to, "/programs/optimal-fertility-blueprint")
        self.assertEqual(ctx.exception.to_dict()["redirectTo"], "/programs/optimal-fertility-blueprint")

    def test_partial_tier_sees_core_content(self):
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN)
        entitlement = require_access(self.user, self.product)
        self.assertEqual(entitlement.tier, Tier.PARTIAL)

    def test_partial_tier_is_denied_bonus_content(self):
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN)

        with self.assertRaises(AccessDeniedException) as ctx:
            require_access(self.user, self.product, bonus=True)

        self.assertEqual(ctx.exception.redirect_to, "/dashboard/programs/optimal-fertility-blueprint")

    def test_full_tier_sees_bonus_content(self):
        make_purchase(self.user, self.product)
        entitlement = require_access(self.user, self.product, bonus=True)
        self.assertTrue(entitlement.can_access_bonus)
