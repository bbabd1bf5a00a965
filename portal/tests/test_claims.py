"""
Catalogue, Free Claim and Purchase List Tests
"""

from rest_framework import status
from rest_framework.test import APITestCase

from portal.programs.models import Purchase

from .helpers import make_product, make_purchase, make_user

ORIGIN = "https://portal.example.com"


class ClaimProductViewTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.free_product = make_product(slug="free-workshop", price=0)
        cls.paid_product = make_product(slug="stress-free-goddess", price=2900)

    def setUp(self):
        self.client.force_authenticate(self.user)

    def test_claim_creates_free_purchase_and_redirects_to_dashboard(self):
        response = self.client.post("/api/products/free-workshop/claim/", HTTP_ORIGIN=ORIGIN)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], f"{ORIGIN}/dashboard/programs/free-workshop")

        purchase = Purchase.objects.get(user=self.user, product=self.free_product)
        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.assertEqual(purchase.payment_type, Purchase.PaymentType.FREE)
        self.assertEqual(purchase.amount, 0)
        self.assertTrue(purchase.plan_complete)

    def test_claiming_twice_creates_one_purchase(self):
        self.client.post("/api/products/free-workshop/claim/", HTTP_ORIGIN=ORIGIN)
        response = self.client.post("/api/products/free-workshop/claim/", HTTP_ORIGIN=ORIGIN)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(Purchase.objects.filter(user=self.user, product=self.free_product).count(), 1)

    def test_paid_product_cannot_be_claimed(self):
        response = self.client.post("/api/products/stress-free-goddess/claim/", HTTP_ORIGIN=ORIGIN)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "This program is not free. Please purchase it instead.")
        self.assertFalse(Purchase.objects.exists())

    def test_unknown_product_is_404(self):
        response = self.client.post("/api/products/does-not-exist/claim/", HTTP_ORIGIN=ORIGIN)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anonymous_user_is_sent_to_login(self):
        self.client.force_authenticate(None)

        response = self.client.post("/api/products/free-workshop/claim/", HTTP_ORIGIN=ORIGIN)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], f"{ORIGIN}/auth/login?redirect=/programs/free-workshop")
        self.assertFalse(Purchase.objects.exists())


class CatalogueAndPurchaseListTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product(order=2)
        cls.free_product = make_product(slug="free-workshop", price=0, order=1)

    def test_catalogue_is_public_and_ordered(self):
        response = self.client.get("/api/products/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["slug"] for p in response.json()], ["free-workshop", "optimal-fertility-blueprint"])

    def test_purchase_list_contains_completed_purchases_with_tier(self):
        make_purchase(self.user, self.product, payment_type=Purchase.PaymentType.PLAN, stripe_session_id="cs_1")
        make_purchase(
            self.user,
            self.free_product,
            status=Purchase.Status.FAILED,
            stripe_session_id="cs_2",
        )
        self.client.force_authenticate(self.user)

        response = self.client.get("/api/purchases/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]["product"]["slug"], "optimal-fertility-blueprint")
        self.assertEqual(body[0]["paymentType"], "PLAN")
        self.assertEqual(body[0]["tier"], "partial")
