from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase

from portal.programs.models import Printable, Product, Video, Workbook


class SeedProgramsCommandTests(TestCase):
    def run_command(self, *args):
        out = StringIO()
        call_command("seed_programs", *args, stdout=out)
        return out.getvalue()

    @mock.patch.dict(
        "os.environ",
        {"STRIPE_TEST_PRICE_ID_OFB_ONE_TIME": "price_test_ofb", "STRIPE_TEST_PRICE_ID_OFB_PLAN": "price_test_plan"},
    )
    def test_seeds_catalogue(self):
        self.run_command()

        self.assertEqual(Product.objects.count(), 5)
        ofb = Product.objects.get(slug="optimal-fertility-blueprint")
        self.assertEqual(ofb.price, 14900)
        self.assertEqual(ofb.test_price_id, "price_test_ofb")
        self.assertEqual(ofb.test_payment_plan_price_id, "price_test_plan")
        self.assertEqual(ofb.workbooks.count(), 10)
        self.assertTrue(ofb.workbooks.get(slug="bonus-workbook").bonus_only)
        self.assertEqual(Printable.objects.filter(product__slug="free-printables").count(), 4)
        self.assertEqual(
            Product.objects.get(slug="stress-free-goddess").guide_pdf_key,
            "pdfs/stress-free-goddess/program-guide.pdf",
        )

    def test_is_idempotent(self):
        self.run_command()
        self.run_command()

        self.assertEqual(Product.objects.count(), 5)
        self.assertEqual(Video.objects.count(), 25)
        self.assertEqual(Workbook.objects.count(), 10)

    def test_dry_run_writes_nothing(self):
        output = self.run_command("--dry-run")

        self.assertIn("DRY RUN", output)
        self.assertFalse(Product.objects.exists())
