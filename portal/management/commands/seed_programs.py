"""
Seeds the program catalogue.

Products are matched on slug and content items on (product, order), so the
command can be re-run after editing the data below or the Stripe price ids
in the environment. Purchases and progress are never touched.

Usage:
    python manage.py seed_programs
    python manage.py seed_programs --dry-run
"""

import os

from django.core.management.base import BaseCommand
from django.db import transaction

from ...models import Printable, Product, Video, Workbook

OFB_SLUG = "optimal-fertility-blueprint"


def _env(name):
    return os.getenv(name) or None


PRODUCTS = [
    {
        "slug": "free-workshop",
        "name": "Free Workshop",
        "description": (
            "Three video workshops introducing fertility optimization through "
            "Traditional Chinese Medicine."
        ),
        "price": 0,
        "product_type": Product.ProductType.FREE_WORKSHOP,
        "featured": True,
        "order": 1,
    },
    {
        "slug": OFB_SLUG,
        "name": "Optimal Fertility Blueprint",
        "description": (
            "9-week program with weekly workbooks, video lessons, acupressure "
            "demonstrations, meditations and supplement protocols. Includes "
            "bonus content for full payment."
        ),
        "price": 14900,
        "product_type": Product.ProductType.PAID_WITH_PLAN,
        "featured": True,
        "order": 2,
        "price_env": "STRIPE_LIVE_PRICE_ID_OFB_ONE_TIME",
        "payment_plan_price_env": "STRIPE_LIVE_PRICE_ID_OFB_PLAN",
        "test_price_env": "STRIPE_TEST_PRICE_ID_OFB_ONE_TIME",
        "test_payment_plan_price_env": "STRIPE_TEST_PRICE_ID_OFB_PLAN",
        "bonus_asset_key": "workbooks/optimal-fertility-blueprint/pdfs/bbt-printable-chart.pdf",
    },
    {
        "slug": "stress-free-goddess",
        "name": "Stress-free Goddess Program",
        "description": (
            "12 weeks of TCM practices to reduce stress, improve sleep and boost "
            "energy with Qigong, Reflexology and Guasha."
        ),
        "price": 2900,
        "product_type": Product.ProductType.PAID_PROGRAM,
        "featured": False,
        "order": 3,
        "price_env": "STRIPE_LIVE_PRICE_ID_SFG",
        "test_price_env": "STRIPE_TEST_PRICE_ID_SFG",
        "guide_pdf_key": "pdfs/stress-free-goddess/program-guide.pdf",
    },
    {
        "slug": "fearlessly-fertile-yoga",
        "name": "Fearlessly Fertile Yoga",
        "description": (
            "10 TCM-inspired yoga sessions to enhance fertility, hormonal balance "
            "and vitality."
        ),
        "price": 1500,
        "product_type": Product.ProductType.PAID_PROGRAM,
        "featured": False,
        "order": 4,
        "price_env": "STRIPE_LIVE_PRICE_ID_FFY",
        "test_price_env": "STRIPE_TEST_PRICE_ID_FFY",
    },
    {
        "slug": "free-printables",
        "name": "Free TCM Food Therapy Printables",
        "description": (
            "4 downloadable TCM food therapy guides for Dampness, Depleted Blood, "
            "Depleted Yang and Depleted Yin."
        ),
        "price": 0,
        "product_type": Product.ProductType.FREE_RESOURCE,
        "featured": True,
        "order": 5,
    },
]

PRICE_ENV_FIELDS = {
    "price_env": "price_id",
    "payment_plan_price_env": "payment_plan_price_id",
    "test_price_env": "test_price_id",
    "test_payment_plan_price_env": "test_payment_plan_price_id",
}

# (title, object key, duration in seconds)
VIDEOS = {
    "free-workshop": [
        ("Day 1: Foundation of Vibrant Living", "videos/free-workshop/living-vibrantly-day-1.mp4", 1200),
        ("Day 2: Nutrition and Lifestyle", "videos/free-workshop/living-vibrantly-day-2.mp4", 1500),
        ("Day 3: Stress Management & Next Steps", "videos/free-workshop/living-vibrantly-day-3.mp4", 1800),
    ],
    "stress-free-goddess": [
        ("Week 1: Qigong to Improve Metabolism", "week-01-qigong-metabolism.mp4", 900),
        ("Week 2: Reflexology to Relieve Stress", "week-02-reflexology-stress.mp4", 720),
        ("Week 3: Qigong to Calm the Mind and Relax Tension", "week-03-qigong-calm-mind.mp4", 1080),
        ("Week 4: Qigong to Mist & Nourish Tissue and Organs", "week-04-qigong-mist-nourish.mp4", 960),
        ("Week 5: Reflexology to Reduce Anxiety", "week-05-reflexology-anxiety.mp4", 600),
        ("Week 6: Guasha (Peaceful Skin Scraping) to Relieve Anxiety", "week-06-guasha-anxiety.mp4", 840),
        ("Week 7: Reflexology to Improve Digestion", "week-07-reflexology-digestion.mp4", 660),
        ("Week 8: Qigong to Support Digestion", "week-08-qigong-digestion.mp4", 1020),
        ("Week 9: Reflexology to Improve Sleep", "week-09-reflexology-sleep.mp4", 600),
        ("Week 10: Qigong to Nourish the Body", "week-10-qigong-nourish.mp4", 1140),
        ("Week 11: Guasha to Improve Sleep", "week-11-guasha-sleep.mp4", 780),
        ("Week 12: Reflexology to Improve Energy", "week-12-reflexology-energy.mp4", 720),
    ],
    "fearlessly-fertile-yoga": [
        ("Enhancing Hormonal Well-being", "video-01-hormonal-wellbeing.mov", 1980),
        ("Eliminate Waste and Enhance Blood Circulation", "video-02-eliminate-waste-circulation.mov", 2280),
        ("Harnessing Yin Energy for Substance Creation", "video-03-yin-energy-substance.mov", 2220),
        ("Release & Embrace the Flow", "video-04-release-embrace-flow.mov", 2040),
        ("Awakening Yang Qi for Growth & Transformation", "video-05-yang-qi-transformation.mov", 2460),
        ("Fascia Flossing for Stress-Free Living", "video-06-fascia-flossing.mov", 2940),
        ("Awakening the Power Within", "video-07-power-within.mov", 2940),
        ("Fluid Dynamics for a Healthier You", "video-08-fluid-dynamics.mov", 2640),
        ("Cool, Calm, and Fired Up", "video-09-cool-calm-fired-up.mov", 2580),
        ("Shine with Your Heart's Inner Glow", "video-10-hearts-inner-glow.mov", 2820),
    ],
}

# (slug, title, total pages, bonus only)
WORKBOOKS = [
    ("week-1-lungs", "Week 1: Lungs - Strengthen Qi & Immunity", 8, False),
    ("week-2-qi", "Week 2: Qi - Cultivate Your Vital Energy", 8, False),
    ("week-3-spleen", "Week 3: Spleen - Nourish Digestion & Blood", 8, False),
    ("week-4-kidneys", "Week 4: Kidneys - Build Essence & Vitality", 8, False),
    ("week-5-liver", "Week 5: Liver - Harmonize Emotions & Flow", 8, False),
    ("week-6-heart", "Week 6: Heart - Cultivate Joy & Connection", 8, False),
    ("week-7-blood", "Week 7: Blood - Build & Circulate Life Force", 8, False),
    ("week-8-yin", "Week 8: Yin - Deepen Rest & Nourishment", 8, False),
    ("week-9-yang", "Week 9: Yang - Activate Warmth & Movement", 8, False),
    ("bonus-workbook", "Bonus: Complete Fertility Toolkit", 12, True),
]

PRINTABLES = [
    ("TCM Food Therapy to Treat Dampness", "tcm-food-therapy-dampness.pdf"),
    ("TCM Food Therapy to Treat Depleted Blood", "tcm-food-therapy-depleted-blood.pdf"),
    ("TCM Food Therapy to Treat Depleted Yang", "tcm-food-therapy-depleted-yang.pdf"),
    ("TCM Food Therapy to Treat Depleted Yin", "tcm-food-therapy-depleted-yin.pdf"),
]


class Command(BaseCommand):
    help = "Creates or updates the program catalogue (products, videos, workbooks, printables)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Roll back all changes after seeding.",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN: changes will be rolled back"))

        with transaction.atomic():
            products = {data["slug"]: self._upsert_product(data) for data in PRODUCTS}
            self._seed_videos(products)
            self._seed_workbooks(products[OFB_SLUG])
            self._seed_printables(products["free-printables"])

            if dry_run:
                transaction.set_rollback(True)

        self.stdout.write(self.style.SUCCESS("Program catalogue seeded."))

    def _upsert_product(self, data):
        defaults = {
            key: value
            for key, value in data.items()
            if key != "slug" and key not in PRICE_ENV_FIELDS
        }
        for env_key, field in PRICE_ENV_FIELDS.items():
            defaults[field] = _env(data[env_key]) if env_key in data else None

        product, created = Product.objects.update_or_create(slug=data["slug"], defaults=defaults)
        action = "created" if created else "updated"
        self.stdout.write(self.style.SUCCESS(f'Product "{product.slug}" {action}.'))

        missing = [
            data[env_key]
            for env_key in PRICE_ENV_FIELDS
            if env_key in data and not defaults[PRICE_ENV_FIELDS[env_key]]
        ]
        if missing:
            self.stdout.write(
                self.style.WARNING(f"  - no Stripe price id for {product.slug}: {', '.join(missing)} not set")
            )
        return product

    def _seed_videos(self, products):
        for slug, videos in VIDEOS.items():
            product = products[slug]
            for order, (title, key, duration) in enumerate(videos, start=1):
                if "/" not in key:
                    key = f"videos/{slug}/{key}"
                Video.objects.update_or_create(
                    product=product,
                    order=order,
                    defaults={"title": title, "object_key": key, "duration_seconds": duration},
                )
            self.stdout.write(f"  - {len(videos)} videos for {slug}")

    def _seed_workbooks(self, product):
        for order, (slug, title, total_pages, bonus_only) in enumerate(WORKBOOKS, start=1):
            Workbook.objects.update_or_create(
                product=product,
                slug=slug,
                defaults={
                    "title": title,
                    "order": order,
                    "bonus_only": bonus_only,
                    "page_folder_key": f"workbooks/{product.slug}/{slug}",
                    "total_pages": total_pages,
                    "pdf_key": None,
                },
            )
        self.stdout.write(f"  - {len(WORKBOOKS)} workbooks for {product.slug}")

    def _seed_printables(self, product):
        for order, (title, filename) in enumerate(PRINTABLES, start=1):
            Printable.objects.update_or_create(
                product=product,
                object_key=f"printables/{product.slug}/{filename}",
                defaults={"title": title, "order": order},
            )
        self.stdout.write(f"  - {len(PRINTABLES)} printables for {product.slug}")
