"""
Program, Purchase and Progress Models

This module defines the catalogue of sellable programs, their content items,
the purchase records that drive entitlement, and per-user progress records.

Models:
- Product: A sellable program (free workshop, free resource, paid program)
- Video: Ordered video lesson of a product
- Workbook: Ordered workbook (PDF or folder of page images), optionally bonus-only
- WorkbookVideo: Video embedded in a workbook, gated like its workbook
- Printable: Downloadable PDF belonging to a product
- Purchase: Entitlement record linking a user, a product and a payment outcome
- VideoProgress: Playback position per (user, video)
- WorkbookProgress: Reading position per (user, workbook)

Content items never store URLs, only opaque object-store keys. Signed URLs
are issued at serve time by the cloud storage service, after the
entitlement check.

Author: Portal Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

__all__ = [
    "Product",
    "Video",
    "Workbook",
    "WorkbookVideo",
    "Printable",
    "Purchase",
    "VideoProgress",
    "WorkbookProgress",
]


class Product(models.Model):
    """
    A sellable program.

    Attributes:
        name: Display name
        slug: Unique URL identifier (e.g. "optimal-fertility-blueprint")
        price: Price in cents; 0 for free products
        product_type: Free workshop, free resource, paid program, paid with plan
        featured / order: Catalogue presentation
        price_id / payment_plan_price_id: Live mode Stripe price ids
        test_price_id / test_payment_plan_price_id: Test mode Stripe price ids
        bonus_asset_key: Object key of the bonus download (full tier only)
        guide_pdf_key: Object key of the public program guide

    A price of 0 does not grant access by itself. Free products are claimed,
    which creates a zero-amount FREE purchase.

    Example:
        >>> product = Product.objects.get(slug="free-workshop")
        >>> product.is_free
        True
    """

    class ProductType(models.TextChoices):
        FREE_WORKSHOP = "FREE_WORKSHOP", _("Free Workshop")
        FREE_RESOURCE = "FREE_RESOURCE", _("Free Resource")
        PAID_PROGRAM = "PAID_PROGRAM", _("Paid Program")
        PAID_WITH_PLAN = "PAID_WITH_PLAN", _("Paid Program with Payment Plan")

    name = models.CharField(
        max_length=200,
        verbose_name=_("Name"),
        help_text=_("Display name of the program"),
    )

    slug = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name=_("Slug"),
        help_text=_("Unique URL identifier"),
    )

    description = models.TextField(blank=True, verbose_name=_("Description"))

    price = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Price (cents)"),
        help_text=_("Price in minor currency units"),
    )

    product_type = models.CharField(
        max_length=20,
        choices=ProductType.choices,
        default=ProductType.PAID_PROGRAM,
        verbose_name=_("Product Type"),
    )

    featured = models.BooleanField(default=False, verbose_name=_("Featured"))

    order = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Display Order"),
    )

    price_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_("Live One-time Price ID"),
    )

    payment_plan_price_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_("Live Payment Plan Price ID"),
    )

    test_price_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_("Test One-time Price ID"),
    )

    test_payment_plan_price_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_("Test Payment Plan Price ID"),
    )

    bonus_asset_key = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name=_("Bonus Asset Key"),
        help_text=_("Object key of the bonus download, requires full payment or a completed plan"),
    )

    guide_pdf_key = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name=_("Program Guide Key"),
        help_text=_("Object key of the free program guide PDF"),
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Program")
        verbose_name_plural = _("Programs")
        ordering = ["order", "name"]
        db_table = "portal_product"

    def __str__(self) -> str:
        return self.name

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def sales_page_path(self) -> str:
        return f"/programs/{self.slug}"

    @property
    def dashboard_path(self) -> str:
        return f"/dashboard/programs/{self.slug}"


class Video(models.Model):
    """Ordered video lesson. ``object_key`` is resolved to a signed URL at serve time."""

    product = models.ForeignKey(
        Product,
        related_name="videos",
        on_delete=models.CASCADE,
        verbose_name=_("Program"),
    )

    title = models.CharField(max_length=255, verbose_name=_("Title"))
    description = models.TextField(blank=True, verbose_name=_("Description"))

    object_key = models.CharField(
        max_length=500,
        blank=True,
        default="",
        verbose_name=_("Object Key"),
        help_text=_("Object-store key of the video file"),
    )

    duration_seconds = models.PositiveIntegerField(
        blank=True,
        null=True,
        verbose_name=_("Duration (seconds)"),
    )

    order = models.PositiveIntegerField(default=0, verbose_name=_("Display Order"))

    class Meta:
        verbose_name = _("Video")
        verbose_name_plural = _("Videos")
        ordering = ["product", "order", "id"]
        db_table = "portal_video"

    def __str__(self) -> str:
        return f"{self.product.name} - {self.title}"


class Workbook(models.Model):
    """
    Ordered workbook of a product.

    A workbook is stored either as a single PDF (``pdf_key``) or as a folder
    of page images (``page_folder_key`` + ``total_pages``, pages named
    ``1.png`` .. ``N.png``). The two representations are mutually exclusive.
    Bonus workbooks require full payment or a completed payment plan.
    """

    product = models.ForeignKey(
        Product,
        related_name="workbooks",
        on_delete=models.CASCADE,
        verbose_name=_("Program"),
    )

    title = models.CharField(max_length=255, verbose_name=_("Title"))
    slug = models.SlugField(max_length=100, verbose_name=_("Slug"))
    description = models.TextField(blank=True, verbose_name=_("Description"))

    order = models.PositiveIntegerField(default=0, verbose_name=_("Display Order"))

    bonus_only = models.BooleanField(
        default=False,
        verbose_name=_("Bonus Only"),
        help_text=_("Requires full payment or a completed payment plan"),
    )

    pdf_key = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name=_("PDF Key"),
    )

    page_folder_key = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name=_("Page Folder Key"),
    )

    total_pages = models.PositiveIntegerField(
        blank=True,
        null=True,
        verbose_name=_("Total Pages"),
    )

    class Meta:
        verbose_name = _("Workbook")
        verbose_name_plural = _("Workbooks")
        ordering = ["product", "order", "id"]
        unique_together = ("product", "slug")
        db_table = "portal_workbook"

    def __str__(self) -> str:
        return f"{self.product.name} - {self.title}"

    def clean(self) -> None:
        if self.pdf_key and self.page_folder_key:
            raise ValidationError(
                _("A workbook is either a PDF or a folder of page images, not both.")
            )
        if self.page_folder_key and not self.total_pages:
            raise ValidationError(
                {"total_pages": _("Page-image workbooks need the number of pages.")}
            )


class WorkbookVideo(models.Model):
    """
    Video embedded in a workbook page. Access follows the workbook: core
    workbooks need any entitlement, bonus workbooks need tier full.
    """

    workbook = models.ForeignKey(
        Workbook,
        related_name="videos",
        on_delete=models.CASCADE,
        verbose_name=_("Workbook"),
    )

    title = models.CharField(max_length=255, verbose_name=_("Title"))
    description = models.TextField(blank=True, verbose_name=_("Description"))

    object_key = models.CharField(
        max_length=500,
        blank=True,
        default="",
        db_index=True,
        verbose_name=_("Object Key"),
        help_text=_("Object-store key of the video file"),
    )

    page_number = models.PositiveIntegerField(
        blank=True,
        null=True,
        verbose_name=_("Page Number"),
        help_text=_("Workbook page the video belongs to"),
    )

    order = models.PositiveIntegerField(default=0, verbose_name=_("Display Order"))

    class Meta:
        verbose_name = _("Workbook Video")
        verbose_name_plural = _("Workbook Videos")
        ordering = ["workbook", "order", "id"]
        db_table = "portal_workbook_video"

    def __str__(self) -> str:
        return f"{self.workbook.title} - {self.title}"


class Printable(models.Model):
    """Downloadable PDF of a product."""

    product = models.ForeignKey(
        Product,
        related_name="printables",
        on_delete=models.CASCADE,
        verbose_name=_("Program"),
    )

    title = models.CharField(max_length=255, verbose_name=_("Title"))
    description = models.TextField(blank=True, verbose_name=_("Description"))
    object_key = models.CharField(max_length=500, verbose_name=_("Object Key"))
    order = models.PositiveIntegerField(default=0, verbose_name=_("Display Order"))

    class Meta:
        verbose_name = _("Printable")
        verbose_name_plural = _("Printables")
        ordering = ["product", "order", "id"]
        db_table = "portal_printable"

    def __str__(self) -> str:
        return f"{self.product.name} - {self.title}"


class Purchase(models.Model):
    """
    Entitlement record.

    Attributes:
        user / product: Who owns what
        stripe_session_id: Checkout session id, unique; the webhook dedup key.
            Null for free claims.
        stripe_customer_id / stripe_subscription_id: Stripe references;
            the subscription id links installment invoices back to this row
        amount: Amount paid in cents
        status: PENDING, COMPLETED or FAILED
        payment_type: FULL, PLAN or FREE
        plan_complete: True once every installment of a plan is paid
            (always True for FULL and FREE)

    Only ``plan_complete`` changes after creation. A failed checkout and a
    later successful one are separate rows.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")

    class PaymentType(models.TextChoices):
        FULL = "FULL", _("Full Payment")
        PLAN = "PLAN", _("Payment Plan")
        FREE = "FREE", _("Free")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="purchases",
        on_delete=models.CASCADE,
        verbose_name=_("User"),
    )

    product = models.ForeignKey(
        Product,
        related_name="purchases",
        on_delete=models.PROTECT,
        verbose_name=_("Program"),
    )

    stripe_session_id = models.CharField(
        max_length=255,
        unique=True,
        blank=True,
        null=True,
        verbose_name=_("Stripe Checkout Session ID"),
    )

    stripe_customer_id = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        verbose_name=_("Stripe Customer ID"),
    )

    stripe_subscription_id = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        db_index=True,
        verbose_name=_("Stripe Subscription ID"),
    )

    amount = models.PositiveIntegerField(default=0, verbose_name=_("Amount (cents)"))

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        verbose_name=_("Status"),
    )

    payment_type = models.CharField(
        max_length=10,
        choices=PaymentType.choices,
        blank=True,
        null=True,
        verbose_name=_("Payment Type"),
    )

    plan_complete = models.BooleanField(default=False, verbose_name=_("Plan Complete"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Purchase")
        verbose_name_plural = _("Purchases")
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["user", "product", "status"], name="portal_purchase_owner_idx"
            ),
        ]
        db_table = "portal_purchase"

    def __str__(self) -> str:
        return f"{self.user} - {self.product} ({self.status})"


class VideoProgress(models.Model):
    """Playback position of a user in a video, upserted on every tick."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="video_progress",
        on_delete=models.CASCADE,
        verbose_name=_("User"),
    )

    video = models.ForeignKey(
        Video,
        related_name="progress_records",
        on_delete=models.CASCADE,
        verbose_name=_("Video"),
    )

    progress_percent = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_("Progress (%)"),
    )

    completed = models.BooleanField(default=False, verbose_name=_("Completed"))
    last_watched_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Video Progress")
        verbose_name_plural = _("Video Progress")
        unique_together = ("user", "video")
        db_table = "portal_video_progress"

    def __str__(self) -> str:
        return f"{self.user} - {self.video.title}: {self.progress_percent}%"


class WorkbookProgress(models.Model):
    """Reading position of a user in a workbook, upserted on every page turn."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="workbook_progress",
        on_delete=models.CASCADE,
        verbose_name=_("User"),
    )

    workbook = models.ForeignKey(
        Workbook,
        related_name="progress_records",
        on_delete=models.CASCADE,
        verbose_name=_("Workbook"),
    )

    last_viewed_page = models.PositiveIntegerField(
        default=1,
        verbose_name=_("Last Viewed Page"),
    )

    completed = models.BooleanField(default=False, verbose_name=_("Completed"))
    last_viewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Workbook Progress")
        verbose_name_plural = _("Workbook Progress")
        unique_together = ("user", "workbook")
        db_table = "portal_workbook_progress"

    def __str__(self) -> str:
        return f"{self.user} - {self.workbook.title}: page {self.last_viewed_page}"
