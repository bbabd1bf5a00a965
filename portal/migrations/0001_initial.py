import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import portal.users.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                (
                    "email",
                    models.EmailField(
                        help_text="Unique email address used to log in",
                        max_length=254,
                        unique=True,
                        verbose_name="Email",
                    ),
                ),
                (
                    "name",
                    models.CharField(blank=True, default="", help_text="Display name", max_length=150, verbose_name="Name"),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "User",
                "verbose_name_plural": "Users",
                "db_table": "portal_user",
            },
            managers=[
                ("objects", portal.users.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="PasswordResetToken",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(db_index=True, max_length=254, verbose_name="Email")),
                (
                    "token",
                    models.CharField(
                        default=portal.users.models._generate_reset_token,
                        max_length=64,
                        unique=True,
                        verbose_name="Token",
                    ),
                ),
                ("expires", models.DateTimeField(default=portal.users.models._default_expiry, verbose_name="Expires")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Password Reset Token",
                "verbose_name_plural": "Password Reset Tokens",
                "db_table": "portal_password_reset_token",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Display name of the program", max_length=200, verbose_name="Name")),
                ("slug", models.SlugField(help_text="Unique URL identifier", max_length=100, unique=True, verbose_name="Slug")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "price",
                    models.PositiveIntegerField(default=0, help_text="Price in minor currency units", verbose_name="Price (cents)"),
                ),
                (
                    "product_type",
                    models.CharField(
                        choices=[
                            ("FREE_WORKSHOP", "Free Workshop"),
                            ("FREE_RESOURCE", "Free Resource"),
                            ("PAID_PROGRAM", "Paid Program"),
                            ("PAID_WITH_PLAN", "Paid Program with Payment Plan"),
                        ],
                        default="PAID_PROGRAM",
                        max_length=20,
                        verbose_name="Product Type",
                    ),
                ),
                ("featured", models.BooleanField(default=False, verbose_name="Featured")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                ("price_id", models.CharField(blank=True, max_length=100, null=True, verbose_name="Live One-time Price ID")),
                (
                    "payment_plan_price_id",
                    models.CharField(blank=True, max_length=100, null=True, verbose_name="Live Payment Plan Price ID"),
                ),
                ("test_price_id", models.CharField(blank=True, max_length=100, null=True, verbose_name="Test One-time Price ID")),
                (
                    "test_payment_plan_price_id",
                    models.CharField(blank=True, max_length=100, null=True, verbose_name="Test Payment Plan Price ID"),
                ),
                (
                    "bonus_asset_key",
                    models.CharField(
                        blank=True,
                        help_text="Object key of the bonus download, requires full payment or a completed plan",
                        max_length=500,
                        null=True,
                        verbose_name="Bonus Asset Key",
                    ),
                ),
                (
                    "guide_pdf_key",
                    models.CharField(
                        blank=True,
                        help_text="Object key of the free program guide PDF",
                        max_length=500,
                        null=True,
                        verbose_name="Program Guide Key",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Program",
                "verbose_name_plural": "Programs",
                "ordering": ["order", "name"],
                "db_table": "portal_product",
            },
        ),
        migrations.CreateModel(
            name="Video",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "object_key",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Object-store key of the video file",
                        max_length=500,
                        verbose_name="Object Key",
                    ),
                ),
                ("duration_seconds", models.PositiveIntegerField(blank=True, null=True, verbose_name="Duration (seconds)")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="videos",
                        to="portal.product",
                        verbose_name="Program",
                    ),
                ),
            ],
            options={
                "verbose_name": "Video",
                "verbose_name_plural": "Videos",
                "ordering": ["product", "order", "id"],
                "db_table": "portal_video",
            },
        ),
        migrations.CreateModel(
            name="Workbook",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("slug", models.SlugField(max_length=100, verbose_name="Slug")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                (
                    "bonus_only",
                    models.BooleanField(
                        default=False,
                        help_text="Requires full payment or a completed payment plan",
                        verbose_name="Bonus Only",
                    ),
                ),
                ("pdf_key", models.CharField(blank=True, max_length=500, null=True, verbose_name="PDF Key")),
                ("page_folder_key", models.CharField(blank=True, max_length=500, null=True, verbose_name="Page Folder Key")),
                ("total_pages", models.PositiveIntegerField(blank=True, null=True, verbose_name="Total Pages")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workbooks",
                        to="portal.product",
                        verbose_name="Program",
                    ),
                ),
            ],
            options={
                "verbose_name": "Workbook",
                "verbose_name_plural": "Workbooks",
                "ordering": ["product", "order", "id"],
                "db_table": "portal_workbook",
                "unique_together": {("product", "slug")},
            },
        ),
        migrations.CreateModel(
            name="Printable",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("object_key", models.CharField(max_length=500, verbose_name="Object Key")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="printables",
                        to="portal.product",
                        verbose_name="Program",
                    ),
                ),
            ],
            options={
                "verbose_name": "Printable",
                "verbose_name_plural": "Printables",
                "ordering": ["product", "order", "id"],
                "db_table": "portal_printable",
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "stripe_session_id",
                    models.CharField(
                        blank=True, max_length=255, null=True, unique=True, verbose_name="Stripe Checkout Session ID"
                    ),
                ),
                (
                    "stripe_customer_id",
                    models.CharField(blank=True, max_length=255, null=True, verbose_name="Stripe Customer ID"),
                ),
                (
                    "stripe_subscription_id",
                    models.CharField(
                        blank=True, db_index=True, max_length=255, null=True, verbose_name="Stripe Subscription ID"
                    ),
                ),
                ("amount", models.PositiveIntegerField(default=0, verbose_name="Amount (cents)")),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("COMPLETED", "Completed"), ("FAILED", "Failed")],
                        default="PENDING",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        blank=True,
                        choices=[("FULL", "Full Payment"), ("PLAN", "Payment Plan"), ("FREE", "Free")],
                        max_length=10,
                        null=True,
                        verbose_name="Payment Type",
                    ),
                ),
                ("plan_complete", models.BooleanField(default=False, verbose_name="Plan Complete")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="portal.product",
                        verbose_name="Program",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Purchase",
                "verbose_name_plural": "Purchases",
                "ordering": ["-created_at"],
                "db_table": "portal_purchase",
                "indexes": [
                    models.Index(fields=["user", "product", "status"], name="portal_purchase_owner_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VideoProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("progress_percent", models.PositiveSmallIntegerField(default=0, verbose_name="Progress (%)")),
                ("completed", models.BooleanField(default=False, verbose_name="Completed")),
                ("last_watched_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="video_progress",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
                (
                    "video",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_records",
                        to="portal.video",
                        verbose_name="Video",
                    ),
                ),
            ],
            options={
                "verbose_name": "Video Progress",
                "verbose_name_plural": "Video Progress",
                "db_table": "portal_video_progress",
                "unique_together": {("user", "video")},
            },
        ),
        migrations.CreateModel(
            name="WorkbookProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("last_viewed_page", models.PositiveIntegerField(default=1, verbose_name="Last Viewed Page")),
                ("completed", models.BooleanField(default=False, verbose_name="Completed")),
                ("last_viewed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workbook_progress",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
                (
                    "workbook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_records",
                        to="portal.workbook",
                        verbose_name="Workbook",
                    ),
                ),
            ],
            options={
                "verbose_name": "Workbook Progress",
                "verbose_name_plural": "Workbook Progress",
                "db_table": "portal_workbook_progress",
                "unique_together": {("user", "workbook")},
            },
        ),
    ]
