"""
Membership Portal Django Admin Configuration

Admin interface (Jazzmin theme) for the portal models.

The admin interface is organized into logical sections:
- User Management: email-keyed users and password reset tokens
- Program Management: products with video, workbook and printable inlines
- Purchases: entitlement records, read-only Stripe references
- Progress: per-user video and workbook progress

Author: Portal Development Team
Version: 1.0.0
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import (
    PasswordResetToken,
    Printable,
    Product,
    Purchase,
    User,
    Video,
    VideoProgress,
    Workbook,
    WorkbookProgress,
    WorkbookVideo,
)

# --- User Management Administration ---


class PortalUserCreationForm(UserCreationForm):
    class Meta:
        model = User
        fields = ("email", "name")


class PortalUserChangeForm(UserChangeForm):
    class Meta:
        model = User
        fields = ("email", "name")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    User administration for the email-keyed user model.

    Django's default UserAdmin references ``username``, ``first_name`` and
    ``last_name``; fieldsets and forms are redefined around email and name.
    """

    form = PortalUserChangeForm
    add_form = PortalUserCreationForm
    list_display = ("email", "name", "is_staff", "is_active", "date_joined", "purchase_count")
    list_filter = ("is_staff", "is_superuser", "is_active", "date_joined")
    search_fields = ("email", "name")
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("name",)}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "password1", "password2"),
            },
        ),
    )

    @admin.display(description=_("Purchases"), ordering="purchase_total")
    def purchase_count(self, instance: User) -> int:
        return instance.purchase_total

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(purchase_total=Count("purchases"))


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ("email", "expires", "created_at")
    search_fields = ("email",)
    readonly_fields = ("token", "created_at")


# --- Program Management Administration ---


class VideoInline(admin.TabularInline):
    """Inline admin for program videos."""

    model = Video
    extra = 1
    fields = ("title", "object_key", "duration_seconds", "order")
    ordering = ("order",)


class WorkbookInline(admin.TabularInline):
    """Inline admin for program workbooks."""

    model = Workbook
    extra = 0
    fields = ("title", "slug", "order", "bonus_only", "pdf_key", "page_folder_key", "total_pages")
    ordering = ("order",)


class PrintableInline(admin.TabularInline):
    model = Printable
    extra = 0
    fields = ("title", "object_key", "order")
    ordering = ("order",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Administration interface for programs.

    Stripe price ids are grouped by mode; checkout never falls back from
    one mode or price type to another, so every id the program is sold with
    must be set here.
    """

    list_display = ("name", "slug", "product_type", "price", "featured", "order", "video_count")
    list_filter = ("product_type", "featured")
    search_fields = ("name", "slug", "description")
    prepopulated_fields = {"slug": ("name",)}
    inlines = [VideoInline, WorkbookInline, PrintableInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("name", "slug", "description", "product_type", "price")}),
        (_("Catalogue"), {"fields": ("featured", "order")}),
        (
            _("Stripe Prices (live)"),
            {"fields": ("price_id", "payment_plan_price_id")},
        ),
        (
            _("Stripe Prices (test)"),
            {"fields": ("test_price_id", "test_payment_plan_price_id")},
        ),
        (
            _("Assets"),
            {
                "fields": ("bonus_asset_key", "guide_pdf_key"),
                "description": _("Object-store keys, never public URLs"),
            },
        ),
    )

    @admin.display(description=_("Videos"), ordering="video_total")
    def video_count(self, instance: Product) -> int:
        return instance.video_total

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(video_total=Count("videos"))


class WorkbookVideoInline(admin.TabularInline):
    model = WorkbookVideo
    extra = 1
    fields = ("title", "object_key", "page_number", "order")
    ordering = ("order",)


@admin.register(Workbook)
class WorkbookAdmin(admin.ModelAdmin):
    list_display = ("title", "product", "order", "bonus_only", "total_pages")
    list_filter = ("product", "bonus_only")
    search_fields = ("title", "slug", "product__name")
    ordering = ("product", "order")
    inlines = [WorkbookVideoInline]


# --- Purchases Administration ---


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Administration interface for purchases.

    Stripe references are read-only; purchases are created by the webhook
    or by free claims.
    """

    list_display = ("user", "product", "status", "payment_type", "plan_complete", "amount", "created_at")
    list_filter = ("status", "payment_type", "plan_complete", "product")
    search_fields = ("user__email", "product__name", "stripe_session_id", "stripe_subscription_id")
    autocomplete_fields = ("user",)
    readonly_fields = (
        "stripe_session_id",
        "stripe_customer_id",
        "stripe_subscription_id",
        "created_at",
        "updated_at",
    )
    date_hierarchy = "created_at"

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "product")


# --- Progress Administration ---


@admin.register(VideoProgress)
class VideoProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "video", "progress_percent", "completed", "last_watched_at")
    list_filter = ("completed", "video__product")
    search_fields = ("user__email", "video__title")

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "video")


@admin.register(WorkbookProgress)
class WorkbookProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "workbook", "last_viewed_page", "completed", "last_viewed_at")
    list_filter = ("completed", "workbook__product")
    search_fields = ("user__email", "workbook__title")

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "workbook")
