"""
Program Serializers

Output serializers for the catalogue, purchases and progress records, and
input serializers for the progress endpoints. Field names are camelCase to
match the frontend.
"""

import math

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from portal.services.entitlements import tier_for_purchase

from .models import Product, Purchase, VideoProgress, WorkbookProgress


class ProductSerializer(serializers.ModelSerializer):
    productType = serializers.CharField(source="product_type")
    hasPaymentPlan = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ("id", "slug", "name", "description", "price", "productType", "featured", "order", "hasPaymentPlan")

    def get_hasPaymentPlan(self, obj: Product) -> bool:
        return obj.product_type == Product.ProductType.PAID_WITH_PLAN


class PurchaseSerializer(serializers.ModelSerializer):
    product = ProductSerializer(read_only=True)
    paymentType = serializers.CharField(source="payment_type")
    planComplete = serializers.BooleanField(source="plan_complete")
    createdAt = serializers.DateTimeField(source="created_at")
    tier = serializers.SerializerMethodField()

    class Meta:
        model = Purchase
        fields = ("id", "product", "amount", "status", "paymentType", "planComplete", "tier", "createdAt")

    def get_tier(self, obj: Purchase) -> str:
        return tier_for_purchase(obj).value


class VideoProgressInputSerializer(serializers.Serializer):
    progressPercent = serializers.FloatField(
        error_messages={
            "required": _("Invalid progress percent. Must be a number between 0 and 100."),
            "invalid": _("Invalid progress percent. Must be a number between 0 and 100."),
        },
    )

    def validate_progressPercent(self, value: float) -> float:
        if not math.isfinite(value):
            raise serializers.ValidationError(
                _("Invalid progress percent. Must be a number between 0 and 100.")
            )
        return value


class WorkbookProgressInputSerializer(serializers.Serializer):
    lastViewedPage = serializers.IntegerField(
        error_messages={
            "required": _("Invalid lastViewedPage"),
            "invalid": _("Invalid lastViewedPage"),
        },
    )
    # Accepted for compatibility; completion is derived from the page
    completed = serializers.BooleanField(required=False)


class VideoProgressSerializer(serializers.ModelSerializer):
    videoId = serializers.IntegerField(source="video_id")
    progressPercent = serializers.IntegerField(source="progress_percent")
    lastWatchedAt = serializers.DateTimeField(source="last_watched_at")

    class Meta:
        model = VideoProgress
        fields = ("videoId", "progressPercent", "completed", "lastWatchedAt")


class WorkbookProgressSerializer(serializers.ModelSerializer):
    workbookId = serializers.IntegerField(source="workbook_id")
    lastViewedPage = serializers.IntegerField(source="last_viewed_page")
    lastViewedAt = serializers.DateTimeField(source="last_viewed_at")

    class Meta:
        model = WorkbookProgress
        fields = ("workbookId", "lastViewedPage", "completed", "lastViewedAt")
