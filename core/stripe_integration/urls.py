from django.urls import path
from .views import (
    CheckoutSessionView,
    CheckoutSuccessView,
    StripeWebhookView,
)

app_name = "stripe_integration"

urlpatterns = [
    path("checkout/", CheckoutSessionView.as_view(), name="checkout"),
    path("checkout/success/", CheckoutSuccessView.as_view(), name="checkout-success"),
    path("webhooks/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
