"""
Stripe Integration Views (core.stripe_integration)
==================================================

REST endpoints for buying programs with Stripe Checkout.

Endpoints
---------

1. CheckoutSessionView
   - URL: /api/checkout/
   - Method: POST
   - Auth: Required
   - Body: {"productId": 3, "priceType": "one-time" | "payment-plan"}
   - Purpose:
       Validates the purchase attempt and opens a Checkout Session.
       Returns {"sessionId", "redirectUrl"}.

2. CheckoutSuccessView
   - URL: /api/checkout/success/?session_id=cs_...
   - Method: GET
   - Auth: Required (otherwise redirect to login)
   - Purpose:
       Browser landing page after Checkout. Verifies that the session
       belongs to the current user and always answers with a redirect to
       the dashboard carrying success, pending or error flags.
       Entitlement itself is only granted by the webhook.

3. StripeWebhookView
   - URL: /api/webhooks/stripe/
   - Method: POST
   - Auth: None, verified through the Stripe-Signature header
   - Purpose:
       Verifies the signature over the raw body, then hands the event to
       the WebhookReconciler. 400 on a bad signature (no state change),
       500 on processing errors so Stripe retries.

Dependencies
------------
- Django REST Framework (API endpoints)
- stripe (official Python SDK, through StripeGateway)

Author: Portal Development Team
Date: 2025-09-03
"""

import logging

import stripe
from django.apps import apps
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BadRequestException
from core.http import resolve_request_origin
from portal.services.clients import get_notifier

from .checkout import CheckoutService
from .reconciler import WebhookReconciler

logger = logging.getLogger(__name__)


def get_gateway():
    return apps.get_app_config("stripe_integration").gateway


class CheckoutSessionView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if not isinstance(request.data, dict):
            raise BadRequestException("Product ID is required")

        product_id = request.data.get("productId", request.data.get("product_id"))
        price_type = request.data.get("priceType", request.data.get("price_type"))

        session = CheckoutService(get_gateway()).initiate_checkout(
            user_id=request.user.pk,
            product_id=product_id,
            price_type=price_type,
            origin=resolve_request_origin(request),
        )
        return Response(
            {"sessionId": session.session_id, "redirectUrl": session.redirect_url},
            status=status.HTTP_200_OK,
        )


class CheckoutSuccessView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        origin = resolve_request_origin(request)

        if not request.user.is_authenticated:
            return HttpResponseRedirect(f"{origin}/auth/login?error=unauthorized")

        session_id = request.query_params.get("session_id")
        if not session_id:
            return HttpResponseRedirect(f"{origin}/dashboard?error=missing-session")

        try:
            checkout_session = get_gateway().retrieve_session(session_id)
        except Exception:
            logger.exception("Checkout verification failed for session %s", session_id)
            return HttpResponseRedirect(f"{origin}/dashboard?error=verification-failed")

        customer_details = getattr(checkout_session, "customer_details", None)
        session_email = (
            getattr(checkout_session, "customer_email", None)
            or getattr(customer_details, "email", None)
            or ""
        )
        if session_email.lower() != request.user.email.lower():
            logger.warning(
                "Session %s does not belong to user %s",
                session_id,
                request.user.pk,
            )
            return HttpResponseRedirect(f"{origin}/dashboard?error=unauthorized")

        payment_status = getattr(checkout_session, "payment_status", None)
        if payment_status == "paid":
            return HttpResponseRedirect(f"{origin}/dashboard?success=true")
        if payment_status == "unpaid":
            return HttpResponseRedirect(f"{origin}/dashboard?pending=true")
        return HttpResponseRedirect(f"{origin}/dashboard?error=payment-failed")


class StripeWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        gateway = get_gateway()
        payload = request.body
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")

        try:
            event = gateway.verify_webhook(payload, signature)
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed: %s", e)
            return Response({"error": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)
        except ValueError:
            logger.warning("Webhook payload is not valid JSON")
            return Response({"error": "Invalid payload"}, status=status.HTTP_400_BAD_REQUEST)

        reconciler = WebhookReconciler(gateway, notifier=get_notifier())
        try:
            reconciler.handle_event(event)
        except Exception:
            logger.exception(
                "Webhook handler failed for %s (event_id=%s)",
                event.get("type"),
                event.get("id"),
            )
            return Response({"error": "Webhook handler failed"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"received": True}, status=status.HTTP_200_OK)
