"""
Free Product Claim View

Free workshops and resources are not entitlement-exempt: claiming one
creates a zero-amount FREE purchase, which is what the entitlement check
looks at afterwards.
"""

import logging

from django.db import transaction
from django.http import HttpResponseRedirect
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.views import APIView

from core.exceptions import BadRequestException, ResourceNotFoundException
from core.http import resolve_request_origin

from ..models import Product, Purchase

logger = logging.getLogger(__name__)


class ClaimProductView(APIView):
    """
    POST /api/products/<slug>/claim/

    Redirects to the login page when not logged in, otherwise to the
    product's dashboard page (claiming twice is a no-op).
    """

    permission_classes = [AllowAny]

    def post(self, request: Request, slug: str):
        origin = resolve_request_origin(request)
        if not request.user.is_authenticated:
            return HttpResponseRedirect(f"{origin}/auth/login?redirect=/programs/{slug}")

        product = Product.objects.filter(slug=slug).first()
        if product is None:
            raise ResourceNotFoundException("Product")

        if not product.is_free:
            raise BadRequestException("This program is not free. Please purchase it instead.")

        with transaction.atomic():
            owned = Purchase.objects.filter(
                user=request.user,
                product=product,
                status=Purchase.Status.COMPLETED,
            ).exists()
            if not owned:
                Purchase.objects.create(
                    user=request.user,
                    product=product,
                    amount=0,
                    status=Purchase.Status.COMPLETED,
                    payment_type=Purchase.PaymentType.FREE,
                    plan_complete=True,
                )
                logger.info("User %s claimed free product %s", request.user.pk, product.slug)

        return HttpResponseRedirect(f"{origin}{product.dashboard_path}")
