"""
Checkout Session Initiator
==========================

Validates a purchase attempt and opens a Stripe Checkout Session for it.

Validation order (the first failing check decides the response):
1. caller authenticated                        -> UnauthorizedException
2. product id present                          -> BadRequestException
3. price type is "one-time" or "payment-plan"  -> BadRequestException
4. user exists                                 -> ResourceNotFoundException("User")
5. product exists                              -> ResourceNotFoundException("Product")
6. no COMPLETED purchase of the product        -> PurchaseConflictException
7. price id configured for mode and price type -> ConfigurationException

There is no fallback between test and live price ids, nor between one-time
and payment-plan prices. No purchase row is written here; the webhook
reconciler creates it once Stripe confirms the payment.

Author: Portal Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from django.contrib.auth import get_user_model

from core.exceptions import (
    BadRequestException,
    ConfigurationException,
    PurchaseConflictException,
    ResourceNotFoundException,
    UnauthorizedException,
)
from portal.programs.models import Product, Purchase

from .config import StripeMode
from .gateway import StripeGateway

logger = logging.getLogger(__name__)
User = get_user_model()


class PriceType(str, Enum):
    ONE_TIME = "one-time"
    PAYMENT_PLAN = "payment-plan"


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    redirect_url: str


def resolve_price_id(product: Product, mode: StripeMode, price_type: PriceType) -> Optional[str]:
    """Stripe price id of ``product`` for ``mode`` and ``price_type``, or None."""
    if price_type is PriceType.PAYMENT_PLAN:
        price_id = (
            product.payment_plan_price_id
            if mode is StripeMode.LIVE
            else product.test_payment_plan_price_id
        )
    else:
        price_id = product.price_id if mode is StripeMode.LIVE else product.test_price_id
    return price_id or None


def _lookup_product(product_id) -> Optional[Product]:
    """Products are addressed by primary key or by slug."""
    value = str(product_id).strip()
    if value.isdigit():
        return Product.objects.filter(pk=int(value)).first()
    return Product.objects.filter(slug=value).first()


class CheckoutService:
    """
    Example:
        >>> service = CheckoutService(gateway)
        >>> session = service.initiate_checkout(user.id, product.id, "one-time", "https://example.com")
        >>> session.redirect_url
        'https://checkout.stripe.com/c/pay/cs_test_...'
    """

    def __init__(self, gateway: StripeGateway) -> None:
        self.gateway = gateway

    def initiate_checkout(
        self,
        user_id,
        product_id,
        price_type: Optional[str],
        origin: str,
    ) -> CheckoutSession:
        if not user_id:
            raise UnauthorizedException("You must be logged in to make a purchase")

        if product_id in (None, ""):
            raise BadRequestException("Product ID is required")

        try:
            resolved_price_type = PriceType(price_type or PriceType.ONE_TIME.value)
        except ValueError:
            raise BadRequestException(
                'Invalid price type. Must be "one-time" or "payment-plan"'
            ) from None

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise ResourceNotFoundException("User")

        product = _lookup_product(product_id)
        if product is None:
            raise ResourceNotFoundException("Product")

        already_owned = Purchase.objects.filter(
            user=user,
            product=product,
            status=Purchase.Status.COMPLETED,
        ).exists()
        if already_owned:
            raise PurchaseConflictException()

        mode = self.gateway.mode
        price_id = resolve_price_id(product, mode, resolved_price_type)
        if not price_id:
            logger.error(
                "No %s mode %s price configured for product %s",
                mode.value,
                resolved_price_type.value,
                product.slug,
            )
            raise ConfigurationException(
                f"No {mode.value} mode {resolved_price_type.value} price for {product.slug}"
            )

        metadata = {
            "userId": str(user.pk),
            "productId": str(product.pk),
            "priceType": resolved_price_type.value,
        }
        params = dict(
            mode="subscription" if resolved_price_type is PriceType.PAYMENT_PLAN else "payment",
            customer_email=user.email,
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{origin}/api/checkout/success/?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/programs/{product.slug}?canceled=true",
            metadata=metadata,
        )
        if resolved_price_type is PriceType.PAYMENT_PLAN:
            # Installment invoices only carry subscription metadata
            params["subscription_data"] = {"metadata": metadata}

        logger.info(
            "Creating checkout session user=%s product=%s mode=%s price_type=%s",
            user.pk,
            product.slug,
            mode.value,
            resolved_price_type.value,
        )
        session = self.gateway.create_checkout_session(**params)
        return CheckoutSession(session_id=session.id, redirect_url=session.url)
