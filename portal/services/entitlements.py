"""
Entitlement Resolver

Decides whether a user may see a product's content, and at which tier.
Every content endpoint goes through ``require_access``; nothing else in the
portal grants access to paid material.

Tiers:
- none: no completed purchase
- partial: payment plan with installments outstanding (core content only)
- full: full payment, free claim, or completed payment plan (core + bonus)

A product price of 0 never grants access on its own. Free products are
claimed first, which creates a FREE purchase row.

Author: Portal Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.exceptions import AccessDeniedException
from portal.programs.models import Product, Purchase

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class Entitlement:
    """Result of an entitlement check."""

    entitled: bool
    tier: Tier
    purchase: Optional[Purchase] = None

    @property
    def can_access_bonus(self) -> bool:
        return self.tier == Tier.FULL


NOT_ENTITLED = Entitlement(entitled=False, tier=Tier.NONE)


def tier_for_purchase(purchase: Purchase) -> Tier:
    if purchase.payment_type == Purchase.PaymentType.PLAN and not purchase.plan_complete:
        return Tier.PARTIAL
    return Tier.FULL


def resolve_entitlement(user, product: Product) -> Entitlement:
    """
    Resolve the entitlement of ``user`` for ``product``.

    The most recent COMPLETED purchase decides. PENDING and FAILED rows are
    ignored.

    Args:
        user: Django user (anonymous users are never entitled)
        product: The product being accessed

    Returns:
        Entitlement with tier none, partial or full
    """
    if user is None or not user.is_authenticated:
        return NOT_ENTITLED

    purchase = (
        Purchase.objects.filter(
            user=user,
            product=product,
            status=Purchase.Status.COMPLETED,
        )
        .order_by("-created_at", "-id")
        .first()
    )
    if purchase is None:
        return NOT_ENTITLED

    return Entitlement(entitled=True, tier=tier_for_purchase(purchase), purchase=purchase)


def require_access(user, product: Product, bonus: bool = False) -> Entitlement:
    """
    Raise ``AccessDeniedException`` unless ``user`` may see ``product``.

    Args:
        user: Requesting user
        product: Product owning the content item
        bonus: True for bonus-only content, which needs tier full

    Returns:
        The resolved entitlement

    Raises:
        AccessDeniedException: carries the product's sales page as redirect hint
    """
    entitlement = resolve_entitlement(user, product)

    if not entitlement.entitled:
        logger.info("Access denied: user=%s product=%s", getattr(user, "pk", None), product.slug)
        raise AccessDeniedException(redirect_to=product.sales_page_path)

    if bonus and not entitlement.can_access_bonus:
        logger.info(
            "Bonus access denied: user=%s product=%s tier=%s",
            user.pk,
            product.slug,
            entitlement.tier.value,
        )
        raise AccessDeniedException(
            message="Bonus content unlocks once your payment plan is complete.",
            redirect_to=product.dashboard_path,
        )

    return entitlement
