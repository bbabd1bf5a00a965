"""Shared fixtures for the portal test suites."""

from django.contrib.auth import get_user_model

from portal.programs.models import Product, Purchase

User = get_user_model()


def make_user(email="jane@example.com", password="Musterpassword", name="Jane Doe", **extra):
    return User.objects.create_user(email=email, password=password, name=name, **extra)


def make_product(slug="optimal-fertility-blueprint", price=14900, **extra):
    defaults = {
        "name": slug.replace("-", " ").title(),
        "product_type": Product.ProductType.PAID_PROGRAM if price else Product.ProductType.FREE_RESOURCE,
    }
    defaults.update(extra)
    return Product.objects.create(slug=slug, price=price, **defaults)


def make_purchase(user, product, payment_type=Purchase.PaymentType.FULL, status=Purchase.Status.COMPLETED, **extra):
    defaults = {
        "amount": product.price,
        "plan_complete": payment_type != Purchase.PaymentType.PLAN,
    }
    defaults.update(extra)
    return Purchase.objects.create(
        user=user,
        product=product,
        payment_type=payment_type,
        status=status,
        **defaults,
    )
