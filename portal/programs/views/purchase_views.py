"""
Catalogue and Purchase Views

- ProductListView: public program catalogue (ids and slugs used by checkout)
- PurchaseListView: the current user's completed purchases with their tier
"""

from rest_framework import generics
from rest_framework.permissions import AllowAny, IsAuthenticated

from ..models import Product, Purchase
from ..serializers import ProductSerializer, PurchaseSerializer


class ProductListView(generics.ListAPIView):
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    pagination_class = None
    queryset = Product.objects.all()


class PurchaseListView(generics.ListAPIView):
    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return (
            Purchase.objects.select_related("product")
            .filter(user=self.request.user, status=Purchase.Status.COMPLETED)
            .order_by("-created_at")
        )
