"""
Portal URL Configuration

URL Structure (mounted under /api/):
- auth/: signup, cookie-based JWT login/refresh/logout, password reset
- newsletter/, book-session/: public newsletter subscription and session booking
- products/: catalogue, free claims, bonus downloads, program guides, progress
- purchases/: the user's purchases
- videos/, workbooks/, workbook-videos/, printables/: signed URLs and progress
  of content items

Checkout and the Stripe webhook live in core.stripe_integration.urls.

Author: Portal Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, path

from .programs import views as program_views
from .users import views as user_views

app_name = "portal"

# --- Authentication ---

auth_urlpatterns: List[URLPattern] = [
    path("auth/signup/", user_views.SignupView.as_view(), name="signup"),
    path("auth/login/", user_views.LoginView.as_view(), name="login"),
    path("auth/refresh/", user_views.RefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", user_views.LogoutView.as_view(), name="logout"),
    path("auth/me/", user_views.MeView.as_view(), name="me"),
    path("auth/forgot-password/", user_views.ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/reset-password/", user_views.ResetPasswordView.as_view(), name="reset-password"),
    path("newsletter/subscribe/", user_views.NewsletterSubscribeView.as_view(), name="newsletter-subscribe"),
    path("book-session/", user_views.BookSessionView.as_view(), name="book-session"),
]

# --- Programs and purchases ---

program_urlpatterns: List[URLPattern] = [
    path("products/", program_views.ProductListView.as_view(), name="product-list"),
    path("products/<slug:slug>/claim/", program_views.ClaimProductView.as_view(), name="product-claim"),
    path("products/<slug:slug>/bonus/", program_views.BonusDownloadView.as_view(), name="product-bonus"),
    path("products/<slug:slug>/guide/", program_views.ProgramGuideView.as_view(), name="product-guide"),
    path("products/<slug:slug>/progress/", program_views.ProductProgressView.as_view(), name="product-progress"),
    path("purchases/", program_views.PurchaseListView.as_view(), name="purchase-list"),
]

# --- Content items ---

content_urlpatterns: List[URLPattern] = [
    path("videos/<int:video_id>/url/", program_views.VideoUrlView.as_view(), name="video-url"),
    path("videos/<int:video_id>/progress/", program_views.VideoProgressView.as_view(), name="video-progress"),
    path("workbooks/<int:workbook_id>/pages/", program_views.WorkbookPagesView.as_view(), name="workbook-pages"),
    path("workbooks/<int:workbook_id>/pdf/", program_views.WorkbookPdfView.as_view(), name="workbook-pdf"),
    path(
        "workbooks/<int:workbook_id>/progress/",
        program_views.WorkbookProgressView.as_view(),
        name="workbook-progress",
    ),
    path(
        "workbook-videos/lookup/",
        program_views.WorkbookVideoLookupView.as_view(),
        name="workbook-video-lookup",
    ),
    path(
        "workbook-videos/<int:video_id>/url/",
        program_views.WorkbookVideoUrlView.as_view(),
        name="workbook-video-url",
    ),
    path(
        "printables/<int:printable_id>/download/",
        program_views.PrintableDownloadView.as_view(),
        name="printable-download",
    ),
]

urlpatterns: List[URLPattern] = auth_urlpatterns + program_urlpatterns + content_urlpatterns
