"""
Portal Users Views Package

Signup, cookie-based JWT sessions, password reset, newsletter subscription
and session booking.

Author: Portal Development Team
Version: 1.0.0
"""

from .auth_views import (
    SignupView,
    LoginView,
    RefreshView,
    LogoutView,
    MeView,
)
from .password_views import ForgotPasswordView, ResetPasswordView
from .newsletter_views import NewsletterSubscribeView
from .booking_views import BookSessionView
