"""
Password Reset Views

- ForgotPasswordView: issues a single-use token and emails the reset link
- ResetPasswordView: validates the token and sets the new password

The forgot-password endpoint answers with the same message whether or not
the email belongs to an account.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BadRequestException
from portal.services.clients import get_notifier
from portal.services.notifications import send_best_effort

from ..models import PasswordResetToken
from ..serializers import ForgotPasswordSerializer, ResetPasswordSerializer

logger = logging.getLogger(__name__)
User = get_user_model()

RESET_REQUESTED_MESSAGE = _(
    "If an account exists with that email, a password reset link has been sent."
)


class ForgotPasswordView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = User.objects.filter(email__iexact=email, is_active=True).first()
        if user is None:
            logger.info("Password reset requested for unknown email")
            return Response({"message": RESET_REQUESTED_MESSAGE}, status=status.HTTP_200_OK)

        with transaction.atomic():
            PasswordResetToken.objects.filter(email=user.email).delete()
            reset_token = PasswordResetToken.objects.create(email=user.email)

        reset_url = f"{settings.APP_URL}/auth/reset-password?token={reset_token.token}"

        notifier = get_notifier()
        if notifier is not None:
            send_best_effort(
                f"password reset email for user {user.pk}",
                notifier.send_password_reset,
                user.email,
                user.name or "there",
                reset_url,
            )

        logger.info("Password reset token issued for user %s", user.pk)
        return Response({"message": RESET_REQUESTED_MESSAGE}, status=status.HTTP_200_OK)


class ResetPasswordView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        token = serializer.validated_data["token"]
        reset_token = PasswordResetToken.objects.filter(token=token).first()
        if reset_token is None:
            raise BadRequestException(_("Invalid or expired reset link"))

        if reset_token.is_expired:
            reset_token.delete()
            raise BadRequestException(_("Invalid or expired reset link"))

        user = User.objects.filter(email__iexact=reset_token.email).first()
        if user is None:
            reset_token.delete()
            raise BadRequestException(_("Invalid or expired reset link"))

        with transaction.atomic():
            user.set_password(serializer.validated_data["password"])
            user.save(update_fields=["password"])
            PasswordResetToken.objects.filter(email=reset_token.email).delete()

        logger.info("Password reset for user %s", user.pk)
        return Response({"message": _("Password has been reset")}, status=status.HTTP_200_OK)
