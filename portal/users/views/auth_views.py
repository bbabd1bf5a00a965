"""
Portal Authentication Views

This module provides the signup and session endpoints of the portal.
JWTs are never returned in response bodies; they live in HTTP-only cookies
that ``backend.custom_auth.JWTAuthentication`` reads back.

Views:
- SignupView: Account creation with best-effort CRM sync and welcome email
- LoginView: Email/password login, sets access and refresh cookies
- RefreshView: Rotates the token pair from the refresh cookie
- LogoutView: Blacklists the refresh token and clears the cookies
- MeView: Current user data

Author: Portal Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from backend.custom_auth import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from core.exceptions import UnauthorizedException
from portal.services.clients import get_notifier
from portal.services.notifications import send_best_effort

from ..serializers import (
    PortalTokenObtainPairSerializer,
    SignupSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def set_auth_cookies(response: Response, access=None, refresh=None) -> Response:
    """
    Store the JWT pair in HTTP-only cookies.

    * httponly=True prevents JavaScript access
    * secure / samesite come from JWT_COOKIE_SECURE / JWT_COOKIE_SAMESITE
    """
    cookie_options = dict(
        httponly=True,
        secure=settings.JWT_COOKIE_SECURE,
        samesite=settings.JWT_COOKIE_SAMESITE,
        path="/",
    )
    if refresh:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            refresh,
            max_age=int(settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"].total_seconds()),
            **cookie_options,
        )
    if access:
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access,
            max_age=int(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
            **cookie_options,
        )
    return response


def clear_auth_cookies(response: Response) -> Response:
    response.delete_cookie(REFRESH_TOKEN_COOKIE, path="/", samesite=settings.JWT_COOKIE_SAMESITE)
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/", samesite=settings.JWT_COOKIE_SAMESITE)
    return response


class SignupView(generics.CreateAPIView):
    """
    Public account creation.

    Request Body Example (JSON):
        {"name": "Jane Doe", "email": "jane@example.com", "password": "secret1234"}

    Response (201):
        {"user": {...}, "message": "Account created successfully"}

    Adding the contact to the portal users list and the welcome email run
    after commit and never fail the signup.
    """

    serializer_class = SignupSerializer
    authentication_classes = []
    permission_classes = [AllowAny]

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("User %s signed up", user.pk)

        notifier = get_notifier()
        if notifier is not None:
            first_name, last_name = user.first_and_last_name
            send_best_effort(
                f"CRM contact sync for user {user.pk}",
                notifier.add_contact,
                user.email,
                first_name,
                last_name,
            )
            send_best_effort(
                f"welcome email for user {user.pk}",
                notifier.send_welcome_email,
                user.email,
                user.name,
            )

        return Response(
            {"user": UserSerializer(user).data, "message": _("Account created successfully")},
            status=status.HTTP_201_CREATED,
        )


class LoginView(TokenObtainPairView):
    """
    Email/password login.

    Calls SimpleJWT to build the token pair, moves both tokens from the
    response body into cookies and returns the user instead.
    """

    serializer_class = PortalTokenObtainPairSerializer
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == status.HTTP_200_OK:
            data = response.data
            refresh = data.pop("refresh", None)
            access = data.pop("access", None)
            set_auth_cookies(response, access=access, refresh=refresh)
        return response


class RefreshView(APIView):
    """
    Refresh the token pair from the refresh cookie.

    With ROTATE_REFRESH_TOKENS the old refresh token is blacklisted and a
    new one is set.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_TOKEN_COOKIE)
        if not refresh_token:
            raise UnauthorizedException("Refresh token not provided")

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise UnauthorizedException(str(e)) from e

        data = serializer.validated_data
        response = Response({"detail": _("Token refreshed.")}, status=status.HTTP_200_OK)
        return set_auth_cookies(response, access=data.get("access"), refresh=data.get("refresh"))


class LogoutView(APIView):
    """
    Invalidate the refresh token and clear both cookies.

    Allowed without a valid access token so that users with an expired
    session can still log out. An unusable refresh token is ignored.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_TOKEN_COOKIE)
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.debug("Logout with unusable refresh token: %s", e)

        response = Response({"detail": _("Successfully logged out.")}, status=status.HTTP_200_OK)
        return clear_auth_cookies(response)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)
