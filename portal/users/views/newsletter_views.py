"""
Newsletter Subscription View

Public endpoint behind the newsletter forms of the marketing site. Adds the
email to the newsletter list in Brevo and sends the newsletter welcome
template.
"""

import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ConfigurationException
from portal.services.clients import get_notifier
from portal.services.notifications import send_best_effort

from ..serializers import NewsletterSubscribeSerializer

logger = logging.getLogger(__name__)


class NewsletterSubscribeView(APIView):
    """
    Request Body Example (JSON):
        {"email": "jane@example.com"}

    Response (200):
        {"success": true, "message": "Successfully subscribed! Check your email for a welcome message."}

    The contact upsert decides the response; the welcome email is
    best-effort and only sent to new contacts.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = NewsletterSubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        notifier = get_notifier()
        if notifier is None or not notifier.is_configured:
            raise ConfigurationException("Newsletter service is not configured")

        created = notifier.add_contact(email, list_ids=[notifier.lists["NEWSLETTER"]])
        if not created:
            return Response(
                {"success": True, "message": _("You are already subscribed to our newsletter!")},
                status=status.HTTP_200_OK,
            )

        send_best_effort("newsletter welcome email", notifier.send_newsletter_welcome, email)
        logger.info("Newsletter subscription added")

        return Response(
            {
                "success": True,
                "message": _("Successfully subscribed! Check your email for a welcome message."),
            },
            status=status.HTTP_200_OK,
        )
