"""
Session Booking View

Public endpoint behind the "book a session" form of the marketing site. The
request is stored as a Brevo contact in the booking list; the team follows
up from there.
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

from ..serializers import BookSessionSerializer

logger = logging.getLogger(__name__)


class BookSessionView(APIView):
    """
    Request Body Example (JSON):
        {
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane@example.com",
            "phone": "+1 555 0100",
            "message": "I would like to talk about my cycle.",
            "interests": ["Fertility", "Stress"],
            "newsletterOptIn": true
        }

    Response (200):
        {"success": true, "message": "Thank you! We'll be in touch soon."}

    An existing contact is updated in place and added to the booking list.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = BookSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        notifier = get_notifier()
        if notifier is None or not notifier.is_configured:
            raise ConfigurationException("Booking service is not configured")

        created = notifier.add_contact(
            data["email"],
            data["firstName"],
            data["lastName"],
            list_ids=[notifier.lists["BOOK_SESSION"]],
            attributes={
                "PHONE": data["phone"],
                "MESSAGE": data["message"],
                "INTERESTS": ", ".join(data["interests"]),
                "NEWSLETTER_OPTIN": data["newsletterOptIn"],
            },
        )
        logger.info("Session booking received (new contact: %s)", created)

        return Response(
            {"success": True, "message": _("Thank you! We'll be in touch soon.")},
            status=status.HTTP_200_OK,
        )
