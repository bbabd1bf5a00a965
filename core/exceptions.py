"""
Portal Exceptions and API Error Handler

This module provides the exception hierarchy shared by the portal services
(entitlements, checkout, progress, notifications) and the DRF exception
handler that turns them into structured JSON responses.

Every exception carries a user-safe message, an HTTP status code and a
machine-readable error code. Internal details (stack traces, gateway
identifiers) are logged server-side and never returned to the client.

Response shape:
    {"status": 409, "error": "already_owned", "message": "...", "redirectTo": "/dashboard"}

Author: Portal Development Team
Version: 1.0.0
"""

import logging
from typing import Optional, Dict, Any

from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class PortalException(Exception):
    """
    Base exception class for all portal errors.

    Attributes:
        message (str): Human-readable error message, safe to show to the user
        status_code (int): HTTP status code
        error_code (str): Machine-readable error identifier
        details (Dict[str, Any]): Additional fields merged into the response body

    Example:
        >>> try:
        ...     require_access(user, product)
        ... except PortalException as e:
        ...     logger.warning("Access check failed: %s", e.message)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = GENERIC_ERROR_MESSAGE,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to the JSON body returned to the client.

        Returns:
            Dictionary representation of the exception
        """
        body = {
            "status": self.status_code,
            "error": self.error_code,
            "message": self.message,
        }
        body.update(self.details)
        return body


class BadRequestException(PortalException):
    """Malformed or missing input. The message is surfaced verbatim."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "bad_request"


class UnauthorizedException(PortalException):
    """No or invalid session."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"

    def __init__(self, message: str = "You must be logged in") -> None:
        super().__init__(message)


class AccessDeniedException(PortalException):
    """
    Authenticated but not entitled.

    The message never reveals whether the requested item exists; it only
    states that access is denied. ``redirect_to`` points at the product's
    sales page so the frontend can send the user there instead of showing
    a bare error.
    """

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "access_denied"

    def __init__(
        self,
        message: str = "Access denied. You must purchase this program first.",
        redirect_to: Optional[str] = None,
    ) -> None:
        details = {}
        if redirect_to:
            details["redirectTo"] = redirect_to
        self.redirect_to = redirect_to
        super().__init__(message, details=details)


class ResourceNotFoundException(PortalException):
    """
    Entity missing.

    Attributes:
        resource (Optional[str]): The type of the missing resource ("User", "Product", ...)
    """

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"

    def __init__(self, resource: str, message: Optional[str] = None) -> None:
        self.resource = resource
        super().__init__(message or f"{resource} not found")


class PurchaseConflictException(PortalException):
    """Duplicate purchase attempt; carries a redirect hint to the dashboard."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "already_owned"

    def __init__(
        self,
        message: str = "You already own this product",
        redirect_to: str = "/dashboard",
    ) -> None:
        super().__init__(message, details={"redirectTo": redirect_to})


class ConfigurationException(PortalException):
    """
    A required external price or credential is absent.

    The detailed reason is logged loudly server-side; the client receives
    a generic message.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "configuration_error"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("This product is not available for purchase right now.")


class UpstreamServiceException(PortalException):
    """
    A payment-gateway, object-store or email-provider call failed.

    Attributes:
        service (str): Name of the failing upstream ("stripe", "s3", "brevo")
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "upstream_error"

    def __init__(self, service: str, reason: str = "") -> None:
        self.service = service
        self.reason = reason
        super().__init__(GENERIC_ERROR_MESSAGE)


# DRF exception classes mapped to portal error codes
DRF_ERROR_CODES = {
    drf_exceptions.NotAuthenticated: "unauthorized",
    drf_exceptions.AuthenticationFailed: "unauthorized",
    drf_exceptions.PermissionDenied: "access_denied",
    drf_exceptions.NotFound: "not_found",
    drf_exceptions.ValidationError: "bad_request",
    drf_exceptions.ParseError: "bad_request",
    drf_exceptions.MethodNotAllowed: "method_not_allowed",
    drf_exceptions.Throttled: "throttled",
}


def _first_message(detail: Any) -> str:
    """Flatten DRF error details (dict/list/str) to the first message."""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def portal_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """
    Outermost error boundary for all DRF views.

    - PortalException: rendered through ``to_dict()``; 5xx ones are logged
      with their internal reason.
    - DRF APIException (auth, validation, 404, ...): normalized to the same shape.
    - Anything else: logged with the view and URL kwargs, answered with a
      generic 500 body.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"
    view_kwargs = context.get("kwargs") or {}

    if isinstance(exc, PortalException):
        if exc.status_code >= 500:
            logger.error(
                "%s failed in %s %s: %s",
                exc.__class__.__name__,
                view_name,
                view_kwargs,
                getattr(exc, "reason", "") or exc.message,
            )
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    if isinstance(exc, drf_exceptions.APIException):
        error_code = next(
            (code for klass, code in DRF_ERROR_CODES.items() if isinstance(exc, klass)),
            "error",
        )
        body = {
            "status": exc.status_code,
            "error": error_code,
            "message": _first_message(exc.detail),
        }
        headers = {}
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            headers["WWW-Authenticate"] = auth_header
        wait = getattr(exc, "wait", None)
        if wait:
            headers["Retry-After"] = "%d" % wait
        return Response(body, status=exc.status_code, headers=headers)

    logger.exception("Unhandled error in %s %s", view_name, view_kwargs)
    return Response(
        {
            "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "error": "server_error",
            "message": GENERIC_ERROR_MESSAGE,
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
