from django.test import RequestFactory, SimpleTestCase, override_settings
from rest_framework import exceptions as drf_exceptions

from core.exceptions import (
    AccessDeniedException,
    ConfigurationException,
    GENERIC_ERROR_MESSAGE,
    UpstreamServiceException,
    portal_exception_handler,
)
from core.http import resolve_request_origin


@override_settings(APP_URL="https://portal.example.com")
class ResolveRequestOriginTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_origin_header_wins(self):
        request = self.factory.get(
            "/",
            HTTP_ORIGIN="https://www.example.com",
            HTTP_X_FORWARDED_HOST="proxy.example.com",
            HTTP_REFERER="https://referer.example.com/page",
        )
        self.assertEqual(resolve_request_origin(request), "https://www.example.com")

    def test_forwarded_host_with_proto(self):
        request = self.factory.get("/", HTTP_X_FORWARDED_HOST="proxy.example.com", HTTP_X_FORWARDED_PROTO="http")
        self.assertEqual(resolve_request_origin(request), "http://proxy.example.com")

    def test_forwarded_host_defaults_to_https(self):
        request = self.factory.get("/", HTTP_X_FORWARDED_HOST="proxy.example.com, internal")
        self.assertEqual(resolve_request_origin(request), "https://proxy.example.com")

    def test_referer_origin(self):
        request = self.factory.get("/", HTTP_REFERER="https://referer.example.com/programs/ofb?x=1")
        self.assertEqual(resolve_request_origin(request), "https://referer.example.com")

    def test_falls_back_to_app_url(self):
        request = self.factory.get("/", HTTP_REFERER="not a url")
        self.assertEqual(resolve_request_origin(request), "https://portal.example.com")


class PortalExceptionHandlerTests(SimpleTestCase):
    def test_access_denied_carries_redirect(self):
        response = portal_exception_handler(AccessDeniedException(redirect_to="/programs/ofb"), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["error"], "access_denied")
        self.assertEqual(response.data["redirectTo"], "/programs/ofb")

    def test_configuration_reason_is_not_exposed(self):
        response = portal_exception_handler(ConfigurationException("STRIPE_LIVE_SECRET_KEY missing"), {})

        self.assertEqual(response.status_code, 500)
        self.assertNotIn("STRIPE", response.data["message"])

    def test_upstream_error_is_generic(self):
        response = portal_exception_handler(UpstreamServiceException("s3", "AccessDenied: arn:aws:..."), {})

        self.assertEqual(response.data["message"], GENERIC_ERROR_MESSAGE)

    def test_drf_validation_error_is_flattened(self):
        exc = drf_exceptions.ValidationError({"email": ["Invalid email format"]})

        response = portal_exception_handler(exc, {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"status": 400, "error": "bad_request", "message": "Invalid email format"})

    def test_unexpected_error_is_generic_500(self):
        with self.assertLogs("core.exceptions", level="ERROR"):
            response = portal_exception_handler(RuntimeError("db password is hunter2"), {})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["message"], GENERIC_ERROR_MESSAGE)
