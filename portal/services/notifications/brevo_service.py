"""
Brevo Notification Service

Client for the Brevo (ex Sendinblue) REST API used for transactional emails
and CRM contact sync.

Features:
- Template emails (welcome, purchase confirmation, password reset, bonus
  unlocked, newsletter welcome)
- Contact upsert into mailing lists
- Best-effort dispatch after the surrounding transaction commits

Notifications never decide the outcome of a purchase or signup: callers
either use ``send_best_effort`` or catch ``PortalException`` themselves.

Author: Portal Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests
from django.conf import settings
from django.db import transaction

from core.exceptions import ConfigurationException, UpstreamServiceException

logger = logging.getLogger(__name__)


class BrevoService:
    """
    Thin wrapper around the Brevo v3 API.

    Attributes:
        api_key: Brevo API key (empty disables every call with ConfigurationException)
        api_url: Base URL, "https://api.brevo.com/v3"
        templates: Template ids by name (WELCOME, PURCHASE_CONFIRMATION, ...)
        lists: List ids by name (PORTAL_USERS, NEWSLETTER, BOOK_SESSION)
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.brevo.com/v3",
        templates: Optional[Dict[str, int]] = None,
        lists: Optional[Dict[str, int]] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.templates = templates or {}
        self.lists = lists or {}
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "BrevoService":
        return cls(
            api_key=settings.BREVO_API_KEY,
            api_url=settings.BREVO_API_URL,
            templates=settings.BREVO_TEMPLATES,
            lists=settings.BREVO_LISTS,
            timeout=settings.BREVO_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _request(self, method: str, path: str, payload: Dict[str, Any]) -> requests.Response:
        if not self.is_configured:
            raise ConfigurationException("BREVO_API_KEY is not set")

        headers = {
            "api-key": self.api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }
        try:
            return self.session.request(
                method,
                f"{self.api_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Brevo request %s %s failed: %s", method, path, e)
            raise UpstreamServiceException("brevo", str(e)) from e

    # --- Primitives ---

    def send_template_email(
        self,
        to_email: str,
        template_id: int,
        params: Optional[Dict[str, Any]] = None,
        to_name: Optional[str] = None,
    ) -> None:
        """
        Send a transactional template email.

        Raises:
            ConfigurationException: no API key
            UpstreamServiceException: network error or non-2xx answer
        """
        recipient = {"email": to_email}
        if to_name:
            recipient["name"] = to_name

        payload: Dict[str, Any] = {"to": [recipient], "templateId": template_id}
        if params:
            payload["params"] = params

        response = self._request("POST", "/smtp/email", payload)
        if not response.ok:
            logger.error(
                "Brevo rejected template %s for %s: %s %s",
                template_id,
                to_email,
                response.status_code,
                response.text,
            )
            raise UpstreamServiceException("brevo", f"HTTP {response.status_code}")

        logger.info("Email sent: template=%s to=%s", template_id, to_email)

    def add_contact(
        self,
        email: str,
        first_name: str = "",
        last_name: str = "",
        list_ids: Optional[List[int]] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Create or update a contact and add it to ``list_ids``.

        ``attributes`` are extra Brevo contact attributes (PHONE, MESSAGE, ...)
        written next to FIRSTNAME and LASTNAME.

        Returns:
            True if the contact was created, False if it already existed
            (in which case its list memberships are updated)
        """
        if list_ids is None:
            list_ids = [self.lists["PORTAL_USERS"]]

        payload: Dict[str, Any] = {
            "email": email,
            "listIds": list_ids,
            "updateEnabled": True,
        }
        contact_attributes: Dict[str, Any] = dict(attributes or {})
        if first_name:
            contact_attributes["FIRSTNAME"] = first_name
        if last_name:
            contact_attributes["LASTNAME"] = last_name
        if contact_attributes:
            payload["attributes"] = contact_attributes

        response = self._request("POST", "/contacts", payload)
        if response.ok:
            logger.info("Brevo contact upserted: %s lists=%s", email, list_ids)
            # 201 on creation, 204 when updateEnabled updated an existing contact
            return response.status_code == 201

        if response.status_code == 400 and _error_code(response) == "duplicate_parameter":
            logger.info("Brevo contact already exists: %s", email)
            update_payload: Dict[str, Any] = {"listIds": list_ids}
            if contact_attributes:
                update_payload["attributes"] = contact_attributes
            update = self._request(
                "PUT",
                f"/contacts/{quote(email, safe='')}",
                update_payload,
            )
            if not update.ok:
                logger.warning("Failed to update existing Brevo contact %s: %s", email, update.text)
            return False

        logger.error("Brevo contact upsert failed for %s: %s %s", email, response.status_code, response.text)
        raise UpstreamServiceException("brevo", f"HTTP {response.status_code}")

    # --- Portal emails ---

    def send_welcome_email(self, email: str, name: str) -> None:
        self.send_template_email(email, self.templates["WELCOME"], to_name=name or None)

    def send_purchase_confirmation(
        self, email: str, name: str, product_name: str, amount: int, dashboard_url: str
    ) -> None:
        self.send_template_email(
            email,
            self.templates["PURCHASE_CONFIRMATION"],
            params={
                "productName": product_name,
                "amount": f"{amount / 100:.2f}",
                "dashboardUrl": dashboard_url,
            },
            to_name=name or None,
        )

    def send_password_reset(self, email: str, name: str, reset_url: str) -> None:
        self.send_template_email(
            email,
            self.templates["PASSWORD_RESET"],
            params={"resetUrl": reset_url, "name": name},
            to_name=name or None,
        )

    def send_bonus_unlocked(self, email: str, name: str, product_name: str, dashboard_url: str) -> None:
        self.send_template_email(
            email,
            self.templates["BONUS_UNLOCKED"],
            params={"productName": product_name, "dashboardUrl": dashboard_url},
            to_name=name or None,
        )

    def send_newsletter_welcome(self, email: str) -> None:
        self.send_template_email(email, self.templates["NEWSLETTER_WELCOME"])


def _error_code(response: requests.Response) -> Optional[str]:
    try:
        return response.json().get("code")
    except ValueError:
        return None


def send_best_effort(description: str, func: Callable[..., Any], *args, **kwargs) -> None:
    """
    Run ``func`` once the current transaction commits, logging any failure.

    Used for emails and CRM sync that must never fail or roll back the
    request that triggered them.
    """

    def _run() -> None:
        try:
            func(*args, **kwargs)
        except Exception:
            logger.exception("Notification failed: %s", description)

    transaction.on_commit(_run)
