"""
Request origin helpers.

The portal runs behind a reverse proxy and is reached from several front-end
origins, so redirect targets (Stripe success/cancel URLs, dashboard
redirects) are built from the inbound request rather than a fixed setting.
"""

from typing import Optional
from urllib.parse import urlsplit

from django.conf import settings
from django.http import HttpRequest


def _origin_of(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def resolve_request_origin(request: HttpRequest) -> str:
    """
    Resolve the public origin of a request.

    Order: Origin header, X-Forwarded-Host (with X-Forwarded-Proto, default
    https), Referer origin, then settings.APP_URL.
    """
    origin = _origin_of(request.headers.get("Origin"))
    if origin:
        return origin

    forwarded_host = request.headers.get("X-Forwarded-Host")
    if forwarded_host:
        host = forwarded_host.split(",")[0].strip()
        proto = (request.headers.get("X-Forwarded-Proto") or "https").split(",")[0].strip()
        return f"{proto}://{host}"

    origin = _origin_of(request.headers.get("Referer"))
    if origin:
        return origin

    return settings.APP_URL.rstrip("/")
