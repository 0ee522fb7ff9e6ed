"""
WebSocket origin validator for deployments behind a proxy.

AllowedHostsOriginValidator rejects when the Origin header is missing. The command line
share client and some proxies do not send Origin, so this validator:
- Allows when Origin's host is in ALLOWED_HOSTS (same as Channels).
- Allows when Origin is missing but Host or X-Forwarded-Host is in ALLOWED_HOSTS.
- Allows when Origin is missing and Host is a private IP (load balancer health traffic).
- Logs when a connection is denied (origin/host values only).
"""
from __future__ import annotations

import ipaddress
import logging
from typing import List, Optional
from urllib.parse import urlparse

from channels.security.websocket import WebsocketDenier
from django.conf import settings
from django.http.request import is_same_domain

logger = logging.getLogger(__name__)

_denier_app = WebsocketDenier.as_asgi()


def get_header(scope: dict, name: str) -> Optional[str]:
    want = name.lower().encode("ascii")
    for key, value in scope.get("headers") or []:
        if key.lower() == want:
            return value.decode("utf-8", errors="replace").strip()
    return None


def hostname_of(value: str) -> str:
    """Hostname of an Origin URL or a bare Host header value, lowercased, port stripped."""
    if not value:
        return ""
    parsed = urlparse(value if "://" in value else "//" + value)
    return (parsed.hostname or "").lower()


def host_allowed(hostname: str, allowed_hosts: List[str]) -> bool:
    if not hostname:
        return False
    for pattern in allowed_hosts:
        if pattern == "*":
            return True
        pattern_host = hostname_of(pattern) or pattern.lower()
        if is_same_domain(hostname, pattern_host):
            return True
    return False


def is_private_ip(hostname: str) -> bool:
    try:
        return ipaddress.ip_address(hostname).is_private
    except ValueError:
        return False


class AllowedHostsOrForwardedHostOriginValidator:
    """ASGI middleware that validates the WebSocket origin before the consumer runs."""

    def __init__(self, application):
        self.application = application

    def is_allowed(self, scope: dict) -> bool:
        allowed_hosts = list(getattr(settings, "ALLOWED_HOSTS", None) or [])
        if settings.DEBUG and not allowed_hosts:
            allowed_hosts = ["localhost", "127.0.0.1", "[::1]"]

        origin = get_header(scope, "origin")
        if origin:
            return host_allowed(hostname_of(origin), allowed_hosts)

        host = hostname_of(get_header(scope, "host") or "")
        forwarded = (get_header(scope, "x-forwarded-host") or "").split(",")[0].strip()
        return (
            host_allowed(host, allowed_hosts)
            or host_allowed(hostname_of(forwarded), allowed_hosts)
            or is_private_ip(host)
        )

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "websocket":
            raise ValueError("AllowedHostsOrForwardedHostOriginValidator only supports WebSocket")

        if self.is_allowed(scope):
            return await self.application(scope, receive, send)

        logger.warning(
            "WebSocket origin denied: origin=%s host=%s x_forwarded_host=%s path=%s",
            get_header(scope, "origin") or "(none)",
            get_header(scope, "host") or "(none)",
            get_header(scope, "x-forwarded-host") or "(none)",
            scope.get("path") or "",
        )
        return await _denier_app(scope, receive, send)
