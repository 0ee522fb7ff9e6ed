"""
HTTP middleware for the rooms app.

- VisitorCounterMiddleware: counts unique client IPs across HTTP requests other than
  /health/ and logs new vs returning visitors.
"""

from __future__ import annotations

import logging

from django.conf import settings

from relay_server.middleware import is_health_path

from .visitors import client_ip, visitor_counter

logger = logging.getLogger(__name__)


class VisitorCounterMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not is_health_path(request):
            ip = client_ip(request.META, trust_proxy=getattr(settings, "RELAY_TRUST_PROXY", True))
            if visitor_counter.observe(ip):
                logger.info("New unique visitor detected (IP: %s)", ip)
                logger.info("Total unique visitors: %d", visitor_counter.total)
            else:
                logger.debug("Returning visitor from IP: %s", ip)
        return self.get_response(request)
