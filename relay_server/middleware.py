"""
Middleware for relay_server.

- HealthCheckAllowHttp: allows load balancer health checks over HTTP by preventing
  SECURE_SSL_REDIRECT from redirecting /health/ to HTTPS (avoids 301),
  and exempts /health/ from CORS so checks are not blocked.
"""

from __future__ import annotations


def is_health_path(request) -> bool:
    path = (request.path or "").rstrip("/") or "/"
    return path == "/health"


class HealthCheckAllowHttpMiddleware:
    """
    Run before SecurityMiddleware. For requests to /health/:
    - Set proxy SSL header so Django does not redirect HTTP -> HTTPS (avoids 301).
    - In response, add permissive CORS so the load balancer is not blocked by CORS.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if is_health_path(request):
            request.META["HTTP_X_FORWARDED_PROTO"] = "https"
        response = self.get_response(request)
        if is_health_path(request):
            response["Access-Control-Allow-Origin"] = "*"
        return response
