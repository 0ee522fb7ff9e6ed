"""
HTTP views: visitor count and the static share page.
"""

from __future__ import annotations

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_GET
from django.views.static import serve

from .visitors import visitor_counter


@require_GET
def visitors(request):
    return JsonResponse({"totalVisitors": visitor_counter.total})


@require_GET
def public_file(request, path: str = ""):
    """Serve the frontend from RELAY_PUBLIC_DIR; the bare root maps to index.html."""
    return serve(request, path or "index.html", document_root=str(settings.RELAY_PUBLIC_DIR))
