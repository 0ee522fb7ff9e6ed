from __future__ import annotations

import os
import time

from django.http import JsonResponse

from rooms.service import get_registry


def health(request):
    """
    Load balancer health check endpoint.

    Keep it cheap: no channel layer call, just the process-local room count.
    """

    return JsonResponse(
        {
            "status": "ok",
            "ts": int(time.time()),
            "instance_id": os.environ.get("INSTANCE_ID", "unknown-instance"),
            "rooms": len(get_registry()),
        }
    )
