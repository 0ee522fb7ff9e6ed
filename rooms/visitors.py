"""
Unique visitor counting by client IP.

In-memory only: the count starts from zero on every restart.
"""

from __future__ import annotations

import threading
from typing import Mapping, Set


def client_ip(meta: Mapping[str, str], trust_proxy: bool = True) -> str:
    """First X-Forwarded-For hop when behind a trusted proxy, else REMOTE_ADDR."""
    if trust_proxy:
        forwarded = meta.get("HTTP_X_FORWARDED_FOR", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return meta.get("REMOTE_ADDR", "") or "unknown"


class VisitorCounter:
    def __init__(self):
        self._lock = threading.Lock()
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    @property
    def total(self) -> int:
        return len(self)

    def observe(self, ip: str) -> bool:
        """Record a request from `ip`. Returns True the first time the IP is seen."""
        with self._lock:
            if ip in self._seen:
                return False
            self._seen.add(ip)
            return True

    def reset(self) -> None:
        with self._lock:
            self._seen.clear()


# Global visitor counter instance
visitor_counter = VisitorCounter()
