"""
Process-wide relay components.

The registry is shared by every consumer in this process; the lifecycle and reaper are
built lazily because they need the channel layer, which is only available once Django
settings are loaded.
"""

from __future__ import annotations

from typing import Optional

from channels.layers import get_channel_layer
from django.conf import settings

from .codes import CodeGenerator
from .lifecycle import SessionLifecycle
from .reaper import ExpiryReaper
from .registry import SessionRegistry
from .transport import ChannelsGroupTransport

_registry: Optional[SessionRegistry] = None
_lifecycle: Optional[SessionLifecycle] = None
_reaper: Optional[ExpiryReaper] = None


def get_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry(
            CodeGenerator(digits=settings.RELAY_CODE_DIGITS),
            capacity=settings.RELAY_ROOM_CAPACITY,
        )
    return _registry


def get_lifecycle() -> SessionLifecycle:
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = SessionLifecycle(
            get_registry(),
            ChannelsGroupTransport(get_channel_layer()),
            notify_peer_left=settings.RELAY_NOTIFY_PEER_LEFT,
        )
    return _lifecycle


def get_reaper() -> ExpiryReaper:
    global _reaper
    if _reaper is None:
        _reaper = ExpiryReaper(
            get_lifecycle(),
            ttl=settings.RELAY_SESSION_TTL_SECONDS,
            interval=settings.RELAY_REAPER_INTERVAL_SECONDS,
        )
    return _reaper


def reset() -> None:
    """Forget every component (tests, settings changes)."""
    global _registry, _lifecycle, _reaper
    _registry = _lifecycle = _reaper = None
