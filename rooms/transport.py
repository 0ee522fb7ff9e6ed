"""
Group transport used by the relay core.

The core only needs a per-connection identity and named groups. Under Channels the
identity is the consumer's channel name and a room code maps to a channel layer group.
Channel layer groups cannot exclude a member on send, so the excluded channel travels
inside the layer message and the receiving consumer drops it.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Protocol

from .events import Event

# Handler name on RoomConsumer ("room.event" -> room_event).
LAYER_EVENT_TYPE = "room.event"


class GroupTransport(Protocol):
    async def group_add(self, code: str, connection: str) -> None: ...

    async def group_discard(self, code: str, connection: str) -> None: ...

    async def group_send(self, code: str, event: Event, exclude: Optional[str] = None) -> None: ...

    async def send(self, connection: str, event: Event) -> None: ...


def group_name(code: str) -> str:
    """
    Channels group name must be ASCII and relatively short.
    We sanitize the code so any client-provided value is safe.
    """

    safe = re.sub(r"[^a-zA-Z0-9_.-]", "_", code)[:80]
    return f"room.{safe}"


def to_layer_message(event: Event, exclude: Optional[str] = None) -> Dict[str, Any]:
    return {
        "type": LAYER_EVENT_TYPE,
        "event": event.name,
        "data": dict(event.data),
        "blob": event.blob,
        "exclude": exclude,
    }


def from_layer_message(message: Dict[str, Any]) -> Event:
    return Event(message["event"], message.get("data") or {}, blob=message.get("blob"))


class ChannelsGroupTransport:
    """GroupTransport over a Channels channel layer."""

    def __init__(self, channel_layer):
        self.channel_layer = channel_layer

    async def group_add(self, code: str, connection: str) -> None:
        await self.channel_layer.group_add(group_name(code), connection)

    async def group_discard(self, code: str, connection: str) -> None:
        await self.channel_layer.group_discard(group_name(code), connection)

    async def group_send(self, code: str, event: Event, exclude: Optional[str] = None) -> None:
        await self.channel_layer.group_send(group_name(code), to_layer_message(event, exclude))

    async def send(self, connection: str, event: Event) -> None:
        await self.channel_layer.send(connection, to_layer_message(event))
