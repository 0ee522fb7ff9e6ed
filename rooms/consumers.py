"""
WebSocket consumer for one-time-code file sharing.

Key behavior:
- URL: /ws/share/
- One connection creates a room and receives a short numeric code; another connection
  joins with that code. Meta, chunk and end events are relayed to the other member.
- The connection identity is the channel name; room codes map to channel layer groups.
- Text frames are JSON envelopes, binary frames carry file chunks (see rooms.frames).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from channels.generic.websocket import AsyncWebsocketConsumer
from pydantic import ValidationError

from . import events, frames
from .exceptions import InvalidFrame
from .service import get_lifecycle, get_reaper
from .transport import from_layer_message

logger = logging.getLogger(__name__)


class RoomConsumer(AsyncWebsocketConsumer):
    async def connect(self) -> None:
        await self.accept()
        get_reaper().ensure_started()
        logger.info("conn: %s", self.channel_name)

    async def disconnect(self, close_code: int) -> None:
        await get_lifecycle().disconnect(self.channel_name)

    async def receive(self, text_data: Optional[str] = None, bytes_data: Optional[bytes] = None) -> None:
        try:
            if bytes_data is not None:
                name, data, blob = frames.decode_binary(bytes_data)
            elif text_data is not None:
                name, data, blob = frames.decode_text(text_data)
            else:
                return
        except InvalidFrame as e:
            logger.debug("invalid frame from %s: %s", self.channel_name, e)
            await self.send_event(events.error("invalid_frame"))
            return

        try:
            request = events.parse_inbound(name, data)
        except ValidationError as e:
            logger.debug("invalid %s payload from %s: %s", name, self.channel_name, e)
            await self.send_event(events.error(f"invalid_{name}"))
            return

        if request is None:
            await self.send_event(events.error("unknown_event"))
            return

        await self.dispatch_request(request, blob)

    async def dispatch_request(self, request: Any, blob: Optional[bytes]) -> None:
        lifecycle = get_lifecycle()
        me = self.channel_name

        if isinstance(request, events.CreateRoom):
            await lifecycle.create(me)
        elif isinstance(request, events.JoinRoom):
            await lifecycle.join(me, request.otp)
        elif isinstance(request, events.FileMeta):
            await lifecycle.file_meta(me, request)
        elif isinstance(request, events.FileChunk):
            chunk = blob if blob is not None else request.chunk
            if chunk is None:
                await self.send_event(events.error("invalid_file-chunk"))
                return
            await lifecycle.file_chunk(me, request.room, chunk)
        elif isinstance(request, events.FileEnd):
            await lifecycle.file_end(me, request.room)

    async def room_event(self, message: Dict[str, Any]) -> None:
        """
        Handler for room events delivered through the channel layer.
        """
        if message.get("exclude") == self.channel_name:
            return
        await self.send_event(from_layer_message(message))

    async def send_event(self, event: events.Event) -> None:
        text, raw = frames.encode(event)
        await self.send(text_data=text, bytes_data=raw)
