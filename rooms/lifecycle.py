"""
Room lifecycle: the protocol state machine for one code.

    ABSENT --create--> ACTIVE(owner) --join--> ACTIVE(owner+peer) --owner leaves/expiry--> ABSENT

Registry mutations happen before the first await of every handler, so a disconnect
removes owned rooms within the same handling turn and no later relay can be attributed
to a departed owner. A joiner only becomes a relay recipient once its group join is done.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from . import events
from .events import Chunk, FileMeta
from .exceptions import CodeSpaceExhausted
from .registry import JoinOutcome, Removal, SessionRegistry
from .relay import RelayRouter
from .transport import GroupTransport

logger = logging.getLogger(__name__)


class SessionLifecycle:
    def __init__(
        self,
        registry: SessionRegistry,
        transport: GroupTransport,
        notify_peer_left: bool = False,
    ):
        self.registry = registry
        self.transport = transport
        self.router = RelayRouter(registry, transport)
        self.notify_peer_left = notify_peer_left

    async def create(self, connection: str) -> Optional[str]:
        try:
            code = self.registry.create_session(connection)
        except CodeSpaceExhausted:
            logger.warning("no free room codes; refusing create from %s", connection)
            await self.transport.send(connection, events.error("no_codes_available"))
            return None

        await self.transport.group_add(code, connection)
        await self.transport.send(connection, events.room_created(code))
        logger.info("room created %s by %s", code, connection)
        return code

    async def join(self, connection: str, code: str) -> JoinOutcome:
        outcome = self.registry.admit(code, connection)

        if outcome is JoinOutcome.NOT_FOUND:
            logger.info("join failed for %s: unknown or expired room %s", connection, code)
            await self.transport.send(connection, events.join_failed(events.INVALID_OR_EXPIRED))
            return outcome
        if outcome is JoinOutcome.FULL:
            logger.info("join failed for %s: room %s is full", connection, code)
            await self.transport.send(connection, events.join_failed(events.ROOM_FULL))
            return outcome

        if outcome is JoinOutcome.JOINED:
            await self.transport.group_add(code, connection)
            if not self.registry.confirm(code, connection):
                # Room closed while we were joining the group; its members were already released.
                await self.transport.group_discard(code, connection)
                await self.transport.send(connection, events.join_failed(events.INVALID_OR_EXPIRED))
                return JoinOutcome.NOT_FOUND
            await self.transport.group_send(code, events.peer_joined(code))
            logger.info("%s joined room %s", connection, code)
        await self.transport.send(connection, events.join_success(code))
        return outcome

    async def file_meta(self, connection: str, meta: FileMeta) -> int:
        return await self.router.relay(meta.room, connection, events.file_meta(meta))

    async def file_chunk(self, connection: str, code: str, chunk: Chunk) -> int:
        return await self.router.relay(code, connection, events.file_chunk(chunk))

    async def file_end(self, connection: str, code: str) -> int:
        delivered = await self.router.relay(code, connection, events.file_end())
        if delivered:
            logger.info("file end for room %s", code)
        return delivered

    async def disconnect(self, connection: str) -> List[str]:
        """Tear down rooms owned by `connection` and drop it from rooms it joined."""
        removed = [r for r in (self.registry.remove_session(c) for c in self.registry.all_owned_by(connection)) if r]
        left = self.registry.discard_member(connection)

        for removal in removed:
            await self.close_room(removal, exclude=connection)
            logger.info("uploader disconnected; removed room %s", removal.code)

        for code, owner in left:
            await self.transport.group_discard(code, connection)
            # Joiner departure does not invalidate the transfer; the owner hears about it only on request.
            if self.notify_peer_left:
                await self.transport.send(owner, events.peer_left(code))

        return [r.code for r in removed]

    async def close_room(self, removal: Removal, exclude: Optional[str] = None) -> None:
        """Tell the remaining members the uploader is gone and release the group."""
        if removal.remaining:
            await self.transport.group_send(removal.code, events.uploader_disconnected(), exclude=exclude)
        for member in removal.members:
            await self.transport.group_discard(removal.code, member)
