"""
Relay of room events between members.

Pure pass-through: no reordering, buffering or reassembly. A relay to a code that is
not live, or from a connection that is not a member, is dropped without side effects.
"""

from __future__ import annotations

import logging

from .events import Event
from .registry import SessionRegistry
from .transport import GroupTransport

logger = logging.getLogger(__name__)


class RelayRouter:
    def __init__(self, registry: SessionRegistry, transport: GroupTransport):
        self.registry = registry
        self.transport = transport

    async def relay(self, code: str, sender: str, event: Event) -> int:
        """Forward `event` to every member of `code` except `sender`. Returns the recipient count."""
        members = self.registry.members(code)
        if sender not in members:
            # Unknown, expired or never joined: all look the same from here.
            logger.debug("dropping %s for room %s from non-member %s", event.name, code, sender)
            return 0
        recipients = len(members) - 1
        if recipients <= 0:
            return 0
        await self.transport.group_send(code, event, exclude=sender)
        return recipients
