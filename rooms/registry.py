"""
In-memory session registry: code -> live session.

WHY:
- A code must map to at most one live session, and a session must be removed exactly
  once even when the reaper and an owner disconnect race for it.
- Channels groups do not provide a way to list members, so member groups are tracked
  here beside the session map (keyed by the same code) to resolve relay recipients
  and enforce the two-party limit.

Design:
- One dict code -> Session (immutable record: code, owner, created_at).
- One dict code -> set of connection ids (owner first, then joiners).
- One dict code -> set of admitted joiners whose channel group join is still in flight.
  They hold a slot against the capacity but receive no relays until confirmed.
- A single lock serialises every operation, so create/join/relay/expire are
  linearizable with respect to a given code. Nothing under the lock awaits or does I/O.
"""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from .codes import CodeGenerator

DEFAULT_ROOM_CAPACITY = 2


@dataclass(frozen=True)
class Session:
    code: str
    owner: str
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


@dataclass(frozen=True)
class Removal:
    """A session that was just removed, with the members it had at that moment."""

    session: Session
    members: FrozenSet[str]

    @property
    def code(self) -> str:
        return self.session.code

    @property
    def remaining(self) -> FrozenSet[str]:
        """Members other than the owner."""
        return self.members - {self.session.owner}


class JoinOutcome(enum.Enum):
    JOINED = "joined"
    ALREADY_MEMBER = "already_member"
    NOT_FOUND = "not_found"
    FULL = "full"

    @property
    def ok(self) -> bool:
        return self in (JoinOutcome.JOINED, JoinOutcome.ALREADY_MEMBER)


class SessionRegistry:
    """
    Owns every live session. Connections only ever hold the code string.
    """

    def __init__(
        self,
        generator: Optional[CodeGenerator] = None,
        capacity: int = DEFAULT_ROOM_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        self._generator = generator or CodeGenerator()
        self._capacity = capacity
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._members: Dict[str, Set[str]] = {}
        self._pending: Dict[str, Set[str]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return code in self._sessions

    @property
    def capacity(self) -> int:
        return self._capacity

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def create_session(self, owner: str) -> str:
        """Allocate a fresh code for `owner`. Raises CodeSpaceExhausted when none is free."""
        with self._lock:
            code = self._generator.generate(self._sessions)
            self._sessions[code] = Session(code=code, owner=owner, created_at=self._clock())
            self._members[code] = {owner}
            self._pending[code] = set()
            return code

    def lookup(self, code: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(code)

    def admit(self, code: str, connection: str) -> JoinOutcome:
        """
        Reserve a slot in `code` for `connection` if the session is live and has room.

        A JOINED connection stays pending until `confirm`, so relays do not count it
        before it can actually receive them.
        """
        with self._lock:
            if code not in self._sessions:
                return JoinOutcome.NOT_FOUND
            members = self._members[code]
            pending = self._pending[code]
            if connection in members or connection in pending:
                return JoinOutcome.ALREADY_MEMBER
            if len(members) + len(pending) >= self._capacity:
                return JoinOutcome.FULL
            pending.add(connection)
            return JoinOutcome.JOINED

    def confirm(self, code: str, connection: str) -> bool:
        """Promote a pending joiner to member. False when the session or the reservation is gone."""
        with self._lock:
            pending = self._pending.get(code)
            if pending is None or connection not in pending:
                return False
            pending.discard(connection)
            self._members[code].add(connection)
            return True

    def members(self, code: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._members.get(code, ()))

    def is_member(self, code: str, connection: str) -> bool:
        with self._lock:
            return connection in self._members.get(code, ())

    def remove_session(self, code: str) -> Optional[Removal]:
        """Remove `code`. Returns None when it is already gone, so only one caller wins."""
        with self._lock:
            return self._pop(code)

    def all_owned_by(self, connection: str) -> List[str]:
        with self._lock:
            return [code for code, s in self._sessions.items() if s.owner == connection]

    def discard_member(self, connection: str) -> List[Tuple[str, str]]:
        """
        Drop a non-owner connection from every group it joined.

        Returns (code, owner) pairs for the groups it left. Groups owned by the
        connection are untouched; owner departure goes through remove_session.
        """
        left: List[Tuple[str, str]] = []
        with self._lock:
            for code, members in self._members.items():
                owner = self._sessions[code].owner
                self._pending[code].discard(connection)
                if connection in members and connection != owner:
                    members.discard(connection)
                    left.append((code, owner))
        return left

    def purge_expired(self, ttl: float, now: Optional[float] = None) -> List[Removal]:
        """Remove every session older than `ttl` seconds, whatever its membership."""
        if now is None:
            now = self._clock()
        with self._lock:
            expired = [code for code, s in self._sessions.items() if s.age(now) > ttl]
            return [r for r in (self._pop(code) for code in expired) if r is not None]

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._members.clear()
            self._pending.clear()

    def _pop(self, code: str) -> Optional[Removal]:
        session = self._sessions.pop(code, None)
        if session is None:
            return None
        # Pending joiners find out through a failed confirm.
        self._pending.pop(code, None)
        members = self._members.pop(code, set())
        return Removal(session=session, members=frozenset(members))
