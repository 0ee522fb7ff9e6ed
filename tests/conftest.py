from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Set

import pytest

from rooms.codes import CodeGenerator
from rooms.events import Event
from rooms.lifecycle import SessionLifecycle
from rooms.registry import SessionRegistry


class FixedRandom:
    """Stands in for SystemRandom: replays `values` for randint, then repeats the last one."""

    def __init__(self, *values: int):
        self.values = list(values)

    def randint(self, low: int, high: int) -> int:
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]

    def choice(self, seq):
        return seq[0]


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """In-process GroupTransport that records what each connection would receive."""

    def __init__(self):
        self.groups: Dict[str, Set[str]] = defaultdict(set)
        self.inbox: Dict[str, List[Event]] = defaultdict(list)

    async def group_add(self, code: str, connection: str) -> None:
        self.groups[code].add(connection)

    async def group_discard(self, code: str, connection: str) -> None:
        self.groups[code].discard(connection)

    async def group_send(self, code: str, event: Event, exclude: Optional[str] = None) -> None:
        for connection in sorted(self.groups[code]):
            if connection != exclude:
                self.inbox[connection].append(event)

    async def send(self, connection: str, event: Event) -> None:
        self.inbox[connection].append(event)

    def names(self, connection: str) -> List[str]:
        return [e.name for e in self.inbox[connection]]

    def last(self, connection: str) -> Event:
        return self.inbox[connection][-1]

    def clear(self) -> None:
        self.inbox.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SessionRegistry(clock=clock)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def lifecycle(registry, transport):
    return SessionLifecycle(registry, transport)


@pytest.fixture
def fixed_registry(clock):
    """Registry whose first code is always 4821."""
    return SessionRegistry(CodeGenerator(rng=FixedRandom(4821)), clock=clock)
