"""
Exceptions raised by the rooms app.

Most failure modes in the relay are expected conditions (a stale code, a relay to a
room that just expired) and are reported as return values, not exceptions.
"""


class RoomsError(Exception):
    """Base class for rooms errors."""


class CodeSpaceExhausted(RoomsError):
    """Every code of the configured width is held by a live session."""


class InvalidFrame(RoomsError):
    """A websocket frame could not be decoded into an event envelope."""
