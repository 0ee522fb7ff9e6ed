"""
Wire events exchanged with share clients.

Every frame carries an envelope `{"event": <name>, "data": {...}}`. Inbound payloads are
validated with pydantic; outbound events are plain `Event` records that the transport can
push through the channel layer and the consumer can encode back into a frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Inbound
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
FILE_META = "file-meta"
FILE_CHUNK = "file-chunk"
FILE_END = "file-end"

# Outbound
ROOM_CREATED = "room-created"
JOIN_FAILED = "join-failed"
PEER_JOINED = "peer-joined"
JOIN_SUCCESS = "join-success"
UPLOADER_DISCONNECTED = "uploader-disconnected"
PEER_LEFT = "peer-left"
ERROR = "error"

INVALID_OR_EXPIRED = "Invalid or expired OTP"
ROOM_FULL = "Room is full"
PEER_JOINED_MESSAGE = "A peer joined the room"

# Binary frames give bytes; a chunk inside a text frame is whatever JSON value the client sent.
Chunk = Any


def _code_str(v: Any) -> Any:
    # Browsers happily send the code as a number.
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


class CreateRoom(BaseModel):
    pass


class JoinRoom(BaseModel):
    otp: str

    @field_validator("otp", mode="before")
    @classmethod
    def normalize_otp(cls, v: Any) -> Any:
        return _code_str(v)


class RoomEvent(BaseModel):
    """Base for events addressed to a room the sender already belongs to."""

    room: str

    @field_validator("room", mode="before")
    @classmethod
    def normalize_room(cls, v: Any) -> Any:
        return _code_str(v)


class FileMeta(RoomEvent):
    """Only `room` is read here; the descriptive fields are relayed exactly as the sender wrote them."""

    model_config = ConfigDict(populate_by_name=True)

    name: Any = None
    size: Any = None
    mime_type: Any = Field(default=None, alias="type")
    chunk_size: Any = Field(default=None, alias="chunkSize")

    def relay_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude={"room"})


class FileChunk(RoomEvent):
    # Only set when the client sent the chunk inside a text frame; binary chunks travel beside the envelope.
    chunk: Any = None


class FileEnd(RoomEvent):
    pass


INBOUND: Dict[str, Type[BaseModel]] = {
    CREATE_ROOM: CreateRoom,
    JOIN_ROOM: JoinRoom,
    FILE_META: FileMeta,
    FILE_CHUNK: FileChunk,
    FILE_END: FileEnd,
}


def parse_inbound(name: str, data: Optional[Dict[str, Any]]) -> Optional[BaseModel]:
    """
    Validate an inbound payload. Returns None for unknown event names.
    Raises pydantic.ValidationError for malformed payloads.
    """
    model = INBOUND.get(name)
    if model is None:
        return None
    return model.model_validate(data or {})


@dataclass(frozen=True)
class Event:
    """An outbound event. `blob` holds a binary chunk that is never inspected."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    blob: Optional[bytes] = None

    def envelope(self) -> Dict[str, Any]:
        return {"event": self.name, "data": dict(self.data)}


def room_created(otp: str) -> Event:
    return Event(ROOM_CREATED, {"otp": otp})


def join_failed(reason: str) -> Event:
    return Event(JOIN_FAILED, {"reason": reason})


def peer_joined(room: str) -> Event:
    return Event(PEER_JOINED, {"message": PEER_JOINED_MESSAGE, "room": room})


def join_success(room: str) -> Event:
    return Event(JOIN_SUCCESS, {"room": room})


def file_meta(meta: FileMeta) -> Event:
    return Event(FILE_META, meta.relay_data())


def file_chunk(chunk: Chunk) -> Event:
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return Event(FILE_CHUNK, {}, blob=bytes(chunk))
    return Event(FILE_CHUNK, {"chunk": chunk})


def file_end() -> Event:
    return Event(FILE_END)


def uploader_disconnected() -> Event:
    return Event(UPLOADER_DISCONNECTED)


def peer_left(room: str) -> Event:
    return Event(PEER_LEFT, {"room": room})


def error(code: str) -> Event:
    return Event(ERROR, {"error": code})
