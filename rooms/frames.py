"""
Websocket frame codec.

Text frames are JSON envelopes. Binary frames carry a file chunk:

    !H header length | header (UTF-8 JSON envelope) | chunk bytes

The chunk bytes are never inspected.
"""

from __future__ import annotations

import json
import struct
from typing import Any, Dict, Optional, Tuple

from .events import Event
from .exceptions import InvalidFrame

HEADER_LEN_FORMAT = "!H"
HEADER_LEN_SIZE = struct.calcsize(HEADER_LEN_FORMAT)
MAX_HEADER_LEN = 2**16 - 1

Decoded = Tuple[str, Dict[str, Any], Optional[bytes]]


def _envelope(obj: Any) -> Tuple[str, Dict[str, Any]]:
    if not isinstance(obj, dict):
        raise InvalidFrame("envelope must be a JSON object")
    name = obj.get("event")
    if not isinstance(name, str) or not name:
        raise InvalidFrame("envelope is missing 'event'")
    data = obj.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidFrame("envelope 'data' must be an object")
    return name, data


def decode_text(text: str) -> Decoded:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidFrame(f"invalid JSON: {e}") from e
    name, data = _envelope(obj)
    return name, data, None


def decode_binary(raw: bytes) -> Decoded:
    if len(raw) < HEADER_LEN_SIZE:
        raise InvalidFrame("binary frame too small to hold a header")
    (header_len,) = struct.unpack_from(HEADER_LEN_FORMAT, raw)
    end = HEADER_LEN_SIZE + header_len
    if len(raw) < end:
        raise InvalidFrame("binary frame shorter than its declared header")
    try:
        obj = json.loads(raw[HEADER_LEN_SIZE:end].decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidFrame(f"invalid binary frame header: {e}") from e
    name, data = _envelope(obj)
    return name, data, bytes(raw[end:])


def encode_text(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def encode_binary(envelope: Dict[str, Any], blob: bytes) -> bytes:
    header = encode_text(envelope).encode("utf-8")
    if len(header) > MAX_HEADER_LEN:
        raise InvalidFrame("binary frame header too large")
    return struct.pack(HEADER_LEN_FORMAT, len(header)) + header + blob


def encode(event: Event) -> Tuple[Optional[str], Optional[bytes]]:
    """Returns (text, None) or (None, bytes), ready for AsyncWebsocketConsumer.send()."""
    if event.blob is not None:
        return None, encode_binary(event.envelope(), event.blob)
    return encode_text(event.envelope()), None
