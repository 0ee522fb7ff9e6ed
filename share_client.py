"""
CLI client for the one-time-code share relay.

Supports:
- Send a file:     python share_client.py send ./report.pdf
- Receive a file:  python share_client.py receive 4821 --out ./downloads

WebSocket protocol (`RoomConsumer`, /ws/share/):
- Text frames:   {"event": "<name>", "data": {...}}
- Binary frames: !H header length | JSON envelope header | chunk bytes
- Uploader sends:  create-room, then file-meta, file-chunk (binary) x N, file-end
- Receiver sends:  join-room {"otp": "<code>"}
- Server sends:    room-created, join-failed, peer-joined, join-success, file-meta,
                   file-chunk, file-end, uploader-disconnected, error
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import websockets

from rooms import events, frames

DEFAULT_CHUNK_SIZE = 64 * 1024


def _rstrip_slash(s: str) -> str:
    return s[:-1] if s.endswith("/") else s


def _ws_share_url(ws_base: str) -> str:
    return f"{_rstrip_slash(ws_base)}/ws/share/"


def _log(line: str) -> None:
    sys.stderr.write(line + "\n")
    sys.stderr.flush()


async def _send_event(ws, name: str, data: Optional[Dict[str, Any]] = None, blob: Optional[bytes] = None) -> None:
    envelope = {"event": name, "data": data or {}}
    if blob is not None:
        await ws.send(frames.encode_binary(envelope, blob))
    else:
        await ws.send(frames.encode_text(envelope))


async def _recv_event(ws) -> Tuple[str, Dict[str, Any], Optional[bytes]]:
    raw = await ws.recv()
    if isinstance(raw, bytes):
        return frames.decode_binary(raw)
    return frames.decode_text(raw)


async def send_file(*, ws_base: str, path: Path, chunk_size: int) -> int:
    size = path.stat().st_size
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    async with websockets.connect(_ws_share_url(ws_base), max_size=None) as ws:
        await _send_event(ws, events.CREATE_ROOM)

        code: Optional[str] = None
        while True:
            name, data, _ = await _recv_event(ws)
            if name == events.ROOM_CREATED:
                code = data.get("otp")
                print(code, flush=True)
                _log(f"[room {code}] share this code with the receiver; waiting for a peer...")
            elif name == events.PEER_JOINED:
                break
            elif name == events.ERROR:
                _log(f"[error {data.get('error')}]")
                return 1

        _log(f"[room {code}] peer joined, sending {path.name} ({size} bytes)")
        await _send_event(
            ws,
            events.FILE_META,
            {"room": code, "name": path.name, "size": size, "type": mime_type, "chunkSize": chunk_size},
        )
        sent = 0
        with path.open("rb") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                await _send_event(ws, events.FILE_CHUNK, {"room": code}, blob=chunk)
                sent += len(chunk)
        await _send_event(ws, events.FILE_END, {"room": code})
        _log(f"[room {code}] sent {sent} bytes")
    return 0


def _target_name(name: Any, code: str) -> str:
    # Never let the sender pick a directory, or a path outside --out.
    base = os.path.basename(str(name or ""))
    if base in ("", ".", ".."):
        return f"share-{code}"
    return base


def _expected_size(size: Any) -> int:
    try:
        return int(size or 0)
    except (TypeError, ValueError):
        return 0


def _chunk_bytes(blob: Optional[bytes], data: Dict[str, Any]) -> bytes:
    if blob is not None:
        return blob
    chunk = data.get("chunk")
    if isinstance(chunk, str):
        return chunk.encode()
    if isinstance(chunk, list):
        try:
            return bytes(chunk)
        except (TypeError, ValueError):
            return b""
    return b""


async def receive_file(*, ws_base: str, code: str, out_dir: Path) -> int:
    async with websockets.connect(_ws_share_url(ws_base), max_size=None) as ws:
        await _send_event(ws, events.JOIN_ROOM, {"otp": code})

        out = None
        target: Optional[Path] = None
        expected = 0
        received = 0
        try:
            while True:
                name, data, blob = await _recv_event(ws)
                if name == events.JOIN_FAILED:
                    _log(f"[join failed: {data.get('reason')}]")
                    return 1
                if name == events.JOIN_SUCCESS:
                    _log(f"[room {data.get('room')}] joined, waiting for the file...")
                elif name == events.FILE_META:
                    target = out_dir / _target_name(data.get("name"), code)
                    expected = _expected_size(data.get("size"))
                    out = target.open("wb")
                    _log(f"[receiving {target.name}: {expected} bytes]")
                elif name == events.FILE_CHUNK and out is not None:
                    chunk = _chunk_bytes(blob, data)
                    out.write(chunk)
                    received += len(chunk)
                elif name == events.FILE_END:
                    break
                elif name == events.UPLOADER_DISCONNECTED:
                    _log("[uploader disconnected]")
                    if out is not None and target is not None:
                        out.close()
                        out = None
                        target.unlink()
                    return 1
        finally:
            if out is not None:
                out.close()

    _log(f"[saved {target} ({received}/{expected} bytes)]")
    return 0 if received == expected else 1


async def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the one-time-code share relay")
    parser.add_argument("--ws", default="ws://localhost:3000", help="WS base, e.g. ws://localhost:3000")

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_send = sub.add_parser("send", help="Create a room and send a file")
    p_send.add_argument("file", type=Path)
    p_send.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE)

    p_recv = sub.add_parser("receive", help="Join a room by code and save the file")
    p_recv.add_argument("code")
    p_recv.add_argument("--out", type=Path, default=Path("."))

    args = parser.parse_args(argv)

    if args.cmd == "send":
        return await send_file(ws_base=args.ws, path=args.file, chunk_size=args.chunk_size)
    return await receive_file(ws_base=args.ws, code=args.code, out_dir=args.out)


def run() -> int:
    return asyncio.run(main())


if __name__ == "__main__":
    raise SystemExit(run())
