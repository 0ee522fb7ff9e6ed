"""
Run the share relay: `python -m relay_server` (or the `relay-server` script).

Listens on RELAY_HOST:PORT, port 3000 unless PORT is set.
"""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn

from relay_server.config import config


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="relay-server", description="One-time-code file share relay.")
    p.add_argument("--host", default=config.HOST)
    p.add_argument("--port", type=int, default=config.PORT)
    p.add_argument("--log-level", default=os.environ.get("DJANGO_LOG_LEVEL", "info").lower())
    args = p.parse_args(argv)

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "relay_server.settings")
    uvicorn.run("relay_server.asgi:application", host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
