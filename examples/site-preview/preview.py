#!/usr/bin/env python3
"""Start a bridge over ./pages and poll it the way a site generator would.

Edit pages/index.py while this runs and the next poll prints the change.
"""

import asyncio
import os
from pathlib import Path

from evalbridge import BridgeClient, BridgeConfig, create_listener

SOCKET_PATH = os.getenv("EVALBRIDGE_SOCKET_PATH", "/tmp/evalbridge-preview.sock")
PAGES_DIR = Path(__file__).parent / "pages"
POLL_SECONDS = float(os.getenv("POLL_SECONDS", "2"))


async def poll(client: BridgeClient) -> None:
    while True:
        for page in ("index.py", "nav.py"):
            value = await client.request(page)
            print(f"[PREVIEW] {page}: {value}")
        await asyncio.sleep(POLL_SECONDS)


async def main() -> None:
    config = BridgeConfig(
        socket_path=SOCKET_PATH,
        root_dir=PAGES_DIR,
        evaluation_mode="isolated",
        error_responses=True,
    )
    async with create_listener(config):
        print(f"[STARTUP] Bridge listening on {SOCKET_PATH}")
        async with BridgeClient(SOCKET_PATH, timeout=5, envelope=True) as client:
            await poll(client)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("[SHUTDOWN] Stopped")
