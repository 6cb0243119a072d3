"""Signaling client for the relay, plus a reachability check.

The client only speaks the signaling protocol; producing the offers,
answers and candidates it carries is up to the caller's WebRTC stack.
"""
import argparse
import asyncio
import json
import logging
import sys

import websockets

from . import events

log = logging.getLogger(__name__)


class SignalingClient:
    def __init__(self, ws_url, self_id):
        self.ws_url = ws_url
        self.self_id = self_id
        self.ws = None

    async def connect(self, timeout=5):
        self.ws = await websockets.connect(self.ws_url, open_timeout=timeout)
        return self

    async def close(self):
        if self.ws is not None:
            await self.ws.close()

    async def __aenter__(self):
        return await self.connect()

    async def __aexit__(self, *exc):
        await self.close()

    async def _send(self, type_, data):
        await self.ws.send(json.dumps({"type": type_, "data": data}))

    async def register(self, identity=None):
        await self._send("register", identity if identity is not None else self.self_id)

    async def call(self, target, offer):
        await self._send("call", {"target": target, "offer": offer})

    async def answer(self, target, answer):
        await self._send("answer", {"target": target, "answer": answer})

    async def send_candidate(self, target, candidate):
        await self._send("ice-candidate", {"target": target, "candidate": candidate})

    async def end_call(self, target):
        await self._send("endCall", {"target": target})

    async def recv(self, timeout=None):
        """Wait for the next frame and return ``(event, data)``."""
        raw = await asyncio.wait_for(self.ws.recv(), timeout)
        msg = json.loads(raw)
        return msg.get("type"), msg.get("data")

    async def wait_for(self, event, timeout=5):
        """Skip frames until one named ``event`` arrives and return its data."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError(f"no {event} within {timeout}s")
            t, data = await self.recv(timeout=remaining)
            if t == event:
                return data
            log.debug("[SIG] skipping %s while waiting for %s", t, event)


async def check_server(server_url, peer_id="TestClient", timeout=5):
    """Register on ``server_url`` and confirm the relay lists us back."""
    log.info("Testing connection to %s...", server_url)
    try:
        async with SignalingClient(server_url, peer_id) as client:
            log.info("Connected to server")
            await client.register()
            users = await client.wait_for(events.UPDATE_USER_LIST, timeout=timeout)
    except asyncio.TimeoutError:
        log.error("Timeout! Server might not be running or did not answer.")
        return False
    except OSError as e:
        log.error("Connection failed: %s", e)
        return False
    except websockets.exceptions.WebSocketException as e:
        log.error("WebSocket error: %s", e)
        return False

    if isinstance(users, list) and peer_id in users:
        log.info("Server responded correctly. Online: %s", users)
        return True
    log.error("Unexpected user list: %s", users)
    return False


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Check that a signaling relay is reachable")
    ap.add_argument("--server", default="ws://localhost:5000", help="WS signaling URL")
    ap.add_argument("--id", default="TestClient", help="identity to register")
    ap.add_argument("--timeout", type=float, default=5.0)
    return ap.parse_args(argv)


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    ok = asyncio.run(check_server(args.server, args.id, args.timeout))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    run()
