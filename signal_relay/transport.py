import logging

import websockets

from . import events
from .connection import Connection
from .events import ConnectionClosed, ProtocolError
from .router import Router

log = logging.getLogger(__name__)


class WebSocketTransport:
    """Owns the live websocket connections and feeds their frames to a Router.

    ``handler`` is the coroutine given to ``websockets.serve``; one runs per
    connection. Outbound frames go through ``websockets.broadcast``, which
    buffers the write without waiting and skips connections that are not
    open, so one bad peer never holds up the others.
    """

    def __init__(self, registry):
        self.registry = registry
        self.router = Router(registry, self)
        self.connections = set()

    def deliver(self, connection, event, payload):
        websockets.broadcast([connection.ws], events.encode(event, payload))

    def broadcast(self, event, payload):
        message = events.encode(event, payload)
        websockets.broadcast([c.ws for c in self.connections], message)

    async def handler(self, ws):
        conn = Connection(ws)
        self.connections.add(conn)
        log.info("[NEW CONNECTION] %r from %s", conn, conn.remote_address)
        try:
            async for raw in ws:
                try:
                    event = events.decode(raw)
                except ProtocolError as e:
                    log.warning("[ERROR] Ignoring frame from %r: %s", conn, e)
                    continue
                self.router.dispatch(conn, event)
        except websockets.exceptions.ConnectionClosed:
            log.info("[DISCONNECT] Connection closed for %r", conn)
        except Exception:
            log.exception("[ERROR] Exception in handler for %r", conn)
        finally:
            self.connections.discard(conn)
            self.router.dispatch(conn, ConnectionClosed())
            log.info("[DISCONNECT] %r left. Connections: %d", conn, len(self.connections))
