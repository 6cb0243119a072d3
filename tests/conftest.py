import pytest

from signal_relay.connection import Connection
from signal_relay.registry import Registry
from signal_relay.router import Router


class RecordingTransport:
    """Collects what the router sends instead of writing to sockets."""

    def __init__(self):
        self.connections = []
        self.sent = []

    def connect(self):
        conn = Connection(ws=None)
        self.connections.append(conn)
        return conn

    def disconnect(self, conn):
        self.connections.remove(conn)

    def deliver(self, connection, event, payload):
        self.sent.append((connection, event, payload))

    def broadcast(self, event, payload):
        for conn in self.connections:
            self.sent.append((conn, event, list(payload)))

    def received(self, conn, event=None):
        return [(e, p) for c, e, p in self.sent if c is conn and (event is None or e == event)]


@pytest.fixture()
def registry():
    return Registry()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def router(registry, transport):
    return Router(registry, transport)


class LockCheckingTransport(RecordingTransport):
    """Fails if anything is sent while the registry lock is held."""

    def __init__(self, registry):
        super().__init__()
        self.registry = registry

    def deliver(self, connection, event, payload):
        assert not self.registry._lock.locked()
        super().deliver(connection, event, payload)

    def broadcast(self, event, payload):
        assert not self.registry._lock.locked()
        super().broadcast(event, payload)


@pytest.fixture()
def lock_checking_transport(registry):
    return LockCheckingTransport(registry)
