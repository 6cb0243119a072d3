import logging
import threading
from typing import Dict, List, Optional

from .connection import Connection

log = logging.getLogger(__name__)


class Registry:
    """Maps each identity to the connection that currently represents it.

    All methods take the same lock, so register/resolve/remove are atomic
    with respect to each other. Nothing here does I/O: ``register`` and
    ``remove`` hand back a snapshot of the identities and the caller does
    the presence broadcast after the lock is released.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._peers: Dict[str, Connection] = {}

    def register(self, identity, connection: Connection) -> Optional[List[str]]:
        """Bind ``identity`` to ``connection``, last registration wins.

        A connection that was bound to another identity is rebound; the old
        identity's entry is left alone. The previous holder of ``identity``
        is not closed, it just stops being reachable by name.

        Returns the identities after the change, or None if ``identity`` was
        rejected.
        """
        if not identity or not isinstance(identity, str):
            log.warning("[REGISTER] Rejected empty identity from %r", connection)
            return None

        with self._lock:
            previous = self._peers.get(identity)
            self._peers[identity] = connection
            connection.identity = identity
            snapshot = list(self._peers)

        if previous is not None and previous is not connection:
            log.info("[REGISTER] '%s' moved from %r to %r", identity, previous, connection)
        else:
            log.info("[REGISTER] '%s' on %r. Total: %d", identity, connection, len(snapshot))
        return snapshot

    def resolve(self, identity) -> Optional[Connection]:
        if not isinstance(identity, str):
            return None
        with self._lock:
            return self._peers.get(identity)

    def remove(self, connection: Connection) -> Optional[List[str]]:
        """Drop the entry held by ``connection``.

        Does nothing for a connection that never registered. The entry is
        only deleted while it still points at this exact connection, so a
        superseded connection closing late cannot evict its successor.

        Returns the identities after the call, or None if the connection
        was unbound.
        """
        with self._lock:
            identity = connection.identity
            if identity is None:
                return None
            if self._peers.get(identity) is connection:
                del self._peers[identity]
                removed = True
            else:
                removed = False
            connection.identity = None
            snapshot = list(self._peers)

        if removed:
            log.info("[CLEANUP] Removed '%s'. Remaining: %s", identity, snapshot)
        else:
            log.debug("[CLEANUP] '%s' already held by another connection, kept", identity)
        return snapshot

    def identities(self) -> List[str]:
        with self._lock:
            return list(self._peers)

    def __contains__(self, identity):
        with self._lock:
            return identity in self._peers

    def __len__(self):
        with self._lock:
            return len(self._peers)
