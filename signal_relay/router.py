import logging

from . import events
from .events import Answer, Call, ConnectionClosed, EndCall, IceCandidate, Register

log = logging.getLogger(__name__)


class Router:
    """Routes call-control events between identities.

    ``transport`` must provide ``deliver(connection, event, payload)`` and
    ``broadcast(event, payload)``. Both are expected to be non-blocking and
    to swallow failures on dead connections; the router never retries.
    """

    def __init__(self, registry, transport):
        self.registry = registry
        self.transport = transport

    def dispatch(self, source, event):
        if isinstance(event, Register):
            self.on_register(source, event)
        elif isinstance(event, Call):
            self.on_call(source, event)
        elif isinstance(event, Answer):
            self.on_answer(source, event)
        elif isinstance(event, IceCandidate):
            self.on_ice_candidate(source, event)
        elif isinstance(event, EndCall):
            self.on_end_call(source, event)
        elif isinstance(event, ConnectionClosed):
            self.on_connection_closed(source)
        else:
            raise TypeError(f"unhandled event: {event!r}")

    def on_register(self, source, event):
        snapshot = self.registry.register(event.identity, source)
        if snapshot is not None:
            self._publish_users(snapshot)

    def on_call(self, source, event):
        log.info("[CALL] '%s' calling '%s'", source.identity, event.target)
        self._forward(source, "call", event.target, events.INCOMING_CALL,
                      {"caller": source.identity, "offer": event.offer})

    def on_answer(self, source, event):
        log.info("[ANSWER] '%s' answering '%s'", source.identity, event.target)
        self._forward(source, "answer", event.target, events.CALL_ANSWERED,
                      {"answerer": source.identity, "answer": event.answer})

    def on_ice_candidate(self, source, event):
        self._forward(source, "ice-candidate", event.target, events.ICE_CANDIDATE,
                      {"sender": source.identity, "candidate": event.candidate})

    def on_end_call(self, source, event):
        self._forward(source, "endCall", event.target, events.CALL_ENDED,
                      {"caller": source.identity})

    def on_connection_closed(self, source):
        snapshot = self.registry.remove(source)
        if snapshot is not None:
            self._publish_users(snapshot)

    def _forward(self, source, kind, target, event, payload):
        conn = self.registry.resolve(target)
        if conn is None:
            log.debug("[DROP] %s from '%s': target '%s' not found", kind, source.identity, target)
            return
        log.debug("[RELAY] %s from '%s' to '%s'", kind, source.identity, target)
        self.transport.deliver(conn, event, payload)

    def _publish_users(self, identities):
        self.transport.broadcast(events.UPDATE_USER_LIST, identities)
