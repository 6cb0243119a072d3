"""Inbound call-control events and the JSON frame codec.

A frame on the wire is ``{"type": <name>, "data": <payload>}``. Inbound
frames decode into one of the event classes below; outbound frames are built
with :func:`encode`.
"""
import json
from dataclasses import dataclass
from typing import Any, Optional

# outbound event names
INCOMING_CALL = "incomingCall"
CALL_ANSWERED = "callAnswered"
ICE_CANDIDATE = "ice-candidate"
CALL_ENDED = "callEnded"
UPDATE_USER_LIST = "updateUserList"


class ProtocolError(ValueError):
    """Raised when a frame cannot be decoded into an event."""


@dataclass(frozen=True)
class Register:
    identity: Optional[str]


@dataclass(frozen=True)
class Call:
    target: Optional[str]
    offer: Any = None


@dataclass(frozen=True)
class Answer:
    target: Optional[str]
    answer: Any = None


@dataclass(frozen=True)
class IceCandidate:
    target: Optional[str]
    candidate: Any = None


@dataclass(frozen=True)
class EndCall:
    target: Optional[str]


@dataclass(frozen=True)
class ConnectionClosed:
    """Lifecycle signal from the transport, never sent by a client."""


def _text(value):
    return value if isinstance(value, str) else None


def _register(data):
    return Register(identity=_text(data))


def _call(data):
    return Call(target=_text(data.get("target")), offer=data.get("offer"))


def _answer(data):
    return Answer(target=_text(data.get("target")), answer=data.get("answer"))


def _ice_candidate(data):
    return IceCandidate(target=_text(data.get("target")), candidate=data.get("candidate"))


def _end_call(data):
    return EndCall(target=_text(data.get("target")))


_DECODERS = {
    "register": _register,
    "call": _call,
    "answer": _answer,
    "ice-candidate": _ice_candidate,
    "endCall": _end_call,
}

# decoders that read fields out of an object payload
_NEEDS_FIELDS = {"call", "answer", "ice-candidate", "endCall"}


def decode(raw):
    """Parse one inbound frame into an event.

    Missing or wrongly typed fields come back as None rather than raising;
    only an unparseable frame or an unknown type is a ProtocolError.
    """
    try:
        msg = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise ProtocolError(f"invalid JSON: {e}") from e

    if not isinstance(msg, dict):
        raise ProtocolError("frame is not a JSON object")

    t = msg.get("type")
    decoder = _DECODERS.get(t) if isinstance(t, str) else None
    if decoder is None:
        raise ProtocolError(f"unknown type: {t!r}")

    data = msg.get("data")
    if t in _NEEDS_FIELDS and not isinstance(data, dict):
        data = {}
    return decoder(data)


def encode(event, payload):
    return json.dumps({"type": event, "data": payload})
