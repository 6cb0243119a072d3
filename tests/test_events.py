import json

import pytest

from signal_relay import events
from signal_relay.events import Answer, Call, EndCall, IceCandidate, ProtocolError, Register


def frame(type_, data=None):
    return json.dumps({"type": type_, "data": data})


def test_decode_each_kind():
    assert events.decode(frame("register", "alice")) == Register("alice")
    assert events.decode(frame("call", {"target": "bob", "offer": {"sdp": "v=0"}})) == \
        Call("bob", {"sdp": "v=0"})
    assert events.decode(frame("answer", {"target": "alice", "answer": "x"})) == Answer("alice", "x")
    assert events.decode(frame("ice-candidate", {"target": "bob", "candidate": {"c": 1}})) == \
        IceCandidate("bob", {"c": 1})
    assert events.decode(frame("endCall", {"target": "bob"})) == EndCall("bob")


def test_malformed_fields_read_as_absent():
    assert events.decode(frame("call", "not-an-object")) == Call(None, None)
    assert events.decode(frame("endCall")) == EndCall(None)
    assert events.decode(frame("answer", {"target": 42})) == Answer(None, None)
    assert events.decode(frame("register", {"identity": "alice"})) == Register(None)


@pytest.mark.parametrize("raw", [
    "{not json",
    b"\xff\xfe",
    "[1, 2]",
    json.dumps({"data": "alice"}),
    frame("hello", "alice"),
    json.dumps({"type": ["call"]}),
])
def test_bad_frames_raise_protocol_error(raw):
    with pytest.raises(ProtocolError):
        events.decode(raw)


def test_encode_wraps_payload():
    assert json.loads(events.encode(events.UPDATE_USER_LIST, ["a"])) == \
        {"type": "updateUserList", "data": ["a"]}


def test_deeply_nested_frame_is_a_protocol_error():
    depth = 50000
    raw = '{"type": "call", "data": {"target": "bob", "offer": ' + "[" * depth + "]" * depth + "}}"
    with pytest.raises(ProtocolError):
        events.decode(raw)
