import itertools

_ids = itertools.count(1)


class Connection:
    """One live websocket as seen by the relay.

    ``identity`` is the name currently bound to this connection, or None
    until the peer registers. Only the registry writes it.
    """

    def __init__(self, ws):
        self.ws = ws
        self.id = next(_ids)
        self.identity = None

    @property
    def remote_address(self):
        return getattr(self.ws, "remote_address", None)

    def __repr__(self):
        return f"<Connection #{self.id} identity={self.identity!r}>"
