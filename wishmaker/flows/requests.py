class RequestGate:
    """Monotonic request ids for one kind of async call.

    Only the most recently issued id may apply its result; anything that
    completes after a newer request was issued is stale.
    """

    def __init__(self):
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest

    def invalidate(self) -> None:
        """Make every outstanding request stale."""
        self._latest += 1
