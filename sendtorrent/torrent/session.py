class SessionStore:
    """
    Holds the Transmission session id for the lifetime of the process.

    Two overlapping sends may both see a stale id and both refresh it. The
    refresh is idempotent so the store only swaps the value and never locks.
    """

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    def swap(self, token: str) -> str | None:
        old, self._token = self._token, token
        return old
