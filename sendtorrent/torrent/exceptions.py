class SendTorrentError(Exception):
    pass


class DownloadError(SendTorrentError):
    """The torrent file could not be downloaded before dispatching."""

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        detail = reason or (f"status {status}" if status is not None else "")
        super().__init__(f"failed to download torrent: {detail}")
        self.url = url
        self.status = status


class NoBackendsEnabledError(SendTorrentError):
    def __init__(self) -> None:
        super().__init__("no torrent clients are enabled")


class BackendError(SendTorrentError):
    """Failures local to one backend. The dispatcher captures these."""


class RequestError(BackendError):
    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"request error: {status}")
        self.status = status


class AddTorrentError(RequestError):
    def __init__(self, status: int) -> None:
        super().__init__(status, f"failed to add torrent: {status}")


class ProtocolError(BackendError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(BackendError):
    def __init__(self, status: int | None = None, reason: str = "") -> None:
        detail = reason or (str(status) if status is not None else "")
        super().__init__(f"failed to authorize: {detail}")
        self.status = status


class AllBackendsFailedError(SendTorrentError):
    def __init__(self, failures: list[tuple[str, str]]) -> None:
        summary = ", ".join(f"{name}: {message}" for name, message in failures)
        super().__init__(f"all enabled clients failed: {summary}")
        self.failures = failures
