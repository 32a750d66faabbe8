from abc import ABCMeta, abstractmethod
from collections.abc import Mapping

from aiohttp import encode_basic_auth

from ..settings import BackendData
from ..transport import HttpResponse, RequestData, Transport


class TorrentClient(metaclass=ABCMeta):
    """Abstract base class for torrent client adapters"""

    name: str = "unknown"

    def __init__(
        self,
        config: BackendData,
        *,
        transport: Transport,
        timeout: float | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._timeout = timeout

    @abstractmethod
    async def add_torrent(
        self, url: str, payload: bytes | None, *, paused: bool
    ) -> object:
        """
        Add a torrent by reference, or by file content when payload is given.

        Returns the backend specific result. Raises BackendError subclasses
        on failure.
        """
        pass

    def _create_auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.config.has_credentials:
            headers["Authorization"] = encode_basic_auth(
                self.config.username or "", self.config.password or ""
            )
        return headers

    async def _post(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: RequestData = None,
    ) -> HttpResponse:
        return await self._transport.request(
            "POST", url, headers=headers, data=data, timeout=self._timeout
        )
