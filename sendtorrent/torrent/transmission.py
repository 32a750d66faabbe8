import json
import logging
from base64 import b64encode
from enum import Enum, auto
from http import HTTPStatus
from typing import Any, override

from ..settings import BackendData
from ..transport import HttpResponse, Transport
from .client import TorrentClient
from .exceptions import ProtocolError, RequestError
from .session import SessionStore


SESSION_ID_HEADER = "X-Transmission-Session-Id"
RESULT_SUCCESS = "success"


_L = logging.getLogger(__name__)


class _State(Enum):
    ATTEMPT = auto()
    RETRY = auto()


class TransmissionClient(TorrentClient):
    """Transmission RPC adapter"""

    name = "Transmission"

    def __init__(
        self,
        config: BackendData,
        *,
        transport: Transport,
        session_store: SessionStore,
        timeout: float | None = None,
    ) -> None:
        super().__init__(config, transport=transport, timeout=timeout)
        self._session = session_store

    @override
    async def add_torrent(
        self, url: str, payload: bytes | None, *, paused: bool
    ) -> dict[str, Any]:
        body = json.dumps(
            {
                "method": "torrent-add",
                "arguments": {
                    **_create_torrent_argument(url, payload),
                    "paused": paused,
                },
            }
        )

        state = _State.ATTEMPT
        while True:
            response = await self._post(
                self.config.url, headers=self._create_headers(), data=body
            )
            if response.status != HTTPStatus.CONFLICT:
                break

            match state:
                case _State.ATTEMPT:
                    token = response.headers.get(SESSION_ID_HEADER)
                    if not token:
                        raise RequestError(response.status)
                    _L.debug("refreshing transmission session id")
                    self._session.swap(token)
                    state = _State.RETRY
                case _State.RETRY:
                    raise RequestError(response.status)

        return _parse_response(response)

    def _create_headers(self) -> dict[str, str]:
        headers = self._create_auth_headers()
        headers["Content-Type"] = "application/json"
        token = self._session.token
        if token:
            headers[SESSION_ID_HEADER] = token
        return headers


def _create_torrent_argument(url: str, payload: bytes | None) -> dict[str, str]:
    if payload is not None:
        return {"metainfo": b64encode(payload).decode("ascii")}
    return {"filename": url}


def _parse_response(response: HttpResponse) -> dict[str, Any]:
    if not response.ok:
        raise RequestError(response.status)
    try:
        result = response.json()
    except ValueError as e:
        raise ProtocolError(f"transmission error: invalid response: {e}") from e
    if not isinstance(result, dict):
        raise ProtocolError("transmission error: invalid response")
    if result.get("result") != RESULT_SUCCESS:
        raise ProtocolError(f"transmission error: {result.get('result')}")
    return result
