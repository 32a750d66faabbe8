import logging
from enum import Enum, auto
from http import HTTPStatus
from typing import override

from aiohttp import FormData

from ..transport import HttpResponse
from .client import TorrentClient
from .exceptions import AddTorrentError, AuthError, RequestError


PATH_ADD_TORRENT = "/api/v2/torrents/add"
PATH_LOGIN = "/api/v2/auth/login"
LOGIN_FAILED = "Fails."


_L = logging.getLogger(__name__)


class _State(Enum):
    FIRST_ATTEMPT = auto()
    AUTHENTICATE = auto()
    SECOND_ATTEMPT = auto()


class QbittorrentClient(TorrentClient):
    """qBittorrent Web API adapter"""

    name = "qBittorrent"

    @override
    async def add_torrent(
        self, url: str, payload: bytes | None, *, paused: bool
    ) -> None:
        state = _State.FIRST_ATTEMPT
        while True:
            match state:
                case _State.FIRST_ATTEMPT:
                    response = await self._add(url, payload, paused=paused)
                    if response.ok:
                        return None
                    if response.status != HTTPStatus.FORBIDDEN:
                        raise RequestError(response.status)
                    state = _State.AUTHENTICATE
                case _State.AUTHENTICATE:
                    await self._login()
                    state = _State.SECOND_ATTEMPT
                case _State.SECOND_ATTEMPT:
                    response = await self._add(url, payload, paused=paused)
                    if response.ok:
                        return None
                    raise AddTorrentError(response.status)

    async def _add(
        self, url: str, payload: bytes | None, *, paused: bool
    ) -> HttpResponse:
        # a FormData can only be serialized once, so build one per attempt
        form = FormData(default_to_multipart=True)
        if paused:
            form.add_field("paused", "true")
        if payload is not None:
            form.add_field(
                "torrents",
                payload,
                filename="_.torrent",
                content_type="application/x-bittorrent",
            )
        else:
            form.add_field("urls", url)

        return await self._post(
            self._get_api_url(PATH_ADD_TORRENT),
            headers=self._create_auth_headers(),
            data=form,
        )

    async def _login(self) -> None:
        _L.info(f"{self.name}: logging in to {self.config.url}")
        response = await self._post(
            self._get_api_url(PATH_LOGIN),
            headers=self._create_auth_headers(),
            data={
                "username": self.config.username or "",
                "password": self.config.password or "",
            },
        )
        if not response.ok:
            raise AuthError(response.status, response.reason)
        if response.text().strip() == LOGIN_FAILED:
            raise AuthError(response.status, "invalid username or password")

    def _get_api_url(self, path: str) -> str:
        return f"{self.config.url.rstrip('/')}{path}"
