"""Pytest configuration and shared fixtures for sendtorrent tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

import pytest_asyncio
from aiohttp import ClientSession, CookieJar
from aiohttp.test_utils import TestServer
from aiohttp.web import Application, FileField, Request, Response, json_response

from sendtorrent.settings import BackendData, Data
from sendtorrent.transport import HttpResponse, RequestData, Transport, create_transport


TORRENT_CONTENT = (
    b"d8:announce31:http://tracker.example/announce"
    b"4:infod6:lengthi1024e4:name8:test.bin12:piece lengthi16384eee"
)
SESSION_ID_HEADER = "X-Transmission-Session-Id"


class FakeTransmission:
    """Transmission RPC endpoint with the session id handshake."""

    def __init__(self) -> None:
        self.session_id = "transmission-session-1"
        self.result = "success"
        self.status: int | None = None
        self.delay = 0.0
        self.issue_token = True
        self.always_conflict = False
        self.requests: list[dict[str, Any]] = []

    async def handle(self, request: Request) -> Response:
        body = await request.json()
        self.requests.append(
            {
                "session_id": request.headers.get(SESSION_ID_HEADER),
                "authorization": request.headers.get("Authorization"),
                "content_type": request.content_type,
                "body": body,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status is not None:
            return Response(status=self.status)

        token = request.headers.get(SESSION_ID_HEADER)
        if self.always_conflict or token != self.session_id:
            headers = {SESSION_ID_HEADER: self.session_id} if self.issue_token else {}
            return Response(status=409, headers=headers)

        return json_response(
            {
                "result": self.result,
                "arguments": {
                    "torrent-added": {"id": 1, "hashString": "abc123", "name": "test"}
                },
            }
        )


class FakeQbittorrent:
    """qBittorrent Web API endpoints guarded by a login cookie."""

    def __init__(self) -> None:
        self.username = "admin"
        self.password = "adminadmin"
        self.sid = "qbittorrent-sid-1"
        self.delay = 0.0
        self.add_status: int | None = None
        self.login_status: int | None = None
        self.require_login = True
        self.always_forbidden = False
        self.add_requests: list[dict[str, Any]] = []
        self.login_requests: list[dict[str, Any]] = []

    async def handle_add(self, request: Request) -> Response:
        form = await request.post()
        torrents = form.get("torrents")
        self.add_requests.append(
            {
                "urls": form.get("urls"),
                "paused": form.get("paused"),
                "torrents": (
                    torrents.file.read() if isinstance(torrents, FileField) else None
                ),
                "filename": (
                    torrents.filename if isinstance(torrents, FileField) else None
                ),
                "authorization": request.headers.get("Authorization"),
                "content_type": request.content_type,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.add_status is not None:
            return Response(status=self.add_status)
        if self.always_forbidden:
            return Response(status=403, text="Forbidden")
        if self.require_login and request.cookies.get("SID") != self.sid:
            return Response(status=403, text="Forbidden")
        return Response(text="Ok.")

    async def handle_login(self, request: Request) -> Response:
        form = await request.post()
        self.login_requests.append(
            {
                "username": form.get("username"),
                "password": form.get("password"),
                "content_type": request.content_type,
            }
        )
        if self.login_status is not None:
            return Response(status=self.login_status)
        if form.get("username") != self.username or form.get("password") != self.password:
            return Response(text="Fails.")
        response = Response(text="Ok.")
        response.set_cookie("SID", self.sid, path="/")
        return response


class FakeFiles:
    """Static torrent file host counting its downloads."""

    def __init__(self) -> None:
        self.content = TORRENT_CONTENT
        self.hits = 0

    async def handle(self, request: Request) -> Response:
        self.hits += 1
        return Response(body=self.content, content_type="application/x-bittorrent")


@dataclass
class FakeBackends:
    server: TestServer
    transmission: FakeTransmission
    qbittorrent: FakeQbittorrent
    files: FakeFiles

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    @property
    def transmission_url(self) -> str:
        return self.url("/transmission/rpc")

    @property
    def qbittorrent_url(self) -> str:
        return self.url("/qbittorrent")

    @property
    def torrent_url(self) -> str:
        return self.url("/files/test.torrent")

    @property
    def missing_torrent_url(self) -> str:
        return self.url("/files/missing.torrent")

    def transmission_config(self, **kwargs: Any) -> BackendData:
        return BackendData(
            **{"enabled": True, "url": self.transmission_url, **kwargs}
        )

    def qbittorrent_config(self, **kwargs: Any) -> BackendData:
        defaults = {
            "enabled": True,
            "url": self.qbittorrent_url,
            "username": self.qbittorrent.username,
            "password": self.qbittorrent.password,
        }
        return BackendData(**{**defaults, **kwargs})


class RecordingTransport(Transport):
    """Transport double recording every request it is asked to make."""

    def __init__(
        self, respond: Callable[[str, str], HttpResponse] | None = None
    ) -> None:
        self.calls: list[dict[str, Any]] = []
        self._respond = respond

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Any = None,
        data: RequestData = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(headers or {}),
                "data": data,
                "timeout": timeout,
            }
        )
        if self._respond is None:
            raise AssertionError(f"unexpected request: {method} {url}")
        return self._respond(method, url)


def make_settings(
    clients: dict[str, BackendData] | None = None,
    *,
    add_paused: bool = False,
    upload_file: bool = False,
    timeout: float | None = None,
) -> Data:
    return Data(
        add_paused=add_paused,
        upload_file=upload_file,
        timeout=timeout,
        clients=clients if clients else {},
    )


@pytest_asyncio.fixture
async def backends() -> AsyncIterator[FakeBackends]:
    transmission = FakeTransmission()
    qbittorrent = FakeQbittorrent()
    files = FakeFiles()

    app = Application()
    app.router.add_post("/transmission/rpc", transmission.handle)
    app.router.add_post("/qbittorrent/api/v2/torrents/add", qbittorrent.handle_add)
    app.router.add_post("/qbittorrent/api/v2/auth/login", qbittorrent.handle_login)
    app.router.add_get("/files/test.torrent", files.handle)

    server = TestServer(app)
    await server.start_server()
    try:
        yield FakeBackends(
            server=server,
            transmission=transmission,
            qbittorrent=qbittorrent,
            files=files,
        )
    finally:
        await server.close()


@pytest_asyncio.fixture
async def transport() -> AsyncIterator[Transport]:
    async with ClientSession(cookie_jar=CookieJar(unsafe=True)) as session:
        yield create_transport(session)
