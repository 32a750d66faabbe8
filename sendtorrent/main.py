import logging
import signal
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from asyncio import Event, get_running_loop
from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial

from aiohttp import ClientSession, CookieJar
from aiohttp.web import Application, AppRunner, TCPSite
from wcpan.logging import ConfigBuilder

from .api import TorrentsHandler
from .keys import DISPATCHER
from .settings import load_from_path
from .torrent import Dispatcher, SendTorrentError
from .transport import create_transport


_L = logging.getLogger(__name__)


class Daemon:
    def __init__(self, args: list[str]) -> None:
        from logging.config import dictConfig

        kwargs = _parse_args(args)
        self._settings_path: str = kwargs.settings
        self._urls: list[str] = kwargs.urls
        self._cfg = load_from_path(self._settings_path)
        dictConfig(
            ConfigBuilder(path=self._cfg.log_path, rotate=True)
            .add("sendtorrent", level="D")
            .add("aiohttp", level="I")
            .to_dict()
        )
        self._finished = None

    async def __call__(self) -> int:
        if self._urls:
            return await self._guard()

        loop = get_running_loop()
        self._finished = Event()
        loop.add_signal_handler(signal.SIGINT, self._close_from_signal)
        loop.add_signal_handler(signal.SIGTERM, self._close_from_signal)
        return await self._guard()

    async def _guard(self) -> int:
        try:
            return await self._main()
        except Exception:
            _L.exception("main function error")
        return 1

    async def _main(self) -> int:
        async with AsyncExitStack() as stack:
            # qBittorrent sessions are cookies, and backends are often bare IPs
            curl = await stack.enter_async_context(
                ClientSession(cookie_jar=CookieJar(unsafe=True))
            )
            dispatcher = Dispatcher(
                # re-read on every send so edits apply without a restart
                partial(load_from_path, self._settings_path),
                transport=create_transport(curl),
            )

            if self._urls:
                return await _send_all(dispatcher, self._urls)

            app = Application()
            app.router.add_view(r"/api/v1/torrents", TorrentsHandler)
            app[DISPATCHER] = dispatcher

            await stack.enter_async_context(
                _server_context(app, self._cfg.host, self._cfg.port)
            )

            _L.info("server started")
            await self._wait_for_finished()

        return 0

    def _close_from_signal(self) -> None:
        assert self._finished
        self._finished.set()

    async def _wait_for_finished(self) -> None:
        assert self._finished
        await self._finished.wait()


async def _send_all(dispatcher: Dispatcher, urls: list[str]) -> int:
    rv = 0
    for url in urls:
        _L.info(f"sending {url} ...")
        try:
            result = await dispatcher.send(url)
        except SendTorrentError as e:
            _L.error(f"failed to send torrent: {e}")
            print(f"{url}: {e}")
            rv = 1
            continue
        print(f"{url}: Done ({result.client})")
    return rv


@asynccontextmanager
async def _server_context(app: Application, host: str, port: int):
    runner = AppRunner(app)
    await runner.setup()
    try:
        site = TCPSite(runner, host=host, port=port)
        await site.start()
        yield
    finally:
        await runner.cleanup()


def _parse_args(args: list[str]):
    parser = ArgumentParser(
        prog="sendtorrent", formatter_class=ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-s",
        "--settings",
        type=str,
        default="sendtorrent.yaml",
        help="settings file name",
    )
    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="send these torrents once and exit instead of serving",
    )
    kwargs = parser.parse_args(args[1:])
    return kwargs
