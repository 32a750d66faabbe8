import logging
from asyncio import TaskGroup
from collections.abc import Callable
from dataclasses import dataclass

from ..settings import Data
from ..transport import Transport
from .client import TorrentClient
from .exceptions import AllBackendsFailedError, NoBackendsEnabledError
from .payload import fetch_payload
from .registry import create_torrent_registry
from .session import SessionStore


_L = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    name: str
    success: bool
    result: object = None
    error: str | None = None


@dataclass(frozen=True)
class SendResult:
    client: str
    result: object


class Dispatcher:
    """
    Sends one torrent reference to every enabled client.

    Each send takes a fresh settings snapshot, downloads the torrent file at
    most once, runs all clients concurrently and waits for every one of them.
    The result comes from the first client in configuration order that
    succeeded, no matter which one finished first.
    """

    def __init__(
        self,
        get_options: Callable[[], Data],
        *,
        transport: Transport,
        session_store: SessionStore | None = None,
    ) -> None:
        self._get_options = get_options
        self._transport = transport
        self._session_store = session_store if session_store else SessionStore()

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    async def send(self, url: str) -> SendResult:
        options = self._get_options()
        registry = create_torrent_registry(
            options.clients,
            transport=self._transport,
            session_store=self._session_store,
            timeout=options.timeout,
        )
        clients = registry.get_all_clients()
        if not clients:
            raise NoBackendsEnabledError()

        _L.debug(f"sending {url} to {', '.join(clients)}")
        payload = await fetch_payload(
            url,
            options.upload_file,
            transport=self._transport,
            timeout=options.timeout,
        )

        async with TaskGroup() as group:
            tasks = [
                group.create_task(
                    _invoke(client, url, payload, paused=options.add_paused)
                )
                for client in clients.values()
            ]
        outcomes = [_.result() for _ in tasks]
        return _reduce(outcomes)


async def _invoke(
    client: TorrentClient, url: str, payload: bytes | None, *, paused: bool
) -> Outcome:
    try:
        result = await client.add_torrent(url, payload, paused=paused)
    except Exception as e:
        message = str(e) or type(e).__name__
        _L.error(f"{client.name}: {message}")
        return Outcome(name=client.name, success=False, error=message)
    return Outcome(name=client.name, success=True, result=result)


def _reduce(outcomes: list[Outcome]) -> SendResult:
    # outcomes are in configuration order, not completion order
    for outcome in outcomes:
        if outcome.success:
            _L.info(f"torrent sent via {outcome.name}")
            return SendResult(client=outcome.name, result=outcome.result)

    failures = [(_.name, _.error or "unknown error") for _ in outcomes]
    raise AllBackendsFailedError(failures)
