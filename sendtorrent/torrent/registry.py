import logging

from ..settings import BackendData
from ..transport import Transport
from .client import TorrentClient
from .qbittorrent import QbittorrentClient
from .session import SessionStore
from .transmission import TransmissionClient


_L = logging.getLogger(__name__)


class TorrentClientRegistry:
    """Registry of enabled torrent clients, kept in configuration order"""

    def __init__(self) -> None:
        self._clients: dict[str, TorrentClient] = {}

    def register_client(self, client: TorrentClient) -> None:
        """Register a torrent client"""
        self._clients[client.name] = client
        _L.debug(f"registered torrent client: {client.name}")

    def get_client(self, name: str) -> TorrentClient | None:
        """Get a torrent client by name"""
        return self._clients.get(name)

    def get_all_clients(self) -> dict[str, TorrentClient]:
        """Get all registered clients"""
        return self._clients.copy()


def create_torrent_client(
    kind: str,
    config: BackendData,
    *,
    transport: Transport,
    session_store: SessionStore,
    timeout: float | None = None,
) -> TorrentClient | None:
    """Factory function to create torrent clients based on configuration"""
    match kind:
        case "transmission":
            return TransmissionClient(
                config,
                transport=transport,
                session_store=session_store,
                timeout=timeout,
            )
        case "qbittorrent":
            return QbittorrentClient(config, transport=transport, timeout=timeout)
        case _:
            _L.error(f"unsupported torrent client type: {kind}")
            return None


def create_torrent_registry(
    configs: dict[str, BackendData] | None,
    *,
    transport: Transport,
    session_store: SessionStore,
    timeout: float | None = None,
) -> TorrentClientRegistry:
    """Create a registry holding only the enabled clients"""
    registry = TorrentClientRegistry()

    if not configs:
        return registry

    for kind, config in configs.items():
        if not config.enabled:
            continue
        client = create_torrent_client(
            kind,
            config,
            transport=transport,
            session_store=session_store,
            timeout=timeout,
        )
        if client:
            registry.register_client(client)

    return registry
