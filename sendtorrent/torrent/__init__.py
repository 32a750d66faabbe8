"""
Torrent client package for sending torrents to download daemons.

This package provides:
- Abstract torrent client interface
- Transmission and qBittorrent client implementations
- Client registry for managing the enabled clients
- Dispatcher fanning one torrent out to every enabled client
"""

from .client import TorrentClient
from .dispatcher import Dispatcher, Outcome, SendResult
from .exceptions import (
    AddTorrentError,
    AllBackendsFailedError,
    AuthError,
    BackendError,
    DownloadError,
    NoBackendsEnabledError,
    ProtocolError,
    RequestError,
    SendTorrentError,
)
from .payload import fetch_payload, is_fetchable
from .qbittorrent import QbittorrentClient
from .registry import (
    TorrentClientRegistry,
    create_torrent_client,
    create_torrent_registry,
)
from .session import SessionStore
from .transmission import TransmissionClient


__all__ = [
    # Core interfaces and models
    "TorrentClient",
    "Outcome",
    "SendResult",
    "SessionStore",
    # Client implementations
    "TransmissionClient",
    "QbittorrentClient",
    # Registry and factory functions
    "TorrentClientRegistry",
    "create_torrent_client",
    "create_torrent_registry",
    # Operations
    "Dispatcher",
    "fetch_payload",
    "is_fetchable",
    # Errors
    "SendTorrentError",
    "DownloadError",
    "NoBackendsEnabledError",
    "BackendError",
    "RequestError",
    "AddTorrentError",
    "ProtocolError",
    "AuthError",
    "AllBackendsFailedError",
]
