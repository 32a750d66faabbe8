import logging
from urllib.parse import urlsplit

from aiohttp import ClientError

from ..transport import Transport
from .exceptions import DownloadError


_L = logging.getLogger(__name__)


def is_fetchable(url: str) -> bool:
    return urlsplit(url).scheme.lower() in ("http", "https")


async def fetch_payload(
    url: str,
    want_payload: bool,
    *,
    transport: Transport,
    timeout: float | None = None,
) -> bytes | None:
    """
    Downloads the torrent file when uploading by file is wanted.

    Magnet links and other non-HTTP references are never downloaded; the
    clients receive the reference itself instead.
    """
    if not want_payload:
        return None
    try:
        fetchable = is_fetchable(url)
    except ValueError as e:
        raise DownloadError(url, reason=str(e)) from e
    if not fetchable:
        return None

    _L.debug(f"downloading {url}")
    try:
        response = await transport.request("GET", url, timeout=timeout)
    except (ClientError, TimeoutError) as e:
        raise DownloadError(url, reason=str(e) or type(e).__name__) from e
    if not response.ok:
        raise DownloadError(url, response.status, response.reason)
    return response.body
