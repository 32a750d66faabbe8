from aiohttp.web import AppKey

from .torrent import Dispatcher


DISPATCHER = AppKey("DISPATCHER", Dispatcher)
