import json
import logging
from typing import TypedDict

from aiohttp.web import Response, View
from aiohttp.web_exceptions import (
    HTTPBadGateway,
    HTTPBadRequest,
    HTTPServiceUnavailable,
)

from .keys import DISPATCHER
from .torrent import (
    AllBackendsFailedError,
    DownloadError,
    NoBackendsEnabledError,
)


_L = logging.getLogger(__name__)


class SendTorrentData(TypedDict):
    url: str


class TorrentsHandler(View):
    async def post(self):
        if not self.request.can_read_body:
            raise HTTPBadRequest

        try:
            payload: SendTorrentData = await self.request.json()
        except ValueError:
            raise HTTPBadRequest
        if not isinstance(payload, dict):
            raise HTTPBadRequest
        url = payload.get("url")
        if not url or not isinstance(url, str):
            raise HTTPBadRequest

        dispatcher = self.request.app[DISPATCHER]
        try:
            rv = await dispatcher.send(url)
        except NoBackendsEnabledError as e:
            _L.error(f"{url}: {e}")
            raise HTTPServiceUnavailable(
                text=_to_json({"error": str(e)}), content_type="application/json"
            )
        except DownloadError as e:
            _L.error(f"{url}: {e}")
            raise HTTPBadGateway(
                text=_to_json({"error": str(e)}), content_type="application/json"
            )
        except AllBackendsFailedError as e:
            _L.error(f"{url}: {e}")
            failures = [
                {"client": name, "message": message} for name, message in e.failures
            ]
            raise HTTPBadGateway(
                text=_to_json({"error": str(e), "failures": failures}),
                content_type="application/json",
            )

        return _json_response({"client": rv.client, "result": rv.result})


def _to_json(data: object) -> str:
    result = json.dumps(data)
    return result + "\n"


def _json_response(data: object) -> Response:
    return Response(text=_to_json(data), content_type="application/json")
