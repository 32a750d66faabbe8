import json
from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, override

from aiohttp import ClientSession, ClientTimeout, FormData
from multidict import CIMultiDict, CIMultiDictProxy


type RequestData = bytes | str | Mapping[str, str] | FormData | None


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: CIMultiDictProxy[str] = field(
        default_factory=lambda: CIMultiDictProxy(CIMultiDict())
    )
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return HTTPStatus.OK <= self.status < HTTPStatus.MULTIPLE_CHOICES

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


class Transport(metaclass=ABCMeta):
    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: RequestData = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        pass


def create_transport(session: ClientSession) -> Transport:
    return _AiohttpTransport(session=session)


class _AiohttpTransport(Transport):
    def __init__(self, *, session: ClientSession) -> None:
        self._curl = session

    @override
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: RequestData = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=timeout)
        async with self._curl.request(
            method, url, headers=headers, data=data, **kwargs
        ) as response:
            body = await response.read()
            return HttpResponse(
                status=response.status,
                headers=response.headers,
                body=body,
            )
