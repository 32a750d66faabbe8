from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import dacite
import yaml


CURRENT_VERSION = 4
KNOWN_CLIENTS = ("transmission", "qbittorrent")


type RawData = dict[str, Any]


class IncompatibleSettingsError(Exception):
    pass


@dataclass(frozen=True)
class BackendData:
    enabled: bool
    url: str
    username: str | None = None
    password: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class Data:
    host: str = "127.0.0.1"
    port: int = 9092
    log_path: str | None = None
    add_paused: bool = False
    upload_file: bool = False
    timeout: float | None = None
    # keys are backend kinds, insertion order is the dispatch order
    clients: dict[str, BackendData] = field(default_factory=dict)


def load_from_path(path: str) -> Data:
    with open(path, mode="r", encoding="utf-8") as fin:
        raw_data = yaml.safe_load(fin)
    return load_from_dict(raw_data if raw_data else {})


def load_from_dict(raw_data: RawData) -> Data:
    raw_data = upgrade(raw_data)
    data = dacite.from_dict(Data, raw_data, config=dacite.Config(cast=[float]))
    return data


def upgrade(raw_data: RawData) -> RawData:
    """
    Applies the migration chain until the document reaches the current
    version. The input is not modified, and the version key is dropped from
    the result.
    """
    rv = dict(raw_data)
    version = rv.pop("version", CURRENT_VERSION)
    # True and 1.0 would otherwise match the int keys
    if type(version) is not int:
        raise IncompatibleSettingsError(f"incompatible version: {version!r}")
    while version != CURRENT_VERSION:
        step = _UPGRADES.get(version)
        if step is None:
            raise IncompatibleSettingsError(f"incompatible version: {version}")
        rv = step(rv)
        version += 1
    return rv


def _upgrade_v1(raw_data: RawData) -> RawData:
    return {**raw_data, "upload_file": False}


def _upgrade_v2(raw_data: RawData) -> RawData:
    return {**raw_data, "client": "transmission"}


def _upgrade_v3(raw_data: RawData) -> RawData:
    rv = dict(raw_data)
    kind = rv.pop("client", "transmission")
    url = rv.pop("url", "")
    username = rv.pop("username", None)
    password = rv.pop("password", None)

    clients: dict[str, RawData] = {
        kind: {
            "enabled": True,
            "url": url,
            "username": username,
            "password": password,
        }
    }
    for other in KNOWN_CLIENTS:
        if other not in clients:
            clients[other] = {"enabled": False, "url": ""}
    rv["clients"] = clients
    return rv


_UPGRADES: dict[object, Callable[[RawData], RawData]] = {
    1: _upgrade_v1,
    2: _upgrade_v2,
    3: _upgrade_v3,
}
