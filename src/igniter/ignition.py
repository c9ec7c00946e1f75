"""The Ignition config model.

Only the parts of the Ignition v2.2 schema used by the bootstrap config are
modelled. Each type converts to and from the JSON document structure with a
fixed field order, so serializing a loaded config reproduces the original
bytes.
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Optional

from igniter.asset import WritableAsset
from igniter.errors import LoadError

__all__ = [
    "IGNITION_VERSION",
    "Ignition",
    "StorageFile",
    "Storage",
    "Dropin",
    "Unit",
    "Systemd",
    "PasswdUser",
    "Passwd",
    "Config",
    "encode_data_url",
    "decode_data_url",
    "file_from_bytes",
    "files_from_asset",
    "dumps",
    "loads",
]

IGNITION_VERSION = "2.2.0"

_DATA_URL_PREFIX = "data:text/plain;charset=utf-8;base64,"


def encode_data_url(data: bytes) -> str:
    return _DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")


def decode_data_url(source: str) -> bytes:
    """Decode a ``data:`` URL produced by :func:`encode_data_url`.

    Raises:
        ValueError: If the URL is not a base64 text data URL.
    """
    if not source.startswith(_DATA_URL_PREFIX):
        raise ValueError(f"unsupported contents source {source[:40]!r}")
    return base64.b64decode(source[len(_DATA_URL_PREFIX):], validate=True)


@dataclass
class Ignition:
    version: str = IGNITION_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ignition":
        return cls(version=data["version"])


@dataclass
class StorageFile:
    """A file written to the node's root filesystem.

    Attributes:
        path: Absolute path of the file on the node.
        user: Name of the owning user.
        mode: Permission bits.
        source: The contents as a ``data:`` URL.
        append: Whether the contents are appended to an existing file.
        filesystem: The filesystem the path refers to.
    """

    path: str
    user: str
    mode: int
    source: str
    append: bool = False
    filesystem: str = "root"

    @property
    def data(self) -> bytes:
        return decode_data_url(self.source)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "filesystem": self.filesystem,
            "path": self.path,
            "user": {"name": self.user},
        }
        if self.append:
            result["append"] = True
        result["contents"] = {"source": self.source, "verification": {}}
        result["mode"] = self.mode
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StorageFile":
        return cls(
            path=data["path"],
            user=data.get("user", {}).get("name", ""),
            mode=data["mode"],
            source=data["contents"]["source"],
            append=data.get("append", False),
            filesystem=data.get("filesystem", "root"),
        )


@dataclass
class Storage:
    files: list[StorageFile] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.files:
            return {}
        return {"files": [f.to_dict() for f in self.files]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Storage":
        return cls(files=[StorageFile.from_dict(f) for f in data.get("files", [])])


@dataclass
class Dropin:
    name: str
    contents: str

    def to_dict(self) -> dict[str, Any]:
        return {"contents": self.contents, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dropin":
        return cls(name=data["name"], contents=data.get("contents", ""))


@dataclass
class Unit:
    """A systemd unit, given either whole or as a set of drop-ins.

    ``enabled`` is None when the config leaves the unit's enablement alone.
    """

    name: str
    contents: Optional[str] = None
    dropins: list[Dropin] = field(default_factory=list)
    enabled: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.contents is not None:
            result["contents"] = self.contents
        if self.dropins:
            result["dropins"] = [d.to_dict() for d in self.dropins]
        if self.enabled is not None:
            result["enabled"] = self.enabled
        result["name"] = self.name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Unit":
        return cls(
            name=data["name"],
            contents=data.get("contents"),
            dropins=[Dropin.from_dict(d) for d in data.get("dropins", [])],
            enabled=data.get("enabled"),
        )


@dataclass
class Systemd:
    units: list[Unit] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.units:
            return {}
        return {"units": [u.to_dict() for u in self.units]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Systemd":
        return cls(units=[Unit.from_dict(u) for u in data.get("units", [])])


@dataclass
class PasswdUser:
    name: str
    ssh_authorized_keys: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.ssh_authorized_keys:
            result["sshAuthorizedKeys"] = list(self.ssh_authorized_keys)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PasswdUser":
        return cls(
            name=data["name"],
            ssh_authorized_keys=list(data.get("sshAuthorizedKeys", [])),
        )


@dataclass
class Passwd:
    users: list[PasswdUser] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.users:
            return {}
        return {"users": [u.to_dict() for u in self.users]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Passwd":
        return cls(users=[PasswdUser.from_dict(u) for u in data.get("users", [])])


@dataclass
class Config:
    """A complete Ignition config."""

    ignition: Ignition = field(default_factory=Ignition)
    passwd: Passwd = field(default_factory=Passwd)
    storage: Storage = field(default_factory=Storage)
    systemd: Systemd = field(default_factory=Systemd)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ignition": self.ignition.to_dict(),
            "passwd": self.passwd.to_dict(),
            "storage": self.storage.to_dict(),
            "systemd": self.systemd.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        return cls(
            ignition=Ignition.from_dict(data["ignition"]),
            passwd=Passwd.from_dict(data.get("passwd", {})),
            storage=Storage.from_dict(data.get("storage", {})),
            systemd=Systemd.from_dict(data.get("systemd", {})),
        )


def file_from_bytes(path: str, user: str, mode: int, data: bytes) -> StorageFile:
    return StorageFile(path=path, user=user, mode=mode, source=encode_data_url(data))


def files_from_asset(root: str, user: str, mode: int, asset: WritableAsset) -> list[StorageFile]:
    """Place every file of an asset below a root directory on the node."""
    return [
        file_from_bytes(f"{root.rstrip('/')}/{file.filename}", user, mode, file.data)
        for file in asset.files()
    ]


def dumps(config: Config) -> bytes:
    """Serialize a config to compact JSON."""
    return json.dumps(config.to_dict(), separators=(",", ":")).encode("utf-8")


def loads(data: bytes) -> Config:
    """Parse a serialized config.

    Raises:
        LoadError: If the data is not a well-formed Ignition config.
    """
    try:
        document = json.loads(data)
        if not isinstance(document, dict):
            raise ValueError(f"expected a JSON object, got {type(document).__name__}")
        return Config.from_dict(document)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise LoadError(f"failed to unmarshal Ignition config: {e}") from e
