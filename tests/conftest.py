from pathlib import Path
from typing import Optional

import pytest

from igniter.asset import Asset, File, WritableAsset
from igniter.installconfig import INSTALL_CONFIG_FILENAME

CALLS: list[str] = []

INSTALL_CONFIG_YAML = b"""\
apiVersion: v1
baseDomain: example.com
metadata:
  name: test
controlPlane:
  replicas: 3
pullSecret: '{"auths": {}}'
sshKey: ssh-ed25519 AAAA test@example.com
"""


class FakeFetcher:
    def __init__(self, files: Optional[dict[str, bytes]] = None, broken: Optional[set[str]] = None):
        self.files = files or {}
        self.broken = broken or set()
        self.fetched: list[str] = []

    def fetch_by_name(self, name: str) -> File:
        self.fetched.append(name)
        if name in self.broken:
            raise PermissionError(f"permission denied: {name}")
        if name not in self.files:
            raise FileNotFoundError(name)
        return File(name, self.files[name])

    def fetch_by_pattern(self, pattern: str) -> list[File]:
        return []


class RecordingAsset(WritableAsset):
    """Writes a single text file naming itself and the assets it saw."""

    def __init__(self):
        self.file: Optional[File] = None

    def name(self) -> str:
        return type(self).__name__

    def dependencies(self) -> list[type[Asset]]:
        return []

    def filename(self) -> str:
        return f"{type(self).__name__.lower()}.txt"

    def generate(self, parents) -> None:
        CALLS.append(f"generate {self.name()}")
        seen = ",".join(sorted(t.__name__ for t in parents))
        self.file = File(self.filename(), f"{self.name()}:{seen}".encode())

    def files(self) -> list[File]:
        return [self.file] if self.file else []

    def load(self, fetcher) -> bool:
        CALLS.append(f"load {self.name()}")
        try:
            self.file = fetcher.fetch_by_name(self.filename())
        except FileNotFoundError:
            return False
        return True


class Leaf(RecordingAsset):
    pass


class Middle(RecordingAsset):
    def dependencies(self):
        return [Leaf]


class Top(RecordingAsset):
    def dependencies(self):
        return [Leaf, Middle]


class InMemoryAsset(Asset):
    """An asset that is never persisted."""

    def name(self) -> str:
        return "In Memory"

    def dependencies(self):
        return [Leaf]

    def generate(self, parents) -> None:
        CALLS.append("generate InMemoryAsset")
        self.leaf = parents[Leaf]


@pytest.fixture(autouse=True)
def calls():
    CALLS.clear()
    yield CALLS
    CALLS.clear()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "cluster"
    directory.mkdir()
    (directory / INSTALL_CONFIG_FILENAME).write_bytes(INSTALL_CONFIG_YAML)
    return directory


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A small bootstrap data directory with files, units and drop-ins."""
    root = tmp_path / "data"
    files = root / "bootstrap" / "files"
    (files / "usr" / "local" / "bin").mkdir(parents=True)
    (files / "etc").mkdir(parents=True)
    (files / "usr" / "local" / "bin" / "start.sh.template").write_text(
        "#!/bin/sh\nexec run --image={{.ReleaseImage}} --etcd={{.EtcdCluster}}\n"
    )
    (files / "etc" / "motd").write_text("bootstrap node\n")
    (files / "etc" / "pull-secret.template").write_text("{{ .PullSecret }}")

    units = root / "bootstrap" / "systemd" / "units"
    (units / "kubelet.service.d").mkdir(parents=True)
    (units / "kubelet.service.d" / "10-image.conf.template").write_text(
        "[Service]\nEnvironment=IMAGE={{.ReleaseImage}}\n"
    )
    (units / "kubelet.service.d" / "20-restart.conf").write_text("[Service]\nRestart=always\n")
    (units / "bootkube.service").write_text("[Service]\nExecStart=/usr/local/bin/start.sh\n")
    (units / "progress.service").write_text("[Service]\nExecStart=/bin/true\n")
    (units / "internal").mkdir()
    (units / "internal" / "ignored.conf").write_text("ignored")
    return root
