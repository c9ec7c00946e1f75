"""The install configuration asset."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from igniter.asset import File, FileFetcher, WritableAsset
from igniter.errors import AssetError, LoadError

__all__ = ["INSTALL_CONFIG_FILENAME", "ClusterConfig", "InstallConfig"]

INSTALL_CONFIG_FILENAME = "install-config.yaml"


@dataclass(frozen=True)
class ClusterConfig:
    """User-supplied description of the cluster.

    Attributes:
        cluster_name: Name of the cluster, the first label of its domain.
        base_domain: Domain the cluster domain is created under.
        pull_secret: Credentials for pulling release images.
        ssh_key: Public key authorized for the ``core`` user.
        control_plane_replicas: Number of control plane machines.
    """

    cluster_name: str
    base_domain: str
    pull_secret: str
    ssh_key: str
    control_plane_replicas: int = 3

    def cluster_domain(self) -> str:
        return f"{self.cluster_name}.{self.base_domain}"

    @classmethod
    def from_dict(cls, data: Mapping) -> "ClusterConfig":
        metadata = data.get("metadata") or {}
        control_plane = data.get("controlPlane") or {}
        replicas = control_plane.get("replicas")
        try:
            return cls(
                cluster_name=metadata["name"],
                base_domain=data["baseDomain"],
                pull_secret=data.get("pullSecret", ""),
                ssh_key=data.get("sshKey", ""),
                control_plane_replicas=3 if replicas is None else int(replicas),
            )
        except KeyError as e:
            raise ValueError(f"missing required field {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "baseDomain": self.base_domain,
            "metadata": {"name": self.cluster_name},
            "controlPlane": {"replicas": self.control_plane_replicas},
            "pullSecret": self.pull_secret,
            "sshKey": self.ssh_key,
        }


class InstallConfig(WritableAsset):
    """The cluster's install configuration, read from ``install-config.yaml``.

    Prompting for missing configuration is not supported, so the file must
    exist in the output directory before generation.
    """

    def __init__(self):
        self.config: Optional[ClusterConfig] = None
        self.file: Optional[File] = None

    def name(self) -> str:
        return "Install Config"

    def dependencies(self) -> list[type]:
        return []

    def generate(self, parents) -> None:
        raise AssetError(f"{INSTALL_CONFIG_FILENAME} not found in the output directory")

    def files(self) -> list[File]:
        return [self.file] if self.file is not None else []

    def load(self, fetcher: FileFetcher) -> bool:
        try:
            file = fetcher.fetch_by_name(INSTALL_CONFIG_FILENAME)
        except FileNotFoundError:
            return False

        try:
            payload = yaml.safe_load(file.data)
            if not isinstance(payload, Mapping):
                raise ValueError("install config must be a YAML mapping")
            config = ClusterConfig.from_dict(payload)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            raise LoadError(f"failed to load {INSTALL_CONFIG_FILENAME}: {e}") from e

        self.file, self.config = file, config
        return True
