"""Metadata describing a created cluster, as persisted in ``metadata.json``."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from igniter.errors import LoadError, PlatformError

__all__ = ["METADATA_FILENAME", "PLATFORMS", "ClusterMetadata", "load_metadata"]

METADATA_FILENAME = "metadata.json"

PLATFORMS = ("aws", "libvirt", "openstack", "baremetal")
"""Platform names, in the order they are checked."""


@dataclass(frozen=True)
class ClusterMetadata:
    """Information about a cluster that was created by the installer.

    Exactly one of the platform attributes is expected to be populated; its
    name identifies the platform the cluster runs on.
    """

    cluster_name: str
    cluster_id: str
    aws: Optional[dict[str, Any]] = None
    libvirt: Optional[dict[str, Any]] = None
    openstack: Optional[dict[str, Any]] = None
    baremetal: Optional[dict[str, Any]] = None

    def __post_init__(self):
        populated = self.populated_platforms()
        if len(populated) > 1:
            raise PlatformError(f"more than one platform configured in metadata: {populated}")

    def populated_platforms(self) -> list[str]:
        return [platform for platform in PLATFORMS if getattr(self, platform) is not None]

    def platform(self) -> str:
        """Return the name of the populated platform, or "" if there is none."""
        populated = self.populated_platforms()
        return populated[0] if populated else ""

    def platform_metadata(self) -> Optional[dict[str, Any]]:
        platform = self.platform()
        return getattr(self, platform) if platform else None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"clusterName": self.cluster_name, "clusterID": self.cluster_id}
        for platform in PLATFORMS:
            value = getattr(self, platform)
            if value is not None:
                result[platform] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClusterMetadata":
        return cls(
            cluster_name=data.get("clusterName", ""),
            cluster_id=data.get("clusterID", ""),
            **{p: data[p] for p in PLATFORMS if data.get(p) is not None},
        )


def load_metadata(directory: Union[str, os.PathLike]) -> ClusterMetadata:
    """Read the cluster metadata from an output directory.

    Raises:
        FileNotFoundError: If the directory holds no metadata file.
        LoadError: If the metadata file cannot be parsed.
        PlatformError: If the metadata names more than one platform.
    """
    path = Path(directory) / METADATA_FILENAME
    try:
        data = json.loads(path.read_bytes())
    except ValueError as e:
        raise LoadError(f"failed to parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise LoadError(f"failed to parse {path}: expected a JSON object")
    return ClusterMetadata.from_dict(data)
