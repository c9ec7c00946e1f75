"""
The bootstrap Ignition config asset.

:class:`Bootstrap` is the terminal asset of the generation graph. It renders
the packaged bootstrap template tree and systemd units, collects the files
of its upstream assets below ``/opt/openshift``, authorizes the install
config's SSH key for the ``core`` user, and serializes the result to
``bootstrap.ign``.

The upstream assets are declared as data by a :class:`BootstrapLayout`, which
sorts them into categories with fixed ownership and permissions. Subclasses
override ``layout`` to add their own certificate and kubeconfig assets.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional, Sequence

from igniter import ignition
from igniter.asset import File, FileFetcher, WritableAsset
from igniter.content import EtcdCAConfigMap, OpenshiftConfigSecretEtcdMetricClient
from igniter.errors import DependencyError, PathCollisionError
from igniter.ignition import Config, Dropin, PasswdUser, StorageFile, Unit
from igniter.installconfig import ClusterConfig, InstallConfig
from igniter.store import Parents
from igniter.templates import decode_text, render, walk_tree

__all__ = [
    "ROOT_DIR",
    "BOOTSTRAP_IGN_FILENAME",
    "DEFAULT_RELEASE_IMAGE",
    "RELEASE_IMAGE_OVERRIDE_ENV",
    "ENABLED_UNITS",
    "TemplateData",
    "BootstrapLayout",
    "Bootstrap",
    "etcd_endpoints",
    "release_image",
    "template_data",
    "check_path_collisions",
]

logger = logging.getLogger(__name__)

ROOT_DIR = "/opt/openshift"
BOOTSTRAP_IGN_FILENAME = "bootstrap.ign"
ETCD_CERT_SIGNER_IMAGE = (
    "quay.io/coreos/kube-etcd-signer-server:678cc8e6841e2121ebfdb6e2db568fce290b67d6"
)
IGNITION_USER = "core"
JOURNAL_USER = "systemd-journal-gateway"
DEFAULT_RELEASE_IMAGE = "registry.svc.ci.openshift.org/openshift/origin-release:v4.0"
RELEASE_IMAGE_OVERRIDE_ENV = "OPENSHIFT_INSTALL_RELEASE_IMAGE_OVERRIDE"
DATA_DIR = Path(__file__).parent / "data"
DROPIN_SUFFIX = ".d"

ENABLED_UNITS = frozenset(
    {
        "progress.service",
        "kubelet.service",
        "keepalived.service",
        "systemd-journal-gatewayd.socket",
    }
)


@dataclass(frozen=True)
class TemplateData:
    """Values substituted into bootstrap templates."""

    etcd_cert_signer_image: str
    etcd_cluster: str
    pull_secret: str
    release_image: str

    def as_context(self) -> dict[str, str]:
        """Return the values under the names the templates refer to."""
        return {
            "EtcdCertSignerImage": self.etcd_cert_signer_image,
            "EtcdCluster": self.etcd_cluster,
            "PullSecret": self.pull_secret,
            "ReleaseImage": self.release_image,
        }


def etcd_endpoints(cluster_domain: str, replicas: int) -> list[str]:
    """Return the client URL of each etcd member.

    Example:
        >>> etcd_endpoints("example.com", 2)
        ['https://etcd-0.example.com:2379', 'https://etcd-1.example.com:2379']
    """
    return [f"https://etcd-{i}.{cluster_domain}:2379" for i in range(replicas)]


def release_image(environ: Optional[Mapping] = None) -> str:
    """Return the release image, honouring the override environment variable."""
    environ = os.environ if environ is None else environ
    override = environ.get(RELEASE_IMAGE_OVERRIDE_ENV)
    if override:
        logger.warning("Found override for ReleaseImage. Please be warned, this is not advised")
        return override
    return DEFAULT_RELEASE_IMAGE


def template_data(cluster: ClusterConfig, environ: Optional[Mapping] = None) -> TemplateData:
    return TemplateData(
        etcd_cert_signer_image=ETCD_CERT_SIGNER_IMAGE,
        etcd_cluster=",".join(
            etcd_endpoints(cluster.cluster_domain(), cluster.control_plane_replicas)
        ),
        pull_secret=cluster.pull_secret,
        release_image=release_image(environ),
    )


@dataclass(frozen=True)
class BootstrapLayout:
    """The upstream assets whose files are placed on the bootstrap node.

    Attributes:
        manifests: Assets producing manifests or machine configs, installed
            world readable.
        credentials: Assets producing keys, certificates or kubeconfigs,
            installed readable by root only.
        root_ca: The root CA asset, which must provide a ``cert_file()``
            method; only its certificate is installed, world readable.
        journal: The journal gateway's certificate asset, owned by the journal
            gateway user.
    """

    manifests: Sequence[type[WritableAsset]] = ()
    credentials: Sequence[type[WritableAsset]] = ()
    root_ca: Optional[type[WritableAsset]] = None
    journal: Optional[type[WritableAsset]] = None

    def __post_init__(self):
        if self.root_ca is not None and not callable(getattr(self.root_ca, "cert_file", None)):
            raise DependencyError(
                f"root CA asset {self.root_ca.__name__} does not provide cert_file()"
            )

    def asset_types(self) -> list[type[WritableAsset]]:
        types = [*self.manifests, *self.credentials]
        types.extend(t for t in (self.root_ca, self.journal) if t is not None)
        return types


class Bootstrap(WritableAsset):
    """The Ignition config for the bootstrap node."""

    layout: ClassVar[BootstrapLayout] = BootstrapLayout(
        manifests=(EtcdCAConfigMap, OpenshiftConfigSecretEtcdMetricClient),
    )
    data_dir: ClassVar[Path] = DATA_DIR

    def __init__(self):
        self.config: Optional[Config] = None
        self.file: Optional[File] = None

    def name(self) -> str:
        return "Bootstrap Ignition Config"

    def dependencies(self) -> list[type]:
        return [InstallConfig, *self.layout.asset_types()]

    def generate(self, parents: Parents) -> None:
        install_config = parents[InstallConfig]
        context = template_data(install_config.config).as_context()

        config = Config()
        config.storage.files.extend(self._storage_files(context))
        config.systemd.units.extend(self._systemd_units(context))
        config.storage.files.extend(self._parent_files(parents))
        config.passwd.users.append(
            PasswdUser(IGNITION_USER, [install_config.config.ssh_key])
        )
        check_path_collisions(config.storage.files)

        self.config = config
        self.file = File(BOOTSTRAP_IGN_FILENAME, ignition.dumps(config))

    def files(self) -> list[File]:
        return [self.file] if self.file is not None else []

    def load(self, fetcher: FileFetcher) -> bool:
        try:
            file = fetcher.fetch_by_name(BOOTSTRAP_IGN_FILENAME)
        except FileNotFoundError:
            return False

        self.config, self.file = ignition.loads(file.data), file
        return True

    def _storage_files(self, context: dict[str, str]) -> list[StorageFile]:
        files = []
        for tree_file in walk_tree(self.data_dir / "bootstrap" / "files", "/", context):
            storage_file = ignition.file_from_bytes(tree_file.path, "root", tree_file.mode, tree_file.data)
            storage_file.append = tree_file.append
            files.append(storage_file)
        return files

    def _systemd_units(self, context: dict[str, str]) -> list[Unit]:
        units = []
        for child in sorted((self.data_dir / "bootstrap" / "systemd" / "units").iterdir()):
            if child.is_dir():
                if not child.name.endswith(DROPIN_SUFFIX):
                    logger.debug("Ignoring internal asset directory %r while looking for systemd drop-ins", child.name)
                    continue
                dropins = []
                for dropin_file in sorted(child.iterdir()):
                    name, contents = render(dropin_file.name, dropin_file.read_bytes(), context)
                    dropins.append(Dropin(name, decode_text(f"drop-in {child.name}/{name}", contents)))
                unit = Unit(child.name[: -len(DROPIN_SUFFIX)], dropins=dropins)
            else:
                name, contents = render(child.name, child.read_bytes(), context)
                unit = Unit(name, contents=decode_text(f"unit {name}", contents))

            if unit.name in ENABLED_UNITS:
                unit.enabled = True
            units.append(unit)
        return units

    def _parent_files(self, parents: Parents) -> list[StorageFile]:
        files = []
        for asset_type in self.layout.manifests:
            files.extend(ignition.files_from_asset(ROOT_DIR, "root", 0o644, parents[asset_type]))
        for asset_type in self.layout.credentials:
            files.extend(ignition.files_from_asset(ROOT_DIR, "root", 0o600, parents[asset_type]))

        if self.layout.root_ca is not None:
            cert = parents[self.layout.root_ca].cert_file()
            files.append(ignition.file_from_bytes(f"{ROOT_DIR}/{cert.filename}", "root", 0o644, cert.data))

        if self.layout.journal is not None:
            files.extend(ignition.files_from_asset(ROOT_DIR, JOURNAL_USER, 0o600, parents[self.layout.journal]))
        return files


def check_path_collisions(files: Sequence[StorageFile]) -> None:
    """Reject files claiming a path already claimed by an earlier file.

    A later file may share a path only if it appends to it.

    Raises:
        PathCollisionError: If a path is claimed twice without appending.
    """
    seen: set[str] = set()
    for storage_file in files:
        if storage_file.path in seen and not storage_file.append:
            raise PathCollisionError(f"more than one file targets {storage_file.path}")
        seen.add(storage_file.path)
