"""Assets carrying unrendered manifest templates.

These assets have no dependencies. Their single file is a packaged template
copied into the output directory's ``templates`` directory, where a later run
reloads it instead of reading the packaged copy again.
"""

from pathlib import Path
from typing import ClassVar, Optional

from igniter.asset import File, FileFetcher, WritableAsset

__all__ = [
    "TEMPLATE_DIR",
    "BOOTKUBE_DATA_DIR",
    "TemplateContentAsset",
    "EtcdCAConfigMap",
    "OpenshiftConfigSecretEtcdMetricClient",
]

TEMPLATE_DIR = "templates"
BOOTKUBE_DATA_DIR = Path(__file__).parent / "data" / "manifests" / "bootkube"


class TemplateContentAsset(WritableAsset):
    """Base class for assets holding one bootkube manifest template.

    Subclasses set ``template_name`` to the file name under the packaged
    bootkube directory.
    """

    template_name: ClassVar[str]
    data_dir: ClassVar[Path] = BOOTKUBE_DATA_DIR

    def __init__(self):
        self.file: Optional[File] = None

    def name(self) -> str:
        return type(self).__name__

    def dependencies(self) -> list[type]:
        return []

    def generate(self, parents) -> None:
        data = (self.data_dir / self.template_name).read_bytes()
        self.file = File(f"{TEMPLATE_DIR}/{self.template_name}", data)

    def files(self) -> list[File]:
        return [self.file] if self.file is not None else []

    def load(self, fetcher: FileFetcher) -> bool:
        try:
            self.file = fetcher.fetch_by_name(f"{TEMPLATE_DIR}/{self.template_name}")
        except FileNotFoundError:
            return False
        return True


class EtcdCAConfigMap(TemplateContentAsset):
    """The config map carrying the etcd CA bundle."""

    template_name = "etcd-ca-bundle-configmap.yaml.template"


class OpenshiftConfigSecretEtcdMetricClient(TemplateContentAsset):
    """The secret carrying the etcd metrics client certificate."""

    template_name = "openshift-config-secret-etcd-metric-client.yaml.template"
