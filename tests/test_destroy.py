import json
import logging

import pytest

from igniter.destroy.baremetal import ClusterUninstaller
from igniter.destroy.destroyer import default_destroyer_registry, destroyer_from_directory, new_destroyer
from igniter.destroy.providers import Destroyer, DestroyerRegistry
from igniter.errors import DependencyError, DestroyerNotRegistered, PlatformError
from igniter.metadata import METADATA_FILENAME, ClusterMetadata


class RecordingDestroyer(Destroyer):
    def __init__(self, platform, logger, metadata):
        self.platform = platform
        self.logger = logger
        self.metadata = metadata
        self.ran = False

    def run(self) -> None:
        self.ran = True


@pytest.fixture
def registry():
    registry = DestroyerRegistry()

    @registry.provides("openstack")
    def make_openstack(logger, metadata) -> Destroyer:
        return RecordingDestroyer("openstack", logger, metadata)

    @registry.provides("aws")
    def make_aws(logger, metadata) -> Destroyer:
        return RecordingDestroyer("aws", logger, metadata)

    return registry


def test_dispatches_to_populated_platform(registry):
    metadata = ClusterMetadata("test", "1234", openstack={"cloud": "c"})
    logger = logging.getLogger("test.destroy")

    destroyer = new_destroyer(metadata, registry, logger)
    destroyer.run()

    assert destroyer.platform == "openstack"
    assert destroyer.metadata is metadata
    assert destroyer.logger is logger
    assert destroyer.ran


def test_no_platform_configured(registry):
    with pytest.raises(PlatformError, match="no platform configured in metadata"):
        new_destroyer(ClusterMetadata("test", "1234"), registry)


def test_unregistered_platform(registry):
    metadata = ClusterMetadata("test", "1234", libvirt={})

    with pytest.raises(DestroyerNotRegistered, match="no destroyers registered for 'libvirt'"):
        new_destroyer(metadata, registry)


def test_duplicate_platform_registration(registry):
    with pytest.raises(DependencyError, match="Duplicate destroyer registration"):
        registry.register("aws", lambda logger, metadata: None)


def test_registry_lists_platforms(registry):
    assert registry.platforms() == ["aws", "openstack"]
    assert registry.get("gcp") is None


def test_default_registry_destroys_bare_metal(tmp_path, caplog):
    (tmp_path / METADATA_FILENAME).write_text(
        json.dumps({"clusterName": "test", "clusterID": "1234", "baremetal": {}})
    )

    with caplog.at_level(logging.DEBUG, logger="test.baremetal"):
        destroyer = destroyer_from_directory(
            tmp_path, default_destroyer_registry(), logging.getLogger("test.baremetal")
        )
        destroyer.run()

    assert isinstance(destroyer, ClusterUninstaller)
    assert "Deleting bare metal resources" in caplog.text
