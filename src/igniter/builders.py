"""High level entry points for generating assets."""

import logging
import os
from typing import Optional, Union

from igniter.asset import Asset, WritableAsset
from igniter.bootstrap import Bootstrap
from igniter.content import EtcdCAConfigMap, OpenshiftConfigSecretEtcdMetricClient
from igniter.fetcher import DirectoryFetcher, persist_to_directory
from igniter.graph import make_build_plan
from igniter.installconfig import InstallConfig
from igniter.registry import AssetRegistry
from igniter.store import AssetStore, Parents

__all__ = ["default_registry", "make_bootstrap"]

logger = logging.getLogger(__name__)


def default_registry() -> AssetRegistry:
    """Return a registry holding every built-in asset type."""
    registry = AssetRegistry()
    registry.register(InstallConfig)
    registry.register(EtcdCAConfigMap)
    registry.register(OpenshiftConfigSecretEtcdMetricClient)
    registry.register(Bootstrap)
    return registry


def make_bootstrap(
    directory: Union[str, os.PathLike],
    registry: Optional[AssetRegistry] = None,
    root: type[Asset] = Bootstrap,
) -> Parents:
    """Resolve a root asset from an output directory and write its files there.

    Assets already persisted in the directory are loaded rather than
    regenerated, so running twice against the same directory reproduces the
    first run's output.

    Args:
        directory: The output directory, which must contain the install config.
        registry: The registry of asset types; defaults to
            :func:`default_registry`.
        root: The asset type to build.

    Returns:
        The resolved root and every asset it depends on.

    Raises:
        DependencyError: If the registry is incomplete.
        CycleDetected: If the registered dependencies contain a cycle.
        LoadError: If a persisted asset is malformed.

    Example:
        >>> parents = make_bootstrap("./cluster")
        >>> parents[Bootstrap].files()[0].filename
        'bootstrap.ign'
    """
    registry = registry or default_registry()
    registry.validate()
    plan = make_build_plan(registry, root)
    logger.debug("Resolving %s", [t.__name__ for t in plan.build_order])

    store = AssetStore(DirectoryFetcher(directory), registry)
    for asset_type in plan.build_order:
        store.fetch(asset_type)
    parents = store.parents

    asset = parents[root]
    if isinstance(asset, WritableAsset):
        persist_to_directory(asset, directory)
    return parents
