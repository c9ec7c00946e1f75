"""Selecting the destroyer for a cluster."""

import logging
import os
from typing import Optional, Union

from igniter.destroy import baremetal
from igniter.destroy.providers import Destroyer, DestroyerRegistry
from igniter.errors import DestroyerNotRegistered, PlatformError
from igniter.metadata import ClusterMetadata, load_metadata

__all__ = ["default_destroyer_registry", "new_destroyer", "destroyer_from_directory"]


def default_destroyer_registry() -> DestroyerRegistry:
    """Return a registry holding every built-in platform destroyer."""
    registry = DestroyerRegistry()
    registry.register("baremetal", baremetal.new)
    return registry


def new_destroyer(
    metadata: ClusterMetadata,
    registry: DestroyerRegistry,
    logger: Optional[logging.Logger] = None,
) -> Destroyer:
    """Construct the destroyer for the platform named in the metadata.

    Raises:
        PlatformError: If the metadata names no platform.
        DestroyerNotRegistered: If no destroyer is registered for the platform.
    """
    platform = metadata.platform()
    if not platform:
        raise PlatformError("no platform configured in metadata")

    constructor = registry.get(platform)
    if constructor is None:
        raise DestroyerNotRegistered(f"no destroyers registered for {platform!r}")
    return constructor(logger or logging.getLogger(__name__), metadata)


def destroyer_from_directory(
    directory: Union[str, os.PathLike],
    registry: DestroyerRegistry,
    logger: Optional[logging.Logger] = None,
) -> Destroyer:
    """Construct the destroyer for the cluster whose metadata is in a directory."""
    return new_destroyer(load_metadata(directory), registry, logger)
