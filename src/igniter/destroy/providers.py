"""The destroyer contract and the registry of destroyers by platform."""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from igniter.errors import DependencyError
from igniter.metadata import ClusterMetadata

__all__ = ["Destroyer", "DestroyerConstructor", "DestroyerRegistry"]


class Destroyer(ABC):
    """Tears down every resource provisioned for a cluster."""

    @abstractmethod
    def run(self) -> None:
        """Destroy the cluster's resources, raising on failure."""


DestroyerConstructor = Callable[[logging.Logger, ClusterMetadata], Destroyer]
"""Builds the destroyer for one platform from the cluster's metadata."""


class DestroyerRegistry:
    """Registry of destroyer constructors, keyed by platform name.

    Registries are populated once by the caller that assembles the
    application, then only read.

    Example:
        >>> registry = DestroyerRegistry()
        >>> @registry.provides("baremetal")
        ... def make_baremetal(logger, metadata) -> Destroyer:
        ...     return ClusterUninstaller(logger)
    """

    def __init__(self):
        self._constructors: dict[str, DestroyerConstructor] = {}

    def register(self, platform: str, constructor: DestroyerConstructor) -> None:
        """Register the destroyer constructor for a platform.

        Raises:
            DependencyError: If the platform already has a constructor.
        """
        if platform in self._constructors:
            raise DependencyError(f"Duplicate destroyer registration for platform {platform!r}")
        self._constructors[platform] = constructor

    def provides(self, platform: str) -> Callable:
        """Decorator registering a constructor for a platform."""

        def decorator(constructor: DestroyerConstructor) -> DestroyerConstructor:
            self.register(platform, constructor)
            return constructor

        return decorator

    def get(self, platform: str) -> Optional[DestroyerConstructor]:
        return self._constructors.get(platform)

    def platforms(self) -> list[str]:
        return sorted(self._constructors)
