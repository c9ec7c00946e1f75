"""Registration and introspection utilities for asset types."""

import inspect
from dataclasses import dataclass
from typing import Callable, Optional

from igniter.asset import Asset
from igniter.errors import DependencyError
from igniter.graph import DependencyGraph

__all__ = [
    "AssetProvider",
    "AssetRegistry",
]


@dataclass(frozen=True)
class AssetProvider:
    """Encapsulates metadata about a registered asset type.

    AssetProvider instances record what an asset type depends on, as
    declared by a zero-value instance of the type. The dependency list is
    captured once at registration, so the whole graph can be validated
    before anything is generated.

    Attributes:
        name: Human-friendly name of the asset.
        asset_type: The registered asset class.
        dependencies: The asset types the asset declares as dependencies.

    Example:
        >>> @registry.provides()
        ... class Kubeconfig(WritableAsset):
        ...     def dependencies(self):
        ...         return [InstallConfig, RootCA]
        >>>
        >>> # Creates AssetProvider with:
        >>> # - name: Kubeconfig().name()
        >>> # - asset_type: Kubeconfig
        >>> # - dependencies: [InstallConfig, RootCA]
    """

    name: str
    asset_type: type[Asset]
    dependencies: list[type[Asset]]


class AssetRegistry:
    """Registry of asset types, keyed by type identity."""

    def __init__(self):
        self._providers: dict[type[Asset], AssetProvider] = {}

    def register(self, asset_type: type[Asset], name: Optional[str] = None) -> AssetProvider:
        """Register an asset type explicitly.

        Args:
            asset_type: The asset class to register.
            name: Optional name overriding the asset's own name.

        Raises:
            DependencyError: If the type is not an asset class or is already
                registered.
        """
        if not (inspect.isclass(asset_type) and issubclass(asset_type, Asset)):
            raise DependencyError(f"{asset_type} is not an asset class")
        if asset_type in self._providers:
            raise DependencyError(f"Duplicate registration of asset {asset_type.__name__}")

        prototype = asset_type()
        provider = AssetProvider(
            name or prototype.name(),
            asset_type,
            list(prototype.dependencies()),
        )
        self._providers[asset_type] = provider
        return provider

    def provides(self, name: Optional[str] = None) -> Callable:
        """Decorator to register an asset class.

        Example:
            @registry.provides()
            class RootCA(WritableAsset):
                ...
        """

        def decorator(cls):
            self.register(cls, name)
            return cls

        return decorator

    def registered_providers(self) -> list[AssetProvider]:
        """Return providers in registration order."""
        return list(self._providers.values())

    def provider_for(self, asset_type: type[Asset]) -> AssetProvider:
        """Look up the provider of an asset type.

        Raises:
            DependencyError: If the type is not registered.
        """
        provider = self._providers.get(asset_type)
        if provider is None:
            raise DependencyError(f"Asset {asset_type.__name__} is not registered")
        return provider

    def __contains__(self, asset_type: type[Asset]) -> bool:
        return asset_type in self._providers

    def validate(self) -> None:
        """Check that the registered graph is complete and acyclic.

        Raises:
            DependencyError: If a declared dependency is not registered.
            CycleDetected: If the dependency declarations contain a cycle.
        """
        missing = {
            f"{provider.asset_type.__name__} -> {dependency.__name__}"
            for provider in self._providers.values()
            for dependency in provider.dependencies
            if dependency not in self._providers
        }
        if missing:
            raise DependencyError(f"Unregistered dependencies: {sorted(missing)}")

        graph = DependencyGraph()
        for provider in self._providers.values():
            graph.add_dependencies(provider.asset_type, provider.dependencies)
        list(graph.traverse())
