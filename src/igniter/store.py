"""
Memoized, dependency-ordered resolution of assets.

The :class:`AssetStore` resolves an asset type by first resolving every type
it depends on, then either loading the asset from a previous run's files or
generating it from its dependencies. Each type is resolved at most once per
store; repeated requests return the same instance.

Resolution is single-threaded. The store is mutated only by the resolving
call chain.
"""

import logging
from typing import Iterator, Optional

from igniter.asset import Asset, FileFetcher, WritableAsset
from igniter.errors import AssetError, CycleDetected
from igniter.registry import AssetRegistry

__all__ = ["Parents", "AssetStore"]

logger = logging.getLogger(__name__)


class Parents:
    """A container of resolved assets keyed by asset type.

    Example:
        >>> parents = Parents()
        >>> parents.add(install_config)
        >>> parents[InstallConfig] is install_config
        True
    """

    def __init__(self):
        self._assets: dict[type[Asset], Asset] = {}

    def add(self, *assets: Asset) -> None:
        for asset in assets:
            self._assets[type(asset)] = asset

    def get(self, asset_type: type[Asset]) -> Asset:
        """Return the resolved asset of the given type.

        Raises:
            KeyError: If no asset of that type has been resolved.
        """
        return self._assets[asset_type]

    def __getitem__(self, asset_type: type[Asset]) -> Asset:
        return self.get(asset_type)

    def __contains__(self, asset_type: type[Asset]) -> bool:
        return asset_type in self._assets

    def __iter__(self) -> Iterator[type[Asset]]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)


class AssetStore:
    """Resolve assets from a fetcher, generating whatever is not persisted."""

    def __init__(self, fetcher: FileFetcher, registry: Optional[AssetRegistry] = None):
        self._fetcher = fetcher
        self._registry = registry
        self._parents = Parents()
        self._in_progress: list[type[Asset]] = []

    @property
    def parents(self) -> Parents:
        return self._parents

    def resolve(self, root: type[Asset]) -> Parents:
        """Resolve a root asset and its transitive dependencies.

        Returns:
            The store's :class:`Parents`, containing the root and every asset
            it depends on.
        """
        self.fetch(root)
        return self._parents

    def fetch(self, asset_type: type[Asset]) -> Asset:
        """Return the resolved asset of the given type, resolving it if needed.

        Raises:
            CycleDetected: If the type is requested while it is being resolved.
            DependencyError: If the store has a registry and the type is not
                registered in it.
            LoadError: If the asset's persisted form exists but is malformed.

        Errors raised while loading or generating an asset are re-raised with
        the same type and a message naming the asset.
        """
        if asset_type in self._parents:
            logger.debug("Reusing %s", asset_type.__name__)
            return self._parents[asset_type]

        if asset_type in self._in_progress:
            chain = " -> ".join(t.__name__ for t in self._in_progress + [asset_type])
            raise CycleDetected(f"Dependency cycle detected: {chain}")

        if self._registry is not None:
            self._registry.provider_for(asset_type)

        self._in_progress.append(asset_type)
        try:
            asset = asset_type()
            logger.debug("Fetching %s", asset.name())
            for dependency in asset.dependencies():
                self.fetch(dependency)

            if not self._load(asset):
                self._generate(asset)
        finally:
            self._in_progress.pop()

        self._parents.add(asset)
        return asset

    def _load(self, asset: Asset) -> bool:
        if not isinstance(asset, WritableAsset):
            return False
        try:
            found = asset.load(self._fetcher)
        except (AssetError, OSError) as e:
            raise _with_context(e, f"failed to load asset {asset.name()!r}") from e
        if found:
            logger.debug("Loaded %s from disk", asset.name())
        return found

    def _generate(self, asset: Asset) -> None:
        logger.debug("Generating %s", asset.name())
        try:
            asset.generate(self._parents)
        except (AssetError, OSError) as e:
            raise _with_context(e, f"failed to generate asset {asset.name()!r}") from e


def _with_context(error: Exception, context: str) -> Exception:
    """Return an error of the same type whose message is prefixed with context."""
    return type(error)(f"{context}: {error}")
