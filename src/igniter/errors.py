__all__ = [
    "AssetError",
    "DependencyError",
    "CycleDetected",
    "LoadError",
    "TemplateError",
    "PathCollisionError",
    "PlatformError",
    "DestroyerNotRegistered",
]


class AssetError(Exception):
    """Base class for errors raised while resolving or composing assets."""

    pass


class DependencyError(AssetError):
    """Raised when an asset's dependency cannot be resolved or is misdeclared."""

    pass


class CycleDetected(DependencyError):
    """Raised when an asset type is requested while it is still being resolved."""

    pass


class LoadError(AssetError):
    """Raised when a persisted asset exists but cannot be parsed."""

    pass


class TemplateError(AssetError):
    """Raised when a template cannot be parsed or executed."""

    pass


class PathCollisionError(AssetError):
    """Raised when two files claim the same target path without appending."""

    pass


class PlatformError(AssetError):
    """Raised when cluster metadata does not name exactly one platform."""

    pass


class DestroyerNotRegistered(PlatformError):
    """Raised when no destroyer is registered for the configured platform."""

    pass
