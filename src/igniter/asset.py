"""The asset contract.

An asset is a typed node in the generation graph. Its identity is its type:
the store holds at most one instance per asset type, constructed with no
arguments and then either loaded from a previous run's output or generated
from the asset's resolved dependencies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from igniter.store import Parents

__all__ = ["File", "FileFetcher", "Asset", "WritableAsset"]


@dataclass(frozen=True)
class File:
    """A file produced by an asset.

    Attributes:
        filename: Path of the file relative to the output directory.
        data: The raw file contents.
    """

    filename: str
    data: bytes


class FileFetcher(Protocol):
    """Reads files persisted by a previous run.

    Implementations raise :class:`FileNotFoundError` when the named file does
    not exist, and any other :class:`OSError` for failures which must not be
    mistaken for absence.
    """

    def fetch_by_name(self, name: str) -> File:
        ...

    def fetch_by_pattern(self, pattern: str) -> list[File]:
        ...


class Asset(ABC):
    """A node in the asset graph."""

    @abstractmethod
    def name(self) -> str:
        """Return the human-friendly name of the asset."""

    @abstractmethod
    def dependencies(self) -> list[type["Asset"]]:
        """Return the asset types which must be resolved before this one."""

    @abstractmethod
    def generate(self, parents: "Parents") -> None:
        """Populate this asset from its resolved dependencies.

        Args:
            parents: The store of resolved assets, containing at least every
                type named by :meth:`dependencies`.
        """


class WritableAsset(Asset):
    """An asset that produces files and can be reloaded from them."""

    @abstractmethod
    def files(self) -> list[File]:
        """Return the files generated by the asset."""

    @abstractmethod
    def load(self, fetcher: FileFetcher) -> bool:
        """Populate this asset from a previous run's files.

        Returns:
            True if the persisted form was found and adopted, False if it
            does not exist.

        Raises:
            LoadError: If the persisted form exists but cannot be parsed.
            OSError: If reading fails for any reason other than absence.
        """
