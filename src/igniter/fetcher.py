"""Reading and writing asset files in an output directory."""

import logging
import os
from pathlib import Path
from typing import Union

from igniter.asset import File, WritableAsset

__all__ = ["DirectoryFetcher", "persist_to_directory"]

logger = logging.getLogger(__name__)


class DirectoryFetcher:
    """Fetch files persisted under a directory by a previous run.

    Example:
        >>> fetcher = DirectoryFetcher("./cluster")
        >>> fetcher.fetch_by_name("bootstrap.ign").filename
        'bootstrap.ign'
    """

    def __init__(self, directory: Union[str, os.PathLike]):
        self._directory = Path(directory)

    def fetch_by_name(self, name: str) -> File:
        """Read a single file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = self._directory / name
        return File(name, path.read_bytes())

    def fetch_by_pattern(self, pattern: str) -> list[File]:
        """Read every file matching a glob pattern, ordered by filename."""
        return [
            File(path.relative_to(self._directory).as_posix(), path.read_bytes())
            for path in sorted(self._directory.glob(pattern))
            if path.is_file()
        ]


def persist_to_directory(asset: WritableAsset, directory: Union[str, os.PathLike]) -> None:
    """Write every file of a writable asset below the given directory."""
    for file in asset.files():
        path = Path(directory) / file.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(file.data)
        logger.debug("Wrote %s for %s", path, asset.name())
