"""Destroyer for bare metal clusters."""

import logging

from igniter.destroy.providers import Destroyer
from igniter.metadata import ClusterMetadata

__all__ = ["ClusterUninstaller", "new"]


class ClusterUninstaller(Destroyer):
    """Uninstalls a bare metal cluster.

    Bare metal hosts are not deprovisioned by the installer, so there is
    nothing to delete.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def run(self) -> None:
        self.logger.debug("Deleting bare metal resources")


def new(logger: logging.Logger, metadata: ClusterMetadata) -> Destroyer:
    return ClusterUninstaller(logger)
