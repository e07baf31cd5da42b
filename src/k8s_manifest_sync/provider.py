"""Resource operations exposed to the state-tracking layer."""

from __future__ import annotations

import logging
from pathlib import Path

from .kubectl import Kubectl
from .reconciler import Reconciliation, evaluate

logger = logging.getLogger(__name__)


class ManifestProvider:
    """Create, refresh and destroy a manifest directory as one tracked resource."""

    def __init__(self, client: Kubectl):
        self.client = client

    def create_or_update(self, manifest_dir: Path) -> Reconciliation:
        """Apply a directory, then fingerprint what is live."""
        logger.info("Applying %s", manifest_dir)
        self.client.apply(manifest_dir)
        logger.info("Applied %s", manifest_dir)
        return evaluate("", manifest_dir, self.client.query)

    def refresh(self, manifest_dir: Path, previous: str) -> Reconciliation:
        """Fingerprint a directory without applying it."""
        logger.info("Refreshing %s", manifest_dir)
        return evaluate(previous, manifest_dir, self.client.query)

    def destroy(self, manifest_dir: Path) -> None:
        """Delete the resources described by a directory."""
        logger.info("Deleting %s", manifest_dir)
        self.client.delete(manifest_dir)
        logger.info("Deleted %s", manifest_dir)
