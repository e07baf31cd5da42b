"""Fingerprint reconciliation for manifest directories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .hashing import hash_directory, hash_string
from .prober import QueryFn, probe_identity

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Why a reconciliation produced the fingerprint it did."""

    ABSENT = "absent"  # Nothing matching the directory is live
    CHANGED = "changed"  # Stored fingerprint no longer matches
    NEW = "new"  # No stored fingerprint yet
    UNCHANGED = "unchanged"

    @property
    def keeps_tracking(self) -> bool:
        return self in (Outcome.NEW, Outcome.UNCHANGED)


@dataclass(frozen=True)
class Reconciliation:
    """Result of reconciling a directory against its stored fingerprint."""

    fingerprint: str  # "" when tracking should be dropped
    combined: str
    outcome: Outcome
    content_digest: str
    raw_identity: str


def combine_fingerprint(content_digest: str, raw_identity: str) -> str:
    """Bind the hashed directory content to the raw (unhashed) identity string."""
    return hash_string(content_digest + raw_identity)


def decide(previous: str, combined: str, raw_identity: str) -> Outcome:
    """Apply the decision rule. Order matters: absence wins over drift."""
    if raw_identity == "":
        return Outcome.ABSENT
    if previous and previous != combined:
        return Outcome.CHANGED
    if previous:
        return Outcome.UNCHANGED
    return Outcome.NEW


def evaluate(previous: str, manifest_dir: Path, query: QueryFn) -> Reconciliation:
    """
    Recompute the fingerprint of a directory and compare it with the stored one.

    The directory is hashed before the live system is queried. Errors from
    either step propagate unchanged.

    Args:
        previous: Fingerprint stored after the last reconciliation, or ""
        manifest_dir: Manifest directory
        query: Callable returning the live query response for the directory

    Returns:
        Reconciliation carrying the new fingerprint and the reason for it
    """
    content_digest = hash_directory(manifest_dir)
    raw_identity = probe_identity(manifest_dir, query)
    combined = combine_fingerprint(content_digest, raw_identity)

    outcome = decide(previous, combined, raw_identity)
    fingerprint = combined if outcome.keeps_tracking else ""
    logger.info("Reconciled %s: %s", manifest_dir, outcome.value)

    return Reconciliation(
        fingerprint=fingerprint,
        combined=combined,
        outcome=outcome,
        content_digest=content_digest,
        raw_identity=raw_identity,
    )


def reconcile(previous: str, manifest_dir: Path, query: QueryFn) -> str:
    """Return the fingerprint to track for a directory, or "" to stop tracking it."""
    return evaluate(previous, manifest_dir, query).fingerprint
