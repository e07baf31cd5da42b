"""Tracked fingerprint state for K8s Manifest Sync."""

import json
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from . import STATE_FILE, SYNC_DIR


class TrackedResource(BaseModel):
    """Fingerprint of a directory as of its last successful reconciliation."""

    fingerprint: str
    updated_at: datetime


class SyncState(BaseModel):
    """All manifest directories currently tracked, keyed by directory."""

    version: int = 1
    resources: dict[str, TrackedResource] = Field(default_factory=dict)

    def fingerprint_for(self, manifest_dir: str) -> str:
        """Stored fingerprint for a directory, "" if untracked."""
        tracked = self.resources.get(manifest_dir)
        return tracked.fingerprint if tracked else ""

    def record(self, manifest_dir: str, fingerprint: str) -> None:
        """Store a fingerprint, or stop tracking the directory if it is empty."""
        if fingerprint:
            self.resources[manifest_dir] = TrackedResource(
                fingerprint=fingerprint,
                updated_at=datetime.now(UTC),
            )
        else:
            self.resources.pop(manifest_dir, None)


def get_state_path(project_root: Path) -> Path:
    """Get the state file path."""
    return project_root / SYNC_DIR / STATE_FILE


def load_state(project_root: Path) -> SyncState | None:
    """Load state from the project's state file.

    Returns None if file doesn't exist.
    """
    state_path = get_state_path(project_root)

    if not state_path.exists():
        return None

    with open(state_path) as f:
        data = json.load(f)

    return SyncState.model_validate(data)


def save_state(state: SyncState, project_root: Path) -> None:
    """Save state to the project's state file."""
    state_path = get_state_path(project_root)
    state_path.parent.mkdir(parents=True, exist_ok=True)

    with open(state_path, "w") as f:
        json.dump(state.model_dump(mode="json"), f, indent=2)


def create_empty_state() -> SyncState:
    """Create a new empty state."""
    return SyncState()
