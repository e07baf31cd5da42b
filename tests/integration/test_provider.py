"""Integration tests for the create/refresh/destroy operations."""

import logging
from pathlib import Path

import pytest

from k8s_manifest_sync.errors import ApplyError, DeleteError
from k8s_manifest_sync.kubectl import ConnectionContext, Kubectl
from k8s_manifest_sync.provider import ManifestProvider
from k8s_manifest_sync.reconciler import Outcome


@pytest.fixture
def provider(fake_kubectl) -> ManifestProvider:
    return ManifestProvider(Kubectl(ConnectionContext(binary=str(fake_kubectl.path))))


class TestCreateOrUpdate:
    """Tests for apply followed by reconciliation."""

    def test_applies_then_queries(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_live("/api/v1/a")
        result = provider.create_or_update(manifest_dir)

        assert result.outcome == Outcome.NEW
        assert result.fingerprint == result.combined
        calls = fake_kubectl.calls()
        assert calls[0].startswith("apply -f")
        assert calls[1].startswith("get --ignore-not-found")

    def test_nothing_live_after_apply(self, provider, fake_kubectl, manifest_dir: Path):
        result = provider.create_or_update(manifest_dir)
        assert result.outcome == Outcome.ABSENT
        assert result.fingerprint == ""

    def test_update_after_edit_accepts_new_fingerprint(
        self, provider, fake_kubectl, manifest_dir: Path
    ):
        fake_kubectl.set_live("/api/v1/a")
        first = provider.create_or_update(manifest_dir)

        (manifest_dir / "configmap.yaml").write_text("kind: ConfigMap\n")
        second = provider.create_or_update(manifest_dir)

        assert second.outcome == Outcome.NEW
        assert second.fingerprint not in ("", first.fingerprint)

    def test_apply_failure_skips_query(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_failure("invalid manifest")
        with pytest.raises(ApplyError):
            provider.create_or_update(manifest_dir)
        assert len(fake_kubectl.calls()) == 1


class TestRefresh:
    """Tests for refresh without apply."""

    def test_never_applies(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_live("/api/v1/a")
        provider.refresh(manifest_dir, "")
        assert not any(call.startswith("apply") for call in fake_kubectl.calls())

    def test_detects_manifest_drift(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_live("/api/v1/a")
        tracked = provider.create_or_update(manifest_dir).fingerprint

        assert provider.refresh(manifest_dir, tracked).outcome == Outcome.UNCHANGED

        (manifest_dir / "configmap.yaml").write_text("kind: ConfigMap\ndata: {}\n")
        result = provider.refresh(manifest_dir, tracked)
        assert result.outcome == Outcome.CHANGED
        assert result.fingerprint == ""

    def test_detects_deleted_resources(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_live("/api/v1/a")
        tracked = provider.create_or_update(manifest_dir).fingerprint

        fake_kubectl.set_nothing_live()
        assert provider.refresh(manifest_dir, tracked).outcome == Outcome.ABSENT


class TestDestroy:
    """Tests for delete."""

    def test_deletes(self, provider, fake_kubectl, manifest_dir: Path):
        provider.destroy(manifest_dir)
        assert fake_kubectl.calls() == [f"delete -f {manifest_dir}"]

    def test_delete_failure(self, provider, fake_kubectl, manifest_dir: Path):
        fake_kubectl.set_failure("forbidden")
        with pytest.raises(DeleteError):
            provider.destroy(manifest_dir)


class TestLogging:
    """Each operation logs its start and outcome."""

    def test_destroy_logs_completion(self, provider, manifest_dir: Path, caplog):
        with caplog.at_level(logging.INFO, logger="k8s_manifest_sync.provider"):
            provider.destroy(manifest_dir)
        assert [r.getMessage() for r in caplog.records] == [
            f"Deleting {manifest_dir}",
            f"Deleted {manifest_dir}",
        ]

    def test_failed_destroy_logs_no_completion(self, provider, fake_kubectl, manifest_dir, caplog):
        fake_kubectl.set_failure("forbidden")
        with caplog.at_level(logging.INFO, logger="k8s_manifest_sync.provider"):
            with pytest.raises(DeleteError):
                provider.destroy(manifest_dir)
        assert f"Deleted {manifest_dir}" not in caplog.messages
