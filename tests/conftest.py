"""Shared test fixtures for k8s-manifest-sync."""

import json
import stat
from pathlib import Path

import pytest
from click.testing import CliRunner

from k8s_manifest_sync.config import SyncConfig, save_config
from k8s_manifest_sync.state import create_empty_state, save_state

FAKE_KUBECTL = """#!/bin/sh
here="$(dirname "$0")"
printf '%s\n' "$*" >> "$here/calls.log"
if [ -f "$here/fail" ]; then
    cat "$here/fail" >&2
    exit 1
fi
case " $* " in
    *" get "*)
        if [ -f "$here/response.json" ]; then
            cat "$here/response.json"
        fi
        ;;
esac
exit 0
"""


class FakeKubectl:
    """A kubectl stand-in script whose responses are controlled from tests."""

    def __init__(self, root: Path):
        self.root = root
        self.path = root / "kubectl"
        self.path.write_text(FAKE_KUBECTL)
        self.path.chmod(self.path.stat().st_mode | stat.S_IEXEC)

    def set_live(self, *selflinks: str) -> None:
        """Report the given self links from `get`."""
        items = [{"kind": "ConfigMap", "metadata": {"selfLink": link}} for link in selflinks]
        self.set_response(json.dumps({"apiVersion": "v1", "kind": "List", "items": items}))

    def set_response(self, text: str) -> None:
        (self.root / "response.json").write_text(text)

    def set_nothing_live(self) -> None:
        (self.root / "response.json").unlink(missing_ok=True)

    def set_failure(self, stderr: str) -> None:
        (self.root / "fail").write_text(stderr)

    def calls(self) -> list[str]:
        log = self.root / "calls.log"
        if not log.exists():
            return []
        return log.read_text().splitlines()


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_kubectl(tmp_path: Path) -> FakeKubectl:
    """A fake kubectl executable in its own directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return FakeKubectl(bin_dir)


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    """
    A small manifest directory.

    Structure:
        manifests/
        ├── configmap.yaml
        └── app/
            └── deployment.yaml
    """
    root = tmp_path / "manifests"
    root.mkdir()
    (root / "configmap.yaml").write_text("kind: ConfigMap\nmetadata:\n  name: settings\n")
    app = root / "app"
    app.mkdir()
    (app / "deployment.yaml").write_text("kind: Deployment\nmetadata:\n  name: web\n")
    return root


@pytest.fixture
def initialized_project(tmp_path: Path, fake_kubectl: FakeKubectl, monkeypatch) -> Path:
    """A temporary project configured to use the fake kubectl, as cwd."""
    project = tmp_path / "project"
    project.mkdir()
    save_config(SyncConfig(kubectl_path=str(fake_kubectl.path)), project)
    save_state(create_empty_state(), project)

    for var in ("K8SMS_KUBECONFIG", "K8SMS_NAMESPACE", "K8SMS_KUBECTL", "K8SMS_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(project)
    return project
