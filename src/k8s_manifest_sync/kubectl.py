"""kubectl invocation: apply, delete and query manifest directories."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import ApplyError, CommandError, DeleteError, QueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionContext:
    """Connection parameters passed to every kubectl invocation."""

    kubeconfig: str = ""
    namespace: str = ""
    binary: str = "kubectl"
    timeout: float | None = None


class Kubectl:
    """Runs kubectl against a cluster described by a ConnectionContext."""

    def __init__(self, context: ConnectionContext | None = None):
        self.context = context or ConnectionContext()

    def command(self, *args: str) -> list[str]:
        """Build the argv for a kubectl call, connection flags first."""
        argv = list(args)
        if self.context.kubeconfig:
            argv = ["--kubeconfig", self.context.kubeconfig] + argv
        if self.context.namespace:
            argv = ["-n", self.context.namespace] + argv
        return [self.context.binary] + argv

    def run(
        self,
        argv: list[str],
        error_cls: type[CommandError] = CommandError,
    ) -> str:
        """
        Run a command and return its stdout.

        Raises:
            error_cls: If the command cannot be started, times out or exits nonzero
        """
        logger.debug("Running %s", " ".join(argv))
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.context.timeout,
            )
        except FileNotFoundError as e:
            raise error_cls(argv, f"executable not found: {e.filename}") from e
        except subprocess.TimeoutExpired as e:
            raise error_cls(argv, f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise error_cls(argv, str(e)) from e

        if result.returncode != 0:
            raise error_cls(
                argv,
                f"exit status {result.returncode}",
                returncode=result.returncode,
                stderr=(result.stderr or "").strip(),
            )
        return result.stdout or ""

    def apply(self, manifest_dir: Path) -> None:
        """Converge the cluster to the manifests in a directory."""
        self.run(self.command("apply", "-f", str(manifest_dir)), ApplyError)

    def delete(self, manifest_dir: Path) -> None:
        """Remove the resources described by a directory."""
        self.run(self.command("delete", "-f", str(manifest_dir)), DeleteError)

    def query(self, manifest_dir: Path) -> str:
        """Return the JSON list of live resources for a directory, or "" if none."""
        return self.run(
            self.command("get", "--ignore-not-found", "-f", str(manifest_dir), "-o", "json"),
            QueryError,
        )
