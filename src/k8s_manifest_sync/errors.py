"""Exceptions raised by K8s Manifest Sync.

Core modules only raise; the CLI decides how errors are rendered.
"""

from __future__ import annotations

import shlex


class SyncError(Exception):
    """Base error for K8s Manifest Sync."""


class DirectoryReadError(SyncError):
    """A manifest directory could not be walked or one of its files read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ConfigError(SyncError):
    """The configuration file or an environment override is invalid."""


class ParseError(SyncError):
    """A query response could not be interpreted as a resource list."""

    def __init__(self, message: str, response: str = ""):
        self.response = response
        super().__init__(message)


class CommandError(SyncError):
    """An external kubectl invocation failed.

    The argv, exit status and captured stderr are kept as separate fields
    so callers can render or inspect them independently.
    """

    action = "command"

    def __init__(
        self,
        command: list[str],
        reason: str,
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._render())

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)

    def _render(self) -> str:
        if not self.stderr:
            return f"{self.command_line}: {self.reason}"
        return f"{self.command_line} {self.reason}: {self.stderr}"


class QueryError(CommandError):
    """Querying live resources failed."""

    action = "query"


class ApplyError(CommandError):
    """Applying manifests failed."""

    action = "apply"


class DeleteError(CommandError):
    """Deleting manifests failed."""

    action = "delete"
