"""CLI for K8s Manifest Sync."""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import SYNC_DIR, __version__
from .config import SyncConfig, get_sync_dir, load_config, save_config
from .errors import CommandError, SyncError
from .hashing import hash_directory
from .kubectl import Kubectl
from .provider import ManifestProvider
from .reconciler import Outcome, Reconciliation
from .state import SyncState, create_empty_state, load_state, save_state

console = Console()
error_console = Console(stderr=True)

OUTCOME_STYLES = {
    Outcome.NEW: "green",
    Outcome.UNCHANGED: "green",
    Outcome.CHANGED: "yellow",
    Outcome.ABSENT: "yellow",
}


def get_project_root() -> Path:
    """Get the project root directory (current working directory)."""
    return Path.cwd()


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def fail(error: SyncError) -> NoReturn:
    """Print an error and exit."""
    if isinstance(error, CommandError):
        error_console.print(f"[red]Error:[/red] {error.action} failed")
        error_console.print(f"  $ {error.command_line}", markup=False, highlight=False, soft_wrap=True)
        error_console.print(f"  {error.reason}", markup=False, highlight=False, soft_wrap=True)
        if error.stderr:
            error_console.print(error.stderr, markup=False, highlight=False, soft_wrap=True)
    else:
        error_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    sys.exit(1)


def get_provider(project_root: Path) -> ManifestProvider:
    """Build a provider from the project's configuration."""
    config = load_config(project_root)
    return ManifestProvider(Kubectl(config.to_context()))


def state_key(project_root: Path, manifest_dir: str) -> str:
    """Key a directory by its resolved path, relative to the project when inside it."""
    root = project_root.resolve()
    path = (project_root / manifest_dir).resolve()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def get_state(project_root: Path) -> SyncState:
    """Load the tracked state, starting empty if there is none."""
    return load_state(project_root) or create_empty_state()


def print_reconciliation(manifest_dir: str, result: Reconciliation) -> None:
    """Report the outcome of a reconciliation."""
    style = OUTCOME_STYLES[result.outcome]
    console.print(f"[bold]{escape(manifest_dir)}[/bold]: [{style}]{result.outcome.value}[/{style}]")
    if result.fingerprint:
        console.print(f"  fingerprint [dim]{result.fingerprint}[/dim]")
    else:
        console.print("  [yellow]No longer tracked; run apply to reconcile.[/yellow]")


@click.group()
@click.version_option(version=__version__, prog_name="k8sms")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(verbose: bool) -> None:
    """K8s Manifest Sync - Keep manifest directories in sync with a cluster."""
    setup_logging(verbose)


@main.command()
@click.option("--kubeconfig", default="", help="Path to the kubeconfig file")
@click.option("--namespace", "-n", default="", help="Namespace for all kubectl calls")
@click.option("--kubectl", "kubectl_path", default="kubectl", help="kubectl executable")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(kubeconfig: str, namespace: str, kubectl_path: str, force: bool) -> None:
    """Initialize k8sms in the current project."""
    project_root = get_project_root()
    sync_dir = get_sync_dir(project_root)

    if sync_dir.exists() and not force:
        error_console.print(
            f"[yellow]Warning:[/yellow] {SYNC_DIR}/ already exists. Use --force to reinitialize."
        )
        sys.exit(1)

    sync_dir.mkdir(parents=True, exist_ok=True)

    config = SyncConfig(kubeconfig=kubeconfig, namespace=namespace, kubectl_path=kubectl_path)
    save_config(config, project_root)
    save_state(create_empty_state(), project_root)

    console.print(
        Panel(
            f"[green]Initialized K8s Manifest Sync[/green]\n\n"
            f"Namespace: [bold]{namespace or '(kubectl default)'}[/bold]\n"
            f"Config directory: [dim]{sync_dir}[/dim]\n\n"
            f"Next steps:\n"
            f"  1. Run [bold]k8sms apply DIR[/bold] to apply and track a manifest directory\n"
            f"  2. Run [bold]k8sms refresh DIR[/bold] to check it for drift",
            title="k8sms init",
        )
    )


@main.command()
@click.argument("manifest_dir", type=click.Path(file_okay=False))
def apply(manifest_dir: str) -> None:
    """Apply a manifest directory and track its fingerprint."""
    project_root = get_project_root()
    state = get_state(project_root)

    try:
        result = get_provider(project_root).create_or_update(Path(manifest_dir))
    except SyncError as e:
        fail(e)

    state.record(state_key(project_root, manifest_dir), result.fingerprint)
    save_state(state, project_root)
    print_reconciliation(manifest_dir, result)


@main.command()
@click.argument("manifest_dir", type=click.Path(file_okay=False))
def refresh(manifest_dir: str) -> None:
    """Check a tracked manifest directory for drift without applying it."""
    project_root = get_project_root()
    state = get_state(project_root)
    previous = state.fingerprint_for(state_key(project_root, manifest_dir))

    try:
        result = get_provider(project_root).refresh(Path(manifest_dir), previous)
    except SyncError as e:
        fail(e)

    state.record(state_key(project_root, manifest_dir), result.fingerprint)
    save_state(state, project_root)
    print_reconciliation(manifest_dir, result)


@main.command()
@click.argument("manifest_dir", type=click.Path(file_okay=False))
def destroy(manifest_dir: str) -> None:
    """Delete the resources of a manifest directory and stop tracking it."""
    project_root = get_project_root()
    state = get_state(project_root)

    try:
        get_provider(project_root).destroy(Path(manifest_dir))
    except SyncError as e:
        fail(e)

    state.record(state_key(project_root, manifest_dir), "")
    save_state(state, project_root)
    console.print(f"[green]Deleted[/green] resources of [bold]{escape(manifest_dir)}[/bold]")


@main.command("hash")
@click.argument("manifest_dir", type=click.Path(file_okay=False))
def hash_command(manifest_dir: str) -> None:
    """Print the content digest of a manifest directory."""
    try:
        digest = hash_directory(Path(manifest_dir))
    except SyncError as e:
        fail(e)
    click.echo(digest)


@main.command()
def status() -> None:
    """Show tracked manifest directories."""
    state = load_state(get_project_root())

    if state is None or not state.resources:
        console.print("[yellow]No manifest directories tracked.[/yellow]")
        return

    table = Table(title="Tracked Directories")
    table.add_column("Directory", style="cyan")
    table.add_column("Fingerprint")
    table.add_column("Updated", justify="right")

    for manifest_dir, tracked in sorted(state.resources.items()):
        table.add_row(
            manifest_dir,
            tracked.fingerprint[:12],
            tracked.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)


if __name__ == "__main__":
    main()
