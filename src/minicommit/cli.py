"""git-mini-commit CLI: park staged changes as small, local, named units.

Commands:
    git mini-commit -m MESSAGE     save the staged changes as a mini-commit
    git mini-commit list           list saved mini-commits
    git mini-commit show ID        show a mini-commit's diff
    git mini-commit pop ID         apply a mini-commit back to the staging area
    git mini-commit drop ID        delete a mini-commit
    git mini-commit clear          delete every mini-commit
    git commit -m MESSAGE          integration commit (plain git)

ID is the full id or any unique prefix of it (as printed by `list`).
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

import click

from minicommit import git
from minicommit.config import MiniCommitConfig, load_config
from minicommit.errors import MiniCommitError
from minicommit.models import short_id
from minicommit.store import MiniCommitStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from minicommit.models import MiniCommit

F = TypeVar("F", bound="Callable[..., Any]")

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FORMAT = "%(asctime)s %(name)s %(message)s"

logger = logging.getLogger("minicommit.cli")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _errors_to_click(fn: F) -> F:
    """Turn MiniCommitError into a one-line `Error: ...` and exit code 1."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except MiniCommitError as exc:
            logger.debug("command failed", exc_info=True)
            raise click.ClickException(str(exc)) from exc

    return wrapper  # type: ignore[return-value]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(format=_LOG_FORMAT, level=logging.WARNING)
    logging.getLogger("minicommit").setLevel(logging.DEBUG if verbose else logging.NOTSET)


def _apply_log_level(cfg: MiniCommitConfig) -> None:
    """Honour log_level from config unless --verbose was given."""
    ctx = click.get_current_context(silent=True)
    if ctx is not None and ctx.find_root().meta.get("minicommit.verbose"):
        return
    level = logging.getLevelName(cfg.log_level)
    if isinstance(level, int):
        logging.getLogger("minicommit").setLevel(level)


def _open_store() -> MiniCommitStore:
    if not git.is_working_tree():
        raise click.ClickException("not a git repository")
    root = git.repository_root()
    cfg = load_config(root)
    _apply_log_level(cfg)
    return MiniCommitStore.open(root, config=cfg)


def _fmt_time(mc: MiniCommit) -> str:
    return mc.created_at.astimezone().strftime(_TIME_FORMAT)


def _short(store: MiniCommitStore, mc_id: str) -> str:
    return short_id(mc_id, store.config.short_id_length)


# ---------------------------------------------------------------------------
# Root group (create)
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.version_option(package_name="git-mini-commit")
@click.option("-m", "--message", default=None, help="mini-commit message")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr")
@click.pass_context
@_errors_to_click
def cli(ctx: click.Context, message: str | None, verbose: bool) -> None:
    """Manage mini-commits between the staging area and regular commits.

    A mini-commit saves the current staging area as a small unit kept only
    in .git/mini-commits, so large refactors can be parked and re-applied
    piece by piece.

    \b
    git mini-commit -m "message"    # create a mini-commit
    git mini-commit list            # list mini-commits
    git mini-commit show <id>       # show a mini-commit's diff
    git mini-commit pop <id>        # apply a mini-commit to staging
    git mini-commit drop <id>       # delete a mini-commit
    git commit -m "message"         # integration commit (standard git)
    """
    ctx.meta["minicommit.verbose"] = verbose
    _setup_logging(verbose)

    if ctx.invoked_subcommand is not None:
        if message is not None:
            raise click.UsageError("-m/--message is only valid when creating a mini-commit")
        return

    if not message:
        raise click.ClickException("message is required (-m option)")

    store = _open_store()
    root = store.config.root

    if not git.has_staged_changes(cwd=root):
        raise click.ClickException("no staged changes")
    patch = git.get_staged_changes(cwd=root)

    mc = store.create(message, datetime.now().astimezone(), patch)

    click.echo(f"Created mini-commit: {_short(store, mc.id)}")
    click.echo(f"Message: {mc.message}")
    click.echo(f"Created at: {_fmt_time(mc)}")


# ---------------------------------------------------------------------------
# list / show
# ---------------------------------------------------------------------------


@cli.command("list")
@_errors_to_click
def list_cmd() -> None:
    """List saved mini-commits (oldest first)."""
    store = _open_store()
    mini_commits = store.list()

    if not mini_commits:
        click.echo("No mini-commits found")
        return

    click.echo(f"Mini-commits ({len(mini_commits)}):\n")
    for i, mc in enumerate(mini_commits, 1):
        click.echo(f"{i}. ID: {_short(store, mc.id)}")
        click.echo(f"   Message: {mc.message}")
        click.echo(f"   Created: {_fmt_time(mc)}")
        click.echo()


@cli.command()
@click.argument("mc_id", metavar="ID")
@_errors_to_click
def show(mc_id: str) -> None:
    """Show the diff of a mini-commit."""
    store = _open_store()
    mc = store.get(store.resolve(mc_id))

    click.echo(f"Mini-commit: {_short(store, mc.id)}")
    click.echo(f"Message: {mc.message}")
    click.echo(f"Created: {_fmt_time(mc)}")
    click.echo("\nDiff:")
    click.echo("---")
    click.echo(mc.patch, nl=False)


# ---------------------------------------------------------------------------
# pop / drop / clear
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("mc_id", metavar="ID")
@click.option("--drop", "drop_after", is_flag=True, help="Delete the mini-commit after applying it")
@_errors_to_click
def pop(mc_id: str, drop_after: bool) -> None:
    """Apply a mini-commit back to the staging area.

    The mini-commit is kept unless --drop is given; it is only dropped once
    the patch applied cleanly.
    """
    store = _open_store()
    mc = store.get(store.resolve(mc_id))

    git.apply_to_staging(mc.patch, cwd=store.config.root)
    click.echo(f"Applied mini-commit '{_short(store, mc.id)}' to staging area")
    click.echo(f"Message: {mc.message}")

    if drop_after:
        store.delete(mc.id)
        click.echo(f"Deleted mini-commit '{_short(store, mc.id)}'")


@cli.command()
@click.argument("mc_id", metavar="ID")
@_errors_to_click
def drop(mc_id: str) -> None:
    """Delete a mini-commit."""
    store = _open_store()
    full_id = store.resolve(mc_id)
    store.delete(full_id)
    click.echo(f"Deleted mini-commit '{_short(store, full_id)}'")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@_errors_to_click
def clear(yes: bool) -> None:
    """Delete every mini-commit."""
    store = _open_store()
    count = len(store.list())
    if count == 0:
        click.echo("No mini-commits found")
        return
    if not yes:
        click.confirm(f"Delete all {count} mini-commit(s)?", abort=True)
    store.clear()
    click.echo(f"Deleted {count} mini-commit(s)")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
