"""Thin wrapper around the git commands mini-commit needs.

Every function takes an optional cwd (defaults to the process cwd). Command
failures raise UpstreamVCSFailure with git's stderr attached.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from minicommit.errors import NotAWorkingTree, UpstreamVCSFailure
from minicommit.models import TEXT_ENCODING, TEXT_ERRORS

logger = logging.getLogger("minicommit.git")


def _run(
    args: list[str],
    *,
    cwd: Path | str | None = None,
    stdin: str | None = None,
) -> subprocess.CompletedProcess[str]:
    cmd = ["git", *args]
    logger.debug("running %s", " ".join(cmd))
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            input=stdin,
            capture_output=True,
            text=True,
            encoding=TEXT_ENCODING,
            errors=TEXT_ERRORS,
            check=False,
        )
    except FileNotFoundError as exc:
        msg = "git executable not found"
        raise UpstreamVCSFailure(msg) from exc


def is_working_tree(cwd: Path | str | None = None) -> bool:
    """True if cwd is inside a git repository."""
    try:
        result = _run(["rev-parse", "--git-dir"], cwd=cwd)
    except UpstreamVCSFailure:
        return False
    return result.returncode == 0


def repository_root(cwd: Path | str | None = None) -> Path:
    """Top-level directory of the working tree containing cwd."""
    result = _run(["rev-parse", "--show-toplevel"], cwd=cwd)
    if result.returncode != 0:
        msg = "not a git repository"
        raise NotAWorkingTree(msg)
    return Path(result.stdout.strip())


def has_staged_changes(cwd: Path | str | None = None) -> bool:
    """True if the index differs from HEAD.

    `git diff --cached --quiet` exits 0 for no changes, 1 for changes, and
    anything else on error.
    """
    result = _run(["diff", "--cached", "--quiet"], cwd=cwd)
    if result.returncode == 0:
        return False
    if result.returncode == 1:
        return True
    msg = "failed to check staging status"
    raise UpstreamVCSFailure(msg, result.stderr)


def get_staged_changes(cwd: Path | str | None = None) -> str:
    """Staged changes as a patch (`git diff --cached`)."""
    # --binary so staged binary files survive a later `git apply --cached`
    result = _run(["diff", "--cached", "--binary"], cwd=cwd)
    if result.returncode != 0:
        msg = "failed to get staged changes"
        raise UpstreamVCSFailure(msg, result.stderr)
    return result.stdout


def apply_to_staging(patch: str, cwd: Path | str | None = None) -> None:
    """Apply patch to the staging area (`git apply --cached`)."""
    result = _run(["apply", "--cached"], cwd=cwd, stdin=patch)
    if result.returncode != 0:
        msg = "failed to apply patch"
        raise UpstreamVCSFailure(msg, result.stderr)
    logger.info("applied %d-byte patch to staging area", len(patch))
