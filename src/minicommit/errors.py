"""Error types raised by the mini-commit store and its collaborators.

Every error derives from MiniCommitError so the CLI can turn any of them into
a one-line message and a non-zero exit.
"""

from __future__ import annotations


class MiniCommitError(Exception):
    """Base class for all mini-commit errors."""


class ConfigError(MiniCommitError):
    """.mini-commit.toml exists but cannot be parsed."""


class NotAWorkingTree(MiniCommitError):
    """The current location is not inside a git working tree."""


class StorageUnavailable(MiniCommitError):
    """The storage directory, index file or lock file cannot be used."""


class CorruptIndex(MiniCommitError):
    """The index file exists but does not hold a well-formed record list."""


class NotFound(MiniCommitError):
    def __init__(self, mc_id: str) -> None:
        self.id = mc_id
        super().__init__(f"mini-commit '{mc_id}' not found")


class AmbiguousId(MiniCommitError):
    def __init__(self, ref: str, candidates: list[str]) -> None:
        self.ref = ref
        self.candidates = candidates
        super().__init__(
            f"mini-commit id '{ref}' is ambiguous ({len(candidates)} matches); use more characters"
        )


class PayloadWriteFailure(MiniCommitError):
    """A patch blob file could not be written or removed."""


class UpstreamVCSFailure(MiniCommitError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        detail = f"{message}: {stderr.strip()}" if stderr.strip() else message
        super().__init__(detail)
