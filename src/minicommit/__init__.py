"""Mini-commits: staged changes parked as small, local, named units.

Layout:
    .git/
        mini-commits/
            index.json    # ordered list of {id, message, createdAt, patch}
            index.lock    # flock target for read-modify-write cycles
            <id>.patch    # the patch text of one mini-commit, verbatim

IDs are sha1(patch + createdAt), 40 hex chars; `list` and friends display the
first 8. index.json is the source of truth for reads; the .patch files are
kept in step with it on create/delete/clear.

Concurrent access: one MiniCommitStore serialises writers and lets readers
share (in-process RW lock). Separate processes are kept apart by flock on
index.lock; index.json is always replaced atomically (tmp + rename).
"""

from minicommit.config import MiniCommitConfig, load_config
from minicommit.errors import (
    AmbiguousId,
    ConfigError,
    CorruptIndex,
    MiniCommitError,
    NotAWorkingTree,
    NotFound,
    PayloadWriteFailure,
    StorageUnavailable,
    UpstreamVCSFailure,
)
from minicommit.models import MiniCommit, generate_id, short_id
from minicommit.store import MiniCommitStore

__all__ = [
    "AmbiguousId",
    "ConfigError",
    "CorruptIndex",
    "MiniCommit",
    "MiniCommitConfig",
    "MiniCommitError",
    "MiniCommitStore",
    "NotAWorkingTree",
    "NotFound",
    "PayloadWriteFailure",
    "StorageUnavailable",
    "UpstreamVCSFailure",
    "generate_id",
    "load_config",
    "short_id",
]
