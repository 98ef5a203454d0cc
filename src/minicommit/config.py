"""MiniCommitConfig: per-repository settings for the mini-commit store.

Layout (all relative to the repository root):

    .mini-commit.toml         # optional config (may be git-tracked)
    .git/
        mini-commits/         # store_dir
            index.json        # ordered record list
            index.lock        # advisory lock for read-modify-write cycles
            <id>.patch        # one blob per record

.mini-commit.toml example:

    [mini-commit]
    # store_dir = "mini-commits"   # default, relative to .git
    # index_file = "index.json"
    # patch_ext = "patch"
    # short_id_length = 8
    # file_lock = true             # flock index.lock around every operation
    # log_level = "WARNING"        # or set MINI_COMMIT_LOG_LEVEL
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from minicommit.errors import ConfigError

_CONFIG_FILENAME = ".mini-commit.toml"
_SECTION = "mini-commit"
_LOG_LEVEL_ENV = "MINI_COMMIT_LOG_LEVEL"

GIT_DIR = ".git"
_DEFAULT_STORE_DIR = "mini-commits"
_DEFAULT_INDEX_FILE = "index.json"
_DEFAULT_PATCH_EXT = "patch"
_DEFAULT_SHORT_ID_LENGTH = 8
_DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class MiniCommitConfig:
    """Resolved configuration for one repository."""

    root: Path                          # working tree root (contains .git/)
    store_dir: str = _DEFAULT_STORE_DIR
    index_file: str = _DEFAULT_INDEX_FILE
    patch_ext: str = _DEFAULT_PATCH_EXT
    short_id_length: int = _DEFAULT_SHORT_ID_LENGTH
    file_lock: bool = True
    log_level: str = _DEFAULT_LOG_LEVEL

    @property
    def git_dir(self) -> Path:
        return self.root / GIT_DIR

    @property
    def store_path(self) -> Path:
        return self.git_dir / self.store_dir

    @property
    def index_path(self) -> Path:
        return self.store_path / self.index_file

    @property
    def lock_path(self) -> Path:
        return self.store_path / "index.lock"


def load_config(root: Path | str | None = None) -> MiniCommitConfig:
    """Load .mini-commit.toml from root (cwd if None). A missing file means defaults."""
    root_path = Path(root) if root else Path.cwd()
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                raw = tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as exc:
            msg = f"failed to read {config_path}: {exc}"
            raise ConfigError(msg) from exc

    section = raw.get(_SECTION, {})
    if not isinstance(section, dict):
        msg = f"[{_SECTION}] in {config_path} must be a table"
        raise ConfigError(msg)

    try:
        short_len = int(section.get("short_id_length", _DEFAULT_SHORT_ID_LENGTH))
    except (TypeError, ValueError) as exc:
        msg = f"short_id_length in {config_path} must be an integer"
        raise ConfigError(msg) from exc
    if not 4 <= short_len <= 40:
        msg = f"short_id_length in {config_path} must be between 4 and 40, got {short_len}"
        raise ConfigError(msg)

    log_level = os.environ.get(_LOG_LEVEL_ENV) or str(section.get("log_level", _DEFAULT_LOG_LEVEL))

    return MiniCommitConfig(
        root=root_path,
        store_dir=str(section.get("store_dir", _DEFAULT_STORE_DIR)),
        index_file=str(section.get("index_file", _DEFAULT_INDEX_FILE)),
        patch_ext=str(section.get("patch_ext", _DEFAULT_PATCH_EXT)).lstrip("."),
        short_id_length=short_len,
        file_lock=bool(section.get("file_lock", True)),
        log_level=log_level.upper(),
    )
