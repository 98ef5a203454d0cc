"""Read and write the mini-commit index and patch blobs.

MiniCommitStore is the public API:
    store = MiniCommitStore.open()
    mc = store.create("wip: parser", datetime.now(UTC), patch)
    store.list()
    store.get(mc.id)
    store.delete(mc.id)

index.json layout (single file, read-modify-write, replaced atomically):
    [
      {
        "id": "3f2a...",            # sha1(patch + createdAt)
        "message": "wip: parser",
        "createdAt": "2026-10-19T09:30:00.123456+00:00",
        "patch": "diff --git a/..."
      }
    ]

The index is authoritative for reads. <id>.patch files hold the same patch
text verbatim and are written/removed alongside their index entry.

Nothing is cached between calls: every operation re-reads index.json, so
changes made by other processes are always visible. Mutations hold an
exclusive flock on index.lock across load -> modify -> save.

Failure windows (not compensated):
    create  index saved, blob write fails   -> entry without blob
    delete  index saved, blob unlink fails  -> blob without entry
"""

from __future__ import annotations

import contextlib
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from minicommit.config import MiniCommitConfig, load_config
from minicommit.errors import (
    AmbiguousId,
    CorruptIndex,
    NotAWorkingTree,
    NotFound,
    PayloadWriteFailure,
    StorageUnavailable,
)
from minicommit.locks import ReadWriteLock, file_lock
from minicommit.models import TEXT_ENCODING, TEXT_ERRORS, MiniCommit, generate_id, normalize_timestamp

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

logger = logging.getLogger("minicommit.store")


def _os_reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class MiniCommitStore:
    """JSON-index-backed mini-commit store."""

    def __init__(self, config: MiniCommitConfig) -> None:
        self.config = config
        self._lock = ReadWriteLock()

    @classmethod
    def open(cls, root: Path | str | None = None, config: MiniCommitConfig | None = None) -> MiniCommitStore:
        """Open the store for the working tree at root (cwd if None).

        Raises NotAWorkingTree if root has no .git directory and
        StorageUnavailable if the storage directory cannot be created.
        """
        if config is None:
            config = load_config(root)

        if not config.git_dir.is_dir():
            msg = f"not a git repository: {config.root}"
            raise NotAWorkingTree(msg)

        try:
            config.store_path.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"failed to create mini-commits directory {config.store_path}: {_os_reason(exc)}"
            raise StorageUnavailable(msg) from exc

        return cls(config)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self.config.store_path

    @property
    def index_path(self) -> Path:
        return self.config.index_path

    def blob_path(self, mc_id: str) -> Path:
        return self.path / f"{mc_id}.{self.config.patch_ext}"

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self) -> list[MiniCommit]:
        """All mini-commits in insertion order (empty list for an empty store)."""
        with self._shared():
            return self._load_index()

    def get(self, mc_id: str) -> MiniCommit:
        """Return the mini-commit with exactly this ID. Raises NotFound."""
        with self._shared():
            for mc in self._load_index():
                if mc.id == mc_id:
                    return mc
        raise NotFound(mc_id)

    def resolve(self, ref: str) -> str:
        """Map a full ID or a unique ID prefix to the full ID.

        Raises NotFound when nothing matches and AmbiguousId when the prefix
        matches more than one record.
        """
        ref = ref.strip().lower()
        if not ref:
            raise NotFound(ref)
        with self._shared():
            ids = [mc.id for mc in self._load_index()]
        if ref in ids:
            return ref
        matches = [i for i in ids if i.startswith(ref)]
        if not matches:
            raise NotFound(ref)
        if len(matches) > 1:
            raise AmbiguousId(ref, matches)
        return matches[0]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(self, message: str, created_at: datetime, patch: str) -> MiniCommit:
        """Persist a new mini-commit and return it.

        The index is saved before the blob is written. If the blob write
        fails the index entry stays and PayloadWriteFailure is raised.
        Re-creating an identical (patch, created_at) pair returns the
        existing record unchanged.
        """
        created_at = normalize_timestamp(created_at)
        mc_id = generate_id(patch, created_at)
        mc = MiniCommit(id=mc_id, message=message, created_at=created_at, patch=patch)

        with self._exclusive():
            index = self._load_index()
            for existing in index:
                if existing.id == mc_id:
                    logger.info("mini-commit %s already exists, not re-creating", mc_id)
                    return existing

            index.append(mc)
            self._save_index(index)

            blob = self.blob_path(mc_id)
            try:
                blob.write_bytes(patch.encode(TEXT_ENCODING, TEXT_ERRORS))
            except OSError as exc:
                msg = f"failed to save patch file {blob}: {_os_reason(exc)}"
                raise PayloadWriteFailure(msg) from exc

        logger.info("created mini-commit %s (%d bytes)", mc_id, len(patch))
        return mc

    def delete(self, mc_id: str) -> None:
        """Remove a mini-commit. Raises NotFound; an already-missing blob is fine."""
        with self._exclusive():
            index = self._load_index()
            remaining = [mc for mc in index if mc.id != mc_id]
            if len(remaining) == len(index):
                raise NotFound(mc_id)

            self._save_index(remaining)
            self._remove_blob(mc_id)

        logger.info("deleted mini-commit %s", mc_id)

    def clear(self) -> None:
        """Remove every blob referenced by the index, then save an empty index."""
        with self._exclusive():
            index = self._load_index()
            for mc in index:
                self._remove_blob(mc.id)
            self._save_index([])

        logger.info("cleared %d mini-commit(s)", len(index))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _shared(self) -> contextlib.AbstractContextManager[None]:
        return self._locked(exclusive=False)

    def _exclusive(self) -> contextlib.AbstractContextManager[None]:
        return self._locked(exclusive=True)

    @contextlib.contextmanager
    def _locked(self, *, exclusive: bool) -> Iterator[None]:
        """In-process RW lock, then flock on index.lock; both released on every exit path."""
        rw = self._lock.write_locked() if exclusive else self._lock.read_locked()
        with rw, file_lock(self.config.lock_path, exclusive=exclusive, enabled=self.config.file_lock):
            yield

    def _load_index(self) -> list[MiniCommit]:
        """Read index.json. Missing file -> []; unparsable file -> CorruptIndex."""
        path = self.index_path
        try:
            text = path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)
        except FileNotFoundError:
            logger.debug("no index at %s, store is empty", path)
            return []
        except OSError as exc:
            msg = f"failed to read index file {path}: {_os_reason(exc)}"
            raise StorageUnavailable(msg) from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"failed to parse index {path}: {exc}"
            raise CorruptIndex(msg) from exc

        if not isinstance(raw, list):
            msg = f"failed to parse index {path}: expected a list, got {type(raw).__name__}"
            raise CorruptIndex(msg)

        index = [MiniCommit.from_dict(entry) for entry in raw]
        logger.debug("loaded %d mini-commit(s) from %s", len(index), path)
        return index

    def _save_index(self, index: list[MiniCommit]) -> None:
        """Write index.json via tmp file + rename so readers never see a partial file."""
        path = self.index_path
        data = json.dumps([mc.to_dict() for mc in index], indent=2, ensure_ascii=False) + "\n"
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_bytes(data.encode(TEXT_ENCODING, TEXT_ERRORS))
            tmp.replace(path)
        except OSError as exc:
            msg = f"failed to save index file {path}: {_os_reason(exc)}"
            raise StorageUnavailable(msg) from exc

    def _remove_blob(self, mc_id: str) -> None:
        blob = self.blob_path(mc_id)
        try:
            blob.unlink()
        except FileNotFoundError:
            logger.debug("patch file %s already gone", blob)
        except OSError as exc:
            msg = f"failed to delete patch file {blob}: {_os_reason(exc)}"
            raise PayloadWriteFailure(msg) from exc

