"""Locking for the mini-commit store.

Two layers:

    ReadWriteLock   in-process; many readers or one writer per store instance.
    file_lock()     cross-process; flock on index.lock held for the whole
                    read-modify-write cycle so concurrent `git mini-commit`
                    invocations do not lose each other's index updates.
"""

from __future__ import annotations

import contextlib
import fcntl
import threading
from typing import TYPE_CHECKING

from minicommit.errors import StorageUnavailable

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


class ReadWriteLock:
    """Shared/exclusive lock. Waiting writers block new readers so writes are not starved."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextlib.contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextlib.contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


@contextlib.contextmanager
def file_lock(path: Path, *, exclusive: bool, enabled: bool = True) -> Iterator[None]:
    """Hold flock(LOCK_EX or LOCK_SH) on path for the duration of the block.

    A shared lock opens an existing lock file read-only, so reads keep
    working on a read-only store.
    """
    if not enabled:
        yield
        return

    try:
        if exclusive:
            f = path.open("a")
        else:
            try:
                f = path.open("r")
            except FileNotFoundError:
                f = path.open("a")
    except OSError as exc:
        msg = f"failed to open lock file {path}: {exc.strerror or exc}"
        raise StorageUnavailable(msg) from exc

    with f:
        try:
            fcntl.flock(f, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        except OSError as exc:
            msg = f"failed to lock {path}: {exc.strerror or exc}"
            raise StorageUnavailable(msg) from exc
        try:
            yield
        finally:
            fcntl.flock(f, fcntl.LOCK_UN)
