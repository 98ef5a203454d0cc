"""Data models for the mini-commit store."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from minicommit.errors import CorruptIndex

SHORT_ID_LENGTH = 8

# Non-UTF-8 bytes coming out of `git diff` survive as lone surrogates and are
# written back out byte-for-byte.
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


def normalize_timestamp(ts: datetime) -> datetime:
    """Return ts as an aware datetime (naive values are taken as local time)."""
    if ts.tzinfo is None:
        return ts.astimezone()
    return ts


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 with microseconds and UTC offset, e.g. 2026-10-19T09:30:00.123456+02:00."""
    return normalize_timestamp(ts).isoformat(timespec="microseconds")


def parse_timestamp(raw: str) -> datetime:
    return normalize_timestamp(datetime.fromisoformat(raw))


def generate_id(patch: str, created_at: datetime) -> str:
    """Derive a mini-commit ID from the patch content and its creation time.

    SHA-1 over the raw patch bytes followed by the formatted timestamp. Pure
    function: the same (patch, created_at) pair always gives the same ID.
    """
    h = hashlib.sha1()
    h.update(patch.encode(TEXT_ENCODING, TEXT_ERRORS))
    h.update(format_timestamp(created_at).encode(TEXT_ENCODING))
    return h.hexdigest()


def short_id(mc_id: str, length: int = SHORT_ID_LENGTH) -> str:
    """Display form of an ID. The stored ID is never truncated."""
    return mc_id[:length]


@dataclass(frozen=True)
class MiniCommit:
    """One persisted snapshot of the staging area."""

    id: str
    message: str
    created_at: datetime
    patch: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MiniCommit:
        """Build a record from its index entry. Raises CorruptIndex on malformed entries."""
        if not isinstance(d, dict):
            msg = f"index entry is not an object: {d!r:.80}"
            raise CorruptIndex(msg)
        try:
            mc_id = d["id"]
            message = d["message"]
            created_raw = d["createdAt"]
            patch = d["patch"]
        except KeyError as exc:
            msg = f"index entry is missing field {exc.args[0]!r}"
            raise CorruptIndex(msg) from exc

        for name, value in (("id", mc_id), ("message", message), ("createdAt", created_raw), ("patch", patch)):
            if not isinstance(value, str):
                msg = f"index entry field {name!r} is not a string"
                raise CorruptIndex(msg)

        try:
            created_at = parse_timestamp(created_raw)
        except ValueError as exc:
            msg = f"index entry {mc_id!r} has an invalid createdAt: {created_raw!r}"
            raise CorruptIndex(msg) from exc

        return cls(id=mc_id, message=message, created_at=created_at, patch=patch)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "createdAt": format_timestamp(self.created_at),
            "patch": self.patch,
        }
