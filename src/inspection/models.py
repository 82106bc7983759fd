"""Provider-normalized commit records and match results."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import MalformedResponseError

SHORT_ID_LENGTH = 8


def parse_timestamp(value: str) -> dt.datetime:
    """Parse an ISO-8601 timestamp into an aware datetime (naive means UTC)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _checked_timestamp(value: Any, provider: str) -> str:
    try:
        parse_timestamp(str(value or ""))
    except ValueError as exc:
        raise MalformedResponseError(f"Received invalid JSON response from {provider}.") from exc
    return str(value)


@dataclass(frozen=True)
class Commit:
    """Read-only projection of one commit from either provider."""

    full_id: str
    timestamp: str
    message: str

    @property
    def short_id(self) -> str:
        return self.full_id[:SHORT_ID_LENGTH]

    @property
    def committed_at(self) -> dt.datetime:
        return parse_timestamp(self.timestamp)

    @classmethod
    def from_github(cls, payload: Dict[str, Any]) -> "Commit":
        if not isinstance(payload, dict) or not payload.get("sha"):
            raise MalformedResponseError("Received invalid JSON response from GitHub.")
        commit = payload.get("commit") or {}
        committer = commit.get("committer") or {}
        return cls(
            full_id=str(payload["sha"]),
            timestamp=_checked_timestamp(committer.get("date"), "GitHub"),
            message=str(commit.get("message") or ""),
        )

    @classmethod
    def from_gitlab(cls, payload: Dict[str, Any]) -> "Commit":
        if not isinstance(payload, dict) or not payload.get("id"):
            raise MalformedResponseError("Received invalid JSON response from GitLab.")
        return cls(
            full_id=str(payload["id"]),
            timestamp=_checked_timestamp(payload.get("committed_date"), "GitLab"),
            message=str(payload.get("title") or ""),
        )


@dataclass(frozen=True)
class ChangedFiles:
    """Raw file-list body for one commit plus the paths it names."""

    raw_text: str
    paths: Tuple[str, ...] = field(default_factory=tuple)


class MatchSource(str, Enum):
    MESSAGE = "message"
    FILES = "files"


@dataclass(frozen=True)
class MatchResult:
    commit: Commit
    matched_via: MatchSource
    file_url: Optional[str] = None


__all__ = [
    "SHORT_ID_LENGTH",
    "parse_timestamp",
    "Commit",
    "ChangedFiles",
    "MatchSource",
    "MatchResult",
]
