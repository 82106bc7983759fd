"""Regex filtering over fetched commits and the text reports built from it."""

from __future__ import annotations

import datetime as dt
import re
from typing import List, Optional, Pattern, Sequence, Tuple

from .config import SUMMARY_LIMIT
from .duration import format_duration
from .errors import ValidationError
from .models import ChangedFiles, Commit, MatchResult, MatchSource
from .providers import CommitProvider


def compile_pattern(pattern: str) -> Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValidationError(f"Invalid regex: {pattern} ({exc})") from exc


def horizon_cutoff(horizon_seconds: int, now: Optional[dt.datetime] = None) -> dt.datetime:
    now = now or dt.datetime.now(dt.timezone.utc)
    return now - dt.timedelta(seconds=horizon_seconds)


def file_match_url(provider: CommitProvider, commit: Commit, regex: Pattern[str], files: ChangedFiles) -> str:
    """Link the first changed path matching `regex`, else the pattern itself."""
    for path in files.paths:
        if regex.search(path):
            return provider.build_blob_url(commit.full_id, path)
    return provider.build_blob_url(commit.full_id, regex.pattern)


def filter_commits(
    commits: Sequence[Commit],
    regex: Pattern[str],
    horizon_seconds: int,
    provider: CommitProvider,
    now: Optional[dt.datetime] = None,
) -> Tuple[List[MatchResult], int]:
    """Return in-window commits matching `regex`, in fetch order, and their count.

    The message is tested first; changed files are fetched only when the
    message does not match. Commits at or before the cutoff are skipped
    without a file fetch, so they can never trigger its rate-limit or
    malformed-response errors.
    """
    cutoff = horizon_cutoff(horizon_seconds, now)
    matched: List[MatchResult] = []
    for commit in commits:
        if commit.committed_at <= cutoff:
            continue
        if regex.search(commit.message):
            matched.append(MatchResult(commit=commit, matched_via=MatchSource.MESSAGE))
            continue
        files = provider.fetch_changed_files(commit.full_id)
        if regex.search(files.raw_text):
            matched.append(
                MatchResult(
                    commit=commit,
                    matched_via=MatchSource.FILES,
                    file_url=file_match_url(provider, commit, regex, files),
                )
            )
    return matched, len(matched)


def format_commit_line(commit: Commit, url: Optional[str] = None) -> str:
    line = f"{commit.short_id} - {commit.timestamp} - {commit.message}"
    if url:
        line += f" URL: {url}"
    return line


def report_matches(
    commits: Sequence[Commit],
    pattern: str,
    horizon_seconds: int,
    provider: CommitProvider,
    now: Optional[dt.datetime] = None,
) -> int:
    """Print the filtered-match block and return the number of matches."""
    regex = compile_pattern(pattern)
    readable = format_duration(horizon_seconds)
    print(f'\nCommits matching the regex "{pattern}" within the duration of {readable}:\n')

    total = 0
    if not commits:
        print("No commits data received.")
    else:
        matched, total = filter_commits(commits, regex, horizon_seconds, provider, now=now)
        for result in matched:
            print(format_commit_line(result.commit, result.file_url))

    print(f"\nTotal commits matched: {total} within the duration of {readable} for file {pattern}")
    return total


def print_commits_summary(commits: Sequence[Commit], limit: int = SUMMARY_LIMIT) -> None:
    """Print the newest `limit` commits without filtering."""
    print("Summary of recent commits:")
    for commit in list(commits)[:limit]:
        print(format_commit_line(commit))


__all__ = [
    "compile_pattern",
    "horizon_cutoff",
    "file_match_url",
    "filter_commits",
    "format_commit_line",
    "report_matches",
    "print_commits_summary",
]
