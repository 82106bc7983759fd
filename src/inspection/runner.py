"""Entry point wiring URL classification, commit fetching and reporting."""

from __future__ import annotations

import datetime as dt
import sys
from typing import List, Optional

from .config import RUN_DEADLINE_SEC, InspectionSettings, parse_args, resolve_settings, usage_text
from .duration import parse_duration
from .errors import DurationFormatError, InspectionError, UsageError
from .filtering import compile_pattern, print_commits_summary, report_matches
from .http_client import Deadline
from .providers import create_provider
from .urls import classify_url


def inspect_repository(settings: InspectionSettings, now: Optional[dt.datetime] = None,
                       deadline: Optional[Deadline] = None) -> int:
    """Run one inspection and return the number of matched commits (0 without a pattern)."""
    ref = classify_url(settings.url)
    print(f"{ref.provider.value} URL detected")

    provider = create_provider(ref, deadline or Deadline(RUN_DEADLINE_SEC))
    horizon_seconds = parse_duration(settings.duration)
    if settings.pattern:
        compile_pattern(settings.pattern)

    if settings.duration_explicit:
        commits = provider.fetch_windowed(horizon_seconds, now=now)
    else:
        commits = provider.fetch_recent()

    matched = 0
    if settings.pattern:
        matched = report_matches(commits, settings.pattern, horizon_seconds, provider, now=now)

    print_commits_summary(commits)
    return matched


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point; errors become a printed message and exit status 1."""
    argv = sys.argv[1:] if argv is None else argv
    if argv[:1] == ["help"]:
        print(usage_text())
        sys.exit(0)

    try:
        settings = resolve_settings(parse_args(argv))
        inspect_repository(settings)
    except (UsageError, DurationFormatError) as exc:
        print(exc)
        print(usage_text())
        sys.exit(exc.exit_code)
    except InspectionError as exc:
        print(exc)
        sys.exit(exc.exit_code)


if __name__ == "__main__":
    main()
