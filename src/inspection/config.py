"""Configuration constants and CLI parsing for the history inspection workflow."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

from .errors import UsageError

USER_AGENT = "git-history-inspection/1.0"
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITLAB_API_URL = os.getenv("GITLAB_API_URL", "https://gitlab.com/api/v4").rstrip("/")
GITHUB_WEB_URL = "https://github.com"
GITLAB_WEB_URL = "https://gitlab.com"
PER_PAGE = 100
SUMMARY_LIMIT = int(os.getenv("SUMMARY_LIMIT", "5"))
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))
RUN_DEADLINE_SEC = int(os.getenv("RUN_DEADLINE_SEC", "600"))  # 0 = no deadline
MAX_PAGES = int(os.getenv("MAX_PAGES", "0"))  # 0 = no cap
DEFAULT_DURATION = "1d"
VERBOSE = os.getenv("GIT_HIST_VERBOSE", "").lower() in {"1", "true", "yes"}

GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
GITLAB_TOKEN_ENV = "GITLAB_TOKEN"

PROG = "git-hist-inspec"

USAGE_EPILOG = f"""\
Duration format:
  - 'd' for days (e.g. '3d' for 3 days)
  - 'h' for hours (e.g. '6h' for 6 hours)
  - 'm' for minutes (e.g. '15m' for 15 minutes)
  - Combine days, hours, and minutes (e.g. '2d3h15m')
  Defaults to '{DEFAULT_DURATION}' when omitted.

Authentication:
  For GitHub: export {GITHUB_TOKEN_ENV}.
  For GitLab: export {GITLAB_TOKEN_ENV}.
  Both may also be stored as github_token / gitlab_token in local_secrets.json.

Examples:
  {PROG} https://github.com/username/repo
  {PROG} https://github.com/username/repo 'A_File\\.txt' 6h
  {PROG} https://gitlab.com/group/project 'README\\.md' 2d3h15m
"""


@dataclass(frozen=True)
class InspectionSettings:
    """Resolved, immutable inputs for one inspection run."""

    url: str
    pattern: Optional[str]
    duration: str
    duration_explicit: bool


class InspectionArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports bad command lines as UsageError (exit 1)."""

    def error(self, message: str) -> None:
        raise UsageError(message)


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the CLI parser used by the inspection entry point."""

    parser = InspectionArgumentParser(
        prog=PROG,
        description=(
            "Summarize recent commits of a GitHub or GitLab repository and list "
            "commits whose message or changed files match a regex."
        ),
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", nargs="?", help="repository URL (github.com or gitlab.com)")
    parser.add_argument("pattern", nargs="?", help="regex matched against messages and changed files")
    parser.add_argument("duration", nargs="?", help="time window, e.g. 6h or 2d3h15m")
    return parser


def usage_text() -> str:
    return build_arg_parser().format_help()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; accepts argv overrides for testing.

    Everything but a leading -h/--help is positional, so a regex such as
    `-rc1` is taken as the pattern.
    """

    parser = build_arg_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv[:1] in (["-h"], ["--help"], ["--"]):
        return parser.parse_args(argv)
    return parser.parse_args(["--", *argv])


def resolve_settings(args: argparse.Namespace) -> InspectionSettings:
    """Return immutable settings, applying the default window when omitted."""

    if not args.url:
        raise UsageError("No URL provided")
    explicit = args.duration is not None
    return InspectionSettings(
        url=args.url,
        pattern=args.pattern or None,
        duration=args.duration if explicit else DEFAULT_DURATION,
        duration_explicit=explicit,
    )


__all__ = [
    "USER_AGENT",
    "GITHUB_API_URL",
    "GITLAB_API_URL",
    "GITHUB_WEB_URL",
    "GITLAB_WEB_URL",
    "PER_PAGE",
    "SUMMARY_LIMIT",
    "REQUEST_TIMEOUT",
    "RUN_DEADLINE_SEC",
    "MAX_PAGES",
    "DEFAULT_DURATION",
    "VERBOSE",
    "GITHUB_TOKEN_ENV",
    "GITLAB_TOKEN_ENV",
    "InspectionSettings",
    "InspectionArgumentParser",
    "build_arg_parser",
    "usage_text",
    "parse_args",
    "resolve_settings",
]
