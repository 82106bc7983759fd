"""GitHub/GitLab commit-history inspection with regex and time-window filtering."""

from .runner import inspect_repository, main

__all__ = ["inspect_repository", "main"]
