"""Error taxonomy for the history inspection workflow.

Every failure is terminal for the run: components raise, and only the CLI
entry point turns an error into printed text plus an exit status.
"""

from __future__ import annotations


class InspectionError(Exception):
    """Base class for all fatal inspection errors."""

    exit_code = 1


class UsageError(InspectionError):
    """Raised when the command line is incomplete (e.g. no URL)."""


class ValidationError(InspectionError):
    """Raised when an argument is present but malformed."""


class InvalidUrlError(ValidationError):
    def __init__(self, url: str):
        super().__init__("Invalid URL")
        self.url = url


class DurationFormatError(ValidationError):
    def __init__(self, token: str):
        super().__init__("Invalid duration format")
        self.token = token


class AuthPreconditionError(InspectionError):
    """Raised before any request when the provider token is not configured."""

    def __init__(self, env_var: str):
        super().__init__(f"{env_var} environment variable not set. Please set it to proceed.")
        self.env_var = env_var


class FetchError(InspectionError):
    """Raised for transport failures and non-2xx responses."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(FetchError):
    """Raised on the first rate-limit signal; never retried."""


class MalformedResponseError(FetchError):
    """Raised when a provider body is null or not JSON."""


class DeadlineExceededError(FetchError):
    """Raised when the whole-run deadline expires before a request."""


__all__ = [
    "InspectionError",
    "UsageError",
    "ValidationError",
    "InvalidUrlError",
    "DurationFormatError",
    "AuthPreconditionError",
    "FetchError",
    "RateLimitError",
    "MalformedResponseError",
    "DeadlineExceededError",
]
