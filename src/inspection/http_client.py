"""HTTP helpers for the inspection workflow: one shared session, no retries.

Every call is a single blocking round trip. Rate limiting, malformed bodies and
error statuses all raise immediately; the operator re-runs later.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from .config import REQUEST_TIMEOUT, USER_AGENT, VERBOSE
from .errors import DeadlineExceededError, FetchError, MalformedResponseError, RateLimitError

SESSION = requests.Session()
SESSION.headers.update({"User-Agent": USER_AGENT})


class Deadline:
    """Whole-run time budget measured on a monotonic clock."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = clock() + seconds if seconds and seconds > 0 else None

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return self._expires_at - self._clock()

    def timeout_for(self, request_timeout: float) -> float:
        """Return the timeout for the next request or raise once expired."""
        remaining = self.remaining()
        if remaining is None:
            return request_timeout
        if remaining <= 0:
            raise DeadlineExceededError("Run deadline exceeded before the next request.")
        return min(request_timeout, remaining)


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when a provider returns an error."""
    try:
        body = resp.json()
    except ValueError:
        body = {"text": (resp.text or "")[:300]}
    if not isinstance(body, dict):
        body = {"text": str(body)[:300]}
    msg = body.get("message") or body.get("error") or body.get("text")
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {msg}")


def log_progress(message: str) -> None:
    if VERBOSE:
        print(f"[fetch] {message}", file=sys.stderr)


def has_message_marker(payload: Any, marker: str, scan_items: bool = True) -> bool:
    """True when `marker` occurs in a `message` field of the body or, with `scan_items`, its items."""
    if isinstance(payload, dict):
        message = payload.get("message")
        return isinstance(message, str) and marker in message
    if isinstance(payload, list) and scan_items:
        return any(has_message_marker(item, marker) for item in payload if isinstance(item, dict))
    return False


def is_rate_limited_status(resp: requests.Response) -> bool:
    if resp.status_code == 429:
        return True
    headers = resp.headers or {}
    return resp.status_code == 403 and headers.get("X-RateLimit-Remaining") == "0"


def decode_json(resp: requests.Response, provider: str) -> Any:
    """Return the decoded body; null and non-JSON bodies are fatal."""
    try:
        payload = resp.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Received invalid JSON response from {provider}.") from exc
    if payload is None:
        raise MalformedResponseError(
            f"Received null response from {provider}. Please check if the repository exists."
        )
    return payload


def request_json(
    url: str,
    *,
    provider: str,
    headers: Dict[str, str],
    deadline: Deadline,
    rate_limit_marker: str,
    rate_limit_message: str,
    params: Optional[Dict[str, Any]] = None,
    scan_list_items: bool = True,
) -> Tuple[Any, requests.Response]:
    """GET `url` once and return (decoded body, response)."""
    timeout = deadline.timeout_for(REQUEST_TIMEOUT)
    try:
        resp = SESSION.get(url, headers=headers, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Request to {url} failed: {exc}") from exc

    if is_rate_limited_status(resp):
        raise RateLimitError(rate_limit_message, status_code=resp.status_code)

    payload = decode_json(resp, provider)
    if has_message_marker(payload, rate_limit_marker, scan_items=scan_list_items):
        raise RateLimitError(rate_limit_message, status_code=resp.status_code)

    if not 200 <= resp.status_code < 300:
        log_http_error(resp, url)
        raise FetchError(f"{provider} returned HTTP {resp.status_code} for {url}", status_code=resp.status_code)
    return payload, resp


__all__ = [
    "SESSION",
    "Deadline",
    "log_http_error",
    "log_progress",
    "has_message_marker",
    "is_rate_limited_status",
    "decode_json",
    "request_json",
]
