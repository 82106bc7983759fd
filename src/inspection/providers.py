"""Commit fetchers for GitHub and GitLab behind one `CommitProvider` interface.

The variant is chosen once from the classified URL. Each variant knows its
endpoints, auth header, pagination signal, rate-limit marker and blob URL
layout; the shared paging loop lives on the base class.
"""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.utils import parse_header_links

from src.secrets import resolve_token

from .config import (
    GITHUB_API_URL,
    GITHUB_TOKEN_ENV,
    GITHUB_WEB_URL,
    GITLAB_API_URL,
    GITLAB_TOKEN_ENV,
    GITLAB_WEB_URL,
    MAX_PAGES,
    PER_PAGE,
)
from .errors import AuthPreconditionError, MalformedResponseError
from .http_client import Deadline, log_progress, request_json
from .models import ChangedFiles, Commit
from .urls import Provider, RepositoryReference


class CommitProvider(ABC):
    label = ""
    token_env = ""
    secrets_key = ""
    rate_limit_marker = ""
    # list bodies whose items may carry an error `message`
    marker_in_list_items = True

    def __init__(self, ref: RepositoryReference, token: str, deadline: Deadline,
                 api_url: Optional[str] = None, web_url: Optional[str] = None):
        self.ref = ref
        self.token = token
        self.deadline = deadline
        self.api_url = (api_url or self.default_api_url()).rstrip("/")
        self.web_url = (web_url or self.default_web_url()).rstrip("/")

    @classmethod
    @abstractmethod
    def default_api_url(cls) -> str:
        ...

    @classmethod
    @abstractmethod
    def default_web_url(cls) -> str:
        ...

    @abstractmethod
    def auth_headers(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def commits_url(self) -> str:
        ...

    @abstractmethod
    def changed_files_url(self, commit_id: str) -> str:
        ...

    @abstractmethod
    def parse_commit(self, item: Dict[str, Any]) -> Commit:
        ...

    @abstractmethod
    def has_next_page(self, resp: requests.Response) -> bool:
        ...

    @abstractmethod
    def changed_paths(self, payload: Any) -> Tuple[str, ...]:
        ...

    @abstractmethod
    def build_blob_url(self, commit_id: str, path: str) -> str:
        ...

    def rate_limit_message(self, resource: str) -> str:
        return (
            f"Rate limit exceeded for {self.label} {resource}. "
            "Please try again later or authenticate your requests."
        )

    def _get(self, url: str, resource: str, params: Optional[Dict[str, Any]] = None) -> Tuple[Any, requests.Response]:
        return request_json(
            url,
            provider=self.label,
            headers=self.auth_headers(),
            deadline=self.deadline,
            rate_limit_marker=self.rate_limit_marker,
            rate_limit_message=self.rate_limit_message(resource),
            params=params,
            scan_list_items=self.marker_in_list_items,
        )

    def _parse_page(self, payload: Any) -> List[Commit]:
        if not isinstance(payload, list):
            raise MalformedResponseError(f"Received invalid JSON response from {self.label}.")
        return [self.parse_commit(item) for item in payload]

    def fetch_recent(self) -> List[Commit]:
        """Return the provider's default first page of commits, newest first."""
        payload, _ = self._get(self.commits_url(), "commits")
        return self._parse_page(payload)

    def fetch_windowed(self, horizon_seconds: int, now: Optional[dt.datetime] = None) -> List[Commit]:
        """Page through commits until one page reaches past the horizon or pages run out.

        The page that crosses the horizon is kept whole; the filter drops the
        out-of-window tail.
        """
        now = now or dt.datetime.now(dt.timezone.utc)
        cutoff = now - dt.timedelta(seconds=horizon_seconds)
        commits: List[Commit] = []
        page = 1
        while True:
            if MAX_PAGES and page > MAX_PAGES:
                log_progress(f"stopping at MAX_PAGES={MAX_PAGES}")
                break
            payload, resp = self._get(
                self.commits_url(), "commits", params={"per_page": PER_PAGE, "page": page}
            )
            batch = self._parse_page(payload)
            log_progress(f"page {page}: {len(batch)} commits")
            if not batch:
                break
            commits.extend(batch)
            if batch[-1].committed_at < cutoff:
                break
            if not self.has_next_page(resp):
                break
            page += 1
        return commits

    def fetch_changed_files(self, commit_id: str) -> ChangedFiles:
        """Return the raw file-list body for one commit."""
        payload, resp = self._get(self.changed_files_url(commit_id), "files")
        raw_text = resp.text if isinstance(resp.text, str) else ""
        return ChangedFiles(raw_text=raw_text, paths=self.changed_paths(payload))


class GitHubProvider(CommitProvider):
    label = Provider.GITHUB.value
    token_env = GITHUB_TOKEN_ENV
    secrets_key = "github_token"
    rate_limit_marker = "API rate limit exceeded"

    @classmethod
    def default_api_url(cls) -> str:
        return GITHUB_API_URL

    @classmethod
    def default_web_url(cls) -> str:
        return GITHUB_WEB_URL

    def auth_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"token {self.token}",
        }

    def commits_url(self) -> str:
        return f"{self.api_url}/repos/{self.ref.owner}/{self.ref.name}/commits"

    def changed_files_url(self, commit_id: str) -> str:
        return f"{self.commits_url()}/{commit_id}"

    def parse_commit(self, item: Dict[str, Any]) -> Commit:
        return Commit.from_github(item)

    def has_next_page(self, resp: requests.Response) -> bool:
        link_header = (resp.headers or {}).get("Link") or ""
        return any(link.get("rel") == "next" for link in parse_header_links(link_header))

    def changed_paths(self, payload: Any) -> Tuple[str, ...]:
        files = payload.get("files") if isinstance(payload, dict) else None
        return tuple(f["filename"] for f in files or [] if isinstance(f, dict) and f.get("filename"))

    def build_blob_url(self, commit_id: str, path: str) -> str:
        return f"{self.web_url}/{self.ref.owner}/{self.ref.name}/blob/{commit_id}/{path}"


class GitLabProvider(CommitProvider):
    label = Provider.GITLAB.value
    token_env = GITLAB_TOKEN_ENV
    secrets_key = "gitlab_token"
    rate_limit_marker = "Rate limit exceeded"
    marker_in_list_items = False

    @classmethod
    def default_api_url(cls) -> str:
        return GITLAB_API_URL

    @classmethod
    def default_web_url(cls) -> str:
        return GITLAB_WEB_URL

    def rate_limit_message(self, resource: str) -> str:
        return f"Rate limit exceeded for {self.label}. Please try again later or authenticate your requests."

    def auth_headers(self) -> Dict[str, str]:
        return {"PRIVATE-TOKEN": self.token}

    def commits_url(self) -> str:
        return f"{self.api_url}/projects/{self.ref.project_path}/repository/commits"

    def changed_files_url(self, commit_id: str) -> str:
        return f"{self.commits_url()}/{commit_id}/diff"

    def parse_commit(self, item: Dict[str, Any]) -> Commit:
        return Commit.from_gitlab(item)

    def has_next_page(self, resp: requests.Response) -> bool:
        return bool(str((resp.headers or {}).get("X-Next-Page") or "").strip())

    def changed_paths(self, payload: Any) -> Tuple[str, ...]:
        paths: List[str] = []
        for entry in payload if isinstance(payload, list) else []:
            if not isinstance(entry, dict):
                continue
            for key in ("new_path", "old_path"):
                path = entry.get(key)
                if path and path not in paths:
                    paths.append(path)
        return tuple(paths)

    def build_blob_url(self, commit_id: str, path: str) -> str:
        return f"{self.web_url}/{self.ref.owner}/{self.ref.name}/-/blob/{commit_id}/{path}"


PROVIDER_CLASSES = {
    Provider.GITHUB: GitHubProvider,
    Provider.GITLAB: GitLabProvider,
}


def create_provider(ref: RepositoryReference, deadline: Deadline, token: Optional[str] = None) -> CommitProvider:
    """Pick the variant for `ref`; a missing token fails before any request."""
    cls = PROVIDER_CLASSES[ref.provider]
    token = token or resolve_token(cls.token_env, cls.secrets_key)
    if not token:
        raise AuthPreconditionError(cls.token_env)
    return cls(ref, token, deadline)


__all__ = [
    "CommitProvider",
    "GitHubProvider",
    "GitLabProvider",
    "PROVIDER_CLASSES",
    "create_provider",
]
