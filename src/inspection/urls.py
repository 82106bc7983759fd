"""Repository URL classification for the two supported providers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from .errors import InvalidUrlError


class Provider(str, Enum):
    GITHUB = "GitHub"
    GITLAB = "GitLab"


HOST_TOKENS = {
    "github.com": Provider.GITHUB,
    "gitlab.com": Provider.GITLAB,
}

URL_RE = re.compile(r"^https?://(?P<host>[^/?#]*?(?P<token>github\.com|gitlab\.com))(?P<path>/[^?#]*)?")


@dataclass(frozen=True)
class RepositoryReference:
    """Provider plus owner/name pair derived once from the input URL."""

    provider: Provider
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def project_path(self) -> str:
        """URL-encoded `owner/name`, the GitLab project id form."""
        return quote(self.full_name, safe="")


def classify_url(url: str) -> RepositoryReference:
    """Return the provider and owner/name for `url` or raise InvalidUrlError."""
    match = URL_RE.match((url or "").strip())
    if not match:
        raise InvalidUrlError(url)

    provider = HOST_TOKENS[match.group("token")]
    segments = [segment for segment in (match.group("path") or "").split("/") if segment]
    if len(segments) < 2:
        raise InvalidUrlError(url)

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise InvalidUrlError(url)
    return RepositoryReference(provider=provider, owner=owner, name=name)


__all__ = ["Provider", "RepositoryReference", "classify_url"]
