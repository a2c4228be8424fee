"""GitHub commit history.

Resolves merge base dates with the compare API:
GET /repos/{owner}/{repo}/compare/{sha}...{base}

Responses are cached in memory so repeated lookups of the same commit
(common across builds of one service) do not spend API quota.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

import requests
import requests_cache

from buildservice.commits.base import CommitHistoryBase, CommitLookupError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

_IMPORT_PATH_RE = re.compile(r"^github\.com/([a-zA-Z0-9-_]+)/([a-zA-Z0-9-_.]+)$")


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat rejects a trailing "Z" before Python 3.11
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def get_http_client(token: str | None = None, expire_after: int = 3600) -> requests.Session:
    """Get a cached requests session for the GitHub API.

    Args:
        token: Optional GitHub access token.
        expire_after: Cache lifetime in seconds.

    Returns:
        Session with in-memory caching and GitHub headers set.
    """
    session = requests_cache.CachedSession(
        backend="memory",
        expire_after=expire_after,
        allowable_codes=[200, 404],
    )
    session.headers.update(
        {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "buildservice",
        }
    )
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


class GitHubCommitHistory(CommitHistoryBase):
    """Commit history for github.com/<owner>/<repo> import paths."""

    def __init__(
        self,
        token: str | None = None,
        session: requests.Session | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 20.0,
    ):
        self.session = session if session is not None else get_http_client(token)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def merge_base_date(self, import_path: str, sha: str, base: str) -> datetime | None:
        """Get the committer date of the merge base of `sha` and `base`.

        Raises:
            CommitLookupError: If the import path is not a GitHub repository
                or the response has an unexpected shape.
            requests.RequestException: On transport or HTTP errors.
        """
        match = _IMPORT_PATH_RE.match(import_path)
        if match is None:
            raise CommitLookupError(f"Import path is not a github repo: {import_path}")
        owner, repo = match.groups()

        url = f"{self.base_url}/repos/{owner}/{repo}/compare/{sha}...{base}"
        response = self.session.get(url, timeout=self.timeout)

        if response.status_code == 404:
            logger.info(f"No comparison for {owner}/{repo} {sha}...{base}")
            return None
        response.raise_for_status()

        try:
            date = response.json()["merge_base_commit"]["commit"]["committer"]["date"]
        except (KeyError, TypeError, ValueError) as e:
            raise CommitLookupError(f"Unexpected compare response for {import_path}: {e}") from e

        if not date:
            return None
        return _parse_timestamp(date)
