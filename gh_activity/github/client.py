"""GitHub REST API client"""

import requests

from gh_activity.config import (
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    USER_AGENT,
    REQUEST_TIMEOUT,
)
from gh_activity.github.errors import UpstreamError, MalformedResponseError
from gh_activity.github.models import CommitStat


class GitHubClient:
    """Simple GitHub REST client bound to one access token"""

    def __init__(self, token: str, base_url: str = GITHUB_API_URL):
        """
        Initialize GitHub REST client

        Args:
            token: GitHub personal access token
            base_url: API root (e.g., https://api.github.com)
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT
        }

    def url(self, endpoint: str) -> str:
        """Build an absolute URL for an API endpoint (e.g., /users/octocat/events)"""
        return f"{self.base_url}{endpoint}"

    def get(self, url: str, params: dict = None) -> requests.Response:
        """
        Make a GET request to the GitHub API

        Args:
            url: Absolute URL (listing endpoints, commit detail URLs, Link header URLs)
            params: Query parameters

        Returns:
            The successful response

        Raises:
            UpstreamError: When the response status is not 2xx
        """
        response = requests.get(
            url,
            headers=self.headers,
            params=params,
            timeout=REQUEST_TIMEOUT
        )
        if not response.ok:
            raise UpstreamError(response.status_code, url, response.text)
        return response

    def fetch_commit_detail(self, url: str) -> CommitStat:
        """
        Fetch additions/deletions for one commit

        Args:
            url: The commit's API detail URL

        Returns:
            CommitStat for the commit

        Raises:
            UpstreamError: Non-2xx response
            MalformedResponseError: Response lacks the ``stats`` object
        """
        response = self.get(url)

        try:
            detail = response.json()
        except ValueError:
            raise MalformedResponseError(url, "body is not JSON")

        stats = detail.get("stats") if isinstance(detail, dict) else None
        if not isinstance(stats, dict):
            raise MalformedResponseError(url, "missing 'stats'")

        additions = stats.get("additions")
        deletions = stats.get("deletions")
        if not isinstance(additions, int) or not isinstance(deletions, int):
            raise MalformedResponseError(url, "'stats' lacks additions/deletions")

        return CommitStat(additions=additions, deletions=deletions)
