"""Fake GitHub clients used by the tests"""

import threading
import time

from gh_activity.github.errors import UpstreamError
from gh_activity.github.models import CommitReference, CommitStat, parse_github_timestamp

API = "https://api.test"


def make_ref(url: str, repo: str, timestamp: str = "2026-01-15T09:00:00Z") -> CommitReference:
    return CommitReference(detail_url=url, repository_name=repo, event_timestamp=parse_github_timestamp(timestamp))


def search_item(url: str, repo: str, date: str) -> dict:
    return {"url": url, "repository": {"name": repo}, "commit": {"committer": {"date": date}}}


class FakeResponse:
    """Just enough of requests.Response for the pager"""

    def __init__(self, payload, links: dict = None):
        self.payload = payload
        self.links = links or {}
        self.ok = True

    def json(self):
        return self.payload


def next_link(url: str = API + "/next") -> dict:
    return {"next": {"url": url, "rel": "next"}}


class FakeGitHub:
    """
    Stand-in for GitHubClient

    Args:
        pages: Either a list of responses/exceptions served in order, or a
            callable (url, params) -> response that may raise
        details: Mapping of detail URL -> CommitStat or exception
    """

    def __init__(self, pages=None, details: dict = None, delay: float = 0):
        self.pages = pages if pages is not None else []
        self.details = details or {}
        self.delay = delay
        self.requests = []
        self.detail_requests = []
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0

    def url(self, endpoint: str) -> str:
        return f"{API}{endpoint}"

    def get(self, url, params=None):
        self.requests.append((url, dict(params) if params else None))
        if callable(self.pages):
            page = self.pages(url, params)
        elif self.pages:
            page = self.pages.pop(0)
        else:
            page = FakeResponse([])
        if isinstance(page, Exception):
            raise page
        return page

    def fetch_commit_detail(self, url: str) -> CommitStat:
        with self._lock:
            self.detail_requests.append(url)
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            outcome = self.details.get(url, UpstreamError(404, url))
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            with self._lock:
                self._active -= 1
