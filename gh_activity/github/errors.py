"""Errors raised while talking to the GitHub REST API"""


class GitHubAPIError(Exception):
    """Base class for GitHub API failures"""


class UpstreamError(GitHubAPIError):
    """GitHub answered with a non-2xx status"""

    def __init__(self, status: int, url: str, body: str = ""):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(f"GitHub API error {status} for {url}")


class MalformedResponseError(GitHubAPIError):
    """A successful response did not have the expected shape"""

    def __init__(self, url: str, reason: str = "unexpected response body"):
        self.url = url
        self.reason = reason
        super().__init__(f"Malformed response from {url}: {reason}")


class ListFetchError(GitHubAPIError):
    """A page of a commits/search/events listing could not be retrieved"""

    def __init__(self, source: str, page: int, cause: Exception):
        self.source = source
        self.page = page
        self.cause = cause
        super().__init__(f"Failed to fetch page {page} of {source}: {cause}")


class DetailFetchError(GitHubAPIError):
    """The statistics of a single commit could not be retrieved"""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch commit detail {url}: {cause}")
