"""Walk paginated GitHub listings and collect commit references"""

from datetime import timezone
from typing import Optional

import requests

from gh_activity import diagnostics
from gh_activity.config import SEARCH_RESULT_CEILING
from gh_activity.diagnostics import emit
from gh_activity.github.errors import GitHubAPIError, ListFetchError, MalformedResponseError
from gh_activity.github.models import (
    CommitReference,
    PageLimits,
    PaginationOutcome,
    TimeWindow,
    TruncationReason,
    parse_github_timestamp,
)

SEARCH_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _commit_reference(detail_url, repository_name, timestamp, observer) -> Optional[CommitReference]:
    """Build a reference, or report a skip when the entry lacks a URL or a usable time"""
    if not detail_url or not timestamp:
        emit(
            observer, diagnostics.REFERENCE_SKIPPED,
            f"Skipping commit in {repository_name}: missing detail URL or timestamp",
            repository=repository_name
        )
        return None

    try:
        event_timestamp = parse_github_timestamp(timestamp)
    except (TypeError, ValueError):
        event_timestamp = None

    # Window checks compare against aware datetimes
    if event_timestamp is None or event_timestamp.tzinfo is None:
        emit(
            observer, diagnostics.REFERENCE_SKIPPED,
            f"Skipping commit in {repository_name}: unusable timestamp {timestamp!r}",
            repository=repository_name, url=detail_url
        )
        return None

    return CommitReference(
        detail_url=detail_url,
        repository_name=repository_name,
        event_timestamp=event_timestamp
    )


def _commit_date(item: dict) -> Optional[str]:
    """Committer date of a REST commit object, falling back to the author date"""
    commit = item.get("commit") or {}
    for role in ("committer", "author"):
        date = (commit.get(role) or {}).get("date")
        if date:
            return date
    return None


class ListingSource:
    """
    One paginated GitHub listing that yields commit references

    Subclasses describe how to request the first page, how to advance, and
    how to turn listing items into references.
    """

    name = "listing"
    ceiling = None  # Hard cap on results the API will ever return

    def first_request(self, client, per_page: int) -> tuple:
        raise NotImplementedError

    def next_request(self, response, payload, url: str, params: dict, raw_seen: int) -> Optional[tuple]:
        """Return (url, params) of the next page, or None when the API reports no more"""
        raise NotImplementedError

    def page_items(self, payload, url: str) -> list:
        if not isinstance(payload, list):
            raise MalformedResponseError(url, "expected a JSON array")
        return payload

    def references(self, item: dict, observer=None) -> list:
        raise NotImplementedError


class UserEventsSource(ListingSource):
    """
    A user's public event stream; only PushEvents carry commits

    Events come newest first, so once a page reaches back past
    ``window.start`` the following pages hold nothing the window wants.
    """

    def __init__(self, username: str, window: Optional[TimeWindow] = None):
        self.username = username
        self.window = window
        self.name = f"public events of {username}"

    def first_request(self, client, per_page: int) -> tuple:
        url = client.url(f"/users/{self.username}/events/public")
        return url, {"per_page": per_page, "page": 1}

    def _reaches_before_window(self, events: list) -> bool:
        for event in events:
            try:
                created_at = parse_github_timestamp(event.get("created_at"))
            except (AttributeError, TypeError, ValueError):
                continue
            if created_at.tzinfo is not None and created_at < self.window.start:
                return True
        return False

    def next_request(self, response, payload, url: str, params: dict, raw_seen: int) -> Optional[tuple]:
        # The events API has no "has more" signal; an empty page or an
        # event older than the window ends it
        if self.window is not None and self._reaches_before_window(payload):
            return None
        return url, {**params, "page": params["page"] + 1}

    def references(self, event: dict, observer=None) -> list:
        if event.get("type") != "PushEvent":
            return []

        repository_name = (event.get("repo") or {}).get("name", "unknown").split("/")[-1]
        commits = (event.get("payload") or {}).get("commits") or []

        refs = []
        for commit in commits:
            ref = _commit_reference(commit.get("url"), repository_name, event.get("created_at"), observer)
            if ref:
                refs.append(ref)
        return refs


class CommitSearchSource(ListingSource):
    """Commit search for ``author:<user>`` within a committer-date range"""

    ceiling = SEARCH_RESULT_CEILING

    def __init__(self, username: str, window: TimeWindow):
        self.username = username
        self.window = window
        self.name = f"commit search for {username}"

    @property
    def query(self) -> str:
        start = self.window.start.astimezone(timezone.utc).strftime(SEARCH_DATE_FORMAT)
        end = self.window.end.astimezone(timezone.utc).strftime(SEARCH_DATE_FORMAT)
        return f"author:{self.username} committer-date:{start}..{end}"

    def first_request(self, client, per_page: int) -> tuple:
        params = {
            "q": self.query,
            "sort": "committer-date",
            "order": "desc",
            "per_page": per_page,
            "page": 1
        }
        return client.url("/search/commits"), params

    def next_request(self, response, payload, url: str, params: dict, raw_seen: int) -> Optional[tuple]:
        if "next" not in response.links:
            return None
        total_count = payload.get("total_count")
        if total_count is not None and raw_seen >= total_count:
            return None
        return url, {**params, "page": params["page"] + 1}

    def page_items(self, payload, url: str) -> list:
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise MalformedResponseError(url, "missing 'items'")
        return payload["items"]

    def references(self, item: dict, observer=None) -> list:
        repository_name = (item.get("repository") or {}).get("name", "unknown")
        ref = _commit_reference(item.get("url"), repository_name, _commit_date(item), observer)
        return [ref] if ref else []


class RepositoryCommitsSource(ListingSource):
    """Commit list of one repository, advanced through the Link header"""

    def __init__(self, owner: str, repository: str):
        self.owner = owner
        self.repository = repository
        self.name = f"commits of {owner}/{repository}"

    def first_request(self, client, per_page: int) -> tuple:
        url = client.url(f"/repos/{self.owner}/{self.repository}/commits")
        return url, {"per_page": per_page}

    def next_request(self, response, payload, url: str, params: dict, raw_seen: int) -> Optional[tuple]:
        next_link = response.links.get("next", {}).get("url")
        if not next_link:
            return None
        # The next URL already carries the query string
        return next_link, None

    def references(self, item: dict, observer=None) -> list:
        ref = _commit_reference(item.get("url"), self.repository, _commit_date(item), observer)
        return [ref] if ref else []


class EventPager:
    """Collects commit references from a listing source, page by page"""

    def __init__(self, client, observer=None):
        """
        Args:
            client: GitHubClient (or anything with ``get`` and ``url``)
            observer: Diagnostics callback, see gh_activity.diagnostics
        """
        self.client = client
        self.observer = observer

    def paginate(self, source: ListingSource, limits: PageLimits = PageLimits()) -> PaginationOutcome:
        """
        Walk ``source`` from its first page until a stopping condition holds

        Stops, checked after each page in this order, when: the page is empty,
        ``limits.max_items`` references were collected (the result is cut to
        exactly that many), the API reports no further pages, the source's
        result ceiling is reached, or ``limits.max_pages`` pages were read.

        A failed page ends the walk with what was collected so far; the
        failure is recorded on the outcome, never raised.

        Returns:
            PaginationOutcome with the references and the reason the walk stopped
        """
        outcome = PaginationOutcome()
        per_page = limits.per_page
        if limits.max_items is not None:
            per_page = max(1, min(per_page, limits.max_items))

        url, params = source.first_request(self.client, per_page)
        page_number = 1
        raw_seen = 0

        while True:
            try:
                response = self.client.get(url, params)
                payload = response.json()
                items = source.page_items(payload, url)
            except (GitHubAPIError, requests.RequestException, ValueError) as e:
                outcome.error = ListFetchError(source.name, page_number, e)
                outcome.truncated_reason = TruncationReason.UPSTREAM_ERROR
                emit(
                    self.observer, diagnostics.PAGE_FAILED,
                    f"Stopping {source.name} at page {page_number}: {e}",
                    source=source.name, page=page_number, collected=len(outcome.items)
                )
                break

            outcome.pages_fetched += 1
            emit(
                self.observer, diagnostics.PAGE_FETCHED,
                f"Page {page_number} of {source.name}: {len(items)} items",
                source=source.name, page=page_number, items=len(items)
            )

            if not items:
                break

            raw_seen += len(items)
            for item in items:
                outcome.items.extend(source.references(item, self.observer))

            if limits.max_items is not None and len(outcome.items) >= limits.max_items:
                del outcome.items[limits.max_items:]
                outcome.truncated_reason = TruncationReason.HIT_MAX
                break

            following = source.next_request(response, payload, url, params, raw_seen)
            if following is None:
                break

            if source.ceiling is not None and page_number * per_page >= source.ceiling:
                outcome.truncated_reason = TruncationReason.HIT_CEILING
                break

            if limits.max_pages is not None and page_number >= limits.max_pages:
                outcome.truncated_reason = TruncationReason.HIT_PAGE_LIMIT
                break

            url, params = following
            page_number += 1

        if outcome.truncated and outcome.truncated_reason is not TruncationReason.UPSTREAM_ERROR:
            emit(
                self.observer, diagnostics.LISTING_TRUNCATED,
                f"Stopped {source.name} after {outcome.pages_fetched} pages "
                f"({outcome.truncated_reason.value}), {len(outcome.items)} commits collected",
                source=source.name, reason=outcome.truncated_reason.value
            )

        return outcome
