"""Build repository, daily and trend reports from a user's GitHub activity"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from gh_activity import diagnostics
from gh_activity.config import (
    ACTIVITY_MAX_ITEMS,
    ACTIVITY_SOURCE,
    DEFAULT_COMMIT_LIMIT,
    DEFAULT_PER_PAGE,
    DETAIL_FETCH_MAX_WORKERS,
    EVENTS_RESULT_CEILING,
    REPO_COMMITS_MAX,
    REPORT_TIMEZONE,
    TREND_WEEKLY_LISTING_REQUIRED,
    TREND_WINDOW_DAYS,
)
from gh_activity.diagnostics import emit
from gh_activity.github.client import GitHubClient
from gh_activity.github.commit_fetcher import (
    CommitSearchSource,
    EventPager,
    RepositoryCommitsSource,
    UserEventsSource,
)
from gh_activity.github.commit_processor import StatsAggregator, compare_totals, filter_by_window
from gh_activity.github.models import PageLimits, PaginationOutcome, TimeWindow, TrendComparison


@dataclass
class RepoCommitStats:
    username: str
    repository: str
    requested_limit: int
    total_additions: int
    total_deletions: int
    succeeded_count: int
    considered_count: int
    repo_stats: dict = field(default_factory=dict)
    listing_truncated: str = "none"

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "repository": self.repository,
            "requested_limit": self.requested_limit,
            "total_additions": self.total_additions,
            "total_deletions": self.total_deletions,
            "succeeded_count": self.succeeded_count,
            "considered_count": self.considered_count,
            "repo_stats": self.repo_stats,
            "listing_truncated": self.listing_truncated
        }


@dataclass
class DailyCommitStats:
    username: str
    today_count: int
    today_additions: int
    today_deletions: int
    today_repo_breakdown: dict
    week_additions: int
    week_deletions: int
    week_commit_count: int
    today_succeeded_count: int = 0
    week_succeeded_count: int = 0
    listing_truncated: str = "none"

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "today_count": self.today_count,
            "today_additions": self.today_additions,
            "today_deletions": self.today_deletions,
            "today_repo_breakdown": self.today_repo_breakdown,
            "week_additions": self.week_additions,
            "week_deletions": self.week_deletions,
            "week_commit_count": self.week_commit_count,
            "today_succeeded_count": self.today_succeeded_count,
            "week_succeeded_count": self.week_succeeded_count,
            "listing_truncated": self.listing_truncated
        }


@dataclass
class CommitTrend:
    username: str
    additions: TrendComparison
    deletions: TrendComparison
    today_considered_count: int = 0
    today_succeeded_count: int = 0
    week_considered_count: int = 0
    week_succeeded_count: int = 0

    @property
    def today_additions(self) -> int:
        return self.additions.current

    @property
    def today_deletions(self) -> int:
        return self.deletions.current

    @property
    def weekly_average_additions(self) -> int:
        return self.additions.baseline_average

    @property
    def weekly_average_deletions(self) -> int:
        return self.deletions.baseline_average

    @property
    def additions_trend(self):
        return self.additions.direction

    @property
    def deletions_trend(self):
        return self.deletions.direction

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "today_additions": self.today_additions,
            "today_deletions": self.today_deletions,
            "weekly_average_additions": self.weekly_average_additions,
            "weekly_average_deletions": self.weekly_average_deletions,
            "additions_trend": self.additions_trend.value,
            "deletions_trend": self.deletions_trend.value,
            "today_considered_count": self.today_considered_count,
            "today_succeeded_count": self.today_succeeded_count,
            "week_considered_count": self.week_considered_count,
            "week_succeeded_count": self.week_succeeded_count
        }


class ActivityReportBuilder:
    """
    Runs the listing -> window -> aggregate -> trend pipeline for one report

    Nothing is kept between runs: each report builds its own client from the
    token it is given, and its own pager and aggregator.
    """

    def __init__(self, client_factory=GitHubClient, now=None, observer=None,
                 max_workers: int = DETAIL_FETCH_MAX_WORKERS,
                 activity_source: str = ACTIVITY_SOURCE,
                 weekly_listing_required: bool = TREND_WEEKLY_LISTING_REQUIRED,
                 timezone_name: str = REPORT_TIMEZONE):
        """
        Args:
            client_factory: Callable taking a token and returning a GitHubClient
            now: Callable returning the current aware datetime (defaults to the clock)
            observer: Diagnostics callback shared by pager and aggregator
            max_workers: Concurrent commit detail requests per aggregation
            activity_source: "search" or "events"
            weekly_listing_required: Whether a failed weekly listing fails the trend report
            timezone_name: Timezone in which "today" starts at midnight
        """
        if activity_source not in ("search", "events"):
            raise ValueError(f"Unknown activity source: {activity_source}")

        self.client_factory = client_factory
        self.now = now
        self.observer = observer
        self.max_workers = max_workers
        self.activity_source = activity_source
        self.weekly_listing_required = weekly_listing_required
        self.timezone = ZoneInfo(timezone_name)

    def _current_time(self) -> datetime:
        current = self.now() if self.now else datetime.now(self.timezone)
        return current.astimezone(self.timezone)

    def _windows(self) -> tuple:
        """(today, week) windows ending now; the week starts 7 days before today's midnight"""
        now = self._current_time()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        today = TimeWindow(start=today_start, end=now)
        week = TimeWindow(start=today_start - timedelta(days=TREND_WINDOW_DAYS), end=now)
        return today, week

    def _activity_listing(self, username: str, window: TimeWindow) -> tuple:
        """Listing source and limits for a user's activity within ``window``"""
        if self.activity_source == "events":
            max_pages = max(1, EVENTS_RESULT_CEILING // DEFAULT_PER_PAGE)
            limits = PageLimits(max_items=ACTIVITY_MAX_ITEMS, per_page=DEFAULT_PER_PAGE, max_pages=max_pages)
            return UserEventsSource(username, window), limits
        limits = PageLimits(max_items=ACTIVITY_MAX_ITEMS, per_page=DEFAULT_PER_PAGE)
        return CommitSearchSource(username, window), limits

    def _walk(self, client, source, limits: PageLimits, required: bool = True) -> PaginationOutcome:
        """Page a listing; a failed first page of a required listing fails the report"""
        outcome = EventPager(client, self.observer).paginate(source, limits)
        if required and outcome.first_page_failed:
            raise outcome.error
        return outcome

    def _aggregator(self, client) -> StatsAggregator:
        return StatsAggregator(client, max_workers=self.max_workers, observer=self.observer)

    def repo_commit_stats(self, token: str, username: str, repository: str,
                          commit_limit: int = DEFAULT_COMMIT_LIMIT) -> RepoCommitStats:
        """
        Line statistics of the latest commits of one repository

        Args:
            token: GitHub access token
            username: Repository owner
            repository: Repository name
            commit_limit: Number of most recent commits (capped at REPO_COMMITS_MAX)

        Returns:
            RepoCommitStats

        Raises:
            ValueError: commit_limit is smaller than 1
            ListFetchError: The first page of the commit list could not be fetched
        """
        if commit_limit < 1:
            raise ValueError("commit_limit must be at least 1")

        limit = min(commit_limit, REPO_COMMITS_MAX)
        client = self.client_factory(token)
        source = RepositoryCommitsSource(username, repository)
        outcome = self._walk(client, source, PageLimits(max_items=limit, per_page=limit))

        if len(outcome.items) < limit:
            emit(
                self.observer, diagnostics.SHORT_LISTING,
                f"Found {len(outcome.items)} commits for {username}/{repository}, "
                f"fewer than the requested {limit}",
                found=len(outcome.items), requested=limit
            )

        result = self._aggregator(client).aggregate(outcome.items)

        return RepoCommitStats(
            username=username,
            repository=repository,
            requested_limit=commit_limit,
            total_additions=result.total_additions,
            total_deletions=result.total_deletions,
            succeeded_count=result.succeeded_count,
            considered_count=result.considered_count,
            repo_stats=result.repo_stats,
            listing_truncated=outcome.truncated_reason.value
        )

    def daily_commit_stats(self, token: str, username: str) -> DailyCommitStats:
        """
        Today's line statistics next to the totals of the trailing week

        The activity listing is walked once for the whole week and split into
        today's window afterwards.

        Raises:
            ListFetchError: The first page of the activity listing could not be fetched
        """
        today_window, week_window = self._windows()
        client = self.client_factory(token)

        source, limits = self._activity_listing(username, week_window)
        outcome = self._walk(client, source, limits)

        week_refs = filter_by_window(outcome.items, week_window)
        today_refs = filter_by_window(week_refs, today_window)

        aggregator = self._aggregator(client)
        today = aggregator.aggregate(today_refs)
        week = aggregator.aggregate(week_refs)

        return DailyCommitStats(
            username=username,
            today_count=today.considered_count,
            today_additions=today.total_additions,
            today_deletions=today.total_deletions,
            today_repo_breakdown=today.repo_stats,
            week_additions=week.total_additions,
            week_deletions=week.total_deletions,
            week_commit_count=week.considered_count,
            today_succeeded_count=today.succeeded_count,
            week_succeeded_count=week.succeeded_count,
            listing_truncated=outcome.truncated_reason.value
        )

    def commit_trend(self, token: str, username: str) -> CommitTrend:
        """
        Compare today's additions/deletions with the trailing week's daily average

        Today and the week are paged independently.

        Raises:
            ListFetchError: The first page of today's listing failed, or of the
                weekly listing when ``weekly_listing_required`` is set
        """
        today_window, week_window = self._windows()
        client = self.client_factory(token)

        today_source, today_limits = self._activity_listing(username, today_window)
        today_outcome = self._walk(client, today_source, today_limits)

        week_source, week_limits = self._activity_listing(username, week_window)
        week_outcome = self._walk(client, week_source, week_limits, required=self.weekly_listing_required)

        week_refs = filter_by_window(week_outcome.items, week_window)
        if week_outcome.first_page_failed:
            emit(
                self.observer, diagnostics.WEEKLY_DEGRADED,
                f"Weekly listing for {username} unavailable, using a zero baseline: {week_outcome.error}",
                username=username
            )

        aggregator = self._aggregator(client)
        today = aggregator.aggregate(filter_by_window(today_outcome.items, today_window))
        week = aggregator.aggregate(week_refs)

        additions, deletions = compare_totals(today, week, TREND_WINDOW_DAYS)

        return CommitTrend(
            username=username,
            additions=additions,
            deletions=deletions,
            today_considered_count=today.considered_count,
            today_succeeded_count=today.succeeded_count,
            week_considered_count=week.considered_count,
            week_succeeded_count=week.succeeded_count
        )
