"""GitHub activity fetching and processing"""

from .client import GitHubClient
from .commit_fetcher import EventPager, UserEventsSource, CommitSearchSource, RepositoryCommitsSource
from .commit_processor import StatsAggregator, filter_by_window, compare_trend, compare_totals
from .activity_report import ActivityReportBuilder
