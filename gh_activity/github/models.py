"""Value types shared by the activity pipeline"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


def parse_github_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp as returned by GitHub (naive if it carries no offset)"""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class CommitReference:
    """
    Pointer to a commit whose line statistics are not yet known

    ``event_timestamp`` is when the activity was observed (push event time,
    search hit committer date) and is the only time used for windowing.
    """

    detail_url: str
    repository_name: str
    event_timestamp: datetime


@dataclass(frozen=True)
class CommitStat:
    additions: int
    deletions: int


@dataclass(frozen=True)
class TimeWindow:
    """Closed time interval, inclusive on both ends"""

    start: datetime
    end: datetime

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end


@dataclass
class AggregateResult:
    """Totals and per-repository breakdown for a set of commit references"""

    total_additions: int = 0
    total_deletions: int = 0
    repo_stats: dict = field(default_factory=dict)
    considered_count: int = 0
    succeeded_count: int = 0
    failed_urls: list = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return self.considered_count - self.succeeded_count

    def add(self, repository_name: str, stat: CommitStat) -> None:
        """Add one commit's stats to the grand total and its repository bucket"""
        self.total_additions += stat.additions
        self.total_deletions += stat.deletions

        bucket = self.repo_stats.setdefault(repository_name, {"additions": 0, "deletions": 0})
        bucket["additions"] += stat.additions
        bucket["deletions"] += stat.deletions
        self.succeeded_count += 1


class Trend(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    EQUAL = "equal"


@dataclass(frozen=True)
class TrendComparison:
    metric: str
    current: int
    baseline_average: int
    direction: Trend

    def to_dict(self) -> dict:
        return {
            "metric": self.metric,
            "current": self.current,
            "baseline_average": self.baseline_average,
            "direction": self.direction.value
        }


@dataclass(frozen=True)
class PageLimits:
    """
    Caller-side bounds for one pagination walk

    Args:
        max_items: Stop once this many references are collected (None = no cap)
        per_page: Page size requested from the API
        max_pages: Stop after this many pages (None = no cap)
    """

    max_items: Optional[int] = None
    per_page: int = 100
    max_pages: Optional[int] = None


class TruncationReason(Enum):
    NONE = "none"
    HIT_MAX = "hit_max"
    HIT_CEILING = "hit_ceiling"
    HIT_PAGE_LIMIT = "hit_page_limit"
    UPSTREAM_ERROR = "upstream_error"


@dataclass
class PaginationOutcome:
    """References collected by one walk and why the walk stopped"""

    items: list = field(default_factory=list)
    truncated_reason: TruncationReason = TruncationReason.NONE
    pages_fetched: int = 0
    error: Optional[Exception] = None

    @property
    def truncated(self) -> bool:
        return self.truncated_reason is not TruncationReason.NONE

    @property
    def first_page_failed(self) -> bool:
        return self.pages_fetched == 0 and self.truncated_reason is TruncationReason.UPSTREAM_ERROR
