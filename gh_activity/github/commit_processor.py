"""Filter, enrich and aggregate commit references into line statistics"""

from concurrent.futures import ThreadPoolExecutor, wait

import requests

from gh_activity import diagnostics
from gh_activity.config import DETAIL_FETCH_MAX_WORKERS
from gh_activity.diagnostics import emit
from gh_activity.github.errors import DetailFetchError, GitHubAPIError
from gh_activity.github.models import (
    AggregateResult,
    TimeWindow,
    Trend,
    TrendComparison,
)


def filter_by_window(refs: list, window: TimeWindow) -> list:
    """Keep references whose event timestamp lies in the window (both ends inclusive)"""
    return [ref for ref in refs if window.contains(ref.event_timestamp)]


class StatsAggregator:
    """Fetches commit details concurrently and sums them per repository"""

    def __init__(self, client, max_workers: int = DETAIL_FETCH_MAX_WORKERS, observer=None):
        """
        Initialize aggregator

        Args:
            client: Object with ``fetch_commit_detail(url) -> CommitStat``
            max_workers: Most detail requests in flight at once
            observer: Diagnostics callback, see gh_activity.diagnostics
        """
        self.client = client
        self.max_workers = max(1, max_workers)
        self.observer = observer

    def aggregate(self, refs: list) -> AggregateResult:
        """
        Aggregate line statistics for a list of commit references

        Every reference is fetched; a failed fetch is counted and reported
        but contributes nothing and does not stop the others.

        Args:
            refs: List of CommitReference

        Returns:
            AggregateResult with totals, per-repository stats and counts
        """
        result = AggregateResult(considered_count=len(refs))
        if not refs:
            return result

        workers = min(self.max_workers, len(refs))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.client.fetch_commit_detail, ref.detail_url) for ref in refs]
            wait(futures)

        # Reduce in input order so repository order follows first occurrence
        for ref, future in zip(refs, futures):
            try:
                stat = future.result()
            except (GitHubAPIError, requests.RequestException) as e:
                error = DetailFetchError(ref.detail_url, e)
                result.failed_urls.append(ref.detail_url)
                emit(
                    self.observer, diagnostics.DETAIL_FAILED, str(error),
                    url=ref.detail_url, repository=ref.repository_name
                )
                continue

            result.add(ref.repository_name, stat)

        emit(
            self.observer, diagnostics.AGGREGATE_COMPLETE,
            f"Aggregated {result.succeeded_count} of {result.considered_count} commits: "
            f"+{result.total_additions}/-{result.total_deletions}",
            succeeded=result.succeeded_count, considered=result.considered_count
        )
        return result


def average_per_day(total: int, window_days: int) -> int:
    """Daily average of a non-negative count, rounded half away from zero; 0 for empty windows"""
    if window_days <= 0:
        return 0
    return (2 * total + window_days) // (2 * window_days)


def compare_trend(metric: str, current: int, window_total: int, window_days: int) -> TrendComparison:
    """
    Compare today's value of a metric with its daily average over a window

    Args:
        metric: "additions" or "deletions"
        current: Today's total
        window_total: Total over the whole window
        window_days: Number of days in the window

    Returns:
        TrendComparison with the rounded baseline and direction
    """
    baseline = average_per_day(window_total, window_days)

    if current > baseline:
        direction = Trend.INCREASE
    elif current < baseline:
        direction = Trend.DECREASE
    else:
        direction = Trend.EQUAL

    return TrendComparison(metric=metric, current=current, baseline_average=baseline, direction=direction)


def compare_totals(today: AggregateResult, week: AggregateResult, window_days: int) -> tuple:
    """Additions and deletions trend of ``today`` against ``week``"""
    return (
        compare_trend("additions", today.total_additions, week.total_additions, window_days),
        compare_trend("deletions", today.total_deletions, week.total_deletions, window_days),
    )
