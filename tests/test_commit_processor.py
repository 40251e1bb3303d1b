"""Tests for window filtering, aggregation and trend comparison"""

import unittest
from datetime import datetime, timezone

import requests

from gh_activity import diagnostics
from gh_activity.diagnostics import collect_diagnostics
from gh_activity.github.commit_processor import (
    StatsAggregator,
    average_per_day,
    compare_totals,
    compare_trend,
    filter_by_window,
)
from gh_activity.github.errors import MalformedResponseError, UpstreamError
from gh_activity.github.models import AggregateResult, CommitStat, TimeWindow, Trend

from fakes import FakeGitHub, make_ref


class TestFilterByWindow(unittest.TestCase):
    """Test time window filtering"""

    def setUp(self):
        self.refs = [
            make_ref("u1", "A", "2026-01-14T23:59:59Z"),
            make_ref("u2", "A", "2026-01-15T00:00:00Z"),
            make_ref("u3", "B", "2026-01-15T12:00:00Z"),
            make_ref("u4", "B", "2026-01-15T12:00:01Z"),
        ]

    def test_both_ends_inclusive(self):
        """Test references on the window edges are kept"""
        window = TimeWindow(
            start=datetime(2026, 1, 15, tzinfo=timezone.utc),
            end=datetime(2026, 1, 15, 12, tzinfo=timezone.utc)
        )
        result = filter_by_window(self.refs, window)
        self.assertEqual([r.detail_url for r in result], ["u2", "u3"])

    def test_single_instant_window(self):
        """Test a window of one instant keeps only exact matches"""
        instant = datetime(2026, 1, 15, 12, tzinfo=timezone.utc)
        result = filter_by_window(self.refs, TimeWindow(instant, instant))
        self.assertEqual([r.detail_url for r in result], ["u3"])

    def test_does_not_modify_input(self):
        """Test filtering returns a new list"""
        window = TimeWindow(
            start=datetime(2025, 12, 31, tzinfo=timezone.utc),
            end=datetime(2026, 1, 1, tzinfo=timezone.utc)
        )
        self.assertEqual(filter_by_window(self.refs, window), [])
        self.assertEqual(len(self.refs), 4)


class TestStatsAggregator(unittest.TestCase):
    """Test concurrent aggregation of commit details"""

    def test_empty_input(self):
        """Test empty input gives zero totals and no repositories"""
        client = FakeGitHub()
        result = StatsAggregator(client, observer=collect_diagnostics()).aggregate([])

        self.assertEqual(result.total_additions, 0)
        self.assertEqual(result.total_deletions, 0)
        self.assertEqual(result.repo_stats, {})
        self.assertEqual(result.considered_count, 0)
        self.assertEqual(result.succeeded_count, 0)
        self.assertEqual(client.detail_requests, [])

    def test_totals_and_repo_breakdown(self):
        """Test stats are summed per repository and overall"""
        client = FakeGitHub(details={
            "u1": CommitStat(20, 1),
            "u2": CommitStat(10, 1),
            "u3": CommitStat(10, 3),
        })
        refs = [make_ref("u1", "A"), make_ref("u2", "A"), make_ref("u3", "B")]

        result = StatsAggregator(client, observer=collect_diagnostics()).aggregate(refs)

        self.assertEqual(result.total_additions, 40)
        self.assertEqual(result.total_deletions, 5)
        self.assertEqual(result.repo_stats, {
            "A": {"additions": 30, "deletions": 2},
            "B": {"additions": 10, "deletions": 3},
        })
        self.assertEqual(sum(s["additions"] for s in result.repo_stats.values()), result.total_additions)
        self.assertEqual(sum(s["deletions"] for s in result.repo_stats.values()), result.total_deletions)

    def test_failed_fetch_is_excluded(self):
        """Test one of three failed fetches is skipped, not counted as zero"""
        client = FakeGitHub(details={
            "u1": CommitStat(5, 2),
            "u2": UpstreamError(500, "u2"),
            "u3": CommitStat(7, 0),
        })
        events = []
        refs = [make_ref("u1", "A"), make_ref("u2", "B"), make_ref("u3", "C")]

        result = StatsAggregator(client, observer=collect_diagnostics(events)).aggregate(refs)

        self.assertEqual(result.succeeded_count, 2)
        self.assertEqual(result.considered_count, 3)
        self.assertEqual(result.failed_count, 1)
        self.assertEqual(result.failed_urls, ["u2"])
        self.assertEqual(result.total_additions, 12)
        self.assertEqual(result.total_deletions, 2)
        self.assertNotIn("B", result.repo_stats)

        failures = [e for e in events if e.kind == diagnostics.DETAIL_FAILED]
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].context["url"], "u2")

    def test_zero_diff_commit_counts_as_success(self):
        """Test a real empty commit is distinguishable from a failure"""
        client = FakeGitHub(details={"u1": CommitStat(0, 0)})
        result = StatsAggregator(client, observer=collect_diagnostics()).aggregate([make_ref("u1", "A")])

        self.assertEqual(result.succeeded_count, 1)
        self.assertEqual(result.repo_stats, {"A": {"additions": 0, "deletions": 0}})

    def test_malformed_and_transport_errors_are_absorbed(self):
        """Test every detail failure kind is absorbed into the failure count"""
        client = FakeGitHub(details={
            "u1": MalformedResponseError("u1"),
            "u2": requests.ConnectionError("reset"),
            "u3": CommitStat(1, 1),
        })
        refs = [make_ref("u1", "A"), make_ref("u2", "A"), make_ref("u3", "A")]

        result = StatsAggregator(client, observer=collect_diagnostics()).aggregate(refs)

        self.assertEqual(result.succeeded_count, 1)
        self.assertEqual(result.total_additions, 1)

    def test_repo_order_follows_first_occurrence(self):
        """Test repositories appear in the order first seen"""
        client = FakeGitHub(details={f"u{i}": CommitStat(1, 0) for i in range(4)})
        refs = [make_ref("u0", "zeta"), make_ref("u1", "alpha"), make_ref("u2", "zeta"), make_ref("u3", "mid")]

        result = StatsAggregator(client, observer=collect_diagnostics()).aggregate(refs)

        self.assertEqual(list(result.repo_stats), ["zeta", "alpha", "mid"])

    def test_concurrency_is_bounded(self):
        """Test no more than max_workers fetches run at once"""
        client = FakeGitHub(details={f"u{i}": CommitStat(1, 1) for i in range(8)}, delay=0.02)
        refs = [make_ref(f"u{i}", "A") for i in range(8)]

        result = StatsAggregator(client, max_workers=2, observer=collect_diagnostics()).aggregate(refs)

        self.assertEqual(result.succeeded_count, 8)
        self.assertLessEqual(client.max_active, 2)
        self.assertEqual(sorted(client.detail_requests), sorted(r.detail_url for r in refs))


class TestTrendComparison(unittest.TestCase):
    """Test trend direction and weekly averages"""

    def test_zero_week_zero_today_is_equal(self):
        """Test no activity at all compares as equal"""
        comparison = compare_trend("additions", 0, 0, 7)
        self.assertEqual(comparison.baseline_average, 0)
        self.assertEqual(comparison.direction, Trend.EQUAL)

    def test_zero_week_with_activity_today_is_increase(self):
        """Test activity today against an empty week is an increase"""
        comparison = compare_trend("additions", 3, 0, 7)
        self.assertEqual(comparison.baseline_average, 0)
        self.assertEqual(comparison.direction, Trend.INCREASE)

    def test_decrease(self):
        """Test less than the average is a decrease"""
        comparison = compare_trend("deletions", 4, 70, 7)
        self.assertEqual(comparison.baseline_average, 10)
        self.assertEqual(comparison.direction, Trend.DECREASE)

    def test_zero_day_window_degrades_to_zero_baseline(self):
        """Test an empty window never divides by zero"""
        comparison = compare_trend("additions", 5, 100, 0)
        self.assertEqual(comparison.baseline_average, 0)
        self.assertEqual(comparison.direction, Trend.INCREASE)

    def test_rounds_half_away_from_zero(self):
        """Test averages round halves up"""
        self.assertEqual(average_per_day(3, 2), 2)
        self.assertEqual(average_per_day(5, 2), 3)
        self.assertEqual(average_per_day(10, 7), 1)
        self.assertEqual(average_per_day(11, 7), 2)
        self.assertEqual(average_per_day(1, 7), 0)

    def test_compare_totals(self):
        """Test both metrics are compared against the week"""
        today = AggregateResult(total_additions=40, total_deletions=5)
        week = AggregateResult(total_additions=280, total_deletions=35)

        additions, deletions = compare_totals(today, week, 7)

        self.assertEqual(additions.metric, "additions")
        self.assertEqual(additions.baseline_average, 40)
        self.assertEqual(additions.direction, Trend.EQUAL)
        self.assertEqual(deletions.metric, "deletions")
        self.assertEqual(deletions.baseline_average, 5)
        self.assertEqual(deletions.direction, Trend.EQUAL)
        self.assertEqual(additions.to_dict()["direction"], "equal")


if __name__ == "__main__":
    unittest.main()
