"""Command line entry point for the activity reports"""

import argparse
import json
import os
import sys
from dotenv import load_dotenv

from gh_activity.config import DEFAULT_COMMIT_LIMIT
from gh_activity.diagnostics import ignore_diagnostic, print_diagnostic
from gh_activity.github.activity_report import ActivityReportBuilder
from gh_activity.github.errors import ListFetchError

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report GitHub line-change activity")
    parser.add_argument("--quiet", action="store_true", help="Don't print progress diagnostics")
    parser.add_argument("--source", choices=["search", "events"], help="Activity listing to walk")

    subparsers = parser.add_subparsers(dest="report", required=True)

    repo = subparsers.add_parser("repo", help="Stats of a repository's latest commits")
    repo.add_argument("user", help="Repository owner")
    repo.add_argument("repo", help="Repository name")
    repo.add_argument("--limit", type=int, default=DEFAULT_COMMIT_LIMIT, help="Number of commits")

    daily = subparsers.add_parser("daily", help="Today's stats with weekly totals")
    daily.add_argument("user", help="GitHub username")

    trend = subparsers.add_parser("trend", help="Today compared with the weekly average")
    trend.add_argument("user", help="GitHub username")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    token = os.getenv("GITHUB_TOKEN")
    if not token:
        raise ValueError("GITHUB_TOKEN environment variable not set")

    options = {"observer": ignore_diagnostic if args.quiet else print_diagnostic}
    if args.source:
        options["activity_source"] = args.source
    builder = ActivityReportBuilder(**options)

    try:
        if args.report == "repo":
            result = builder.repo_commit_stats(token, args.user, args.repo, args.limit)
        elif args.report == "daily":
            result = builder.daily_commit_stats(token, args.user)
        else:
            result = builder.commit_trend(token, args.user)
    except ListFetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
