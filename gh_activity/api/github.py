"""GitHub activity report endpoints"""

import os
from flask import Blueprint, current_app, jsonify, request

from gh_activity.config import DEFAULT_COMMIT_LIMIT
from gh_activity.github.activity_report import ActivityReportBuilder
from gh_activity.github.errors import ListFetchError

github_bp = Blueprint('github', __name__, url_prefix='/api')


def get_token():
    """GitHub token for this request, read from the environment"""
    return os.environ.get("GITHUB_TOKEN")


def get_report_builder() -> ActivityReportBuilder:
    """Builder used by the endpoints (replaceable in app.config for tests)"""
    factory = current_app.config.get("REPORT_BUILDER_FACTORY", ActivityReportBuilder)
    return factory()


def run_report(report_name: str, *args):
    """Run a report and turn it into a JSON response"""
    token = get_token()
    if not token:
        return jsonify({"error": "GITHUB_TOKEN not configured"}), 503

    try:
        report = getattr(get_report_builder(), report_name)
        result = report(token, *args)
        return jsonify(result.to_dict())
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except ListFetchError as e:
        return jsonify({"error": str(e)}), 502


@github_bp.route("/repo-commit-stats")
def get_repo_commit_stats():
    """Get line statistics of a repository's latest commits"""
    username = request.args.get("user")
    repo = request.args.get("repo")

    if not username or not repo:
        return jsonify({"error": "user and repo parameters required"}), 400

    try:
        limit = int(request.args.get("limit", DEFAULT_COMMIT_LIMIT))
    except ValueError:
        return jsonify({"error": "limit must be an integer"}), 400

    return run_report("repo_commit_stats", username, repo, limit)


@github_bp.route("/daily-commit-stats")
def get_daily_commit_stats():
    """Get today's commit statistics with the weekly totals"""
    username = request.args.get("user")

    if not username:
        return jsonify({"error": "user parameter required"}), 400

    return run_report("daily_commit_stats", username)


@github_bp.route("/commit-trend")
def get_commit_trend():
    """Get today's additions/deletions compared with the weekly average"""
    username = request.args.get("user")

    if not username:
        return jsonify({"error": "user parameter required"}), 400

    return run_report("commit_trend", username)
