"""Centralized configuration for the activity stats service"""


# =============================================================================
# GitHub API Configuration
# =============================================================================

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "gh-activity-stats"

# Seconds, passed straight to requests
REQUEST_TIMEOUT = 30

# Largest page size the REST API accepts
DEFAULT_PER_PAGE = 100

# Search API never returns more than this many results for one query
SEARCH_RESULT_CEILING = 1000

# Events API only serves the last 300 events; pages past that are refused
EVENTS_RESULT_CEILING = 300

# Cap on references collected per activity walk
ACTIVITY_MAX_ITEMS = 1000


# =============================================================================
# Repository Report Configuration
# =============================================================================

DEFAULT_COMMIT_LIMIT = 20
REPO_COMMITS_MAX = 100


# =============================================================================
# Aggregation Configuration
# =============================================================================

# Upper bound on concurrent commit detail requests
DETAIL_FETCH_MAX_WORKERS = 10


# =============================================================================
# Activity / Trend Report Configuration
# =============================================================================

TREND_WINDOW_DAYS = 7

# "search" (commit search API) or "events" (public events stream)
ACTIVITY_SOURCE = "search"

# When False, a failed first page of the weekly listing degrades to a zero baseline
TREND_WEEKLY_LISTING_REQUIRED = True

# Timezone used to decide where "today" starts
REPORT_TIMEZONE = "UTC"
