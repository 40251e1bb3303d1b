"""Diagnostic events emitted while paging and aggregating activity"""

import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional


PAGE_FETCHED = "page_fetched"
PAGE_FAILED = "page_failed"
LISTING_TRUNCATED = "listing_truncated"
REFERENCE_SKIPPED = "reference_skipped"
DETAIL_FAILED = "detail_failed"
AGGREGATE_COMPLETE = "aggregate_complete"
SHORT_LISTING = "short_listing"
WEEKLY_DEGRADED = "weekly_degraded"

ERROR_KINDS = {PAGE_FAILED, DETAIL_FAILED, WEEKLY_DEGRADED}


@dataclass(frozen=True)
class Diagnostic:
    """One skip, truncation or progress event"""

    kind: str
    message: str
    context: dict = field(default_factory=dict)


Observer = Callable[[Diagnostic], None]


def print_diagnostic(diagnostic: Diagnostic) -> None:
    """Default observer: progress lines to stdout, failures to stderr"""
    stream = sys.stderr if diagnostic.kind in ERROR_KINDS else sys.stdout
    print(f"  {diagnostic.message}", file=stream)


def ignore_diagnostic(diagnostic: Diagnostic) -> None:
    pass


def collect_diagnostics(sink: Optional[List[Diagnostic]] = None) -> Observer:
    """
    Build an observer that appends every diagnostic to a list

    Args:
        sink: List to append to (a new one is created if omitted)

    Returns:
        Observer callable; the list is exposed as its ``events`` attribute
    """
    events = sink if sink is not None else []

    def observer(diagnostic: Diagnostic) -> None:
        events.append(diagnostic)

    observer.events = events
    return observer


def emit(observer: Optional[Observer], kind: str, message: str, **context) -> None:
    """Send a diagnostic to ``observer``, falling back to printing"""
    (observer or print_diagnostic)(Diagnostic(kind, message, context))
