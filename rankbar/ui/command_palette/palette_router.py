"""
Routing for activated palette items.

Commands run their own action; streamed results map to a route based on
their kind and payload. A result without the payload its kind needs is
treated as a no-op rather than an error.
"""

import inspect
import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Optional
from urllib.parse import quote

from rankbar.config.constants import ROUTE_AUDIT, ROUTE_CONTENT_NEW, ROUTE_SITE_STRATEGY

from .palette_commands import PaletteCommand
from .streaming_runner import ResultKind, StreamingResult

logger = logging.getLogger(__name__)


class FollowUp(Enum):
    """Actions offered under a finished result log."""

    NEW_SEARCH = "new_search"
    VIEW_REPORT = "view_report"
    VIEW_ISSUES = "view_issues"

    @property
    def label(self) -> str:
        return {
            FollowUp.NEW_SEARCH: "New Search",
            FollowUp.VIEW_REPORT: "View Full Report",
            FollowUp.VIEW_ISSUES: "View All Issues",
        }[self]


def route_for_result(result: StreamingResult) -> Optional[str]:
    """Route an activatable result leads to, or None."""
    if result.kind is ResultKind.SUCCESS:
        site_id = result.payload.get("site_id")
        if site_id:
            return ROUTE_SITE_STRATEGY.format(site_id=quote(str(site_id), safe=""))
    elif result.kind is ResultKind.CONTENT:
        keyword = result.payload.get("keyword")
        if keyword:
            return f"{ROUTE_CONTENT_NEW}?keyword={quote(str(keyword), safe='')}"
    return None


def report_result(results: Sequence[StreamingResult]) -> Optional[StreamingResult]:
    """First success result that points at a site report."""
    for result in results:
        if result.kind is ResultKind.SUCCESS and result.payload.get("site_id"):
            return result
    return None


def available_follow_ups(results: Sequence[StreamingResult], is_running: bool) -> list[FollowUp]:
    if is_running or not results:
        return []
    follow_ups = [FollowUp.NEW_SEARCH]
    if report_result(results):
        follow_ups.append(FollowUp.VIEW_REPORT)
    if any(r.kind is ResultKind.ISSUE for r in results):
        follow_ups.append(FollowUp.VIEW_ISSUES)
    return follow_ups


class ResultRouter:
    """Performs the follow-up of an activated command or result."""

    def __init__(self, navigate: Callable[[str], None], close: Callable[[], None]):
        self._navigate = navigate
        self._close = close

    async def activate_command(self, command: PaletteCommand) -> bool:
        """Run a command's action and close the palette unless it primes the input.

        Returns True when the action completed.
        """
        if command.action is None:
            logger.debug(f"Command {command.id} has no action")
            return False
        try:
            outcome = command.action()
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Command {command.id} failed: {e}", exc_info=True)
            return False

        logger.debug(f"Executed command {command.id}")
        if not command.primes_input:
            self._close()
        return True

    def activate_result(self, result: StreamingResult) -> bool:
        """Navigate for an activatable result. Returns False for a no-op."""
        if not result.activatable:
            return False
        route = route_for_result(result)
        if route is None:
            logger.debug(f"{result.kind.value} result has nothing to open: {result.message}")
            return False
        self._navigate(route)
        self._close()
        return True

    def view_report(self, results: Sequence[StreamingResult]) -> bool:
        result = report_result(results)
        return self.activate_result(result) if result else False

    def view_issues(self, results: Sequence[StreamingResult]) -> bool:
        if not any(r.kind is ResultKind.ISSUE for r in results):
            return False
        self._navigate(ROUTE_AUDIT)
        self._close()
        return True
