"""Tests for routing activated commands and results."""

from types import MappingProxyType
from unittest.mock import AsyncMock, MagicMock

import pytest

from rankbar.ui.command_palette.palette_commands import CommandCategory, PaletteCommand
from rankbar.ui.command_palette.palette_router import (
    FollowUp,
    ResultRouter,
    available_follow_ups,
    route_for_result,
)
from rankbar.ui.command_palette.streaming_runner import ResultKind, StreamingResult


def result(kind, message="x", **payload):
    return StreamingResult(kind, message, MappingProxyType(payload))


@pytest.fixture
def close():
    return MagicMock()


@pytest.fixture
def router(navigate, close):
    return ResultRouter(navigate=navigate, close=close)


class TestRouteForResult:
    def test_success_with_site(self):
        assert route_for_result(result(ResultKind.SUCCESS, site_id="site-42")) == "/sites/site-42/strategy"

    def test_site_id_is_escaped(self):
        assert route_for_result(result(ResultKind.SUCCESS, site_id="a/b c")) == "/sites/a%2Fb%20c/strategy"

    def test_content_keyword_is_escaped(self):
        route = route_for_result(result(ResultKind.CONTENT, keyword="best crm & tools"))
        assert route == "/content/new?keyword=best%20crm%20%26%20tools"

    def test_missing_payload(self):
        assert route_for_result(result(ResultKind.SUCCESS)) is None
        assert route_for_result(result(ResultKind.CONTENT)) is None

    def test_non_activatable_kinds(self):
        assert route_for_result(result(ResultKind.PROGRESS, site_id="s")) is None
        assert route_for_result(result(ResultKind.ERROR)) is None


class TestActivateResult:
    def test_content_navigates_and_closes(self, router, navigate, close):
        assert router.activate_result(result(ResultKind.CONTENT, keyword="best crm"))
        navigate.assert_called_once_with("/content/new?keyword=best%20crm")
        close.assert_called_once()

    @pytest.mark.parametrize("kind", [ResultKind.PROGRESS, ResultKind.SCORE, ResultKind.ISSUE, ResultKind.ERROR])
    def test_non_activatable_is_noop(self, router, navigate, close, kind):
        assert router.activate_result(result(kind, site_id="site-42", keyword="k")) is False
        navigate.assert_not_called()
        close.assert_not_called()

    def test_quick_win_without_keyword_is_noop(self, router, navigate, close):
        assert router.activate_result(result(ResultKind.CONTENT, impact="high")) is False
        navigate.assert_not_called()
        close.assert_not_called()


class TestActivateCommand:
    @pytest.mark.asyncio
    async def test_sync_action_closes(self, router, close):
        action = MagicMock()
        command = PaletteCommand("c", "Cmd", CommandCategory.ACTIONS, action=action)
        assert await router.activate_command(command)
        action.assert_called_once()
        close.assert_called_once()

    @pytest.mark.asyncio
    async def test_async_action_is_awaited(self, router, close):
        action = AsyncMock()
        command = PaletteCommand("c", "Cmd", CommandCategory.AI, action=action)
        assert await router.activate_command(command)
        action.assert_awaited_once()
        close.assert_called_once()

    @pytest.mark.asyncio
    async def test_priming_command_keeps_palette_open(self, router, close):
        command = PaletteCommand("c", "Cmd", CommandCategory.ACTIONS, action=MagicMock(), primes_input=True)
        assert await router.activate_command(command)
        close.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_action_keeps_palette_open(self, router, close):
        command = PaletteCommand("c", "Cmd", CommandCategory.ACTIONS, action=MagicMock(side_effect=RuntimeError("nope")))
        assert await router.activate_command(command) is False
        close.assert_not_called()

    @pytest.mark.asyncio
    async def test_command_without_action(self, router, close):
        command = PaletteCommand("c", "Cmd", CommandCategory.ACTIONS)
        assert await router.activate_command(command) is False
        close.assert_not_called()


class TestFollowUps:
    def test_none_while_running_or_empty(self):
        log = [result(ResultKind.PROGRESS)]
        assert available_follow_ups(log, is_running=True) == []
        assert available_follow_ups([], is_running=False) == []

    def test_error_log_offers_new_search(self):
        log = [result(ResultKind.PROGRESS), result(ResultKind.ERROR)]
        assert available_follow_ups(log, is_running=False) == [FollowUp.NEW_SEARCH]

    def test_full_analysis(self):
        log = [result(ResultKind.ISSUE), result(ResultKind.SUCCESS, site_id="s1")]
        assert available_follow_ups(log, is_running=False) == [
            FollowUp.NEW_SEARCH,
            FollowUp.VIEW_REPORT,
            FollowUp.VIEW_ISSUES,
        ]

    def test_labels(self):
        assert FollowUp.VIEW_REPORT.label == "View Full Report"
        assert FollowUp.VIEW_ISSUES.label == "View All Issues"

    def test_view_issues(self, router, navigate, close):
        assert router.view_issues([result(ResultKind.ISSUE)])
        navigate.assert_called_once_with("/audit")
        close.assert_called_once()

    def test_view_report_without_site(self, router, navigate):
        assert router.view_report([result(ResultKind.SUCCESS)]) is False
        navigate.assert_not_called()
