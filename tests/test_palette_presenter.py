"""Tests for the palette selection state machine."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from rankbar.exceptions import ApiConnectionError
from rankbar.services.types import Site
from rankbar.ui.command_palette.input_classifier import InputMode
from rankbar.ui.command_palette.palette_presenter import PalettePresenter, SelectionSpace
from rankbar.ui.command_palette.palette_router import FollowUp
from rankbar.ui.command_palette.streaming_runner import ResultKind
from rankbar.ui.palette_toggle import PaletteToggle


class TestOpenAndReset:
    """Opening the palette always starts clean."""

    def test_open_state(self, presenter):
        state = presenter.state
        assert presenter.is_open
        assert state.text == ""
        assert state.space is SelectionSpace.COMMANDS
        assert state.active_index == 0
        assert state.results == ()
        assert state.is_running is False
        assert len(state.commands) == 11  # 6 actions, 3 navigation, 2 sites

    @pytest.mark.asyncio
    async def test_reopen_resets_everything(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()
        presenter.move_selection(2)
        assert presenter.state.results

        presenter.close()
        presenter.open()

        state = presenter.state
        assert state.text == ""
        assert state.results == ()
        assert presenter.runner.log == ()
        assert state.is_running is False
        assert state.active_index == 0
        assert state.space is SelectionSpace.COMMANDS

    def test_toggle_from_elsewhere_opens_and_resets(self, mock_api, registry):
        toggle = PaletteToggle()
        palette = PalettePresenter(mock_api, registry=registry, toggle=toggle, progress_pause=0)
        palette.set_text("dash")

        toggle.toggle()
        assert palette.is_open
        assert palette.state.text == ""

        toggle.toggle()
        assert not palette.is_open

    def test_state_updates_are_published(self, presenter):
        updates = MagicMock()
        presenter.on_state_update = updates
        presenter.set_text("set")
        updates.assert_called_with(presenter.state)


class TestTextAndSelection:
    """Filtering and keyboard selection in list mode."""

    def test_text_change_filters_and_resets_selection(self, presenter):
        presenter.move_selection(3)
        presenter.set_text("dash")
        assert presenter.state.active_index == 0
        assert [c.id for c in presenter.state.commands] == ["nav-dashboard"]

    def test_text_change_reclassifies(self, presenter):
        presenter.set_text("acme.com")
        assert presenter.state.mode is InputMode.URL
        presenter.set_text("email marketing for small agencies")
        assert presenter.state.mode is InputMode.AI
        presenter.set_text("seo")
        assert presenter.state.mode is InputMode.SEARCH

    @pytest.mark.asyncio
    async def test_arrow_keys_clamp_without_wraparound(self, presenter):
        presenter.set_text("site")
        count = len(presenter.state.commands)
        assert count == 3

        await presenter.handle_key("down")
        await presenter.handle_key("down")
        assert presenter.state.active_index == 2
        await presenter.handle_key("down")
        assert presenter.state.active_index == 2

        await presenter.handle_key("up")
        await presenter.handle_key("ctrl+p")
        assert presenter.state.active_index == 0
        await presenter.handle_key("up")
        assert presenter.state.active_index == 0

    def test_move_on_empty_list_is_noop(self, presenter):
        presenter.set_text("zzzz")
        presenter.move_selection(1)
        assert presenter.state.active_index == 0

    def test_hover_sets_highlight(self, presenter):
        presenter.hover(4)
        assert presenter.state.active_index == 4
        presenter.hover(99)
        assert presenter.state.active_index == len(presenter.state.commands) - 1

    def test_catalogue_update_resets_selection(self, presenter, registry):
        presenter.move_selection(5)
        registry.set_sites([Site("site-3", "third.io")])
        assert presenter.state.active_index == 0
        assert presenter.state.commands[-1].id == "site-site-3"

    @pytest.mark.asyncio
    async def test_unknown_key_not_consumed(self, presenter):
        assert await presenter.handle_key("tab") is False


class TestEnter:
    """Enter in list mode."""

    @pytest.mark.asyncio
    async def test_enter_activates_highlighted_command(self, presenter, navigate):
        presenter.set_text("dash")
        await presenter.handle_key("enter")
        navigate.assert_called_once_with("/dashboard")
        assert not presenter.is_open

    @pytest.mark.asyncio
    async def test_enter_on_url_runs_even_with_command_highlighted(self, presenter, mock_api):
        presenter.set_text("acme.com")
        presenter.hover(0)
        await presenter.handle_key("enter")

        mock_api.analyze_site.assert_awaited_once_with("acme.com")
        assert presenter.state.space is SelectionSpace.RESULTS
        assert presenter.state.results[-1].kind is ResultKind.SUCCESS
        assert presenter.is_open

    @pytest.mark.asyncio
    async def test_enter_on_ai_text_generates_ideas(self, presenter, mock_api):
        presenter.set_text("email marketing for small agencies")
        await presenter.handle_key("enter")
        mock_api.generate_ideas.assert_awaited_once()
        assert presenter.state.streaming

    @pytest.mark.asyncio
    async def test_unmatched_search_text_asks_for_ideas(self, presenter, mock_api):
        presenter.set_text("zebra")
        assert presenter.state.commands == []
        await presenter.handle_key("enter")
        mock_api.generate_ideas.assert_awaited_once_with("zebra", count=5)

    @pytest.mark.asyncio
    async def test_short_unmatched_search_does_nothing(self, presenter, mock_api):
        presenter.set_text("zzz")
        assert await presenter.submit() is False
        mock_api.generate_ideas.assert_not_awaited()
        assert presenter.state.space is SelectionSpace.COMMANDS

    @pytest.mark.asyncio
    async def test_analyze_command_primes_input_and_stays_open(self, presenter):
        presenter.set_text("analyze")
        await presenter.handle_key("enter")
        assert presenter.is_open
        assert presenter.state.text == "https://"

    @pytest.mark.asyncio
    async def test_enter_ignored_while_running(self, presenter, mock_api, sample_report):
        release = asyncio.Event()

        async def slow_analysis(domain):
            await release.wait()
            return sample_report

        mock_api.analyze_site = AsyncMock(side_effect=slow_analysis)
        presenter.set_text("acme.com")
        task = asyncio.create_task(presenter.submit())
        await asyncio.sleep(0)
        assert presenter.state.is_running

        assert await presenter.submit() is False
        release.set()
        await task
        mock_api.analyze_site.assert_awaited_once()


class TestStreamingMode:
    """Navigation over the result log."""

    @pytest.mark.asyncio
    async def test_arrows_move_over_results(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()
        count = len(presenter.state.results)

        for _ in range(count + 3):
            await presenter.handle_key("down")
        assert presenter.state.active_index == count - 1
        assert presenter.get_selected_result().kind is ResultKind.SUCCESS

    @pytest.mark.asyncio
    async def test_enter_opens_highlighted_result(self, presenter, navigate, mock_api):
        presenter.set_text("acme.com")
        await presenter.submit()
        presenter.hover(len(presenter.state.results) - 1)

        await presenter.handle_key("enter")
        navigate.assert_called_once_with("/sites/site-42/strategy")
        assert not presenter.is_open
        mock_api.analyze_site.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enter_on_progress_result_is_noop(self, presenter, navigate):
        presenter.set_text("acme.com")
        await presenter.submit()
        presenter.hover(0)

        assert await presenter.submit() is False
        navigate.assert_not_called()
        assert presenter.is_open

    @pytest.mark.asyncio
    async def test_edited_url_starts_new_run(self, presenter, mock_api):
        presenter.set_text("acme.com")
        await presenter.submit()
        presenter.set_text("other.org")
        await presenter.submit()

        assert mock_api.analyze_site.await_count == 2
        assert presenter.state.results[0].message == "Connecting to other.org..."

    @pytest.mark.asyncio
    async def test_escape_returns_to_list_mode(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()

        await presenter.handle_key("escape")
        state = presenter.state
        assert presenter.is_open
        assert state.space is SelectionSpace.COMMANDS
        assert state.text == ""
        assert state.results == ()
        assert presenter.runner.log == ()

    @pytest.mark.asyncio
    async def test_escape_in_list_mode_closes(self, presenter):
        await presenter.handle_key("escape")
        assert not presenter.is_open

    @pytest.mark.asyncio
    async def test_commands_unfiltered_while_streaming(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()
        assert len(presenter.state.commands) == 9  # no sites while streaming

    @pytest.mark.asyncio
    async def test_failed_run_offers_only_new_search(self, presenter, mock_api):
        mock_api.analyze_site.side_effect = ApiConnectionError("offline")
        presenter.set_text("acme.com")
        await presenter.submit()

        assert presenter.state.results[-1].kind is ResultKind.ERROR
        assert presenter.state.is_running is False
        assert presenter.state.follow_ups == [FollowUp.NEW_SEARCH]


class TestFollowUps:
    """Actions under a finished log."""

    @pytest.mark.asyncio
    async def test_follow_ups_after_analysis(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()
        assert presenter.state.follow_ups == [
            FollowUp.NEW_SEARCH,
            FollowUp.VIEW_REPORT,
            FollowUp.VIEW_ISSUES,
        ]

    @pytest.mark.asyncio
    async def test_view_issues_goes_to_audit(self, presenter, navigate):
        presenter.set_text("acme.com")
        await presenter.submit()
        assert presenter.run_follow_up(FollowUp.VIEW_ISSUES)
        navigate.assert_called_once_with("/audit")
        assert not presenter.is_open

    @pytest.mark.asyncio
    async def test_view_report(self, presenter, navigate):
        presenter.set_text("acme.com")
        await presenter.submit()
        assert presenter.run_follow_up(FollowUp.VIEW_REPORT)
        navigate.assert_called_once_with("/sites/site-42/strategy")

    @pytest.mark.asyncio
    async def test_new_search(self, presenter):
        presenter.set_text("acme.com")
        await presenter.submit()
        assert presenter.run_follow_up(FollowUp.NEW_SEARCH)
        assert presenter.state.space is SelectionSpace.COMMANDS
        assert presenter.state.text == ""

    @pytest.mark.asyncio
    async def test_idea_run_has_no_report_or_issues(self, presenter):
        presenter.set_text("email marketing for small agencies")
        await presenter.submit()
        assert presenter.state.follow_ups == [FollowUp.NEW_SEARCH]
        assert presenter.run_follow_up(FollowUp.VIEW_REPORT) is False
