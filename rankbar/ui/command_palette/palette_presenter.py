"""
Presenter for the command palette.

Owns the palette state machine: the input text and its classified mode, the
filtered command list, the streamed result log, and which entry is
highlighted. The screen forwards keys and text changes here and re-renders
from ``PaletteState`` whenever ``on_state_update`` fires.

Two selection spaces exist and only one is active at a time:
- COMMANDS (list mode): the grouped, filtered command catalogue
- RESULTS (streaming mode): the log of the current run
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from rankbar.config.constants import FALLBACK_IDEAS_MIN_LENGTH
from rankbar.services.site_registry import SiteRegistry
from rankbar.ui.palette_toggle import PaletteToggle

from .input_classifier import InputMode, classify
from .palette_commands import (
    CommandCatalogue,
    GroupedCommands,
    PaletteCommand,
    filter_commands,
    flatten_groups,
)
from .palette_router import FollowUp, ResultRouter, available_follow_ups
from .streaming_runner import AnalysisApi, OperationRunner, StreamingResult

logger = logging.getLogger(__name__)

DOWN_KEYS = ("down", "ctrl+n")
UP_KEYS = ("up", "ctrl+p")


class SelectionSpace(Enum):
    COMMANDS = "commands"
    RESULTS = "results"


@dataclass
class PaletteState:
    """Current state of the palette."""

    text: str = ""
    mode: InputMode = InputMode.SEARCH
    space: SelectionSpace = SelectionSpace.COMMANDS
    active_index: int = 0
    groups: GroupedCommands = field(default_factory=dict)
    commands: list[PaletteCommand] = field(default_factory=list)  # Flattened groups
    results: tuple[StreamingResult, ...] = ()
    is_running: bool = False
    submitted_text: str = ""  # Text the current run was started with
    follow_ups: list[FollowUp] = field(default_factory=list)

    @property
    def streaming(self) -> bool:
        return self.space is SelectionSpace.RESULTS

    @property
    def items(self) -> Union[list[PaletteCommand], tuple[StreamingResult, ...]]:
        return self.results if self.streaming else self.commands


class PalettePresenter:
    """Handles command palette business logic."""

    def __init__(
        self,
        api: AnalysisApi,
        registry: Optional[SiteRegistry] = None,
        navigate: Optional[Callable[[str], None]] = None,
        toggle: Optional[PaletteToggle] = None,
        on_state_update: Optional[Callable[[PaletteState], None]] = None,
        progress_pause: Optional[float] = None,
    ):
        self.on_state_update = on_state_update
        self.toggle = toggle or PaletteToggle()
        self.registry = registry if registry is not None else SiteRegistry()
        self._navigate_callback = navigate
        self.router = ResultRouter(navigate=self._navigate, close=self.close)
        self.catalogue = CommandCatalogue(
            navigate=self._navigate,
            prime_input=self.prime_input,
            registry=self.registry,
        )
        runner_options = {} if progress_pause is None else {"progress_pause": progress_pause}
        self.runner = OperationRunner(
            api,
            registry=self.registry,
            on_result=self._on_result,
            on_running_change=self._on_running_change,
            **runner_options,
        )
        self._state = PaletteState()
        self._unsubscribers = [
            self.toggle.subscribe(self._on_toggle),
            self.registry.subscribe(self._on_catalogue_change),
        ]
        self._refresh_commands()

    @property
    def state(self) -> PaletteState:
        """Get current state."""
        return self._state

    @property
    def is_open(self) -> bool:
        return self.toggle.is_open

    def _notify_update(self) -> None:
        """Notify listeners of state change."""
        if self.on_state_update:
            self.on_state_update(self._state)

    def _navigate(self, route: str) -> None:
        logger.info(f"Navigating to {route}")
        if self._navigate_callback:
            self._navigate_callback(route)

    def detach(self) -> None:
        """Stop listening to the toggle and the registry."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open the palette, starting from a clean state."""
        if self.toggle.is_open:
            self.reset()
        else:
            self.toggle.open()

    def close(self) -> None:
        self.toggle.close()

    def _on_toggle(self, is_open: bool) -> None:
        if is_open:
            self.reset()

    def reset(self) -> None:
        """Clear text, results, running flag and selection; back to list mode."""
        self.runner.reset()
        self._state = PaletteState()
        self._refresh_commands()
        self._notify_update()

    # ------------------------------------------------------------------
    # Text and command list
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Handle an input change."""
        self._state.text = text
        self._state.mode = classify(text)
        self._state.active_index = 0
        self._refresh_commands()
        self._notify_update()

    def prime_input(self, text: str) -> None:
        """Pre-fill the input (used by commands that keep the palette open)."""
        self.set_text(text)

    def _refresh_commands(self) -> None:
        state = self._state
        state.groups = filter_commands(
            self.catalogue.commands(),
            self.catalogue.site_commands(),
            state.text,
            streaming=state.streaming,
        )
        state.commands = flatten_groups(state.groups)
        self._clamp_selection()

    def _on_catalogue_change(self) -> None:
        self._refresh_commands()
        if not self._state.streaming:
            self._state.active_index = 0
        self._notify_update()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _clamp_selection(self) -> None:
        count = len(self._state.items)
        self._state.active_index = max(0, min(self._state.active_index, count - 1))

    def move_selection(self, delta: int) -> None:
        """Move selection up or down, clamped to the active space."""
        if not self._state.items:
            return
        self._state.active_index += delta
        self._clamp_selection()
        self._notify_update()

    def hover(self, index: int) -> None:
        """Highlight the entry under the pointer."""
        self._state.active_index = index
        self._clamp_selection()
        self._notify_update()

    def get_selected_command(self) -> Optional[PaletteCommand]:
        if self._state.streaming or not self._state.commands:
            return None
        return self._state.commands[self._state.active_index]

    def get_selected_result(self) -> Optional[StreamingResult]:
        if not self._state.streaming or not self._state.results:
            return None
        return self._state.results[self._state.active_index]

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    async def handle_key(self, key: str) -> bool:
        """Handle a palette key. Returns True if the key was consumed."""
        if key in DOWN_KEYS:
            self.move_selection(1)
        elif key in UP_KEYS:
            self.move_selection(-1)
        elif key == "enter":
            await self.submit()
        elif key == "escape":
            self.escape()
        else:
            return False
        return True

    def escape(self) -> None:
        """Leave streaming mode, or close the palette from list mode."""
        if self._state.streaming:
            self.new_search()
        else:
            self.close()

    async def submit(self) -> bool:
        """Handle Enter.

        URL and AI text starts a run even when a command is highlighted.
        After a run, Enter on the unchanged text opens the highlighted
        result rather than running again; edited text or a new search starts
        a fresh run. Search text that matches no command asks for ideas instead.
        """
        state = self._state
        text = state.text.strip()
        if self.runner.is_running:
            return False

        if state.streaming and text == state.submitted_text:
            return self.activate_selected_result()

        if text and state.mode in (InputMode.URL, InputMode.AI):
            await self.start_run(state.mode, text)
            return True

        if state.streaming:
            return self.activate_selected_result()

        command = self.get_selected_command()
        if command is not None:
            return await self.activate_command(command)

        if len(text) > FALLBACK_IDEAS_MIN_LENGTH:
            await self.start_run(InputMode.AI, text)
            return True
        return False

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def start_run(self, mode: InputMode, text: str) -> None:
        """Switch to streaming mode and run to completion."""
        state = self._state
        state.space = SelectionSpace.RESULTS
        state.submitted_text = text.strip()
        state.results = ()
        state.active_index = 0
        state.follow_ups = []
        self._refresh_commands()
        self._notify_update()
        await self.runner.run(mode, text)

    def _on_result(self, result: StreamingResult) -> None:
        self._state.results = self.runner.log
        self._clamp_selection()
        self._notify_update()

    def _on_running_change(self, running: bool) -> None:
        self._state.is_running = running
        self._state.follow_ups = available_follow_ups(self._state.results, running)
        self._notify_update()

    def new_search(self) -> None:
        """Drop the current run and go back to the command list."""
        self.runner.reset()
        state = self._state
        state.space = SelectionSpace.COMMANDS
        state.text = ""
        state.mode = InputMode.SEARCH
        state.submitted_text = ""
        state.results = ()
        state.follow_ups = []
        state.is_running = False
        state.active_index = 0
        self._refresh_commands()
        self._notify_update()

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    async def activate_command(self, command: PaletteCommand) -> bool:
        return await self.router.activate_command(command)

    def activate_result(self, result: StreamingResult) -> bool:
        return self.router.activate_result(result)

    def activate_selected_result(self) -> bool:
        result = self.get_selected_result()
        return self.activate_result(result) if result else False

    async def activate_index(self, index: int) -> bool:
        """Activate the entry at ``index`` of the active space (mouse click)."""
        self.hover(index)
        if self._state.streaming:
            return self.activate_selected_result()
        command = self.get_selected_command()
        return await self.activate_command(command) if command else False

    def run_follow_up(self, follow_up: FollowUp) -> bool:
        if follow_up not in self._state.follow_ups:
            return False
        if follow_up is FollowUp.NEW_SEARCH:
            self.new_search()
            return True
        if follow_up is FollowUp.VIEW_REPORT:
            return self.router.view_report(self._state.results)
        return self.router.view_issues(self._state.results)
