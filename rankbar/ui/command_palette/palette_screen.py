"""
Command Palette Screen - modal overlay over the rankbar app.

Renders ``PaletteState`` and forwards input to ``PalettePresenter``. Opening
and closing is driven by the app's ``PaletteToggle``, not by this screen.
"""

import logging
from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Input, ListItem, ListView, Static

from .input_classifier import InputMode
from .palette_commands import CommandCategory
from .palette_presenter import PalettePresenter, PaletteState
from .palette_router import FollowUp
from .streaming_runner import ResultKind, StreamingResult

logger = logging.getLogger(__name__)

RESULT_ICONS = {
    ResultKind.PROGRESS: ("…", "dim"),
    ResultKind.SCORE: ("▲", "blue"),
    ResultKind.ISSUE: ("⚠", "yellow"),
    ResultKind.CONTENT: ("💡", "bold"),
    ResultKind.SUCCESS: ("✔", "bold green"),
    ResultKind.ERROR: ("✖", "red"),
}

MODE_BADGES = {
    InputMode.URL: "URL → Enter to analyze",
    InputMode.AI: "Topic → Enter for ideas",
    InputMode.SEARCH: "Search",
}


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


class PaletteRow(ListItem):
    """One row of the palette list.

    ``entry_index`` points into the presenter's active space; headers and
    empty-state rows have none. Follow-up rows carry ``follow_up``.
    """

    DEFAULT_CSS = """
    PaletteRow {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        markup: str,
        entry_index: Optional[int] = None,
        follow_up: Optional[FollowUp] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.row_markup = markup
        self.entry_index = entry_index
        self.follow_up = follow_up

    def compose(self) -> ComposeResult:
        yield Static(self.row_markup)


def _result_markup(result: StreamingResult) -> str:
    icon, style = RESULT_ICONS[result.kind]
    line = f"[{style}]{icon} {_truncate(result.message, 60)}[/{style}]"
    if result.subtitle:
        line += f"\n   [dim]{_truncate(result.subtitle, 60)}[/dim]"
    if result.activatable:
        line += "  →"
    return line


def build_rows(state: PaletteState, selected_site_id: Optional[str] = None) -> list[PaletteRow]:
    """Turn palette state into list rows."""
    rows: list[PaletteRow] = []

    if state.streaming:
        for index, result in enumerate(state.results):
            rows.append(PaletteRow(_result_markup(result), entry_index=index))
        for follow_up in state.follow_ups:
            rows.append(PaletteRow(f"[reverse] {follow_up.label} [/reverse]", follow_up=follow_up))
        return rows

    if not state.commands and state.text.strip():
        rows.append(
            PaletteRow(
                "[dim]No commands found\n"
                f"Press Enter to search for “{_truncate(state.text.strip(), 40)}”[/dim]"
            )
        )
        return rows

    index = 0
    for category in CommandCategory:
        commands = state.groups.get(category, [])
        if not commands:
            continue
        rows.append(PaletteRow(f"[dim]{category.label.upper()}[/dim]", disabled=True))
        for command in commands:
            line = f"▶ {_truncate(command.title, 40)}"
            if command.description:
                line += f"  [dim]{_truncate(command.description, 40)}[/dim]"
            if command.shortcut:
                line += f"  [dim]⌘{command.shortcut}[/dim]"
            if selected_site_id and command.id == f"site-{selected_site_id}":
                line += "  [reverse] Current [/reverse]"
            rows.append(PaletteRow(line, entry_index=index))
            index += 1
    return rows


class CommandPaletteScreen(ModalScreen):
    """Command palette modal overlay."""

    CSS = """
    CommandPaletteScreen {
        align: center top;
        padding-top: 5;
    }

    #palette-container {
        width: 80;
        height: auto;
        max-height: 30;
        background: $surface;
        border: solid $primary;
    }

    #palette-input {
        width: 100%;
        height: 3;
        border: none;
        border-bottom: solid $primary-darken-1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #palette-mode {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #palette-results {
        height: auto;
        max-height: 20;
        min-height: 5;
        padding: 0;
    }

    #palette-hints {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
    }

    PaletteRow.--highlight {
        background: $accent;
    }
    """

    BINDINGS = [
        Binding("ctrl+k", "close_palette", "Close", show=False),
        Binding("ctrl+r", "follow_up('new_search')", "New search", show=False),
        Binding("ctrl+o", "follow_up('view_report')", "View report", show=False),
        Binding("ctrl+e", "follow_up('view_issues')", "View issues", show=False),
    ]

    def __init__(self, presenter: PalettePresenter, **kwargs):
        super().__init__(**kwargs)
        self.presenter = presenter
        self.presenter.on_state_update = self._on_state_update
        self._render_id = 0

    def compose(self) -> ComposeResult:
        with Vertical(id="palette-container"):
            yield Input(
                placeholder="Paste URL, enter keyword, or search commands...",
                id="palette-input",
            )
            yield Static("", id="palette-mode")
            yield ListView(id="palette-results")
            yield Static("", id="palette-hints")

    async def on_mount(self) -> None:
        self.query_one("#palette-input", Input).focus()
        await self._render_state(self.presenter.state, self._render_id)

    def on_unmount(self) -> None:
        if self.presenter.on_state_update == self._on_state_update:
            self.presenter.on_state_update = None

    def _on_state_update(self, state: PaletteState) -> None:
        """Schedule a render; only the newest scheduled render runs."""
        self._render_id += 1
        self.call_later(self._render_state, state, self._render_id)

    async def _render_state(self, state: PaletteState, render_id: int) -> None:
        if render_id != self._render_id:
            return
        try:
            input_widget = self.query_one("#palette-input", Input)
            results_view = self.query_one("#palette-results", ListView)
            mode_label = self.query_one("#palette-mode", Static)
            hints = self.query_one("#palette-hints", Static)
        except NoMatches:
            return

        if input_widget.value != state.text:
            input_widget.value = state.text
        input_widget.disabled = state.is_running
        if state.streaming:
            input_widget.placeholder = "Press Esc to go back..."
        else:
            input_widget.placeholder = "Paste URL, enter keyword, or search commands..."
        if not state.is_running and not input_widget.has_focus:
            input_widget.focus()

        if state.is_running:
            mode_label.update("[b]Working…[/b]")
        elif state.text and not state.streaming:
            mode_label.update(MODE_BADGES[state.mode])
        else:
            mode_label.update("")

        enter_hint = {InputMode.URL: "analyze", InputMode.AI: "search"}.get(state.mode, "select")
        escape_hint = "back" if state.streaming else "close"
        site = self.presenter.registry.selected_site
        site_hint = f"  │  🌐 {site.domain}" if site else ""
        hints.update(f"↵ {enter_hint}  │  esc {escape_hint}  │  ↑↓ navigate{site_hint}")

        rows = build_rows(state, self.presenter.registry.selected_site_id)
        await results_view.clear()
        await results_view.extend(rows)
        for row_number, row in enumerate(rows):
            if row.entry_index == state.active_index:
                results_view.index = row_number
                break

    async def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "palette-input":
            return
        if event.value != self.presenter.state.text:
            self.presenter.set_text(event.value)

    async def on_key(self, event) -> None:
        """Route palette keys to the presenter."""
        key = event.key
        if key == "enter":
            event.stop()
            event.prevent_default()
            self.run_worker(self.presenter.handle_key(key), group="palette-submit")
        elif key in ("up", "down", "ctrl+p", "ctrl+n", "escape"):
            event.stop()
            event.prevent_default()
            await self.presenter.handle_key(key)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        row = event.item
        if not isinstance(row, PaletteRow):
            return
        if row.follow_up is not None:
            self.presenter.run_follow_up(row.follow_up)
        elif row.entry_index is not None:
            await self.presenter.activate_index(row.entry_index)

    def action_close_palette(self) -> None:
        self.presenter.close()

    def action_follow_up(self, name: str) -> None:
        self.presenter.run_follow_up(FollowUp(name))
