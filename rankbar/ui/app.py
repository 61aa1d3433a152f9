#!/usr/bin/env python3
"""
rankbar TUI shell - hosts the command palette behind ctrl+k.
"""

import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from rankbar.config.constants import ROUTE_DASHBOARD
from rankbar.exceptions import ApiError
from rankbar.services.site_api import SiteApiClient
from rankbar.services.site_registry import SiteRegistry

from .command_palette import CommandPaletteScreen, PalettePresenter
from .palette_toggle import PaletteToggle

logger = logging.getLogger(__name__)


class RankbarApp(App):
    """Minimal shell: shows the current route and site, opens the palette."""

    TITLE = "rankbar"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #shell {
        padding: 1 2;
    }

    #route {
        text-style: bold;
    }

    #site {
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("ctrl+k", "toggle_palette", "Command palette", priority=True),
        Binding("q", "quit", "Quit"),
    ]

    current_route = reactive(ROUTE_DASHBOARD)

    def __init__(
        self,
        api: Optional[SiteApiClient] = None,
        registry: Optional[SiteRegistry] = None,
        open_palette: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api = api or SiteApiClient()
        self.registry = registry or SiteRegistry(source=self.api)
        self.toggle = PaletteToggle()
        self.presenter = PalettePresenter(
            self.api,
            registry=self.registry,
            navigate=self.navigate,
            toggle=self.toggle,
        )
        self._open_on_mount = open_palette
        self.toggle.subscribe(self._on_palette_toggle)
        self.registry.subscribe(self._show_site)

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="shell"):
            yield Static(f"Current page: {self.current_route}", id="route")
            yield Static("No site selected", id="site")
            yield Static("[dim]Press ctrl+k to paste a URL, ask for ideas or run a command[/dim]")
        yield Footer()

    async def on_mount(self) -> None:
        self.run_worker(self._load_sites(), group="sites")
        if self._open_on_mount:
            self.toggle.open()

    async def _load_sites(self) -> None:
        try:
            await self.registry.refresh()
        except ApiError as e:
            logger.warning(f"Could not load sites: {e}")
            self.notify(f"Could not load sites: {e.message}", severity="warning")

    def _show_site(self) -> None:
        site = self.registry.selected_site
        text = f"Site: {site.domain}" if site else "No site selected"
        try:
            self.query_one("#site", Static).update(text)
        except NoMatches:
            pass

    def watch_current_route(self, route: str) -> None:
        try:
            self.query_one("#route", Static).update(f"Current page: {route}")
        except NoMatches:
            pass

    def navigate(self, route: str) -> None:
        self.current_route = route

    def _on_palette_toggle(self, is_open: bool) -> None:
        if is_open:
            self.push_screen(CommandPaletteScreen(self.presenter))
        elif isinstance(self.screen, CommandPaletteScreen):
            self.pop_screen()

    def action_toggle_palette(self) -> None:
        self.toggle.toggle()
