"""
Command catalogue and filtering for the command palette.

The catalogue is the built-in actions and navigation targets plus one entry
per site in the ``SiteRegistry``. Both halves are memoized projections of
the registry state: they are rebuilt only when the site list or the
selected site changes.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from rankbar.config.constants import (
    ROUTE_AUDIT,
    ROUTE_CONTENT,
    ROUTE_CONTENT_NEW,
    ROUTE_DASHBOARD,
    ROUTE_GEO,
    ROUTE_KEYWORDS,
    ROUTE_SETTINGS,
    ROUTE_SITE_STRATEGY,
    ROUTE_SITES,
)
from rankbar.services.site_registry import SiteRegistry
from rankbar.services.types import Site

logger = logging.getLogger(__name__)

CommandAction = Callable[[], Union[None, Awaitable[None]]]


class CommandCategory(Enum):
    """Command groups, in display and selection order."""

    ACTIONS = "actions"
    NAVIGATION = "navigation"
    AI = "ai"
    SITES = "sites"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    CommandCategory.ACTIONS: "Quick Actions",
    CommandCategory.NAVIGATION: "Navigation",
    CommandCategory.AI: "AI Commands",
    CommandCategory.SITES: "Your Sites",
}

GroupedCommands = dict[CommandCategory, list["PaletteCommand"]]


@dataclass
class PaletteCommand:
    """A command that can be executed from the palette."""

    id: str  # Unique within the catalogue, e.g. "nav-dashboard"
    title: str
    category: CommandCategory
    action: Optional[CommandAction] = None  # Sync or async, no arguments
    description: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    shortcut: Optional[str] = None  # Display only
    primes_input: bool = False  # Only pre-fills the input; palette stays open

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, description or keywords."""
        if query in self.title.lower():
            return True
        if self.description and query in self.description.lower():
            return True
        return any(query in keyword.lower() for keyword in self.keywords)


class CommandCatalogue:
    """Built-in commands plus commands derived from the site registry."""

    def __init__(
        self,
        navigate: Callable[[str], None],
        prime_input: Callable[[str], None],
        registry: Optional[SiteRegistry] = None,
    ):
        self._navigate = navigate
        self._prime_input = prime_input
        self._registry = registry or SiteRegistry()
        self._extra: list[PaletteCommand] = []
        self._static_key: Optional[tuple] = None
        self._static: list[PaletteCommand] = []
        self._sites_key: Optional[tuple] = None
        self._site_commands: list[PaletteCommand] = []

    @property
    def registry(self) -> SiteRegistry:
        return self._registry

    def register(self, command: PaletteCommand) -> None:
        """Add a command beyond the built-in set (e.g. to the AI group)."""
        if command.category is CommandCategory.SITES:
            raise ValueError("Site commands are derived from the site registry")
        if any(c.id == command.id for c in self.commands()):
            raise ValueError(f"Duplicate command id: {command.id}")
        self._extra.append(command)
        self._static_key = None
        logger.debug(f"Registered command: {command.id}")

    def commands(self) -> list[PaletteCommand]:
        """Non-site commands, rebuilt only when the selected site changes."""
        selected = self._registry.selected_site
        key = (selected, len(self._extra))
        if key != self._static_key:
            self._static = self._build_static(selected) + list(self._extra)
            self._static_key = key
        return self._static

    def site_commands(self) -> list[PaletteCommand]:
        """One command per site, keyed by site id rather than list position."""
        key = (self._registry.sites, self._registry.selected_site_id)
        if key != self._sites_key:
            self._site_commands = [
                self._site_command(site, key[1]) for site in self._registry.sites
            ]
            self._sites_key = key
        return self._site_commands

    def get(self, command_id: str) -> Optional[PaletteCommand]:
        for command in [*self.commands(), *self.site_commands()]:
            if command.id == command_id:
                return command
        return None

    def _site_command(self, site: Site, selected_id: Optional[str]) -> PaletteCommand:
        registry = self._registry
        return PaletteCommand(
            id=f"site-{site.id}",
            title=site.domain,
            category=CommandCategory.SITES,
            description="Currently selected" if site.id == selected_id else "Switch to this site",
            keywords=[site.domain],
            action=lambda: registry.select(site.id),
        )

    def _go(self, route: str) -> CommandAction:
        return lambda: self._navigate(route)

    def _export(self) -> None:
        selected = self._registry.selected_site
        if selected:
            self._navigate(ROUTE_SITE_STRATEGY.format(site_id=selected.id))
        else:
            self._navigate(ROUTE_SITES)

    def _build_static(self, selected: Optional[Site]) -> list[PaletteCommand]:
        actions = CommandCategory.ACTIONS
        navigation = CommandCategory.NAVIGATION
        return [
            PaletteCommand(
                id="action-analyze",
                title="Analyze Website",
                description="Paste any URL for instant SEO + AI visibility analysis",
                category=actions,
                action=lambda: self._prime_input("https://"),
                keywords=["url", "scan", "check", "audit"],
                primes_input=True,
            ),
            PaletteCommand(
                id="action-generate",
                title="Generate Content",
                description="Create SEO-optimized articles that rank",
                category=actions,
                shortcut="G",
                action=self._go(ROUTE_CONTENT_NEW),
                keywords=["write", "article", "blog", "post"],
            ),
            PaletteCommand(
                id="action-audit",
                title="Run SEO Audit",
                description=f"Audit {selected.domain}" if selected else "Find and fix SEO issues",
                category=actions,
                action=self._go(ROUTE_AUDIT),
                keywords=["issues", "problems", "fix", "scan"],
            ),
            PaletteCommand(
                id="action-keywords",
                title="Research Keywords",
                description="Find low-competition keywords to target",
                category=actions,
                shortcut="K",
                action=self._go(ROUTE_KEYWORDS),
                keywords=["research", "seo", "rank"],
            ),
            PaletteCommand(
                id="action-geo",
                title="Check GEO Score",
                description="See how AI assistants see your site",
                category=actions,
                action=self._go(ROUTE_GEO),
                keywords=["chatgpt", "perplexity", "claude", "ai"],
            ),
            PaletteCommand(
                id="action-export",
                title="Export for Cursor/Claude",
                description="Get improvements as markdown for AI coding",
                category=actions,
                action=self._export,
                keywords=["download", "markdown", "cursor", "claude"],
            ),
            PaletteCommand(
                id="nav-dashboard",
                title="Dashboard",
                description="Overview of all your sites",
                category=navigation,
                shortcut="D",
                action=self._go(ROUTE_DASHBOARD),
                keywords=["home", "main"],
            ),
            PaletteCommand(
                id="nav-content",
                title="Content Library",
                description="Manage your articles",
                category=navigation,
                shortcut="C",
                action=self._go(ROUTE_CONTENT),
                keywords=["articles", "posts"],
            ),
            PaletteCommand(
                id="nav-settings",
                title="Settings",
                description="Billing, integrations, account",
                category=navigation,
                shortcut="S",
                action=self._go(ROUTE_SETTINGS),
                keywords=["billing", "account", "integrations"],
            ),
        ]


def filter_commands(
    commands: Iterable[PaletteCommand],
    site_commands: Iterable[PaletteCommand],
    query: str,
    streaming: bool = False,
) -> GroupedCommands:
    """Group commands by category, keeping catalogue order within each group.

    An empty query or streaming mode returns every non-site command. Site
    commands match on title only and are left out while streaming.
    """
    groups: GroupedCommands = {category: [] for category in CommandCategory}
    needle = query.strip().lower()

    for command in commands:
        if command.category is CommandCategory.SITES:
            continue
        if streaming or not needle or command.matches(needle):
            groups[command.category].append(command)

    if not streaming:
        groups[CommandCategory.SITES] = [
            command
            for command in site_commands
            if not needle or needle in command.title.lower()
        ]

    return groups


def flatten_groups(groups: GroupedCommands) -> list[PaletteCommand]:
    """Selection order across groups: actions, navigation, ai, sites."""
    return [command for category in CommandCategory for command in groups.get(category, [])]
