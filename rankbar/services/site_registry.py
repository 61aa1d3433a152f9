"""
In-memory registry of the user's sites and the current selection.

The command palette derives its "sites" commands from this registry and the
streaming runner refreshes it after a successful analysis. Listeners are
called after every change so derived views can recompute.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Optional, Protocol

from .types import Site

logger = logging.getLogger(__name__)


class SiteSource(Protocol):
    async def list_sites(self) -> list[Site]: ...


class SiteRegistry:
    """Holds the site list and which site is selected."""

    def __init__(self, source: Optional[SiteSource] = None, sites: Iterable[Site] = ()):
        self._source = source
        self._sites: tuple[Site, ...] = tuple(sites)
        self._selected_id: Optional[str] = None
        self._listeners: list[Callable[[], None]] = []

    @property
    def sites(self) -> tuple[Site, ...]:
        return self._sites

    @property
    def selected_site_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_site(self) -> Optional[Site]:
        return self.get(self._selected_id) if self._selected_id else None

    def get(self, site_id: str) -> Optional[Site]:
        for site in self._sites:
            if site.id == site_id:
                return site
        return None

    def list_sites(self) -> list[Site]:
        return list(self._sites)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def set_sites(self, sites: Iterable[Site]) -> None:
        """Replace the site list, dropping a selection that no longer exists."""
        self._sites = tuple(sites)
        if self._selected_id and self.get(self._selected_id) is None:
            self._selected_id = None
        self._notify()

    def select(self, site_id: str) -> None:
        """Select a site by id. Unknown ids are kept until the next refresh."""
        if site_id == self._selected_id:
            return
        if self.get(site_id) is None:
            logger.debug(f"Selecting site {site_id} that is not loaded yet")
        self._selected_id = site_id
        self._notify()

    async def refresh(self) -> None:
        """Reload the site list from the source, if there is one."""
        if self._source is None:
            return
        sites = await self._source.list_sites()
        logger.debug(f"Loaded {len(sites)} sites")
        self.set_sites(sites)
