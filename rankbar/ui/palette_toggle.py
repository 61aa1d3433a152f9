"""
Shared open/closed signal for the command palette.

The app shell owns one ``PaletteToggle`` and hands it to the palette and to
anything else that can open it (key bindings, trigger buttons).
"""

from collections.abc import Callable


class PaletteToggle:
    """Observable boolean with a setter and a toggle."""

    def __init__(self, is_open: bool = False):
        self._is_open = is_open
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def is_open(self) -> bool:
        return self._is_open

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        """Call ``listener(is_open)`` on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, is_open: bool) -> None:
        if is_open == self._is_open:
            return
        self._is_open = is_open
        for listener in list(self._listeners):
            listener(is_open)

    def open(self) -> None:
        self.set(True)

    def close(self) -> None:
        self.set(False)

    def toggle(self) -> None:
        self.set(not self._is_open)
