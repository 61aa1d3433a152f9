"""
Command Palette - one input for commands, site analysis and content ideas.

Provides:
- classify: Input classification (search / url / ai)
- CommandCatalogue: Built-in and site-derived commands
- OperationRunner: Streaming runs with a typed result log
- PalettePresenter: Selection state machine behind the screen
- ResultRouter: Follow-up navigation for activated items
- CommandPaletteScreen: Textual modal overlay
"""

from .input_classifier import InputMode, classify
from .palette_commands import (
    CommandCatalogue,
    CommandCategory,
    PaletteCommand,
    filter_commands,
    flatten_groups,
)
from .palette_presenter import PalettePresenter, PaletteState, SelectionSpace
from .palette_router import FollowUp, ResultRouter
from .palette_screen import CommandPaletteScreen
from .streaming_runner import OperationRunner, ResultKind, StreamingResult

__all__ = [
    "CommandCatalogue",
    "CommandCategory",
    "CommandPaletteScreen",
    "FollowUp",
    "InputMode",
    "OperationRunner",
    "PaletteCommand",
    "PalettePresenter",
    "PaletteState",
    "ResultKind",
    "ResultRouter",
    "SelectionSpace",
    "StreamingResult",
    "classify",
    "filter_commands",
    "flatten_groups",
]
