"""Textual user interface for rankbar."""
