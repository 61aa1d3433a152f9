"""Utility modules for rankbar."""
