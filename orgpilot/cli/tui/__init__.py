"""Textual organisation browser."""

from orgpilot.cli.tui.app import OrgBrowserApp

__all__ = ["OrgBrowserApp"]
