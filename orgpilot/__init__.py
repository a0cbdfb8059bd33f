"""OrgPilot organisation hierarchy navigation and view-state persistence."""

__version__ = "0.1.0"
