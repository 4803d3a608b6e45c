"""
Application Shell

Tab navigation over the four flows, the shared ledger, configuration and the
HTTP surface.
"""

from .app import RewardsApp, Tab, ShellState
from .config import Settings, get_settings

__all__ = [
    "RewardsApp",
    "Tab",
    "ShellState",
    "Settings",
    "get_settings",
]
