"""TUI module for kubetop.

This module provides:
- KubetopApp: Main Textual application
- StatusBar: Round summary widget
- run_app: Entry point for launching the TUI
"""

from kubetop.tui.app import KubetopApp, StatusBar, run_app

__all__ = [
    "KubetopApp",
    "StatusBar",
    "run_app",
]
