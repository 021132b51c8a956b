"""
CLI interface module for tubedex.

Provides the Typer-based command-line interface for building the channel
directory and browsing it in the terminal.
"""

from __future__ import annotations

__all__: list[str] = []
