"""
Configuration management module for tubedex.

Handles application settings, environment variables, retry and pacing
parameters, and extraction thresholds.
"""

from __future__ import annotations

__all__: list[str] = []
