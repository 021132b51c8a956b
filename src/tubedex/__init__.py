"""
tubedex - Static channel directory generator.

Scrapes public channel metadata (title, avatar, subscriber, view and upload
counts) from pages it does not control, reconciles the results across
sources, and writes a flat JSON directory for a static display layer.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "tubedex"
__email__ = "noreply@tubedex.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
