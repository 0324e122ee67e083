"""
Default include patterns for entry document discovery.

Patterns use gitignore wildcard syntax, anchored at the directory they are
expanded from.
"""

from __future__ import annotations

DEFAULT_INCLUDES: list[str] = ["**/*.html"]
