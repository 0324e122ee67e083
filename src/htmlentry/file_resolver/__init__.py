"""
Glob expansion for entry documents and exclusion sets.

Usage::

    from htmlentry.file_resolver import PatternResolver

    resolver = PatternResolver()
    excluded = resolver.expand(["vendor/**/*.html"])
    entries = resolver.entry_documents(["**/*.html"], excluded, set())
"""

from htmlentry.file_resolver.defaults import DEFAULT_INCLUDES
from htmlentry.file_resolver.resolver import PatternResolver, split_pattern

__all__ = [
    "DEFAULT_INCLUDES",
    "PatternResolver",
    "split_pattern",
]
