"""
htmlentry: turn the scripts embedded in HTML documents into one entry module.

Usage::

    from htmlentry import HtmlEntryPlugin

    plugin = HtmlEntryPlugin({"include": ["pages/*.html"], "output": "dist"})
    opts = plugin.options({})
    source = plugin.load(opts["input"])
    plugin.generate()
"""

from htmlentry.config import ConfigError, EntryConfig, ExportMode, parse_options
from htmlentry.graph import GraphState, ImportGraphBuilder, analyze
from htmlentry.output import write_documents
from htmlentry.plugin import ENTRY_ID, HtmlEntryPlugin
from htmlentry.synthesize import synthesize

__all__ = [
    "ENTRY_ID",
    "ConfigError",
    "EntryConfig",
    "ExportMode",
    "GraphState",
    "HtmlEntryPlugin",
    "ImportGraphBuilder",
    "analyze",
    "parse_options",
    "synthesize",
    "write_documents",
]
