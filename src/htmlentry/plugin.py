"""
Module host protocol.

`HtmlEntryPlugin` exposes the analyzed graph to a module-loading host through
four hooks, called in this order:

1. `options()` once per run: swaps the requested input for the synthetic entry
   id and runs a full analysis pass.
2. `resolve_id()` / `load()` any number of times: pure lookups against the
   last analysis pass.
3. `generate()` once at the end of the run: writes rewritten documents when an
   output directory is configured.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from htmlentry.config import EntryConfig, parse_options
from htmlentry.graph import GraphState, analyze
from htmlentry.logging import get_logger
from htmlentry.output import write_documents
from htmlentry.synthesize import synthesize

log = get_logger("plugin")

# The NUL prefix keeps the entry id from ever resolving to a real file.
ENTRY_ID = "\0htmlentry:entry-point"


class HtmlEntryPlugin:
    """
    Serves the HTML script graph as ordinary modules.

    `config` takes any form `parse_options()` accepts; `root` is the directory
    relative patterns are expanded from (the current directory by default).
    """

    name = "htmlentry"

    def __init__(self, config: Any = None, *, root: Path | None = None) -> None:
        self._config: EntryConfig = parse_options(config) if config else EntryConfig()
        self._root: Path | None = root
        self._state: GraphState = GraphState.empty()

    @property
    def config(self) -> EntryConfig:
        return self._config

    @property
    def state(self) -> GraphState:
        return self._state

    def configure(self, options: Any) -> EntryConfig:
        self._config = parse_options(options, self._config)
        return self._config

    def options(self, input_options: dict[str, Any]) -> dict[str, Any]:
        """
        Identify the entry. A requested input other than the entry id is read as
        configuration; the returned options always point at `ENTRY_ID`.
        """
        requested = input_options.get("input")
        if requested and requested != ENTRY_ID:
            self.configure(requested)
        self.analyze()
        return {**input_options, "input": ENTRY_ID}

    def analyze(self) -> GraphState:
        """Rebuild the graph from scratch and replace the previous state in one step."""
        self._state = analyze(self._config, self._root)
        log.debug(
            "Graph has %d module(s), %d inline", len(self._state.paths), len(self._state.virtual_modules)
        )
        return self._state

    def resolve_id(self, module_id: str) -> str | None:
        """Claim the entry id and virtual ids; decline everything else."""
        if module_id == ENTRY_ID:
            return ENTRY_ID
        if self._state.is_virtual(module_id):
            return module_id
        return None

    def load(self, module_id: str) -> str | None:
        """
        Source for the entry id or a virtual id. Real script paths are declined
        and left to the host's own file loading.
        """
        if module_id == ENTRY_ID:
            if not self._state.paths:
                return ""
            return synthesize(self._state.paths, self._config.export_mode)
        return self._state.virtual_modules.get(module_id)

    def generate(self) -> list[Path]:
        """Write the rewritten documents if an output directory is configured."""
        if self._config.output is None:
            return []
        return write_documents(self._state.documents, self._config.output, cwd=self._root)
