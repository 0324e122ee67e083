"""Synthesis of the entry module that stands in for every HTML-embedded script."""

from __future__ import annotations

import json
from collections.abc import Iterable

from htmlentry.config import ExportMode


def module_statement(module_id: str, export_mode: ExportMode) -> str:
    quoted = json.dumps(module_id, ensure_ascii=False)
    if export_mode is ExportMode.SIDE_EFFECT:
        return f"import {quoted};"
    return f"export * from {quoted};"


def synthesize(paths: Iterable[str], export_mode: ExportMode = ExportMode.REEXPORT) -> str:
    """
    Source text of the entry module: one statement per dependency, in dependency
    order, so scripts evaluate in the order they appeared in the documents.
    No dependencies gives an empty module.
    """
    return "\n".join(module_statement(path, export_mode) for path in paths)
