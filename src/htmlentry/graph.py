"""
Import graph construction.

Walks every entry document (and the documents they pull in through
`<link rel="import">`), classifies each script it finds and accumulates the
results of one analysis pass into a `GraphState`:

- `paths`: module ids in document-then-script order (real paths or virtual ids)
- `virtual_modules`: virtual id -> inline script text
- `documents`: real document path -> parsed tree, with consumed tags removed
  when rewriting is enabled

A `GraphState` is rebuilt wholesale on every pass and is read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from bs4 import BeautifulSoup
from bs4.element import Tag

from htmlentry.classifier import (
    classify_script,
    import_target,
    is_import_link,
    is_local,
    resolve_reference,
)
from htmlentry.config import EntryConfig
from htmlentry.file_resolver import PatternResolver
from htmlentry.logging import get_logger

log = get_logger("graph")

# Prefix for virtual ids that would otherwise shadow a real file.
VIRTUAL_PREFIX = "\0"


@dataclass(frozen=True)
class GraphState:
    paths: tuple[str, ...] = ()
    virtual_modules: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    documents: Mapping[Path, BeautifulSoup] = field(
        default_factory=lambda: MappingProxyType({})
    )
    excluded: frozenset[Path] = frozenset()
    omitted: frozenset[Path] = frozenset()

    @classmethod
    def empty(cls) -> GraphState:
        return cls()

    def is_virtual(self, module_id: str) -> bool:
        return module_id in self.virtual_modules


def parse_document(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


class ImportGraphBuilder:
    """
    Traverses HTML documents and builds a `GraphState`.

    Documents in `omitted` are never entered. Documents in `excluded` have their
    import links removed and, if entered anyway, capture none of their scripts.
    With `rewrite` set, captured and suppressed script tags are stripped from the
    document trees.
    """

    def __init__(
        self,
        excluded: Iterable[Path] = (),
        omitted: Iterable[Path] = (),
        *,
        rewrite: bool = False,
    ) -> None:
        self._excluded: frozenset[Path] = frozenset(excluded)
        self._omitted: frozenset[Path] = frozenset(omitted)
        self._rewrite: bool = rewrite
        self._paths: list[str] = []
        self._virtual: dict[str, str] = {}
        self._documents: dict[Path, BeautifulSoup] = {}
        self._seen: set[Path] = set()

    def build(self, roots: Iterable[Path]) -> GraphState:
        """Enter each root in order and return the accumulated graph."""
        self._paths = []
        self._virtual = {}
        self._documents = {}
        self._seen = set()

        for root in roots:
            self.enter(Path(root).resolve())

        return GraphState(
            paths=tuple(self._paths),
            virtual_modules=MappingProxyType(dict(self._virtual)),
            documents=MappingProxyType(dict(self._documents)),
            excluded=self._excluded,
            omitted=self._omitted,
        )

    def enter(self, path: Path) -> None:
        """Parse and walk one document, unless it was already seen or is omitted."""
        if path in self._seen:
            return
        if path in self._omitted:
            log.debug("Not entering external document: %s", path)
            return
        self._seen.add(path)

        try:
            document = parse_document(path)
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Skipping unreadable document %s: %s", path, e)
            return

        self._documents[path] = document
        log.debug("Entered document: %s", path)
        self._walk(document, path)

    def _walk(self, document: BeautifulSoup, path: Path) -> None:
        suppressed = path in self._excluded
        removals: list[Tag] = []

        for index, element in enumerate(document.find_all(True)):
            if is_import_link(element):
                self._follow_import(element, path, removals)
            elif element.name == "script":
                decision = classify_script(
                    element, path, index, suppressed=suppressed, rewrite=self._rewrite
                )
                module_id = decision.module_id
                if module_id is not None:
                    if decision.text is not None:
                        module_id = self._register_virtual(module_id, decision.text)
                    self._paths.append(module_id)
                if decision.remove:
                    removals.append(element)

        for element in removals:
            element.extract()

    def _follow_import(self, link: Tag, path: Path, removals: list[Tag]) -> None:
        href = import_target(link)
        if not is_local(href):
            return
        location = resolve_reference(path, href)
        if location in self._excluded:
            # Drop the import and keep its document out of the graph.
            removals.append(link)
            return
        self.enter(location)

    def _register_virtual(self, module_id: str, text: str) -> str:
        if Path(module_id).exists():
            log.warning(
                "Inline script id %s collides with an existing file; namespacing it", module_id
            )
            module_id = VIRTUAL_PREFIX + module_id
        self._virtual[module_id] = text
        return module_id


def analyze(config: EntryConfig, root: Path | None = None) -> GraphState:
    """
    Run one full analysis pass: expand the exclude, external and include sets,
    then traverse every entry document. Never raises; an empty or unmatched
    configuration yields an empty graph.
    """
    resolver = PatternResolver(root)
    excluded: set[Path] = resolver.expand(config.exclude) if config.exclude else set()
    omitted: set[Path] = resolver.expand(config.external) if config.external else set()
    entries = (
        resolver.entry_documents(config.include, excluded, omitted) if config.include else []
    )
    log.debug(
        "Analyzing %d entry document(s), %d excluded, %d external",
        len(entries),
        len(excluded),
        len(omitted),
    )

    builder = ImportGraphBuilder(excluded, omitted, rewrite=config.rewrite)
    return builder.build(entries)
