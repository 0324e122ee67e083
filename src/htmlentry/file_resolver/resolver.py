"""
PatternResolver: expands glob patterns into sets of real file paths.

Each pattern is split into a literal base directory and a wildcard tail. The base
is walked with `os.walk()` and files are matched against the tail with `pathspec`,
so `*` stays within one path segment and `**` spans directories.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

from htmlentry.logging import get_logger

log = get_logger("file_resolver")

# Characters that indicate a path is a glob pattern rather than a literal path.
_GLOB_CHARS = frozenset("*?[")


def split_pattern(pattern: str) -> tuple[Path, str | None]:
    """
    Split a pattern into its literal base directory and its wildcard tail.
    The tail is `None` when the pattern has no glob characters at all.
    """
    parts = Path(pattern).parts
    for i, part in enumerate(parts):
        if any(c in part for c in _GLOB_CHARS):
            base = Path(*parts[:i]) if i > 0 else Path(".")
            return base, "/".join(parts[i:])
    return Path(pattern), None


class PatternResolver:
    """
    Expands include, exclude and external glob sets into canonical, de-duplicated
    file paths. Relative patterns are expanded against `root`, which defaults to
    the current working directory at call time.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root: Path | None = root

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else Path.cwd()

    def expand(self, patterns: str | Sequence[str]) -> set[Path]:
        """
        Expand one or more patterns to the set of matching real file paths.
        A missing or unreadable base directory contributes nothing.
        """
        if isinstance(patterns, str):
            patterns = [patterns]
        found: set[Path] = set()
        for pattern in patterns:
            found.update(self._expand_pattern(pattern))
        log.debug("Expanded %s to %d file(s)", list(patterns), len(found))
        return found

    def entry_documents(
        self,
        include: str | Sequence[str],
        excluded: set[Path] | frozenset[Path],
        omitted: set[Path] | frozenset[Path],
    ) -> list[Path]:
        """
        Documents to traverse from scratch: the include expansion minus the
        excluded and omitted sets, sorted so traversal order is deterministic.
        """
        included = self.expand(include)
        return sorted(included - set(excluded) - set(omitted))

    def _expand_pattern(self, pattern: str) -> Iterable[Path]:
        base, tail = split_pattern(pattern)
        if not base.is_absolute():
            base = self.root / base

        if tail is None:
            if base.is_file():
                yield base.resolve()
            return

        if not base.is_dir():
            return

        # Anchor the tail at the base so a bare `*.html` does not match at any depth.
        spec = pathspec.PathSpec.from_lines("gitignore", ["/" + tail])
        for dirpath, dirnames, filenames in os.walk(base):
            current = Path(dirpath)
            dirnames.sort()
            for filename in sorted(filenames):
                filepath = current / filename
                if spec.match_file(filepath.relative_to(base).as_posix()):
                    yield filepath.resolve()
